from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from spherewalk.camera import CameraParameters, RenderSeeds, SeedLike, validate_camera
from spherewalk.core.path import generate_path
from spherewalk.core.projection import render
from spherewalk.errors import _require


@dataclass(frozen=True)
class RenderStats:
    segments: int
    samples: int
    hits: int
    discarded: int


def render_scene(
    step_count: int,
    step_size: float,
    camera: CameraParameters,
    seeds: RenderSeeds | SeedLike,
    workers: int = 1,
) -> np.ndarray:
    """Walk -> project -> normalize. Returns an (height, width, channels) float image in [0,1]."""
    image, _stats = render_scene_with_stats(step_count, step_size, camera, seeds, workers=workers)
    return image


def render_scene_with_stats(
    step_count: int,
    step_size: float,
    camera: CameraParameters,
    seeds: RenderSeeds | SeedLike,
    workers: int = 1,
) -> tuple[np.ndarray, RenderStats]:
    # Reject bad configuration before the walk is generated.
    validate_camera(camera)
    _require(int(workers) >= 1, "workers must be >= 1")
    if not isinstance(seeds, RenderSeeds):
        seeds = RenderSeeds.from_seed(seeds)

    path = generate_path(step_count, step_size, seeds.path)
    return render_path(path, camera, seeds, workers=workers)


def render_path(
    path: np.ndarray,
    camera: CameraParameters,
    seeds: RenderSeeds,
    workers: int = 1,
) -> tuple[np.ndarray, RenderStats]:
    """Render and normalize an existing path (lets a sweep reuse one walk for many cameras)."""
    buffer = render(path, camera, seeds, workers=workers)
    stats = RenderStats(
        segments=max(0, int(path.shape[0]) - 1),
        samples=max(0, int(path.shape[0]) - 1) * int(camera.samples_per_segment),
        hits=buffer.total_hits,
        discarded=buffer.discarded,
    )
    return buffer.normalize(camera.normalization), stats
