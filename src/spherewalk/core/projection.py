from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Union

import numpy as np

from spherewalk.camera import CameraParameters, RenderSeeds, SeedLike, validate_camera
from spherewalk.core.buffer import AccumulationBuffer
from spherewalk.core.path import as_path
from spherewalk.core.vec3 import random_directions, rotation_matrix
from spherewalk.errors import _require

# Segments per random-stream block. Fixed so that the output does not depend on `workers`.
BLOCK_SEGMENTS = 1024

SeedsLike = Union[RenderSeeds, SeedLike]


def _as_render_seeds(rng_seed: SeedsLike) -> RenderSeeds:
    if isinstance(rng_seed, RenderSeeds):
        return rng_seed
    return RenderSeeds.from_seed(rng_seed)


def blur_profile(dz: np.ndarray, exponent: float) -> np.ndarray:
    """
    f(dz) for depth-of-field jitter: identity for exponent 1, signed power for
    integer exponents (even powers lose the sign), |dz|**exponent otherwise.
    """
    dz = np.asarray(dz, dtype=np.float64)
    exponent = float(exponent)
    if exponent == 1.0:
        return dz
    if exponent.is_integer():
        return dz ** int(exponent)
    return np.abs(dz) ** exponent


def transform_samples(points: np.ndarray, camera: CameraParameters, jitter_rng: np.random.Generator) -> np.ndarray:
    """Apply camera rotation and depth-of-field jitter to (N,3) sample points."""
    points = np.asarray(points, dtype=np.float64)
    if camera.rotation_angle != 0.0:
        points = points @ rotation_matrix(camera.rotation_axis, camera.rotation_angle).T
    if camera.blur_scaling > 0.0 and points.shape[0]:
        dz = camera.focus_depth - points[:, 2]
        magnitude = camera.blur_scaling * blur_profile(dz, camera.blur_exponent)
        dirs = random_directions(jitter_rng, points.shape[0], stage="jitter")
        points = points + magnitude[:, None] * dirs
    return points


def project_samples(
    points: np.ndarray,
    camera: CameraParameters,
    jitter_rng: np.random.Generator,
    buffer: AccumulationBuffer | None = None,
) -> AccumulationBuffer:
    """
    Project (N,3) sample points into `buffer` (allocated from `camera` if None).

    Jitter is drawn once per sample before the per-channel aberration scale, so
    every channel sees the same jittered point.
    """
    if buffer is None:
        buffer = AccumulationBuffer(camera.width, camera.height, camera.channels)
    points = transform_samples(points, camera, jitter_rng)
    cx, cy = camera.center
    factors = camera.aberration or (1.0,)

    for channel, factor in enumerate(factors):
        q = points if factor == 1.0 else points * float(factor)
        x = q[:, 0] * camera.radius + cx
        y = q[:, 1] * camera.radius + cy
        inside = (x >= 0.0) & (x < camera.width) & (y >= 0.0) & (y < camera.height)
        cols = np.floor(x[inside]).astype(np.int64)
        rows = np.floor(y[inside]).astype(np.int64)
        buffer.add_hits(channel, rows, cols, discarded=int(inside.size - np.count_nonzero(inside)))
    return buffer


def chord_samples(p0: np.ndarray, p1: np.ndarray, samples_per_segment: int, rng: np.random.Generator) -> np.ndarray:
    """(len(p0) * samples_per_segment, 3) points on the chords p0[i] -> p1[i], d ~ U[0,1)."""
    d = rng.random((p0.shape[0], int(samples_per_segment)))[..., None]
    pts = (1.0 - d) * p0[:, None, :] + d * p1[:, None, :]
    return pts.reshape(-1, 3)


def _render_block(
    points: np.ndarray,
    camera: CameraParameters,
    interp_seed: np.random.SeedSequence,
    jitter_seed: np.random.SeedSequence,
) -> AccumulationBuffer:
    interp_rng = np.random.default_rng(interp_seed)
    jitter_rng = np.random.default_rng(jitter_seed)
    samples = chord_samples(points[:-1], points[1:], camera.samples_per_segment, interp_rng)
    return project_samples(samples, camera, jitter_rng)


def _segment_blocks(n_segments: int) -> list[tuple[int, int]]:
    return [(s, min(s + BLOCK_SEGMENTS, n_segments)) for s in range(0, n_segments, BLOCK_SEGMENTS)]


def render(
    path: np.ndarray,
    camera: CameraParameters,
    rng_seed: SeedsLike,
    workers: int = 1,
) -> AccumulationBuffer:
    """
    Stochastic projection of every path segment into a fresh accumulation buffer.

    `rng_seed` is either a RenderSeeds (its `interpolation` and `jitter` seeds are
    used) or a root seed (int, SeedSequence or Generator) handed to
    RenderSeeds.from_seed. Segments are processed in fixed blocks, each with its
    own child stream, so `workers > 1` gives the same counts as `workers == 1`.
    The returned buffer is not normalized yet.
    """
    validate_camera(camera)
    _require(int(workers) >= 1, "workers must be >= 1")
    path = as_path(path)
    seeds = _as_render_seeds(rng_seed)

    buffer = AccumulationBuffer(camera.width, camera.height, camera.channels)
    blocks = _segment_blocks(max(0, path.shape[0] - 1))
    if not blocks:
        return buffer

    interp_seeds = np.random.SeedSequence(seeds.interpolation).spawn(len(blocks))
    jitter_seeds = np.random.SeedSequence(seeds.jitter).spawn(len(blocks))

    if int(workers) == 1 or len(blocks) == 1:
        for (start, stop), si, sj in zip(blocks, interp_seeds, jitter_seeds):
            buffer.merge(_render_block(path[start : stop + 1], camera, si, sj))
        return buffer

    with ProcessPoolExecutor(max_workers=min(int(workers), len(blocks))) as executor:
        futures = [
            executor.submit(_render_block, np.array(path[start : stop + 1]), camera, si, sj)
            for (start, stop), si, sj in zip(blocks, interp_seeds, jitter_seeds)
        ]
        for future in as_completed(futures):
            buffer.merge(future.result())
    return buffer


def render_points(points: np.ndarray, camera: CameraParameters, rng_seed: SeedLike | RenderSeeds) -> AccumulationBuffer:
    """Project each point once (point-cloud mode, no segment sampling)."""
    validate_camera(camera)
    points = as_path(points)
    if isinstance(rng_seed, RenderSeeds):
        jitter_rng = np.random.default_rng(rng_seed.jitter)
    elif isinstance(rng_seed, np.random.Generator):
        jitter_rng = rng_seed
    else:
        jitter_rng = np.random.default_rng(rng_seed)
    return project_samples(points, camera, jitter_rng)
