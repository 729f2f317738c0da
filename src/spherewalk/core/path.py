from __future__ import annotations

import math

import numpy as np

from spherewalk.camera import SeedLike, as_generator
from spherewalk.core.vec3 import normalize_rows, random_direction, random_directions
from spherewalk.errors import DegenerateMathError, _require

UNIT_TOL = 1e-6


def _freeze(points: np.ndarray) -> np.ndarray:
    points.setflags(write=False)
    return points


def generate_path(step_count: int, step_size: float, rng_seed: SeedLike) -> np.ndarray:
    """
    Random walk on the unit sphere.

    Starts at a uniformly random direction; each step adds `step_size` times a fresh
    random direction and projects back onto the sphere. The start point is not part
    of the result, so the returned (step_count, 3) array holds one row per step.

    The same (step_count, step_size, seed) always yields a bit-identical array.
    """
    _require(isinstance(step_count, (int, np.integer)) and step_count > 0, "step_count must be a positive integer")
    _require(math.isfinite(step_size) and step_size > 0.0, "step_size must be > 0")

    rng = as_generator(rng_seed)
    current = random_direction(rng, stage="path").to_array()
    # Per-step direction draws are independent of the walk state, so draw them up front.
    directions = random_directions(rng, int(step_count), stage="path")

    points = np.empty((int(step_count), 3), dtype=np.float64)
    step = float(step_size)
    for i in range(int(step_count)):
        nxt = current + step * directions[i]
        n = math.sqrt(float(nxt @ nxt))
        if n == 0.0:
            raise DegenerateMathError("path", f"walk step {i} landed on the origin")
        current = nxt / n
        points[i] = current
    return _freeze(points)


def sample_sphere(num_points: int, rng_seed: SeedLike) -> np.ndarray:
    """(num_points, 3) independent uniform points on the unit sphere."""
    _require(isinstance(num_points, (int, np.integer)) and num_points > 0, "num_points must be a positive integer")
    rng = as_generator(rng_seed)
    return _freeze(random_directions(rng, int(num_points), stage="path"))


def as_path(points: np.ndarray, tol: float = UNIT_TOL) -> np.ndarray:
    """Validate an externally supplied path: (N,3) finite rows of unit length (read-only view)."""
    points = np.asarray(points, dtype=np.float64)
    _require(points.ndim == 2 and points.shape[1] == 3, "path must be (N,3)")
    _require(bool(np.all(np.isfinite(points))), "path must be finite")
    if points.shape[0]:
        err = np.max(np.abs(np.linalg.norm(points, axis=1) - 1.0))
        _require(err < tol, f"path points must have unit length (max deviation {err:.3g})")
    view = points.view()
    view.setflags(write=False)
    return view


def renormalize(points: np.ndarray) -> np.ndarray:
    """Project arbitrary non-zero (N,3) rows back onto the sphere, e.g. after loading from text."""
    return _freeze(normalize_rows(np.asarray(points, dtype=np.float64), stage="path"))
