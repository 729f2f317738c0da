from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from spherewalk.errors import DegenerateMathError


@dataclass(frozen=True)
class Vec3:
    x: float
    y: float
    z: float

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def scale(self, s: float) -> Vec3:
        return Vec3(s * self.x, s * self.y, s * self.z)

    def dot(self, other: Vec3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self, stage: str = "vec3") -> Vec3:
        n = self.norm()
        if n == 0.0 or not math.isfinite(n):
            raise DegenerateMathError(stage, f"cannot normalize vector {self}")
        return self.scale(1.0 / n)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, a: np.ndarray) -> Vec3:
        a = np.asarray(a, dtype=np.float64).reshape(3)
        return cls(float(a[0]), float(a[1]), float(a[2]))


def random_direction(rng: np.random.Generator, stage: str = "random_direction") -> Vec3:
    """Uniform direction on the unit sphere (normalized standard-normal triple)."""
    return Vec3.from_array(rng.standard_normal(3)).normalized(stage=stage)


def normalize_rows(v: np.ndarray, stage: str) -> np.ndarray:
    """
    Normalize an (N,3) array row by row.

    Raises DegenerateMathError if any row has zero (or non-finite) length.
    """
    v = np.asarray(v, dtype=np.float64)
    n = np.linalg.norm(v, axis=-1, keepdims=True)
    bad = ~np.isfinite(n) | (n == 0.0)
    if np.any(bad):
        raise DegenerateMathError(stage, f"{int(np.sum(bad))} zero-length vector(s) cannot be normalized")
    return v / n


def random_directions(rng: np.random.Generator, n: int, stage: str = "random_direction") -> np.ndarray:
    """(n,3) uniform directions; each row is drawn as three consecutive standard normals."""
    return normalize_rows(rng.standard_normal((int(n), 3)), stage=stage)


def rotation_matrix(axis: str, angle: float) -> np.ndarray:
    """Rigid rotation by `angle` radians about a coordinate axis ("x", "y" or "z")."""
    c = math.cos(float(angle))
    s = math.sin(float(angle))
    if axis == "x":
        return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]], dtype=np.float64)
    if axis == "y":
        return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]], dtype=np.float64)
    if axis == "z":
        return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]], dtype=np.float64)
    raise ValueError("axis must be x|y|z")
