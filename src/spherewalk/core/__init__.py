from spherewalk.core.buffer import AccumulationBuffer, normalize_counts
from spherewalk.core.path import generate_path, sample_sphere
from spherewalk.core.projection import project_samples, render, render_points
from spherewalk.core.vec3 import Vec3, random_direction

__all__ = [
    "AccumulationBuffer",
    "normalize_counts",
    "generate_path",
    "sample_sphere",
    "project_samples",
    "render",
    "render_points",
    "Vec3",
    "random_direction",
]
