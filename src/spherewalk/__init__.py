from spherewalk.camera import CameraParameters, RenderSeeds, load_camera_params, parse_camera_params
from spherewalk.core import AccumulationBuffer, Vec3, generate_path, normalize_counts, render, render_points
from spherewalk.errors import BufferStateError, ConfigurationError, DegenerateMathError, SpherewalkError
from spherewalk.scene import render_scene

__all__ = [
    "CameraParameters",
    "RenderSeeds",
    "load_camera_params",
    "parse_camera_params",
    "AccumulationBuffer",
    "Vec3",
    "generate_path",
    "normalize_counts",
    "render",
    "render_points",
    "render_scene",
    "SpherewalkError",
    "ConfigurationError",
    "DegenerateMathError",
    "BufferStateError",
]
