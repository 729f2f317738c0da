from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import numpy as np

from spherewalk.errors import ConfigurationError, _require

SCHEMA_VERSION = "spherewalk.camera.v0"

SeedLike = Union[int, np.random.SeedSequence, np.random.Generator]


@dataclass(frozen=True)
class CameraParameters:
    """
    Camera used by the projector.

    Pixel mapping: col = floor(x * radius + width / 2), row = floor(y * radius + height / 2),
    so row 0 is the top of the image and rows grow with +y.
    An empty `aberration` renders a single channel; otherwise one channel per factor.
    """

    width: int = 500
    height: int = 500
    radius: float = 200.0
    rotation_angle: float = 0.0
    rotation_axis: str = "y"
    focus_depth: float = 0.0
    blur_scaling: float = 0.0
    blur_exponent: float = 1.0
    aberration: tuple[float, ...] = field(default_factory=tuple)
    samples_per_segment: int = 10
    normalization: str = "per_channel"

    @property
    def channels(self) -> int:
        return max(1, len(self.aberration))

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0


@dataclass(frozen=True)
class RenderSeeds:
    """One independent seed per random stream of a rendering pass."""

    path: int = 0
    interpolation: int = 1
    jitter: int = 2

    def __post_init__(self) -> None:
        for name in ("path", "interpolation", "jitter"):
            v = getattr(self, name)
            _require(
                isinstance(v, (int, np.integer)) and not isinstance(v, bool) and v >= 0,
                f"seeds.{name} must be a non-negative integer",
            )

    @classmethod
    def from_seed(cls, seed: SeedLike) -> RenderSeeds:
        """
        Derive the three stream seeds from one root seed: a non-negative int, a
        SeedSequence, or a Generator (one integer is drawn from it).
        """
        if isinstance(seed, np.random.Generator):
            seed = int(seed.integers(0, 2**63 - 1))
        if isinstance(seed, np.random.SeedSequence):
            root = seed
        else:
            _require(
                isinstance(seed, (int, np.integer)) and not isinstance(seed, bool) and seed >= 0,
                "seed must be a non-negative integer",
            )
            root = np.random.SeedSequence(int(seed))
        children = root.spawn(3)
        path, interpolation, jitter = (int(c.generate_state(1, dtype=np.uint64)[0]) for c in children)
        return cls(path=path, interpolation=interpolation, jitter=jitter)


def as_generator(seed: SeedLike) -> np.random.Generator:
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def validate_camera(cam: CameraParameters) -> None:
    _require(isinstance(cam.width, (int, np.integer)) and cam.width > 0, "width must be a positive integer")
    _require(isinstance(cam.height, (int, np.integer)) and cam.height > 0, "height must be a positive integer")
    _require(math.isfinite(cam.radius) and cam.radius > 0.0, "radius must be > 0")
    _require(math.isfinite(cam.rotation_angle), "rotation_angle must be finite")
    _require(cam.rotation_axis in ("x", "y", "z"), "rotation_axis must be x|y|z")
    _require(math.isfinite(cam.focus_depth), "focus_depth must be finite")
    _require(math.isfinite(cam.blur_scaling) and cam.blur_scaling >= 0.0, "blur_scaling must be >= 0")
    _require(math.isfinite(cam.blur_exponent) and cam.blur_exponent > 0.0, "blur_exponent must be > 0")
    _require(
        all(math.isfinite(a) and a > 0.0 for a in cam.aberration),
        "aberration factors must be finite and > 0",
    )
    _require(
        isinstance(cam.samples_per_segment, (int, np.integer)) and cam.samples_per_segment > 0,
        "samples_per_segment must be a positive integer",
    )
    _require(cam.normalization in ("per_channel", "global"), "normalization must be per_channel|global")


def parse_camera_params(data: dict[str, Any]) -> CameraParameters:
    schema_version = data.get("schema_version", SCHEMA_VERSION)
    _require(schema_version == SCHEMA_VERSION, f"schema_version must be {SCHEMA_VERSION}")

    defaults = CameraParameters()
    image = data.get("image", {})
    blur = data.get("blur", {})
    rotation = data.get("rotation", {})
    _require(isinstance(image, dict), "image must be an object")
    _require(isinstance(blur, dict), "blur must be an object")
    _require(isinstance(rotation, dict), "rotation must be an object")

    aberration = data.get("aberration", [])
    _require(isinstance(aberration, (list, tuple)), "aberration must be a list of per-channel factors")

    try:
        cam = CameraParameters(
            width=int(image.get("width_px", defaults.width)),
            height=int(image.get("height_px", defaults.height)),
            radius=float(image.get("radius_px", defaults.radius)),
            rotation_angle=float(rotation.get("angle_rad", defaults.rotation_angle)),
            rotation_axis=str(rotation.get("axis", defaults.rotation_axis)),
            focus_depth=float(blur.get("focus_depth", defaults.focus_depth)),
            blur_scaling=float(blur.get("scaling", defaults.blur_scaling)),
            blur_exponent=float(blur.get("exponent", defaults.blur_exponent)),
            aberration=tuple(float(a) for a in aberration),
            samples_per_segment=int(data.get("samples_per_segment", defaults.samples_per_segment)),
            normalization=str(data.get("normalization", defaults.normalization)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid camera value: {e}") from e

    validate_camera(cam)
    return cam


def camera_params_to_dict(cam: CameraParameters) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "image": {"width_px": int(cam.width), "height_px": int(cam.height), "radius_px": float(cam.radius)},
        "rotation": {"axis": cam.rotation_axis, "angle_rad": float(cam.rotation_angle)},
        "blur": {
            "focus_depth": float(cam.focus_depth),
            "scaling": float(cam.blur_scaling),
            "exponent": float(cam.blur_exponent),
        },
        "aberration": [float(a) for a in cam.aberration],
        "samples_per_segment": int(cam.samples_per_segment),
        "normalization": cam.normalization,
    }


def load_camera_params(path: Path) -> CameraParameters:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    _require(isinstance(data, dict), f"{path} must contain a JSON object")
    return parse_camera_params(data)


def save_camera_params(path: Path, cam: CameraParameters) -> Path:
    path = Path(path)
    path.write_text(json.dumps(camera_params_to_dict(cam), indent=2, sort_keys=True), encoding="utf-8")
    return path
