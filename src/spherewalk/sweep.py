from __future__ import annotations

import json
import math
import time
from dataclasses import dataclass, replace
from pathlib import Path

from spherewalk.camera import CameraParameters, RenderSeeds, camera_params_to_dict, validate_camera
from spherewalk.core.path import generate_path
from spherewalk.errors import SpherewalkError
from spherewalk.image_io import DEFAULT_GAMMA, save_image
from spherewalk.scene import render_path


@dataclass(frozen=True)
class SweepCase:
    name: str
    camera: CameraParameters


def _fmt(x: float) -> str:
    return f"{x:g}".replace(".", "p").replace("-", "m")


def blur_sweep_cases(
    base: CameraParameters,
    blur_scalings: list[float],
    blur_exponents: list[float],
) -> list[SweepCase]:
    """Cartesian product blur_scaling x blur_exponent, named blur_<s>_exp_<e>."""
    cases = []
    for s in blur_scalings:
        for e in blur_exponents:
            cam = replace(base, blur_scaling=float(s), blur_exponent=float(e))
            cases.append(SweepCase(name=f"blur_{_fmt(float(s))}_exp_{_fmt(float(e))}", camera=cam))
    return cases


def animation_cases(base: CameraParameters, frames: int, start_angle: float = 0.0) -> list[SweepCase]:
    """One case per frame, rotating the camera by a full turn over `frames` frames."""
    if int(frames) <= 0:
        raise ValueError("frames must be > 0")
    return [
        SweepCase(
            name=f"frame_{i:04d}",
            camera=replace(base, rotation_angle=float(start_angle) + 2.0 * math.pi * i / int(frames)),
        )
        for i in range(int(frames))
    ]


def run_sweep(
    out_dir: Path,
    cases: list[SweepCase],
    step_count: int,
    step_size: float,
    seeds: RenderSeeds,
    image_format: str = "ppm",
    gamma: float = DEFAULT_GAMMA,
    workers: int = 1,
) -> Path:
    """
    Render every case from one shared walk and write `<name>.<image_format>` plus
    sweep_report.json into `out_dir`. A case that fails with a SpherewalkError is
    recorded in the report and the sweep moves on.
    """
    if image_format not in ("ppm", "png"):
        raise ValueError("image_format must be ppm|png")
    out_dir = Path(out_dir).resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    path = generate_path(step_count, step_size, seeds.path)

    results: dict[str, object] = {
        "out_dir": str(out_dir),
        "step_count": int(step_count),
        "step_size": float(step_size),
        "seeds": {"path": seeds.path, "interpolation": seeds.interpolation, "jitter": seeds.jitter},
        "cases": [],
    }

    for case in cases:
        entry: dict[str, object] = {"name": case.name, "camera": camera_params_to_dict(case.camera)}
        t0 = time.perf_counter()
        try:
            validate_camera(case.camera)
            image, stats = render_path(path, case.camera, seeds, workers=workers)
            out = save_image(out_dir / f"{case.name}.{image_format}", image, gamma=gamma)
        except SpherewalkError as e:
            entry.update({"ok": False, "error": str(e)})
        else:
            entry.update(
                {
                    "ok": True,
                    "image": out.name,
                    "hits": stats.hits,
                    "discarded": stats.discarded,
                }
            )
        entry["seconds"] = round(time.perf_counter() - t0, 4)
        results["cases"].append(entry)
        print(json.dumps({k: v for k, v in entry.items() if k != "camera"}, sort_keys=True))

    report_path = out_dir / "sweep_report.json"
    report_path.write_text(json.dumps(results, indent=2, sort_keys=True), encoding="utf-8")
    return report_path
