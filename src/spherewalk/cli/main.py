from __future__ import annotations

import argparse
import time
from dataclasses import replace
from pathlib import Path

from spherewalk.camera import CameraParameters, RenderSeeds, load_camera_params, validate_camera
from spherewalk.core.path import sample_sphere
from spherewalk.core.projection import render_points
from spherewalk.image_io import save_image
from spherewalk.scene import render_scene_with_stats
from spherewalk.sweep import animation_cases, blur_sweep_cases, run_sweep


def _float_list(text: str) -> list[float]:
    return [float(s) for s in text.split(",") if s.strip()]


def _add_camera_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--camera", type=Path, default=None, help="Camera JSON (spherewalk.camera.v0); flags override it.")
    p.add_argument("--width", type=int, default=None)
    p.add_argument("--height", type=int, default=None)
    p.add_argument("--radius", type=float, default=None, help="Projection radius in pixels.")
    p.add_argument("--samples", type=int, default=None, help="Samples per path segment.")
    p.add_argument("--focus-depth", type=float, default=None)
    p.add_argument("--blur", type=float, default=None, help="Depth-of-field blur scaling (0 disables).")
    p.add_argument("--blur-exponent", type=float, default=None)
    p.add_argument("--rotation", type=float, default=None, help="Camera rotation angle (radians).")
    p.add_argument("--rotation-axis", type=str, default=None, choices=["x", "y", "z"])
    p.add_argument(
        "--aberration",
        type=_float_list,
        default=None,
        help="Comma-separated per-channel scale factors, e.g. 1.0,1.01,1.02 (empty = grayscale).",
    )
    p.add_argument("--normalization", type=str, default=None, choices=["per_channel", "global"])


def _add_walk_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--steps", type=int, default=8000, help="Random walk step count.")
    p.add_argument("--step-size", type=float, default=0.02)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--workers", type=int, default=1)
    p.add_argument("--gamma", type=float, default=2.2)


def _camera_from_args(args: argparse.Namespace) -> CameraParameters:
    cam = load_camera_params(args.camera) if args.camera is not None else CameraParameters()
    overrides = {
        "width": args.width,
        "height": args.height,
        "radius": args.radius,
        "samples_per_segment": args.samples,
        "focus_depth": args.focus_depth,
        "blur_scaling": args.blur,
        "blur_exponent": args.blur_exponent,
        "rotation_angle": args.rotation,
        "rotation_axis": args.rotation_axis,
        "aberration": tuple(args.aberration) if args.aberration is not None else None,
        "normalization": args.normalization,
    }
    cam = replace(cam, **{k: v for k, v in overrides.items() if v is not None})
    validate_camera(cam)
    return cam


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="spherewalk")
    sub = parser.add_subparsers(dest="cmd", required=True)

    rend = sub.add_parser("render", help="Render one image of a random walk on the sphere.")
    rend.add_argument("--out", type=Path, default=Path("cameraImage.ppm"), help="Output .ppm or .png file.")
    _add_walk_args(rend)
    _add_camera_args(rend)

    pts = sub.add_parser("points", help="Render uniformly sampled sphere points (no walk).")
    pts.add_argument("--out", type=Path, default=Path("cameraImage.ppm"))
    pts.add_argument("--num-points", type=int, default=100)
    pts.add_argument("--seed", type=int, default=0)
    pts.add_argument("--gamma", type=float, default=2.2)
    _add_camera_args(pts)

    anim = sub.add_parser("animate", help="Render a rotating frame sequence of one walk.")
    anim.add_argument("--out", type=Path, required=True, help="Output directory.")
    anim.add_argument("--frames", type=int, default=36)
    anim.add_argument("--format", type=str, default="ppm", choices=["ppm", "png"])
    _add_walk_args(anim)
    _add_camera_args(anim)

    sweep = sub.add_parser("sweep-blur", help="Render one walk over a blur scaling x exponent grid.")
    sweep.add_argument("--out", type=Path, required=True, help="Output directory.")
    sweep.add_argument("--blur-scalings", type=_float_list, default=[0.005, 0.01, 0.02, 0.04])
    sweep.add_argument("--blur-exponents", type=_float_list, default=[1.0, 2.0, 3.0])
    sweep.add_argument("--format", type=str, default="ppm", choices=["ppm", "png"])
    _add_walk_args(sweep)
    _add_camera_args(sweep)

    args = parser.parse_args(argv)
    cam = _camera_from_args(args)

    seeds = RenderSeeds.from_seed(args.seed)

    if args.cmd == "render":
        print("Rendering camera image to file.")
        t0 = time.perf_counter()
        image, stats = render_scene_with_stats(args.steps, args.step_size, cam, seeds, workers=args.workers)
        save_image(args.out, image, gamma=args.gamma)
        print(f"{stats.hits} hits, {stats.discarded} discarded, {time.perf_counter() - t0:.2f} s")
        print(f"Wrote {args.out}")
        return 0

    if args.cmd == "points":
        points = sample_sphere(args.num_points, seeds.path)
        image = render_points(points, cam, seeds).normalize(cam.normalization)
        save_image(args.out, image, gamma=args.gamma)
        print(f"Wrote {args.out}")
        return 0

    if args.cmd in ("animate", "sweep-blur"):
        if args.cmd == "animate":
            cases = animation_cases(cam, args.frames, start_angle=cam.rotation_angle)
        else:
            cases = blur_sweep_cases(cam, args.blur_scalings, args.blur_exponents)
        t0 = time.perf_counter()
        report_path = run_sweep(
            args.out,
            cases,
            step_count=args.steps,
            step_size=args.step_size,
            seeds=seeds,
            image_format=args.format,
            gamma=args.gamma,
            workers=args.workers,
        )
        print(f"{len(cases)} cases in {time.perf_counter() - t0:.2f} s")
        print(f"Wrote {report_path}")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
