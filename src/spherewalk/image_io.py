from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from spherewalk.errors import _require

DEFAULT_GAMMA = 2.2


def to_u8(image: np.ndarray, gamma: float = DEFAULT_GAMMA, exposure: float = 1.0) -> np.ndarray:
    """
    Map a normalized (H,W) or (H,W,C) image in [0,1] to uint8 display levels:
    round(255 * clip(exposure * c, 0, 1) ** (1 / gamma)).
    """
    _require(gamma > 0.0, "gamma must be > 0")
    _require(exposure > 0.0, "exposure must be > 0")
    img = np.clip(np.asarray(image, dtype=np.float64) * float(exposure), 0.0, 1.0)
    img = img ** (1.0 / float(gamma))
    return (img * 255.0 + 0.5).astype(np.uint8)


def _as_rgb_u8(image: np.ndarray, gamma: float, exposure: float) -> np.ndarray:
    img = np.asarray(image)
    if img.ndim == 2:
        img = img[:, :, None]
    _require(img.ndim == 3, "image must be (H,W) or (H,W,C)")
    channels = img.shape[2]
    _require(channels in (1, 3), f"serialization supports 1 or 3 channels, got {channels}")
    u8 = to_u8(img, gamma=gamma, exposure=exposure)
    if channels == 1:
        u8 = np.repeat(u8, 3, axis=2)
    return u8


def write_ppm(path: str | Path, image: np.ndarray, gamma: float = DEFAULT_GAMMA, exposure: float = 1.0) -> Path:
    """
    Write a plain-text (P3) portable pixmap, row 0 first. Grayscale images are
    written with the same level in R, G and B.
    """
    p = Path(path)
    u8 = _as_rgb_u8(image, gamma, exposure)
    h, w, _ = u8.shape
    lines = ["P3", f"{w} {h}", "255"]
    for row in u8:
        lines.append(" ".join(str(int(v)) for v in row.reshape(-1)))
    p.write_text("\n".join(lines) + "\n", encoding="ascii")
    return p


def save_png(path: str | Path, image: np.ndarray, gamma: float = DEFAULT_GAMMA, exposure: float = 1.0) -> Path:
    p = Path(path)
    img = np.asarray(image)
    if img.ndim == 3 and img.shape[2] == 1:
        img = img[:, :, 0]
    if img.ndim == 2:
        Image.fromarray(to_u8(img, gamma=gamma, exposure=exposure)).save(p)
        return p
    Image.fromarray(_as_rgb_u8(img, gamma, exposure)).save(p)
    return p


def save_image(path: str | Path, image: np.ndarray, gamma: float = DEFAULT_GAMMA, exposure: float = 1.0) -> Path:
    suffix = Path(path).suffix.lower()
    if suffix == ".ppm":
        return write_ppm(path, image, gamma=gamma, exposure=exposure)
    if suffix == ".png":
        return save_png(path, image, gamma=gamma, exposure=exposure)
    raise ValueError("output format must be .ppm|.png")


def load_u8(path: str | Path) -> np.ndarray:
    """Load a written image back as uint8 (H,W) or (H,W,3) with Pillow."""
    with Image.open(Path(path)) as im:
        if im.mode not in ("L", "RGB"):
            im = im.convert("RGB")
        arr = np.asarray(im, dtype=np.uint8)
    return arr
