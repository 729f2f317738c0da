from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from spherewalk.errors import ConfigurationError
from spherewalk.image_io import load_u8, save_image, save_png, to_u8, write_ppm


def test_to_u8_levels():
    assert to_u8(np.array([0.0, 1.0])).tolist() == [0, 255]
    assert to_u8(np.array([0.5]), gamma=1.0).tolist() == [128]
    assert to_u8(np.array([0.5])).tolist() == [186]
    assert to_u8(np.array([0.25]), gamma=1.0, exposure=8.0).tolist() == [255]
    with pytest.raises(ConfigurationError):
        to_u8(np.array([0.5]), gamma=0.0)


def test_write_ppm_grayscale(tmp_path: Path) -> None:
    img = np.array([[0.0, 1.0, 0.0], [1.0, 0.0, 0.0]])[:, :, None]
    p = write_ppm(tmp_path / "a.ppm", img)
    lines = p.read_text(encoding="ascii").splitlines()
    assert lines[:3] == ["P3", "3 2", "255"]
    assert len(lines) == 5
    assert lines[3].split() == ["0", "0", "0", "255", "255", "255", "0", "0", "0"]
    assert lines[4].split()[:3] == ["255", "255", "255"]


def test_write_ppm_rgb(tmp_path: Path) -> None:
    img = np.zeros((1, 2, 3))
    img[0, 1, 2] = 1.0
    p = write_ppm(tmp_path / "b.ppm", img, gamma=1.0)
    assert p.read_text(encoding="ascii").splitlines()[3].split() == ["0", "0", "0", "0", "0", "255"]

    with pytest.raises(ConfigurationError):
        write_ppm(tmp_path / "c.ppm", np.zeros((2, 2, 2)))


def test_save_png_and_load(tmp_path: Path) -> None:
    gray = np.linspace(0.0, 1.0, 64).reshape(8, 8, 1)
    rgb = np.random.default_rng(0).uniform(size=(8, 8, 3))

    a = load_u8(save_png(tmp_path / "gray.png", gray))
    b = load_u8(save_image(tmp_path / "rgb.png", rgb))

    assert a.shape == (8, 8)
    assert b.shape == (8, 8, 3)
    assert a.dtype == np.uint8
    assert np.array_equal(a, to_u8(gray[:, :, 0]))
    assert np.array_equal(b, to_u8(rgb))

    with pytest.raises(ValueError):
        save_image(tmp_path / "x.jpg", gray)
