import numpy as np
import pytest

import spherewalk.core.path as path_mod
from spherewalk.core.path import as_path, generate_path, renormalize, sample_sphere
from spherewalk.core.vec3 import Vec3, random_direction
from spherewalk.errors import ConfigurationError, DegenerateMathError


def test_generate_path_length_and_unit_norm():
    path = generate_path(500, 0.1, 7)
    assert path.shape == (500, 3)
    assert len(path) == 500
    assert np.max(np.abs(np.linalg.norm(path, axis=1) - 1.0)) < 1e-9


def test_generate_path_is_deterministic():
    a = generate_path(300, 0.05, 42)
    b = generate_path(300, 0.05, 42)
    c = generate_path(300, 0.05, 43)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)

    # A SeedSequence with the same entropy is the same stream.
    d = generate_path(300, 0.05, np.random.SeedSequence(42))
    assert np.array_equal(a, d)


def test_generate_path_step_length_is_bounded():
    step = 0.05
    path = generate_path(2000, step, 3)
    jumps = np.linalg.norm(np.diff(path, axis=0), axis=1)
    assert np.max(jumps) <= 1.01 * step
    assert np.min(jumps) > 0.0


def test_generate_path_large_steps_stay_on_sphere():
    path = generate_path(200, 3.0, 11)
    assert np.max(np.abs(np.linalg.norm(path, axis=1) - 1.0)) < 1e-9


def test_generate_path_is_read_only():
    path = generate_path(10, 0.1, 0)
    with pytest.raises(ValueError):
        path[0, 0] = 2.0


@pytest.mark.parametrize(
    "step_count,step_size",
    [(0, 0.1), (-5, 0.1), (10, 0.0), (10, -0.1), (10, float("nan")), (2.5, 0.1)],
)
def test_generate_path_rejects_bad_config(step_count, step_size):
    with pytest.raises(ConfigurationError):
        generate_path(step_count, step_size, 0)


def test_generate_path_degenerate_step_is_fatal(monkeypatch):
    monkeypatch.setattr(path_mod, "random_direction", lambda rng, stage: Vec3(1.0, 0.0, 0.0))
    monkeypatch.setattr(
        path_mod, "random_directions", lambda rng, n, stage: np.array([[-1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    )
    with pytest.raises(DegenerateMathError) as exc:
        generate_path(2, 1.0, 0)
    assert exc.value.stage == "path"


def test_sample_sphere_points():
    pts = sample_sphere(1000, 5)
    assert pts.shape == (1000, 3)
    assert np.max(np.abs(np.linalg.norm(pts, axis=1) - 1.0)) < 1e-9
    assert np.array_equal(pts, sample_sphere(1000, 5))


def test_as_path_validation():
    with pytest.raises(ConfigurationError):
        as_path(np.zeros((4, 2)))
    with pytest.raises(ConfigurationError):
        as_path(np.array([[2.0, 0.0, 0.0]]))
    with pytest.raises(ConfigurationError):
        as_path(np.array([[np.nan, 0.0, 0.0]]))

    p = renormalize(np.array([[3.0, 0.0, 4.0], [0.0, 2.0, 0.0]]))
    assert np.allclose(p, [[0.6, 0.0, 0.8], [0.0, 1.0, 0.0]])
    assert as_path(p).shape == (2, 3)


def test_generate_path_starts_one_step_from_a_random_direction():
    start = random_direction(np.random.default_rng(7), stage="path")
    assert abs(start.norm() - 1.0) < 1e-12
    path = generate_path(50, 0.1, 7)
    assert np.linalg.norm(path[0] - start.to_array()) <= 1.01 * 0.1
