import numpy as np
import pytest

from spherewalk.core.buffer import ACCUMULATING, ALLOCATED, NORMALIZED, AccumulationBuffer, normalize_counts
from spherewalk.errors import BufferStateError, ConfigurationError, DegenerateMathError


def test_buffer_lifecycle():
    buf = AccumulationBuffer(width=4, height=3, channels=1)
    assert buf.state == ALLOCATED
    assert buf.counts.shape == (3, 4, 1)
    assert buf.total_hits == 0

    buf.add_hits(0, rows=[0, 0, 2], cols=[1, 1, 3], discarded=5)
    assert buf.state == ACCUMULATING
    assert buf.counts[0, 1, 0] == 2
    assert buf.counts[2, 3, 0] == 1
    assert buf.discarded == 5

    img = buf.normalize()
    assert buf.state == NORMALIZED
    assert img.shape == (3, 4, 1)
    assert img[0, 1, 0] == 1.0
    assert img[2, 3, 0] == 0.5
    assert buf.normalize() is img

    with pytest.raises(BufferStateError):
        buf.add_hits(0, rows=[0], cols=[0])
    with pytest.raises(BufferStateError):
        buf.merge(AccumulationBuffer(4, 3, 1))
    with pytest.raises(ValueError):
        img[0, 0, 0] = 3.0


def test_add_hits_is_order_independent():
    rng = np.random.default_rng(0)
    rows = rng.integers(0, 16, size=2000)
    cols = rng.integers(0, 16, size=2000)
    perm = rng.permutation(2000)

    a = AccumulationBuffer(16, 16)
    a.add_hits(0, rows, cols)
    b = AccumulationBuffer(16, 16)
    b.add_hits(0, rows[perm[:700]], cols[perm[:700]])
    b.add_hits(0, rows[perm[700:]], cols[perm[700:]])
    assert np.array_equal(a.counts, b.counts)
    assert a.total_hits == 2000


def test_merge_sums_private_buffers():
    a = AccumulationBuffer(2, 2, 2)
    b = AccumulationBuffer(2, 2, 2)
    a.add_hits(0, [0], [0])
    b.add_hits(1, [1, 1], [0, 0], discarded=3)
    a.merge(b)
    assert a.counts[0, 0, 0] == 1
    assert a.counts[1, 0, 1] == 2
    assert a.discarded == 3

    with pytest.raises(ConfigurationError):
        a.merge(AccumulationBuffer(3, 2, 2))
    with pytest.raises(ConfigurationError):
        a.add_hits(2, [0], [0])


def test_zero_buffer_normalization_is_fatal():
    buf = AccumulationBuffer(8, 8, 1)
    with pytest.raises(DegenerateMathError) as exc:
        buf.normalize()
    assert exc.value.stage == "normalize"
    # A failed normalization leaves the buffer usable.
    assert buf.state == ALLOCATED


def test_normalize_policies():
    counts = np.zeros((2, 2, 2), dtype=np.int64)
    counts[0, 0, 0] = 4
    counts[1, 1, 0] = 1
    counts[0, 1, 1] = 2

    per = normalize_counts(counts, "per_channel")
    assert per[..., 0].max() == 1.0
    assert per[..., 1].max() == 1.0
    assert per[1, 1, 0] == 0.25

    glob = normalize_counts(counts, "global")
    assert glob.max() == 1.0
    assert glob[0, 1, 1] == 0.5
    assert glob.min() >= 0.0


def test_per_channel_normalization_rejects_empty_channel():
    counts = np.zeros((2, 2, 3), dtype=np.int64)
    counts[0, 0, 0] = 1
    with pytest.raises(DegenerateMathError):
        normalize_counts(counts, "per_channel")
    assert normalize_counts(counts, "global").max() == 1.0


def test_normalize_is_idempotent():
    counts = np.random.default_rng(3).integers(0, 50, size=(10, 12, 3))
    once = normalize_counts(counts)
    twice = normalize_counts(once)
    assert np.allclose(once, twice, rtol=0.0, atol=1e-15)
    assert np.all(once >= 0.0) and np.all(once <= 1.0)


def test_normalize_policy_is_fixed_once_frozen():
    buf = AccumulationBuffer(2, 2, 2)
    buf.add_hits(0, [0, 0], [0, 0])
    buf.add_hits(1, [1], [1])

    per = buf.normalize("per_channel")
    assert per[1, 1, 1] == 1.0
    assert buf.normalize("per_channel") is per
    with pytest.raises(BufferStateError):
        buf.normalize("global")

    other = AccumulationBuffer(2, 2, 2)
    other.add_hits(0, [0, 0], [0, 0])
    other.add_hits(1, [1], [1])
    glob = other.normalize("global")
    assert glob[1, 1, 1] == 0.5
    with pytest.raises(BufferStateError):
        other.normalize("per_channel")
