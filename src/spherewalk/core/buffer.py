from __future__ import annotations

import numpy as np

from spherewalk.errors import BufferStateError, DegenerateMathError, _require

ALLOCATED = "allocated"
ACCUMULATING = "accumulating"
NORMALIZED = "normalized"


def normalize_counts(counts: np.ndarray, policy: str = "per_channel") -> np.ndarray:
    """
    Scale an (H,W,C) histogram into [0,1].

    policy:
      per_channel: each channel divided by its own maximum (every channel peaks at 1.0).
      global: all channels divided by the single largest cell (keeps relative color balance).

    Raises DegenerateMathError when a divisor is zero.
    """
    _require(policy in ("per_channel", "global"), "normalization must be per_channel|global")
    counts = np.asarray(counts)
    _require(counts.ndim == 3, "counts must be (H,W,C)")
    img = counts.astype(np.float64)

    if policy == "global":
        peak = float(np.max(img)) if img.size else 0.0
        if not peak > 0.0:
            raise DegenerateMathError("normalize", "buffer is empty (no in-bounds samples)")
        return img / peak

    peaks = np.max(img, axis=(0, 1)) if img.size else np.zeros(img.shape[-1])
    empty = [c for c, p in enumerate(peaks) if not p > 0.0]
    if empty:
        raise DegenerateMathError("normalize", f"channel(s) {empty} received no in-bounds samples")
    return img / peaks[None, None, :]


class AccumulationBuffer:
    """
    Per-channel hit counter of shape (height, width, channels).

    Lifecycle: allocated -> accumulating -> normalized. Hits can be added (or private
    buffers merged) until `normalize()` is called; afterwards the buffer is read-only.
    """

    def __init__(self, width: int, height: int, channels: int = 1) -> None:
        _require(int(width) > 0 and int(height) > 0, "buffer width/height must be > 0")
        _require(int(channels) > 0, "buffer channels must be > 0")
        self.width = int(width)
        self.height = int(height)
        self.channels = int(channels)
        self.counts = np.zeros((self.height, self.width, self.channels), dtype=np.int64)
        self.discarded = 0
        self.state = ALLOCATED
        self._image: np.ndarray | None = None
        self._policy: str | None = None

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.height, self.width, self.channels

    @property
    def total_hits(self) -> int:
        return int(np.sum(self.counts))

    def _check_mutable(self) -> None:
        if self.state == NORMALIZED:
            raise BufferStateError("buffer is normalized and read-only; allocate a new buffer for a new pass")

    def add_hits(self, channel: int, rows: np.ndarray, cols: np.ndarray, discarded: int = 0) -> None:
        """Increment one cell per (row, col) pair; coordinates must already be in bounds."""
        self._check_mutable()
        _require(0 <= int(channel) < self.channels, f"channel must be in [0,{self.channels})")
        rows = np.asarray(rows, dtype=np.int64).reshape(-1)
        cols = np.asarray(cols, dtype=np.int64).reshape(-1)
        _require(rows.shape == cols.shape, "rows and cols must have the same length")
        if rows.size:
            _require(
                rows.min() >= 0 and rows.max() < self.height and cols.min() >= 0 and cols.max() < self.width,
                "hit coordinates out of bounds",
            )
        self.state = ACCUMULATING
        self.discarded += int(discarded)
        if rows.size == 0:
            return
        flat = rows * self.width + cols
        # bincount sums integer hits, so the result does not depend on sample order.
        hist = np.bincount(flat, minlength=self.width * self.height)
        self.counts[:, :, int(channel)] += hist.reshape(self.height, self.width)

    def merge(self, other: AccumulationBuffer) -> None:
        """Sum a privately accumulated buffer into this one."""
        self._check_mutable()
        _require(other.shape == self.shape, f"cannot merge buffer {other.shape} into {self.shape}")
        self.state = ACCUMULATING
        self.counts += other.counts
        self.discarded += other.discarded

    def normalize(self, policy: str = "per_channel") -> np.ndarray:
        """
        Normalize into a float image in [0,1] and freeze the buffer.
        Calling it again with the same policy returns the same image; a different
        policy raises BufferStateError.
        """
        if self.state == NORMALIZED:
            assert self._image is not None
            if policy != self._policy:
                raise BufferStateError(f"buffer was normalized with policy {self._policy!r}, not {policy!r}")
            return self._image
        image = normalize_counts(self.counts, policy=policy)
        image.setflags(write=False)
        self.counts.setflags(write=False)
        self._image = image
        self._policy = policy
        self.state = NORMALIZED
        return image
