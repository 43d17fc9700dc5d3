"""Double-buffered grid state with padding and a block activity bitmap.

Both buffers are padded by the ruleset's largest radius so every window
read is a plain slice. Logical (unpadded) index ``i`` on an axis lives at
physical index ``i + radius``. The activity bitmap holds one flag per
``block_size`` block of logical cells; a cleared flag lets the sequencer
skip that block.
"""

from __future__ import annotations

import itertools
import math
from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np

from dynamic_grids.config.constants import DEFAULT_BLOCK_SIZE
from dynamic_grids.domain.overflow import Overflow, handle_overflow
from dynamic_grids.domain.ruleset import Ruleset


def addpadding(init: np.ndarray, radius: int) -> np.ndarray:
    """Return a zero-padded copy of ``init`` with ``radius`` cells on every side."""
    return np.pad(np.asarray(init), radius, mode="constant")


def block_shape(shape: tuple[int, ...], block_size: int) -> tuple[int, ...]:
    """Shape of the activity bitmap covering a grid of ``shape``."""
    return tuple(math.ceil(n / block_size) for n in shape)


def block_reduce(mask: np.ndarray, block_size: int) -> np.ndarray:
    """Collapse a cell mask to a block mask: a block is set if any cell is."""
    nblocks = block_shape(mask.shape, block_size)
    padded = np.zeros(tuple(nb * block_size for nb in nblocks), dtype=bool)
    padded[tuple(slice(0, n) for n in mask.shape)] = mask
    split: list[int] = []
    for nb in nblocks:
        split.extend((nb, block_size))
    return padded.reshape(split).any(axis=tuple(range(1, 2 * mask.ndim, 2)))


def block_expand(status: np.ndarray, block_size: int, shape: tuple[int, ...]) -> np.ndarray:
    """Expand a block mask back to a cell mask of ``shape``."""
    cells = status
    for axis in range(status.ndim):
        cells = np.repeat(cells, block_size, axis=axis)
    return cells[tuple(slice(0, n) for n in shape)]


def _shift(mask: np.ndarray, shift: int, axis: int, overflow: Overflow) -> np.ndarray:
    if overflow is Overflow.WRAP:
        return np.roll(mask, shift, axis=axis)
    out = np.zeros_like(mask)
    n = mask.shape[axis]
    if abs(shift) >= n:
        return out
    src = [slice(None)] * mask.ndim
    dst = [slice(None)] * mask.ndim
    if shift > 0:
        src[axis], dst[axis] = slice(0, n - shift), slice(shift, None)
    else:
        src[axis], dst[axis] = slice(-shift, None), slice(0, n + shift)
    out[tuple(dst)] = mask[tuple(src)]
    return out


def dilate(mask: np.ndarray, reach: int, overflow: Overflow) -> np.ndarray:
    """Grow a cell mask by Chebyshev distance ``reach``.

    Growth wraps across the grid edges under ``WRAP`` and stops at them
    under ``REMOVE``. The box is separable, so axes are grown one at a time.
    """
    out = mask.copy()
    if reach == 0:
        return out
    for axis in range(mask.ndim):
        grown = out.copy()
        for shift in range(1, reach + 1):
            grown |= _shift(out, shift, axis, overflow)
            grown |= _shift(out, -shift, axis, overflow)
        out = grown
    return out


@dataclass
class SimData:
    """Source/destination buffers, activity bitmap, clock and random stream
    for one replicate."""

    source: np.ndarray
    dest: np.ndarray
    shape: tuple[int, ...]
    radius: int
    overflow: Overflow
    status: np.ndarray
    block_size: int = DEFAULT_BLOCK_SIZE
    sparse: bool = False
    reach: int = 0
    rng: np.random.Generator = field(default_factory=np.random.default_rng)
    t: int = 0
    changed: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.source.shape != self.dest.shape or self.source.dtype != self.dest.dtype:
            raise ValueError("source and dest must share shape and dtype")
        self.changed = np.zeros(self.shape, dtype=bool)

    @property
    def interior(self) -> tuple[slice, ...]:
        """Physical slices covering the real (unpadded) grid."""
        return tuple(slice(self.radius, self.radius + n) for n in self.shape)

    def to_physical(self, index: tuple[int, ...]) -> tuple[int, ...]:
        return tuple(i + self.radius for i in index)

    def to_logical(self, index: tuple[int, ...]) -> tuple[int, ...]:
        return tuple(i - self.radius for i in index)

    def swap(self) -> None:
        """Exchange source and dest by reference."""
        self.source, self.dest = self.dest, self.source

    def frame(self) -> np.ndarray:
        """Read-only copy of the current (source) grid without padding."""
        frame = self.source[self.interior].copy()
        frame.flags.writeable = False
        return frame

    def load(self, init: np.ndarray, t: int = 0) -> None:
        """Reset both buffers to ``init`` and mark every block active."""
        init = np.asarray(init)
        if init.shape != self.shape:
            raise ValueError(f"init shape {init.shape} does not match grid shape {self.shape}")
        self.source[self.interior] = init
        handle_overflow(self.source, self.radius, self.overflow)
        self.dest[...] = self.source
        self.status[...] = True
        self.changed[...] = False
        self.t = t

    def all_active(self) -> bool:
        return not self.sparse or bool(self.status.all())

    def active_indices(self) -> Iterator[tuple[int, ...]]:
        """Logical indices of every cell in an active block."""
        if self.all_active():
            yield from np.ndindex(*self.shape)
            return
        bs = self.block_size
        for block in np.argwhere(self.status):
            ranges = [
                range(int(b) * bs, min((int(b) + 1) * bs, n))
                for b, n in zip(block, self.shape, strict=True)
            ]
            yield from itertools.product(*ranges)


def simdata(
    ruleset: Ruleset,
    init: np.ndarray,
    *,
    block_size: int = DEFAULT_BLOCK_SIZE,
    sparse: bool = True,
    rng: np.random.Generator | None = None,
    t: int = 0,
) -> SimData:
    """Generate simulation data to match a ruleset and init array."""
    init = np.asarray(init)
    if init.ndim == 0:
        raise ValueError("init must have at least one dimension")
    if 0 in init.shape:
        raise ValueError("init must not have an empty dimension")
    mismatched = ruleset.ndims() - {init.ndim}
    if mismatched:
        raise ValueError(
            f"init has {init.ndim} dimensions but rules use neighborhoods of "
            f"{sorted(mismatched)} dimensions"
        )
    radius = ruleset.maxradius()
    source = addpadding(init, radius)
    handle_overflow(source, radius, ruleset.overflow)
    return SimData(
        source=source,
        dest=source.copy(),
        shape=init.shape,
        radius=radius,
        overflow=ruleset.overflow,
        status=np.ones(block_shape(init.shape, block_size), dtype=bool),
        block_size=block_size,
        sparse=sparse and ruleset.is_stationary(),
        reach=ruleset.reach(),
        rng=rng if rng is not None else np.random.default_rng(),
        t=t,
    )
