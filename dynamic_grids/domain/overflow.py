"""Boundary-overflow policies for padded grids.

Grids are padded by the largest rule radius so neighborhood windows never
need bounds checks. The overflow policy decides what the padding holds:
``WRAP`` mirrors the opposite edge of the real grid (toroidal topology),
``REMOVE`` keeps it zeroed so out-of-grid cells add nothing to an
aggregate.
"""

from __future__ import annotations

from enum import Enum

import numpy as np


class Overflow(Enum):
    """Policy for coordinates that fall outside the real grid."""

    WRAP = "wrap"
    REMOVE = "remove"


WrapOverflow = Overflow.WRAP
RemoveOverflow = Overflow.REMOVE


def inbounds(
    index: tuple[int, ...], shape: tuple[int, ...], overflow: Overflow
) -> tuple[tuple[int, ...], bool]:
    """Resolve a logical coordinate against the grid boundaries.

    Returns the coordinate followed by whether it is in bounds. ``WRAP``
    returns the wrapped equivalent and is always in bounds. ``REMOVE``
    returns the coordinate unchanged and ``False`` when it overflows.
    """
    if len(index) != len(shape):
        raise ValueError(f"index has {len(index)} dimensions, grid has {len(shape)}")
    if overflow is Overflow.WRAP:
        return tuple(int(i) % n for i, n in zip(index, shape, strict=True)), True
    in_grid = all(0 <= i < n for i, n in zip(index, shape, strict=True))
    return tuple(int(i) for i in index), in_grid


def handle_overflow(arr: np.ndarray, radius: int, overflow: Overflow) -> None:
    """Refresh the padding of ``arr`` in place for the given policy."""
    if radius == 0:
        return
    if overflow is Overflow.REMOVE:
        _zero_padding(arr, radius)
        return
    for axis, size in enumerate(arr.shape):
        n = size - 2 * radius
        # Physical index of the real cell each padded position mirrors.
        source_idx = np.arange(-radius, n + radius) % n + radius
        arr[...] = np.take(arr, source_idx, axis=axis)


def _zero_padding(arr: np.ndarray, radius: int) -> None:
    for axis in range(arr.ndim):
        lower = [slice(None)] * arr.ndim
        upper = [slice(None)] * arr.ndim
        lower[axis] = slice(0, radius)
        upper[axis] = slice(arr.shape[axis] - radius, None)
        arr[tuple(lower)] = 0
        arr[tuple(upper)] = 0
