"""Neighborhood descriptors and their aggregation over a local window.

A rule of radius ``r`` is handed a window of side ``2r + 1`` on every axis,
centred on the target cell. Neighborhoods reduce that window to an
aggregate influence (a sum, or one sum per layer). They never see the
global grid, so every evaluation is a pure function of the window.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

Offset = tuple[int, ...]


def hoodsize(radius: int) -> int:
    """Return the side length of a neighborhood window, always ``2r + 1``."""
    return 2 * radius + 1


def _window_center(window: np.ndarray) -> tuple[int, ...]:
    return tuple(side // 2 for side in window.shape)


@dataclass(frozen=True)
class RadialNeighborhood:
    """Moore neighborhood of any rank: every cell within Chebyshev distance
    ``radius`` of the centre, excluding the centre itself."""

    radius: int = 1

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError("radius must be >= 0")

    @property
    def ndims(self) -> int | None:
        return None

    def size(self, ndims: int) -> int:
        """Number of cells counted for a grid of rank ``ndims``."""
        return hoodsize(self.radius) ** ndims - 1

    def neighbors(self, window: np.ndarray):
        total = window.sum()
        return total - total.dtype.type(window[_window_center(window)])


@dataclass(frozen=True)
class CustomNeighborhood:
    """Arbitrary neighborhood shape listed as offsets from the centre.

    The origin is counted only when ``(0, ..., 0)`` is listed explicitly.
    """

    offsets: tuple[Offset, ...]

    def __post_init__(self) -> None:
        offsets = tuple(tuple(int(c) for c in offset) for offset in self.offsets)
        if not offsets:
            raise ValueError("offsets must not be empty")
        ndims = len(offsets[0])
        if ndims < 1:
            raise ValueError("offsets must have at least one dimension")
        if any(len(offset) != ndims for offset in offsets):
            raise ValueError("offsets must all have the same length")
        object.__setattr__(self, "offsets", offsets)

    @property
    def radius(self) -> int:
        return max(abs(c) for offset in self.offsets for c in offset)

    @property
    def ndims(self) -> int:
        return len(self.offsets[0])

    def size(self, ndims: int | None = None) -> int:
        return len(self.offsets)

    def neighbors(self, window: np.ndarray):
        center = _window_center(window)
        return sum(
            window[tuple(c + o for c, o in zip(center, offset, strict=True))]
            for offset in self.offsets
        )


@dataclass(frozen=True)
class LayeredCustomNeighborhood:
    """Several custom neighborhoods summed separately, one result per layer."""

    layers: tuple[CustomNeighborhood, ...]

    def __post_init__(self) -> None:
        layers = tuple(
            layer if isinstance(layer, CustomNeighborhood) else CustomNeighborhood(tuple(layer))
            for layer in self.layers
        )
        if not layers:
            raise ValueError("layers must not be empty")
        if len({layer.ndims for layer in layers}) != 1:
            raise ValueError("all layers must have the same number of dimensions")
        object.__setattr__(self, "layers", layers)

    @property
    def radius(self) -> int:
        return max(layer.radius for layer in self.layers)

    @property
    def ndims(self) -> int:
        return self.layers[0].ndims

    def size(self, ndims: int | None = None) -> int:
        return max(len(layer.offsets) for layer in self.layers)

    def neighbors(self, window: np.ndarray) -> tuple:
        return tuple(layer.neighbors(window) for layer in self.layers)


Neighborhood = Union[RadialNeighborhood, CustomNeighborhood, LayeredCustomNeighborhood]
