"""Frame processors: turn a 2-D frame into an RGB image.

Frames are first normalised to ``[0, 1]`` between a minimum and maximum,
taken from the processor when it fixes them, else from the caller, else
from the frame itself.
"""

from __future__ import annotations

import matplotlib
import numpy as np
from matplotlib.colors import to_rgb

ColorSpec = str | tuple[float, float, float]


def _as_image_grid(frame: np.ndarray) -> np.ndarray:
    frame = np.asarray(frame, dtype=np.float64)
    if frame.ndim == 1:
        frame = frame[np.newaxis, :]
    if frame.ndim != 2:
        raise ValueError(f"images are drawn from 1-D or 2-D frames, got {frame.ndim}-D")
    return frame


def normalise(frame: np.ndarray, minval: float, maxval: float) -> np.ndarray:
    """Scale ``frame`` linearly so ``minval`` maps to 0 and ``maxval`` to 1."""
    span = maxval - minval
    if span <= 0:
        return np.zeros(frame.shape, dtype=np.float64)
    return np.clip((frame - minval) / span, 0.0, 1.0)


class FrameProcessor:
    """Base processor. ``min``/``max`` fix the normalisation range when set."""

    def __init__(self, min: float | None = None, max: float | None = None) -> None:
        if min is not None and max is not None and max < min:
            raise ValueError("max must be >= min")
        self.min = min
        self.max = max

    def colorize(self, normed: np.ndarray, frame: np.ndarray) -> np.ndarray:
        """Map normalised values to an ``(H, W, 3)`` float RGB array in [0, 1]."""
        raise NotImplementedError


class Greyscale(FrameProcessor):
    """Black for the minimum, white for the maximum."""

    def colorize(self, normed: np.ndarray, frame: np.ndarray) -> np.ndarray:
        return np.repeat(normed[..., np.newaxis], 3, axis=-1)


class ColorProcessor(FrameProcessor):
    """Colour through a named matplotlib colormap.

    Cells that are exactly zero are painted ``zerocolor`` when it is given.
    """

    def __init__(
        self,
        scheme: str = "viridis",
        zerocolor: ColorSpec | None = None,
        min: float | None = None,
        max: float | None = None,
    ) -> None:
        super().__init__(min=min, max=max)
        if scheme not in matplotlib.colormaps:
            raise ValueError(f"unknown colour scheme {scheme!r}")
        self.scheme = scheme
        self.cmap = matplotlib.colormaps[scheme]
        self.zerocolor = to_rgb(zerocolor) if zerocolor is not None else None

    def colorize(self, normed: np.ndarray, frame: np.ndarray) -> np.ndarray:
        rgb = np.asarray(self.cmap(normed))[..., :3]
        if self.zerocolor is not None:
            rgb[frame == 0] = self.zerocolor
        return rgb


def frametoimage(
    processor: FrameProcessor,
    frame: np.ndarray,
    minval: float | None = None,
    maxval: float | None = None,
) -> np.ndarray:
    """Render ``frame`` as an ``(H, W, 3)`` ``uint8`` image."""
    grid = _as_image_grid(frame)
    lo = processor.min if processor.min is not None else minval
    hi = processor.max if processor.max is not None else maxval
    if lo is None:
        lo = float(grid.min())
    if hi is None:
        hi = float(grid.max())
    rgb = processor.colorize(normalise(grid, lo, hi), grid)
    return np.round(rgb * 255).astype(np.uint8)
