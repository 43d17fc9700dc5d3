"""Export stored frames as an animated image."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
import numpy as np
from matplotlib import animation

from dynamic_grids.config.constants import DEFAULT_FPS
from dynamic_grids.io.paths import resolve_within_base
from dynamic_grids.outputs.base import Output
from dynamic_grids.viz.processors import FrameProcessor, Greyscale, frametoimage

logger = logging.getLogger(__name__)


def _stored_frames(source: Output | Sequence[np.ndarray]) -> list[np.ndarray]:
    if isinstance(source, Output):
        frames = getattr(source, "frames", None)
        if frames is None:
            raise ValueError(f"{type(source).__name__} does not keep its frames")
        frames = list(frames)
    else:
        frames = list(source)
    if not frames:
        raise ValueError("no frames to export")
    return frames


def savegif(
    path: Path,
    output: Output | Sequence[np.ndarray],
    processor: FrameProcessor | None = None,
    fps: float | None = None,
    base_dir: Path | None = None,
) -> Path:
    """Write every stored frame of ``output`` to an animated GIF at ``path``.

    All frames share one normalisation range so colours are comparable
    across the animation. ``fps`` defaults to the output's own rate.
    Returns the resolved path written.
    """
    if base_dir is None:
        path = Path(path).resolve()
    else:
        path = resolve_within_base(Path(path), Path(base_dir).resolve())
    processor = processor if processor is not None else Greyscale()
    frames = _stored_frames(output)
    if fps is None:
        fps = output.fps if isinstance(output, Output) else DEFAULT_FPS
    if fps <= 0:
        raise ValueError("fps must be > 0")

    minval = min(float(np.min(frame)) for frame in frames)
    maxval = max(float(np.max(frame)) for frame in frames)
    images = [frametoimage(processor, frame, minval, maxval) for frame in frames]

    height, width = images[0].shape[:2]
    fig = plt.figure(figsize=(max(1.0, width / 50), max(1.0, height / 50)), dpi=100)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_axis_off()
    img = ax.imshow(images[0], interpolation="nearest", aspect="auto")

    def update(frame_index: int) -> tuple[Any, ...]:
        img.set_data(images[frame_index])
        return (img,)

    anim = animation.FuncAnimation(
        fig, update, frames=len(images), interval=max(1, int(1000 / fps)), blit=False
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    anim.save(path, writer=animation.PillowWriter(fps=fps))
    plt.close(fig)
    logger.info("wrote %d frames to %s", len(images), path)
    return path
