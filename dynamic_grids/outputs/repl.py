"""Terminal output: draws each frame with block or braille characters."""

from __future__ import annotations

import sys
import time
from typing import TextIO

import numpy as np

from dynamic_grids.config.constants import DEFAULT_CUTOFF, DEFAULT_FPS, DEFAULT_TSTOP
from dynamic_grids.config.types import DisplayStyle
from dynamic_grids.outputs.base import Output

_CLEAR = "\x1b[2J"
_HOME = "\x1b[H"

# Braille dot bit for each (row, column) of a 4x2 character cell.
_BRAILLE_BITS = ((0x01, 0x08), (0x02, 0x10), (0x04, 0x20), (0x40, 0x80))


def _occupancy(frame: np.ndarray, cutoff: float) -> np.ndarray:
    frame = np.asarray(frame)
    if frame.ndim == 1:
        frame = frame[np.newaxis, :]
    if frame.ndim != 2:
        raise ValueError(f"terminal output draws 1-D or 2-D frames, got {frame.ndim}-D")
    return frame > cutoff


def _pad_to(mask: np.ndarray, rows: int, cols: int) -> np.ndarray:
    h, w = mask.shape
    return np.pad(mask, ((0, -h % rows), (0, -w % cols)), mode="constant")


def render_block(frame: np.ndarray, cutoff: float = DEFAULT_CUTOFF) -> str:
    """Two grid rows per text line using half-block characters."""
    mask = _pad_to(_occupancy(frame, cutoff), 2, 1)
    chars = {(False, False): " ", (True, False): "▀", (False, True): "▄", (True, True): "█"}
    lines = []
    for top, bottom in zip(mask[0::2], mask[1::2], strict=True):
        pairs = zip(top, bottom, strict=True)
        lines.append("".join(chars[(bool(a), bool(b))] for a, b in pairs))
    return "\n".join(lines)


def render_braille(frame: np.ndarray, cutoff: float = DEFAULT_CUTOFF) -> str:
    """Four grid rows and two columns per braille character."""
    mask = _pad_to(_occupancy(frame, cutoff), 4, 2)
    h, w = mask.shape
    lines = []
    for r in range(0, h, 4):
        line = []
        for c in range(0, w, 2):
            code = 0x2800
            for dr in range(4):
                for dc in range(2):
                    if mask[r + dr, c + dc]:
                        code |= _BRAILLE_BITS[dr][dc]
            line.append(chr(code))
        lines.append("".join(line))
    return "\n".join(lines)


_RENDERERS = {
    DisplayStyle.BLOCK: render_block,
    DisplayStyle.BRAILLE: render_braille,
}


class REPLOutput(Output):
    """Draws frames in the terminal, paced to ``fps``.

    Only the last frame is kept unless ``store=True``.
    """

    def __init__(
        self,
        *,
        tstop: int = DEFAULT_TSTOP,
        fps: float = DEFAULT_FPS,
        style: DisplayStyle = DisplayStyle.BLOCK,
        cutoff: float = DEFAULT_CUTOFF,
        store: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        super().__init__(tstop=tstop, fps=fps)
        self.style = style
        self.cutoff = cutoff
        self.store = store
        self.stream = stream if stream is not None else sys.stdout
        self.frames: list[np.ndarray] = []
        self._started_at: float | None = None
        self._tstart = 0

    def clear(self) -> None:
        super().clear()
        self.frames = []
        self._started_at = None

    def start(self) -> None:
        super().start()
        self._started_at = None

    def _write(self, frame: np.ndarray, t: int) -> None:
        if self.store:
            self.frames.append(frame)
        if self._started_at is None:
            self._started_at = time.monotonic()
            self._tstart = t
            self.stream.write(_CLEAR)
        else:
            self._pace(t)
        self.showframe(frame, t)

    def _pace(self, t: int) -> None:
        if self._started_at is None:
            return
        target = self._started_at + (t - self._tstart) / self.fps
        delay = target - time.monotonic()
        if delay > 0:
            time.sleep(delay)

    def showframe(self, frame: np.ndarray | None = None, t: int | None = None) -> None:
        """Draw ``frame``, or the last stored frame when omitted."""
        if frame is None:
            frame, t = self.last_frame, self.clock
        text = _RENDERERS[self.style](frame, self.cutoff)
        self.stream.write(f"{_HOME}t={t}\n{text}\n")
        self.stream.flush()
