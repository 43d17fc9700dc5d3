"""In-memory output that keeps every frame of a run."""

from __future__ import annotations

import numpy as np

from dynamic_grids.config.constants import DEFAULT_FPS, DEFAULT_TSTOP
from dynamic_grids.outputs.base import Output


class ArrayOutput(Output):
    """Stores each frame, indexable by its clock value.

    ``output[t]`` is the frame at clock ``t`` counted from the first stored
    frame; ``len(output)`` is the number of stored frames.
    """

    def __init__(self, *, tstop: int = DEFAULT_TSTOP, fps: float = DEFAULT_FPS) -> None:
        super().__init__(tstop=tstop, fps=fps)
        self.frames: list[np.ndarray] = []
        self.tstart = 0

    def clear(self) -> None:
        super().clear()
        self.frames = []

    def _write(self, frame: np.ndarray, t: int) -> None:
        if not self.frames:
            self.tstart = t
        elif t != self.tstart + len(self.frames):
            last = self.tstart + len(self.frames) - 1
            raise ValueError(f"frame clock {t} leaves a gap after {last}")
        self.frames.append(frame)

    def __len__(self) -> int:
        return len(self.frames)

    def __getitem__(self, t: int) -> np.ndarray:
        if t < 0:
            return self.frames[t]
        return self.frames[t - self.tstart]

    def __iter__(self):
        return iter(self.frames)
