"""Output sink interface shared by every frame store and display.

Outputs receive one read-only frame per step and never see the live
buffers. They remember the last frame and its clock value so a run can
be resumed even when the output itself discards frames.
"""

from __future__ import annotations

import threading

import numpy as np

from dynamic_grids.config.constants import DEFAULT_FPS, DEFAULT_TSTOP


class Output:
    """Base output: declared length, pacing hint, run flag and last frame."""

    def __init__(self, *, tstop: int = DEFAULT_TSTOP, fps: float = DEFAULT_FPS) -> None:
        if tstop < 0:
            raise ValueError("tstop must be >= 0")
        if fps <= 0:
            raise ValueError("fps must be > 0")
        self.tstop = tstop
        self.fps = fps
        self._running = threading.Event()
        self._last_frame: np.ndarray | None = None
        self._clock: int | None = None

    @property
    def has_frames(self) -> bool:
        return self._last_frame is not None

    @property
    def last_frame(self) -> np.ndarray:
        if self._last_frame is None:
            raise ValueError("output holds no frames")
        return self._last_frame

    @property
    def clock(self) -> int:
        """Clock value of the last stored frame."""
        if self._clock is None:
            raise ValueError("output holds no frames")
        return self._clock

    def init_frames(self, frame: np.ndarray, t: int) -> None:
        """Start a fresh run: drop stored frames and store the initial one."""
        self.clear()
        self.store_frame(frame, t)

    def store_frame(self, frame: np.ndarray, t: int) -> None:
        if self._clock is not None and t <= self._clock:
            raise ValueError(f"frame clock {t} is not after {self._clock}")
        self._write(frame, t)
        self._last_frame = frame
        self._clock = t

    def clear(self) -> None:
        self._last_frame = None
        self._clock = None

    def _write(self, frame: np.ndarray, t: int) -> None:
        """Persist or display one frame; subclasses override."""

    def start(self) -> None:
        self._running.set()

    def stop(self) -> None:
        """Ask a running simulation to stop before its next step."""
        self._running.clear()

    def is_running(self) -> bool:
        return self._running.is_set()

    def finalize(self) -> None:
        """Called once when a run ends, normally or not."""
