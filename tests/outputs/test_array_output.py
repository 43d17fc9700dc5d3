"""Tests for the output base class and the in-memory array output."""

from __future__ import annotations

import numpy as np
import pytest

from dynamic_grids.outputs.array import ArrayOutput
from dynamic_grids.outputs.base import Output


class TestOutputBase:
    def test_defaults(self) -> None:
        output = Output()
        assert output.tstop > 0 and output.fps > 0
        assert not output.has_frames
        assert not output.is_running()

    @pytest.mark.parametrize(("kwargs", "match"), [({"tstop": -1}, "tstop"), ({"fps": 0}, "fps")])
    def test_rejects_bad_settings(self, kwargs: dict[str, float], match: str) -> None:
        with pytest.raises(ValueError, match=match):
            Output(**kwargs)  # type: ignore[arg-type]

    def test_empty_output_has_no_last_frame_or_clock(self) -> None:
        output = Output()
        with pytest.raises(ValueError, match="no frames"):
            output.last_frame
        with pytest.raises(ValueError, match="no frames"):
            output.clock

    def test_remembers_last_frame_even_without_storage(self) -> None:
        output = Output()
        output.init_frames(np.zeros(2), 0)
        output.store_frame(np.ones(2), 1)
        assert output.clock == 1
        assert output.last_frame.tolist() == [1.0, 1.0]

    def test_rejects_clock_going_backwards(self) -> None:
        output = Output()
        output.init_frames(np.zeros(2), 3)
        with pytest.raises(ValueError, match="not after"):
            output.store_frame(np.zeros(2), 3)

    def test_run_flag(self) -> None:
        output = Output()
        output.start()
        assert output.is_running()
        output.stop()
        assert not output.is_running()


class TestArrayOutput:
    def test_indexed_by_clock(self) -> None:
        output = ArrayOutput()
        output.init_frames(np.array([0]), 5)
        output.store_frame(np.array([1]), 6)
        assert len(output) == 2
        assert output.tstart == 5
        assert output[6].tolist() == [1]
        assert output[-1].tolist() == [1]

    def test_init_frames_drops_previous_run(self) -> None:
        output = ArrayOutput()
        output.init_frames(np.array([0]), 0)
        output.store_frame(np.array([1]), 1)
        output.init_frames(np.array([9]), 0)
        assert len(output) == 1
        assert output[0].tolist() == [9]

    def test_rejects_gaps(self) -> None:
        output = ArrayOutput()
        output.init_frames(np.array([0]), 0)
        with pytest.raises(ValueError, match="gap"):
            output.store_frame(np.array([1]), 2)

    def test_iterates_in_order(self) -> None:
        output = ArrayOutput()
        output.init_frames(np.array([0]), 0)
        for t in (1, 2):
            output.store_frame(np.array([t]), t)
        assert [int(frame[0]) for frame in output] == [0, 1, 2]
