"""Parquet output: streams frames to disk instead of holding them in memory."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq

from dynamic_grids.config.constants import DEFAULT_FPS, DEFAULT_TSTOP, FLUSH_THRESHOLD
from dynamic_grids.io.schemas import FRAME_SCHEMA
from dynamic_grids.outputs.base import Output

logger = logging.getLogger(__name__)


def _empty_columns() -> dict[str, list]:
    return {name: [] for name in FRAME_SCHEMA.names}


class ParquetOutput(Output):
    """Writes one row per frame to ``path``.

    Rows are buffered until ``flush_threshold`` cells are held, then written
    as a row group. The file is complete once ``close`` has been called;
    ``finalize`` only flushes, so a closed-over run can still be resumed.
    """

    def __init__(
        self,
        path: Path,
        *,
        tstop: int = DEFAULT_TSTOP,
        fps: float = DEFAULT_FPS,
        flush_threshold: int = FLUSH_THRESHOLD,
    ) -> None:
        super().__init__(tstop=tstop, fps=fps)
        if flush_threshold < 1:
            raise ValueError("flush_threshold must be >= 1")
        self.path = Path(path)
        self.flush_threshold = flush_threshold
        self._columns = _empty_columns()
        self._buffered_cells = 0
        self._writer: pq.ParquetWriter | None = None
        self._closed = False

    def clear(self) -> None:
        super().clear()
        if self._writer is not None:
            self._writer.close()
            self._writer = None
        self._columns = _empty_columns()
        self._buffered_cells = 0
        self._closed = False

    def _write(self, frame: np.ndarray, t: int) -> None:
        if self._closed:
            raise ValueError(f"{self.path} is closed")
        self._columns["t"].append(t)
        self._columns["shape"].append(list(frame.shape))
        self._columns["dtype"].append(frame.dtype.str)
        self._columns["values"].append(frame.astype(np.float64).ravel().tolist())
        self._buffered_cells += frame.size
        if self._buffered_cells >= self.flush_threshold:
            self.flush()

    def flush(self) -> None:
        """Write buffered rows to Parquet and clear the in-memory buffers."""
        if not self._columns["t"]:
            return
        table = pa.Table.from_pydict(self._columns, schema=FRAME_SCHEMA)
        if self._writer is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._writer = pq.ParquetWriter(self.path, FRAME_SCHEMA)
        self._writer.write_table(table)
        logger.debug("flushed %d frames to %s", table.num_rows, self.path)
        for values in self._columns.values():
            values.clear()
        self._buffered_cells = 0

    def finalize(self) -> None:
        self.flush()

    def close(self) -> None:
        self.flush()
        if self._writer is not None:
            self._writer.close()
            self._writer = None
        self._closed = True

    def __enter__(self) -> ParquetOutput:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def read_frames(path: Path) -> dict[int, np.ndarray]:
    """Load frames written by ``ParquetOutput``, keyed by clock value."""
    table = pq.read_table(Path(path))
    frames: dict[int, np.ndarray] = {}
    for row in table.to_pylist():
        values = np.asarray(row["values"], dtype=np.float64).reshape(row["shape"])
        frames[int(row["t"])] = values.astype(np.dtype(row["dtype"]))
    return frames
