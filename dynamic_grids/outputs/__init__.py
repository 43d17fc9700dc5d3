"""Output sinks: in-memory store, terminal display, and Parquet persistence."""

from dynamic_grids.outputs.array import ArrayOutput
from dynamic_grids.outputs.base import Output
from dynamic_grids.outputs.parquet import ParquetOutput, read_frames
from dynamic_grids.outputs.repl import REPLOutput, render_block, render_braille

__all__ = [
    "ArrayOutput",
    "Output",
    "ParquetOutput",
    "REPLOutput",
    "read_frames",
    "render_block",
    "render_braille",
]
