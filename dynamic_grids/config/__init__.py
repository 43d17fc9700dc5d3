"""Configuration layer: constants and typed config dataclasses."""

from dynamic_grids.config.constants import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_CUTOFF,
    DEFAULT_FPS,
    DEFAULT_TADD,
    DEFAULT_TSTOP,
    FLUSH_THRESHOLD,
    MAX_REPLICATES,
)
from dynamic_grids.config.types import DisplayStyle, Reduction, SimConfig

__all__ = [
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_CUTOFF",
    "DEFAULT_FPS",
    "DEFAULT_TADD",
    "DEFAULT_TSTOP",
    "DisplayStyle",
    "FLUSH_THRESHOLD",
    "MAX_REPLICATES",
    "Reduction",
    "SimConfig",
]
