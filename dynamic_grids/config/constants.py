"""Centralized defaults for simulation runs and output sinks.

All magic numbers that appear across multiple modules are defined here.
Consuming modules should import from this module rather than defining
their own inline literals.
"""

from __future__ import annotations

DEFAULT_FPS = 25.0
"""Default frames-per-second pacing hint for outputs."""

DEFAULT_TSTOP = 100
"""Default declared length (stop clock) of an output."""

DEFAULT_TADD = 100
"""Default number of frames added by ``resume``."""

DEFAULT_BLOCK_SIZE = 16
"""Side length, in cells, of one activity-bitmap block on every axis."""

DEFAULT_CUTOFF = 0.5
"""Cell values above this are drawn as occupied by the terminal renderer."""

FLUSH_THRESHOLD = 8_192
"""Flush buffered frame rows to Parquet once this many cells are held in memory."""

MAX_REPLICATES = 256
"""Safety cap on the number of concurrently stepped replicates."""
