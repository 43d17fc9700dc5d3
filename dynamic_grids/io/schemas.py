"""Parquet schema definitions for persisted simulation frames.

Every module that writes or reads frame files works against the column
contract defined here.
"""

from __future__ import annotations

import pyarrow as pa

FRAME_SCHEMA_VERSION = 1

FRAME_SCHEMA = pa.schema(
    [
        ("t", pa.int64()),
        ("shape", pa.list_(pa.int64())),
        ("dtype", pa.string()),
        ("values", pa.list_(pa.float64())),
    ],
    metadata={"schema_version": str(FRAME_SCHEMA_VERSION)},
)
