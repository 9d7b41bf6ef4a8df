"""Parquet schema definitions for run artifacts.

The per-step trace is the only persisted artifact: one row per live marble
after every settled cycle. Step 0 holds the compiled start state.
"""

from __future__ import annotations

import pyarrow as pa

TRACE_SCHEMA_VERSION = 1

TRACE_SCHEMA = pa.schema(
    [
        ("step", pa.int64()),
        ("marble_index", pa.int64()),
        ("x", pa.int64()),
        ("y", pa.int64()),
        ("value", pa.int64()),
    ],
    metadata={"trace_schema_version": str(TRACE_SCHEMA_VERSION)},
)

TRACE_COLUMNS: tuple[str, ...] = tuple(TRACE_SCHEMA.names)
"""Column order of ``TRACE_SCHEMA``."""
