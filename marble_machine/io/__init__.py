"""I/O layer: Arrow schemas for persisted run artifacts."""

from marble_machine.io.schemas import TRACE_COLUMNS, TRACE_SCHEMA, TRACE_SCHEMA_VERSION

__all__ = ["TRACE_COLUMNS", "TRACE_SCHEMA", "TRACE_SCHEMA_VERSION"]
