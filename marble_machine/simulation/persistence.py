"""Parquet persistence for the per-step trace stream."""

from __future__ import annotations

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from marble_machine.config.constants import FLUSH_THRESHOLD
from marble_machine.domain.contraption import Contraption
from marble_machine.io.schemas import TRACE_COLUMNS, TRACE_SCHEMA


class TraceRecorder:
    """Buffer one row per live marble per snapshot and stream batches to ``path``.

    The Parquet writer is opened on the first non-empty flush. ``finish``
    guarantees a readable file even when no row was ever recorded; ``close``
    only releases the writer.
    """

    def __init__(self, path: Path, flush_threshold: int = FLUSH_THRESHOLD) -> None:
        if flush_threshold < 1:
            raise ValueError("flush_threshold must be >= 1")
        self.path = path
        self._flush_threshold = flush_threshold
        self._columns: dict[str, list[int]] = {name: [] for name in TRACE_COLUMNS}
        self._writer: pq.ParquetWriter | None = None
        self.rows_written = 0

    @property
    def buffered_rows(self) -> int:
        return len(self._columns["step"])

    def record(self, step: int, contraption: Contraption) -> None:
        for index, marble in enumerate(contraption.marbles):
            self._columns["step"].append(step)
            self._columns["marble_index"].append(index)
            self._columns["x"].append(marble.x)
            self._columns["y"].append(marble.y)
            self._columns["value"].append(marble.value)
        if self.buffered_rows >= self._flush_threshold:
            self.flush()

    def flush(self) -> None:
        if not self.buffered_rows:
            return
        if self._writer is None:
            self._writer = pq.ParquetWriter(self.path, TRACE_SCHEMA)
        self._writer.write_table(pa.Table.from_pydict(self._columns, schema=TRACE_SCHEMA))
        self.rows_written += self.buffered_rows
        for values in self._columns.values():
            values.clear()

    def finish(self) -> None:
        self.flush()
        if self._writer is None:
            pq.write_table(TRACE_SCHEMA.empty_table(), self.path)

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None
