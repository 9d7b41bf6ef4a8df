"""Tests for the host run loop and Parquet trace recording."""

from __future__ import annotations

from pathlib import Path

import pyarrow.parquet as pq
import pytest

from marble_machine.config.types import HaltReason, RunConfig
from marble_machine.domain.compiler import CompilationError, compile_source
from marble_machine.io.schemas import TRACE_SCHEMA
from marble_machine.samples import get_sample
from marble_machine.simulation.runner import run_contraption, run_source

COUNTDOWN_FROM_FIVE = '05\n--:>oo\n""  xx\nxx'


class TestRunContraption:
    def test_countdown_from_five(self) -> None:
        result = run_source(COUNTDOWN_FROM_FIVE)
        assert result.output.splitlines() == ["4", "3", "2", "1", "0"]
        assert result.final.marbles == ()
        assert result.halt_reason is HaltReason.EMPTY
        assert result.steps == 8

    def test_countdown_sample(self) -> None:
        result = run_source(get_sample("countdown"))
        assert result.output.splitlines() == [str(n) for n in range(9, -1, -1)]
        assert result.halt_reason is HaltReason.EMPTY
        assert result.steps == 13

    def test_fibonacci_sample(self) -> None:
        result = run_source(get_sample("fib"), RunConfig(max_steps=28))
        assert result.output.splitlines() == ["0", "1", "1", "2", "3", "5"]
        assert result.halt_reason is HaltReason.MAX_STEPS
        assert result.steps == 28
        assert len(result.final.marbles) == 2

    def test_keeps_stepping_when_empty_halting_disabled(self) -> None:
        result = run_source(COUNTDOWN_FROM_FIVE, RunConfig(max_steps=20, halt_when_empty=False))
        assert result.steps == 20
        assert result.halt_reason is HaltReason.MAX_STEPS
        assert result.output.splitlines() == ["4", "3", "2", "1", "0"]

    def test_empty_program_halts_immediately(self) -> None:
        result = run_contraption(compile_source("####").contraption)
        assert result.steps == 0
        assert result.halt_reason is HaltReason.EMPTY

    def test_start_state_is_not_mutated(self) -> None:
        start = compile_source(COUNTDOWN_FROM_FIVE).contraption
        run_contraption(start)
        assert [(m.value, m.position) for m in start.marbles] == [(5, (0, 0))]
        assert start.output == ""


class TestRunSource:
    def test_diagnostics_block_execution(self) -> None:
        with pytest.raises(CompilationError) as excinfo:
            run_source("01\nqq")
        assert [d.span.start_line for d in excinfo.value.diagnostics] == [2]

    def test_allow_diagnostics_runs_anyway(self) -> None:
        result = run_source("01\nqq", RunConfig(max_steps=3, allow_diagnostics=True))
        # The error cell is solid, so the marble rests on it.
        assert [m.position for m in result.final.marbles] == [(0, 0)]
        assert result.steps == 3


class TestTrace:
    def test_trace_rows_per_marble_per_step(self, tmp_path: Path) -> None:
        trace_path = tmp_path / "trace.parquet"
        result = run_source(
            COUNTDOWN_FROM_FIVE, RunConfig(record_trace=True, trace_path=trace_path)
        )
        table = pq.read_table(trace_path)
        assert table.schema.names == TRACE_SCHEMA.names
        rows = table.to_pylist()
        assert rows[0] == {"step": 0, "marble_index": 0, "x": 0, "y": 0, "value": 5}
        assert {"step": 1, "marble_index": 0, "x": 0, "y": 1, "value": 5} in rows
        assert max(row["step"] for row in rows) == result.steps - 1

    def test_trace_flushes_in_batches(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("marble_machine.simulation.runner.FLUSH_THRESHOLD", 2)
        trace_path = tmp_path / "trace.parquet"
        config = RunConfig(max_steps=10, record_trace=True, trace_path=trace_path)
        run_source(get_sample("fib"), config)
        table = pq.read_table(trace_path)
        # Two marbles at each of the 11 recorded snapshots.
        assert table.num_rows == 22

    def test_trace_written_for_program_without_marbles(self, tmp_path: Path) -> None:
        trace_path = tmp_path / "trace.parquet"
        run_source("####", RunConfig(record_trace=True, trace_path=trace_path))
        table = pq.read_table(trace_path)
        assert table.num_rows == 0
        assert table.schema.names == TRACE_SCHEMA.names
