"""Tests for marble_machine.config.types module."""

from __future__ import annotations

from pathlib import Path

import pytest

from marble_machine.config.types import RunConfig


class TestRunConfig:
    def test_defaults(self) -> None:
        config = RunConfig()
        assert config.max_steps == 1_000
        assert config.halt_when_empty
        assert not config.allow_diagnostics
        assert not config.record_trace

    def test_rejects_non_positive_max_steps(self) -> None:
        with pytest.raises(ValueError, match="max_steps must be >= 1"):
            RunConfig(max_steps=0)

    def test_trace_requires_path(self) -> None:
        with pytest.raises(ValueError, match="trace_path is required"):
            RunConfig(record_trace=True)

    def test_trace_with_path(self, tmp_path: Path) -> None:
        config = RunConfig(record_trace=True, trace_path=tmp_path / "trace.parquet")
        assert config.trace_path == tmp_path / "trace.parquet"

    def test_frozen(self) -> None:
        config = RunConfig()
        with pytest.raises(AttributeError):
            config.max_steps = 5  # type: ignore[misc]
