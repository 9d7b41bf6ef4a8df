"""Configuration dataclasses and result containers for host runs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from marble_machine.config.constants import MAX_STEPS

if TYPE_CHECKING:
    from marble_machine.domain.contraption import Contraption

__all__ = [
    "HaltReason",
    "RunConfig",
    "RunResult",
]


class HaltReason(Enum):
    """Why the host runner stopped stepping a contraption."""

    EMPTY = "empty"
    MAX_STEPS = "max_steps"


@dataclass(frozen=True)
class RunConfig:
    """Host runtime knobs for stepping one program."""

    max_steps: int = MAX_STEPS
    halt_when_empty: bool = True
    allow_diagnostics: bool = False
    record_trace: bool = False
    trace_path: Path | None = None
    """Parquet file receiving one row per live marble per step."""

    def __post_init__(self) -> None:
        if self.max_steps < 1:
            raise ValueError("max_steps must be >= 1")
        if self.record_trace and self.trace_path is None:
            raise ValueError("trace_path is required when record_trace is enabled")


@dataclass(frozen=True)
class RunResult:
    """Outcome of one host run."""

    steps: int
    halt_reason: HaltReason
    output: str
    final: Contraption
