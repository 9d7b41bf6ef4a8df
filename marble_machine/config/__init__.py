"""Configuration layer: constants and typed config dataclasses."""

from marble_machine.config.constants import (
    BYTE_MODULUS,
    CELL_WIDTH,
    FLUSH_THRESHOLD,
    MAX_STEPS,
)
from marble_machine.config.types import HaltReason, RunConfig, RunResult

__all__ = [
    "BYTE_MODULUS",
    "CELL_WIDTH",
    "FLUSH_THRESHOLD",
    "HaltReason",
    "MAX_STEPS",
    "RunConfig",
    "RunResult",
]
