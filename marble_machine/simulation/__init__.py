"""Simulation layer: host run loop and Parquet trace persistence."""

from marble_machine.simulation.persistence import TraceRecorder
from marble_machine.simulation.runner import run_contraption, run_source

__all__ = [
    "TraceRecorder",
    "run_contraption",
    "run_source",
]
