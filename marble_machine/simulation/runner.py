"""Host loop: step a contraption until it empties or hits the step cap."""

from __future__ import annotations

import logging

from marble_machine.config.constants import FLUSH_THRESHOLD
from marble_machine.config.types import HaltReason, RunConfig, RunResult
from marble_machine.domain.compiler import CompilationError, compile_source
from marble_machine.domain.contraption import Contraption
from marble_machine.simulation.persistence import TraceRecorder

logger = logging.getLogger(__name__)


def run_contraption(contraption: Contraption, config: RunConfig | None = None) -> RunResult:
    """Step ``contraption`` and return the final snapshot with its output.

    Halts as soon as no marbles remain (when ``halt_when_empty``) or after
    ``max_steps`` cycles. With ``record_trace`` every settled snapshot,
    including the start state as step 0, is written to ``trace_path``.
    """
    run_config = config or RunConfig()
    recorder: TraceRecorder | None = None
    if run_config.record_trace and run_config.trace_path is not None:
        recorder = TraceRecorder(run_config.trace_path, FLUSH_THRESHOLD)

    state = contraption
    steps = 0
    halt_reason = HaltReason.MAX_STEPS
    try:
        if recorder is not None:
            recorder.record(0, state)
        while steps < run_config.max_steps:
            if run_config.halt_when_empty and not state.marbles:
                halt_reason = HaltReason.EMPTY
                break
            state = state.step()
            steps += 1
            logger.debug("step %d: %d marble(s)", steps, len(state.marbles))
            if recorder is not None:
                recorder.record(steps, state)
        else:
            if run_config.halt_when_empty and not state.marbles:
                halt_reason = HaltReason.EMPTY

        if recorder is not None:
            recorder.finish()
            logger.info("wrote %d trace row(s) to %s", recorder.rows_written, recorder.path)
    finally:
        if recorder is not None:
            recorder.close()

    logger.info("halted after %d step(s): %s", steps, halt_reason.value)
    return RunResult(steps=steps, halt_reason=halt_reason, output=state.output, final=state)


def run_source(source: str, config: RunConfig | None = None) -> RunResult:
    """Compile ``source`` and run it.

    Raises ``CompilationError`` when the build produced diagnostics, unless
    ``allow_diagnostics`` is set.
    """
    run_config = config or RunConfig()
    result = compile_source(source)
    if not result.ok:
        for diagnostic in result.diagnostics:
            logger.warning("%s", diagnostic.message)
        if not run_config.allow_diagnostics:
            raise CompilationError(result.diagnostics)
    return run_contraption(result.contraption, run_config)
