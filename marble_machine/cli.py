"""CLI entrypoint: compile and run one program.

Supports ``--config path/to/config.json``; CLI arguments override
config-file values, config-file values override built-in defaults.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from marble_machine.config.constants import MAX_STEPS
from marble_machine.config.types import RunConfig
from marble_machine.domain.compiler import CompilationError
from marble_machine.samples import SAMPLES, get_sample
from marble_machine.simulation.runner import run_source

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config resolution helpers
# ---------------------------------------------------------------------------


def _coerce_bool(raw: object, key: str) -> bool:
    """Coerce raw value to bool with strict string-check."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"{key} must be a boolean value")


def _coerce_int(raw: object, key: str) -> int:
    """Coerce raw value to int; rejects booleans and non-integer floats."""
    if isinstance(raw, bool):
        raise ValueError(f"{key} must be an integer value")
    if isinstance(raw, float):
        if raw != int(raw):
            raise ValueError(f"{key} must be an integer value, got {raw!r}")
        return int(raw)
    if isinstance(raw, (int, str)):
        return int(raw)
    raise ValueError(f"{key} must be an integer value")


def _coerce_optional_path(raw: object, key: str) -> Path | None:
    if raw is None:
        return None
    if isinstance(raw, (str, Path)):
        return Path(raw)
    raise ValueError(f"{key} must be a path string")


def _get_val(cli_val: object, key: str, file_cfg: dict[str, object], default: object) -> object:
    """CLI > file > default resolution."""
    if cli_val is not None:
        return cli_val
    return file_cfg.get(key, default)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a marble machine program")
    parser.add_argument("program", type=Path, nargs="?", default=None, help="Program source file")
    parser.add_argument("--sample", type=str, choices=sorted(SAMPLES), default=None)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file (CLI args override file values)",
    )
    parser.add_argument("--max-steps", type=int, default=None)
    parser.add_argument("--halt-when-empty", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument(
        "--allow-diagnostics",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run even when the program has unknown symbols",
    )
    parser.add_argument("--trace", type=Path, default=None, help="Write a Parquet step trace")
    parser.add_argument(
        "--render", action="store_true", help="Include the final grid with marbles in the summary"
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


# ---------------------------------------------------------------------------
# Main CLI
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Run the program and print a JSON summary; returns the exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if (args.program is None) == (args.sample is None):
        parser.error("give exactly one of PROGRAM or --sample")

    file_cfg: dict[str, object] = {}
    if args.config is not None:
        try:
            file_cfg = json.loads(Path(args.config).read_text())
        except FileNotFoundError:
            parser.error(f"Config file not found: {args.config}")
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {args.config}: {exc}")

    try:
        trace_path = _coerce_optional_path(_get_val(args.trace, "trace", file_cfg, None), "trace")
        run_config = RunConfig(
            max_steps=_coerce_int(
                _get_val(args.max_steps, "max_steps", file_cfg, MAX_STEPS), "max_steps"
            ),
            halt_when_empty=_coerce_bool(
                _get_val(args.halt_when_empty, "halt_when_empty", file_cfg, True),
                "halt_when_empty",
            ),
            allow_diagnostics=_coerce_bool(
                _get_val(args.allow_diagnostics, "allow_diagnostics", file_cfg, False),
                "allow_diagnostics",
            ),
            record_trace=trace_path is not None,
            trace_path=trace_path,
        )
    except ValueError as exc:
        parser.error(str(exc))
    logger.debug("resolved run config: %s", run_config)

    if args.sample is not None:
        source = get_sample(args.sample)
    else:
        try:
            source = Path(args.program).read_text()
        except FileNotFoundError:
            parser.error(f"Program file not found: {args.program}")

    try:
        result = run_source(source, run_config)
    except CompilationError as exc:
        for diagnostic in exc.diagnostics:
            print(diagnostic.message, file=sys.stderr)
        return 1

    summary: dict[str, object] = {
        "steps": result.steps,
        "halt_reason": result.halt_reason.value,
        "marbles": len(result.final.marbles),
        "output": result.output.splitlines(),
    }
    if args.render:
        summary["grid"] = result.final.render(show_marbles=True).splitlines()
    if trace_path is not None:
        summary["trace"] = str(trace_path)
    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
