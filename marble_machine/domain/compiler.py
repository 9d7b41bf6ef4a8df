"""Program builder: source text to an initial contraption plus diagnostics.

Each line is cut into two-character chunks as written: a trailing odd
character is dropped and trailing spaces are ordinary Air chunks. Two hex
digits place a marble of that value on Air; any other chunk is looked up in
the cell catalogue by exact glyph. Unknown chunks become Error cells and
produce a diagnostic, so the build itself never fails.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from marble_machine.config.constants import CELL_WIDTH
from marble_machine.domain.cells import Cell, create_air, create_cell, create_error
from marble_machine.domain.contraption import Contraption
from marble_machine.domain.marble import Marble
from marble_machine.domain.span import Span

_MARBLE_CHUNK = re.compile(r"[0-9a-fA-F]{2}")


@dataclass(frozen=True)
class Diagnostic:
    message: str
    span: Span


@dataclass(frozen=True)
class CompilationResult:
    contraption: Contraption
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when the program compiled without diagnostics."""
        return not self.diagnostics


class CompilationError(Exception):
    """Raised by hosts that refuse to run a program with diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        summary = "; ".join(d.message for d in diagnostics)
        super().__init__(f"{len(diagnostics)} diagnostic(s): {summary}")


def _chunks(line: str) -> list[str]:
    return [line[i : i + CELL_WIDTH] for i in range(0, len(line) - CELL_WIDTH + 1, CELL_WIDTH)]


def compile_source(source: str) -> CompilationResult:
    """Build the initial contraption for ``source``."""
    diagnostics: list[Diagnostic] = []
    marbles: list[Marble] = []
    grid: list[list[Cell]] = []

    for y, line in enumerate(source.splitlines()):
        row: list[Cell] = []
        for x, chunk in enumerate(_chunks(line)):
            span = Span.for_cell(x, y)
            if _MARBLE_CHUNK.fullmatch(chunk):
                marbles.append(Marble(int(chunk, 16), x, y))
                row.append(create_air(x, y, span))
                continue
            cell = create_cell(chunk, x, y, span)
            if cell is None:
                diagnostics.append(
                    Diagnostic(
                        f"Unknown symbol {chunk!r} at {span.start_line}:{span.start_column}",
                        span,
                    )
                )
                cell = create_error(chunk, x, y, span)
            row.append(cell)
        grid.append(row)

    width = max((len(row) for row in grid), default=0)
    for y, row in enumerate(grid):
        for x in range(len(row), width):
            row.append(create_air(x, y, Span.for_cell(x, y)))

    contraption = Contraption(width, len(grid), grid, marbles)
    return CompilationResult(contraption, diagnostics)
