"""Source ranges used for diagnostics and cell highlighting."""

from __future__ import annotations

from dataclasses import dataclass

from marble_machine.config.constants import CELL_WIDTH


@dataclass(frozen=True)
class Span:
    """1-based, inclusive range of source text."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def for_cell(cls, x: int, y: int) -> Span:
        """Span covering the two source characters of grid cell (x, y)."""
        start_column = x * CELL_WIDTH + 1
        return cls(y + 1, start_column, y + 1, start_column + CELL_WIDTH - 1)


def position_to_coords(line: int, column: int) -> tuple[int, int]:
    """Map a 1-based editor position onto the grid cell that contains it."""
    return (column - 1) // CELL_WIDTH, line - 1
