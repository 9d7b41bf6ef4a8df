"""Domain layer: cell catalogue, marbles, the execution engine and the builder."""

from marble_machine.domain.cells import (
    CATALOGUE,
    Cell,
    CellKind,
    Direction,
    create_air,
    create_cell,
)
from marble_machine.domain.compiler import (
    CompilationError,
    CompilationResult,
    Diagnostic,
    compile_source,
)
from marble_machine.domain.contraption import Contraption, PendingMove, PendingSpawn
from marble_machine.domain.marble import Marble
from marble_machine.domain.span import Span

__all__ = [
    "CATALOGUE",
    "Cell",
    "CellKind",
    "CompilationError",
    "CompilationResult",
    "Contraption",
    "Diagnostic",
    "Direction",
    "Marble",
    "PendingMove",
    "PendingSpawn",
    "Span",
    "compile_source",
    "create_air",
    "create_cell",
]
