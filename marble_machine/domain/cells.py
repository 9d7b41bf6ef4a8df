"""Cell kind catalogue: the fixed glyph table and per-kind behaviour.

Every kind is a flat capability record (solidity test, per-step effect,
render). Effects only read the contraption, mutate a marble's value and
activation in place, or queue spawn/move/delete requests; they never move a
marble or change the live marble set directly.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from marble_machine.config.constants import (
    AIR_GLYPHS,
    AIR_RENDER,
    BYTE_MODULUS,
    DIRECTION_MARKERS,
    ERROR_RENDER,
    KEY_CHARACTERS,
    LABEL_PREFIX,
    TELEPORTER_PREFIX,
)
from marble_machine.domain.span import Span

if TYPE_CHECKING:
    from marble_machine.domain.contraption import Contraption
    from marble_machine.domain.marble import Marble


class Direction(Enum):
    """Cardinal facing, keyed by its glyph marker."""

    UP = "^"
    DOWN = "v"
    LEFT = "<"
    RIGHT = ">"

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    def step(self, x: int, y: int) -> tuple[int, int]:
        dx, dy = self.delta
        return x + dx, y + dy


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}
_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

SolidTest = Callable[["Cell", "Contraption"], bool]
StepEffect = Callable[["Cell", "Contraption"], None]


@dataclass(frozen=True)
class CellKind:
    """Behaviour shared by every cell of one kind."""

    name: str
    is_solid: SolidTest
    on_step: StepEffect
    render: Callable[[Cell], str] | None = None


@dataclass(frozen=True)
class Cell:
    """An immobile grid position with a behaviour kind."""

    kind: CellKind
    symbol: str
    x: int
    y: int
    span: Span
    facing: Direction | None = None
    key: str | None = None
    """Label/teleporter key character, ``None`` for every other kind."""

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y

    def is_solid(self, contraption: Contraption) -> bool:
        return self.kind.is_solid(self, contraption)

    def on_step(self, contraption: Contraption) -> None:
        self.kind.on_step(self, contraption)

    def render(self) -> str:
        if self.kind.render is None:
            return self.symbol
        return self.kind.render(self)

    def ahead(self) -> tuple[int, int]:
        """Coordinate one cell along ``facing``."""
        if self.facing is None:
            raise ValueError(f"{self.kind.name} cell has no facing")
        return self.facing.step(self.x, self.y)

    def behind(self) -> tuple[int, int]:
        """Coordinate one cell against ``facing``."""
        if self.facing is None:
            raise ValueError(f"{self.kind.name} cell has no facing")
        return self.facing.opposite.step(self.x, self.y)


# ---------------------------------------------------------------------------
# Solidity and rendering helpers
# ---------------------------------------------------------------------------


def _never_solid(cell: Cell, contraption: Contraption) -> bool:
    return False


def _always_solid(cell: Cell, contraption: Contraption) -> bool:
    return True


def _no_effect(cell: Cell, contraption: Contraption) -> None:
    return None


def _render_directional(cell: Cell) -> str:
    """Marker first for left-facing cells, last otherwise."""
    if cell.facing is None:
        return cell.symbol
    operator = cell.symbol.replace(cell.facing.value, "", 1)
    if cell.facing is Direction.LEFT:
        return cell.facing.value + operator
    return operator + cell.facing.value


def _sieve_is_solid(cell: Cell, contraption: Contraption) -> bool:
    """Solid unless the marble directly above holds zero."""
    marble = contraption.get_marble(cell.x, cell.y - 1)
    return marble is None or marble.value != 0


# ---------------------------------------------------------------------------
# Point affectors
# ---------------------------------------------------------------------------


def _affector(affect: Callable[[Marble, Contraption], None]) -> StepEffect:
    """Wrap a per-marble effect applied to whatever occupies the cell."""

    def on_step(cell: Cell, contraption: Contraption) -> None:
        marble = contraption.get_marble(cell.x, cell.y)
        if marble is None:
            return
        affect(marble, contraption)
        marble.activated = True
        contraption.activate(cell)

    return on_step


def _increment(marble: Marble, contraption: Contraption) -> None:
    marble.value += 1


def _decrement(marble: Marble, contraption: Contraption) -> None:
    marble.value -= 1


def _output(marble: Marble, contraption: Contraption) -> None:
    contraption.print_line(str(marble.value % BYTE_MODULUS))


def _delete(marble: Marble, contraption: Contraption) -> None:
    contraption.remove(marble)


# ---------------------------------------------------------------------------
# Movers
# ---------------------------------------------------------------------------


def _conveyor_step(cell: Cell, contraption: Contraption) -> None:
    marble = contraption.get_marble(cell.x, cell.y)
    if marble is None:
        return
    contraption.move(marble, *cell.ahead())
    contraption.activate(cell)


def _teleporter_step(cell: Cell, contraption: Contraption) -> None:
    marble = contraption.get_marble(cell.x, cell.y)
    if marble is None or cell.key is None:
        return
    target = contraption.find_label(cell.key)
    if target is None:
        return
    contraption.move(marble, *target)
    contraption.activate(cell)


# ---------------------------------------------------------------------------
# Directional operators
# ---------------------------------------------------------------------------

BinaryOp = Callable[[int, int], int | None]
"""``op(a, b)`` with A the marble behind and B the marble ahead; ``None`` skips."""


def _divide(a: int, b: int) -> int | None:
    if a == 0:
        return None
    return b // a


def _modulo(a: int, b: int) -> int | None:
    if a == 0:
        return None
    return b % a


BINARY_OPERATORS: dict[str, tuple[str, BinaryOp]] = {
    "+": ("add", lambda a, b: a + b),
    "-": ("subtract", lambda a, b: b - a),
    "*": ("multiply", lambda a, b: a * b),
    "/": ("divide", _divide),
    "%": ("modulo", _modulo),
}
"""Operator character -> (kind name, operation)."""


def _binary_operator(op: BinaryOp) -> StepEffect:
    def on_step(cell: Cell, contraption: Contraption) -> None:
        operand_a = contraption.get_marble(*cell.behind())
        if operand_a is None:
            return
        operand_b = contraption.get_marble(*cell.ahead())
        if operand_b is None:
            return
        result = op(operand_a.value, operand_b.value)
        if result is None:
            return
        operand_b.value = result
        operand_b.activated = True
        contraption.activate(cell)

    return on_step


def _clone_step(cell: Cell, contraption: Contraption) -> None:
    source = contraption.get_marble(*cell.behind())
    if source is None:
        return
    target_x, target_y = cell.ahead()
    target = contraption.get_cell(target_x, target_y)
    if target is None or target.is_solid(contraption):
        return
    contraption.spawn(source.value, target_x, target_y)
    source.activated = True
    contraption.activate(cell)


def _observer_step(cell: Cell, contraption: Contraption) -> None:
    if contraption.get_marble(*cell.behind()) is not None:
        return
    held = contraption.get_marble(*cell.ahead())
    if held is None:
        return
    held.moved = True
    contraption.activate(cell)


def _counter_step(cell: Cell, contraption: Contraption) -> None:
    behind = contraption.get_marble(*cell.behind())
    ahead = contraption.get_marble(*cell.ahead())
    if ahead is not None and behind is None:
        ahead.moved = True
        contraption.activate(cell)
    if behind is not None:
        behind.value -= 1
        behind.activated = True
        contraption.activate(cell)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

AIR = CellKind("air", _never_solid, _no_effect, lambda cell: AIR_RENDER)
WALL = CellKind("wall", _always_solid, _no_effect)
ERROR = CellKind("error", _always_solid, _no_effect, lambda cell: ERROR_RENDER)
INCREMENT = CellKind("increment", _never_solid, _affector(_increment))
DECREMENT = CellKind("decrement", _never_solid, _affector(_decrement))
OUTPUT = CellKind("output", _never_solid, _affector(_output))
DELETE = CellKind("delete", _never_solid, _affector(_delete))
SIEVE = CellKind("sieve", _sieve_is_solid, _no_effect)
CONVEYOR = CellKind("conveyor", _never_solid, _conveyor_step)
CLONE = CellKind("clone", _always_solid, _clone_step, _render_directional)
OBSERVER = CellKind("observer", _always_solid, _observer_step, _render_directional)
COUNTER = CellKind("counter", _always_solid, _counter_step, _render_directional)
LABEL = CellKind("label", _never_solid, _no_effect)
TELEPORTER = CellKind("teleporter", _never_solid, _teleporter_step)
OPERATORS: dict[str, CellKind] = {
    char: CellKind(name, _always_solid, _binary_operator(op), _render_directional)
    for char, (name, op) in BINARY_OPERATORS.items()
}

DIRECTIONAL_KINDS: dict[str, CellKind] = {
    **OPERATORS,
    ":": CLONE,
    "?": OBSERVER,
    "=": COUNTER,
}
"""Operator character -> kind, for every kind spelled as a mirrored glyph pair."""

CatalogueEntry = tuple[CellKind, Direction | None, str | None]


def _mirrored(char: str) -> Iterator[tuple[str, Direction]]:
    for direction in Direction:
        yield char + direction.value, direction
        yield direction.value + char, direction


def _build_catalogue() -> dict[str, CatalogueEntry]:
    catalogue: dict[str, CatalogueEntry] = {glyph: (AIR, None, None) for glyph in AIR_GLYPHS}
    catalogue["##"] = (WALL, None, None)
    catalogue["++"] = (INCREMENT, None, None)
    catalogue["--"] = (DECREMENT, None, None)
    catalogue["oo"] = (OUTPUT, None, None)
    catalogue["xx"] = (DELETE, None, None)
    catalogue['""'] = (SIEVE, None, None)
    for marker in DIRECTION_MARKERS:
        catalogue[marker * 2] = (CONVEYOR, Direction(marker), None)
    for char, kind in DIRECTIONAL_KINDS.items():
        for glyph, direction in _mirrored(char):
            catalogue[glyph] = (kind, direction, None)
    for key in KEY_CHARACTERS:
        catalogue[LABEL_PREFIX + key] = (LABEL, None, key)
        catalogue[TELEPORTER_PREFIX + key] = (TELEPORTER, None, key)
    return catalogue


CATALOGUE: dict[str, CatalogueEntry] = _build_catalogue()
"""Exact source glyph -> (kind, facing, key)."""


def create_cell(symbol: str, x: int, y: int, span: Span) -> Cell | None:
    """Instantiate the catalogue entry for ``symbol``; ``None`` if unrecognized."""
    entry = CATALOGUE.get(symbol)
    if entry is None:
        return None
    kind, facing, key = entry
    return Cell(kind, symbol, x, y, span, facing=facing, key=key)


def create_air(x: int, y: int, span: Span) -> Cell:
    return Cell(AIR, AIR_GLYPHS[0], x, y, span)


def create_error(symbol: str, x: int, y: int, span: Span) -> Cell:
    return Cell(ERROR, symbol, x, y, span)
