"""Execution engine: the grid, the live marbles, and the two-phase step.

One cycle is ``tick()`` (effects) followed by ``move_marbles()`` (movement
resolution). Both return a fresh snapshot and leave the receiver untouched, so
a host may keep and render any intermediate state.

Effect phase: every cell's ``on_step`` runs once in row-major order against
the same grid. Effects may rewrite marble values and flags in place but only
*request* spawns, moves and deletions; values are wrapped into the byte range
once the scan is done.

Movement phase: deletions first, then queued moves (FIFO, a move blocked by a
marble that is itself still queued is retried at the tail), then gravity
(one row per cycle for every marble that did not move), then spawns onto free
cells.
"""

from __future__ import annotations

from collections import Counter, deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from marble_machine.domain.cells import LABEL, Cell
from marble_machine.domain.marble import Marble
from marble_machine.domain.span import Span, position_to_coords


@dataclass(frozen=True)
class PendingSpawn:
    value: int
    x: int
    y: int


@dataclass(frozen=True)
class PendingMove:
    marble: Marble
    target_x: int
    target_y: int


class Contraption:
    """A complete simulation snapshot: grid, marbles, journals and output."""

    def __init__(
        self,
        width: int,
        height: int,
        grid: Sequence[Sequence[Cell]],
        marbles: Sequence[Marble] = (),
        output: str = "",
        pending_spawns: Sequence[PendingSpawn] = (),
        pending_moves: Sequence[PendingMove] = (),
        pending_deletes: Sequence[Marble] = (),
    ) -> None:
        if len(grid) != height or any(len(row) != width for row in grid):
            raise ValueError(f"grid must be {width}x{height} cells")
        self._width = width
        self._height = height
        self._grid: tuple[tuple[Cell, ...], ...] = tuple(tuple(row) for row in grid)
        self._marbles: list[Marble] = list(marbles)
        self._occupied: dict[tuple[int, int], Marble] = {}  # (x, y) -> marble
        for marble in reversed(self._marbles):
            self._occupied[marble.position] = marble
        self._output = output
        self._activated: set[tuple[int, int]] = set()
        self._pending_spawns: list[PendingSpawn] = list(pending_spawns)
        self._pending_moves: list[PendingMove] = list(pending_moves)
        self._pending_deletes: list[Marble] = list(pending_deletes)
        self._labels: dict[str, tuple[int, int]] = {}
        for cell in self.cells():
            if cell.kind is LABEL and cell.key is not None:
                # First label in scan order wins when keys repeat.
                self._labels.setdefault(cell.key, cell.position)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def grid(self) -> tuple[tuple[Cell, ...], ...]:
        return self._grid

    @property
    def marbles(self) -> tuple[Marble, ...]:
        return tuple(self._marbles)

    @property
    def output(self) -> str:
        return self._output

    @property
    def pending_spawns(self) -> tuple[PendingSpawn, ...]:
        return tuple(self._pending_spawns)

    @property
    def pending_moves(self) -> tuple[PendingMove, ...]:
        return tuple(self._pending_moves)

    @property
    def pending_deletes(self) -> tuple[Marble, ...]:
        return tuple(self._pending_deletes)

    def cells(self) -> Iterator[Cell]:
        """Every cell in row-major order."""
        for row in self._grid:
            yield from row

    def get_cell(self, x: int, y: int) -> Cell | None:
        if 0 <= x < self._width and 0 <= y < self._height:
            return self._grid[y][x]
        return None

    def get_marble(self, x: int, y: int) -> Marble | None:
        return self._occupied.get((x, y))

    def get_cell_at_position(self, line: int, column: int) -> Cell | None:
        return self.get_cell(*position_to_coords(line, column))

    def get_marble_at_position(self, line: int, column: int) -> Marble | None:
        return self.get_marble(*position_to_coords(line, column))

    def find_label(self, key: str) -> tuple[int, int] | None:
        """Coordinate of the label keyed ``key``; the first in scan order if repeated."""
        return self._labels.get(key)

    def is_activated(self, cell: Cell) -> bool:
        return cell.position in self._activated

    def active_spans(self) -> list[Span]:
        """Spans of cells activated during the phase that produced this snapshot."""
        return [cell.span for cell in self.cells() if cell.position in self._activated]

    def render(self, show_marbles: bool = False) -> str:
        rows = [[cell.render() for cell in row] for row in self._grid]
        if show_marbles:
            for marble in self._marbles:
                rows[marble.y][marble.x] = f"{marble.value:02x}"
        return "\n".join("".join(row) for row in rows)

    # ------------------------------------------------------------------
    # Requests raised by cell effects
    # ------------------------------------------------------------------

    def activate(self, cell: Cell) -> None:
        self._activated.add(cell.position)

    def print_line(self, line: str) -> None:
        self._output += line + "\n"

    def spawn(self, value: int, x: int, y: int) -> None:
        self._pending_spawns.append(PendingSpawn(value, x, y))

    def move(self, marble: Marble, target_x: int, target_y: int) -> None:
        self._pending_moves.append(PendingMove(marble, target_x, target_y))

    def remove(self, marble: Marble) -> None:
        self._pending_deletes.append(marble)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _copy(self) -> Contraption:
        """Snapshot with fresh marble objects; journals follow the copied marbles."""
        copies = {id(marble): marble.copy() for marble in self._marbles}
        return Contraption(
            self._width,
            self._height,
            self._grid,
            [copies[id(marble)] for marble in self._marbles],
            self._output,
            self._pending_spawns,
            [
                PendingMove(copies[id(move.marble)], move.target_x, move.target_y)
                for move in self._pending_moves
                if id(move.marble) in copies
            ],
            [copies[id(marble)] for marble in self._pending_deletes if id(marble) in copies],
        )

    def tick(self) -> Contraption:
        """Run the effect phase and return the post-effect snapshot."""
        state = self._copy()
        for marble in state._marbles:
            marble.moved = False
            marble.activated = False
        for cell in state.cells():
            cell.on_step(state)
        for marble in state._marbles:
            marble.wrap()
        return state

    def move_marbles(self) -> Contraption:
        """Run the movement phase and return the settled snapshot with empty journals."""
        state = self._copy()
        for marble in state._marbles:
            marble.activated = False
        state._apply_deletes()
        state._resolve_moves()
        state._apply_gravity()
        state._apply_spawns()
        return state

    def step(self) -> Contraption:
        """One full cycle."""
        return self.tick().move_marbles()

    def _relocate(self, marble: Marble, x: int, y: int) -> None:
        if self._occupied.get(marble.position) is marble:
            del self._occupied[marble.position]
        marble.x = x
        marble.y = y
        self._occupied[(x, y)] = marble

    def _apply_deletes(self) -> None:
        doomed = {id(marble) for marble in self._pending_deletes}
        self._marbles = [marble for marble in self._marbles if id(marble) not in doomed]
        self._occupied = {marble.position: marble for marble in reversed(self._marbles)}
        self._pending_deletes = []

    def _resolve_moves(self) -> None:
        live = {id(marble) for marble in self._marbles}
        queue = deque(move for move in self._pending_moves if id(move.marble) in live)
        queued = Counter(id(move.marble) for move in queue)
        self._pending_moves = []
        # Consecutive retries since the last commit or drop; a full lap of
        # retries means every remaining move waits on another one.
        retries = 0
        while queue and retries < len(queue):
            move = queue.popleft()
            queued[id(move.marble)] -= 1
            obstacle = self.get_marble(move.target_x, move.target_y)
            if obstacle is not None:
                if queued[id(obstacle)] > 0:
                    queue.append(move)
                    queued[id(move.marble)] += 1
                    retries += 1
                else:
                    retries = 0
                continue

            retries = 0
            target = self.get_cell(move.target_x, move.target_y)
            if target is None or target.is_solid(self):
                continue
            self._relocate(move.marble, move.target_x, move.target_y)
            move.marble.moved = True

    def _apply_gravity(self) -> None:
        queue = deque(marble for marble in self._marbles if not marble.moved)
        while queue:
            marble = queue.popleft()
            below = self.get_marble(marble.x, marble.y + 1)
            if below is not None:
                if below.moved:
                    marble.moved = True
                else:
                    queue.append(marble)
                continue

            cell_below = self.get_cell(marble.x, marble.y + 1)
            if cell_below is None or cell_below.is_solid(self):
                marble.moved = True
                continue
            self._relocate(marble, marble.x, marble.y + 1)

    def _apply_spawns(self) -> None:
        for spawn in self._pending_spawns:
            if self.get_marble(spawn.x, spawn.y) is not None:
                continue
            marble = Marble(spawn.value, spawn.x, spawn.y, moved=True, activated=True)
            # The source may have been rewritten earlier in the scan, before wrapping.
            marble.wrap()
            self._marbles.append(marble)
            self._occupied[marble.position] = marble
        self._pending_spawns = []
