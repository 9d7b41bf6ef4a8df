"""Mobile integer tokens moved and transformed by cells."""

from __future__ import annotations

from dataclasses import dataclass

from marble_machine.config.constants import BYTE_MODULUS


@dataclass(eq=False)
class Marble:
    """A single marble on the grid.

    Equality is identity: two marbles holding the same value at different
    times are still distinct entries in the movement bookkeeping.
    """

    value: int
    x: int
    y: int
    moved: bool = False
    activated: bool = False

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y

    def wrap(self) -> None:
        """Fold ``value`` back into the byte range (negative values wrap to the top)."""
        self.value %= BYTE_MODULUS

    def copy(self) -> Marble:
        return Marble(self.value, self.x, self.y, self.moved, self.activated)
