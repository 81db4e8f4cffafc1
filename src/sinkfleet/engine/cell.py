"""Single-square state for the grid."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .geometry import Coordinate


class CellState(Enum):
    """State of a cell from the point of view of shots taken."""

    NOT_FIRED = "not_fired"
    HIT = "hit"
    MISS = "miss"


class MoveResult(Enum):
    """Outcome of firing at a cell."""

    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"
    ALREADY_FIRED = "already_fired"


_SYMBOLS = {CellState.NOT_FIRED: ".", CellState.MISS: "o", CellState.HIT: "X"}


@dataclass
class Cell:
    """One square of a grid.

    ``ship_id`` is the index of the occupying ship in the owning grid's ship
    list, or ``None`` for open water.
    """

    coordinate: Coordinate
    state: CellState = CellState.NOT_FIRED
    ship_id: int | None = None

    @property
    def has_ship(self) -> bool:
        return self.ship_id is not None

    @property
    def is_fired(self) -> bool:
        return self.state is not CellState.NOT_FIRED

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self.state]

    def assign_ship(self, ship_id: int) -> None:
        if self.has_ship:
            raise RuntimeError(f"Cell already has a ship at {self.coordinate}")
        self.ship_id = ship_id

    def mark(self, state: CellState) -> None:
        """Record a shot; only NOT_FIRED -> HIT/MISS is allowed."""
        if state is CellState.NOT_FIRED:
            raise ValueError("A cell cannot be marked as not fired.")
        if self.is_fired:
            raise RuntimeError(f"Cell {self.coordinate} was already fired at.")
        self.state = state

    def reset(self) -> None:
        self.state = CellState.NOT_FIRED
        self.ship_id = None
