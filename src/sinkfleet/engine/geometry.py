"""Coordinates, directions and neighbourhood helpers shared by the grid and the AI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


@dataclass(frozen=True)
class Coordinate:
    """Immutable grid coordinate; ``x`` is the column, ``y`` the row."""

    x: int
    y: int

    def shifted(self, direction: Direction, steps: int = 1) -> Coordinate:
        return Coordinate(self.x + direction.dx * steps, self.y + direction.dy * steps)


class Direction(Enum):
    """Orthogonal directions on the grid."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    @property
    def is_horizontal(self) -> bool:
        return self.dy == 0

    @classmethod
    def between(cls, start: Coordinate, end: Coordinate) -> Direction | None:
        """Direction leading from ``start`` to an orthogonally adjacent ``end``."""
        delta = (end.x - start.x, end.y - start.y)
        for direction in cls:
            if direction.value == delta:
                return direction
        return None


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


def in_bounds(x: int, y: int, width: int, height: int) -> bool:
    return 0 <= x < width and 0 <= y < height


def ship_span(size: int, x: int, y: int, horizontal: bool) -> list[Coordinate]:
    """Coordinates covered by a ship of ``size`` starting at ``(x, y)``."""
    if horizontal:
        return [Coordinate(x + offset, y) for offset in range(size)]
    return [Coordinate(x, y + offset) for offset in range(size)]


def neighbourhood(coord: Coordinate, width: int, height: int) -> Iterator[Coordinate]:
    """Yield the in-bounds 3x3 block centred on ``coord``, the centre included."""
    for dx in (-1, 0, 1):
        for dy in (-1, 0, 1):
            nx, ny = coord.x + dx, coord.y + dy
            if in_bounds(nx, ny, width, height):
                yield Coordinate(nx, ny)


def orthogonal_neighbours(coord: Coordinate, width: int, height: int) -> Iterator[Coordinate]:
    for direction in Direction:
        neighbour = coord.shifted(direction)
        if in_bounds(neighbour.x, neighbour.y, width, height):
            yield neighbour
