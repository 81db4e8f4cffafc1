"""Ship domain model for the sinkfleet engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from .geometry import Coordinate


@dataclass(frozen=True)
class ShipConfig:
    """Fleet template: a ship class, its length and how many of them a fleet holds."""

    name: str
    size: int
    count: int = 1

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Ship name cannot be blank.")
        if self.size <= 0:
            raise ValueError("Ship size must be positive.")
        if self.count <= 0:
            raise ValueError("Ship count must be positive.")

    def __str__(self) -> str:
        return f"{self.name} (size={self.size}, count={self.count})"


@dataclass
class Ship:
    """A single ship instance; its cells are fixed once it is placed."""

    config: ShipConfig
    hits: int = field(default=0, init=False)
    _cells: tuple[Coordinate, ...] = field(default=(), init=False, repr=False)

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def size(self) -> int:
        return self.config.size

    @property
    def cells(self) -> tuple[Coordinate, ...]:
        return self._cells

    @property
    def is_placed(self) -> bool:
        return bool(self._cells)

    @property
    def sunk(self) -> bool:
        return self.hits == self.size

    def assign_cells(self, cells: list[Coordinate]) -> None:
        if self._cells:
            raise RuntimeError(f"{self.name} has already been placed.")
        if len(cells) != self.size:
            raise ValueError(f"{self.name} needs {self.size} cells, got {len(cells)}.")
        self._cells = tuple(cells)

    def hit(self) -> bool:
        """Register a hit; a sunk ship ignores further hits."""
        if self.sunk:
            return False
        self.hits += 1
        return True

    def occupies(self, coord: Coordinate) -> bool:
        return coord in self._cells
