"""Fleet placement: automatic layouts for the AI and a one-ship-at-a-time session for humans."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Sequence

from sinkfleet.engine.errors import FleetPlacementError
from sinkfleet.engine.grid import Grid
from sinkfleet.engine.ship import Ship, ShipConfig
from sinkfleet.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer("sinkfleet.ai.placement")

MAX_PLACEMENT_ATTEMPTS = 100

Proposal = tuple[int, int, bool]


class AutomaticShipPlacer(ABC):
    """Lays out a whole fleet, one bounded retry loop per ship.

    Subclasses only propose ``(x, y, horizontal)``; every proposal goes
    through :meth:`Grid.place_ship`, so legality is never bypassed.
    """

    def __init__(
        self, rng: random.Random | None = None, max_attempts: int = MAX_PLACEMENT_ATTEMPTS
    ) -> None:
        self._rng = rng or random.Random()
        self.max_attempts = max_attempts

    def place_fleet(self, grid: Grid, fleet: Sequence[ShipConfig]) -> list[Ship]:
        """Place ``count`` ships of every config; raise if any cannot be placed."""
        with tracer.start_as_current_span("placer.place_fleet") as span:
            span.set_attribute("placer", type(self).__name__)
            span.set_attribute("grid.owner", grid.owner)
            placed: list[Ship] = []
            for config in fleet:
                for _ in range(config.count):
                    placed.append(self._place_one(grid, config))
            span.set_attribute("ships_placed", len(placed))
            return placed

    def _place_one(self, grid: Grid, config: ShipConfig) -> Ship:
        for attempt in range(1, self.max_attempts + 1):
            ship = Ship(config)
            x, y, horizontal = self.propose(grid, ship)
            if grid.place_ship(ship, x, y, horizontal):
                logger.debug(
                    "fleet_ship_placed",
                    extra={"ship_name": config.name, "attempts": attempt, "owner": grid.owner},
                )
                return ship
        logger.error(
            "fleet_placement_exhausted",
            extra={"ship_name": config.name, "attempts": self.max_attempts, "owner": grid.owner},
        )
        raise FleetPlacementError(
            f"Failed to place ship {config.name} after {self.max_attempts} attempts."
        )

    @abstractmethod
    def propose(self, grid: Grid, ship: Ship) -> Proposal:
        """Return a candidate bow position and orientation for ``ship``."""


class RandomShipPlacer(AutomaticShipPlacer):
    """Uniform orientation and any start that keeps the ship inside the grid."""

    def propose(self, grid: Grid, ship: Ship) -> Proposal:
        horizontal = self._rng.random() < 0.5
        if horizontal:
            x = self._rng.randrange(max(1, grid.width - ship.size + 1))
            y = self._rng.randrange(grid.height)
        else:
            x = self._rng.randrange(grid.width)
            y = self._rng.randrange(max(1, grid.height - ship.size + 1))
        return x, y, horizontal


class HardShipPlacer(AutomaticShipPlacer):
    """Ships longer than three lie horizontally when they fit across.

    Starts keep a one-cell margin from both ends of the ship's axis when the grid leaves room.
    """

    def propose(self, grid: Grid, ship: Ship) -> Proposal:
        fits_across = ship.size <= grid.width
        fits_down = ship.size <= grid.height
        if ship.size > 3 and fits_across:
            horizontal = True
        elif fits_across and fits_down:
            horizontal = self._rng.random() < 0.5
        else:
            horizontal = fits_across
        along, across = (grid.width, grid.height) if horizontal else (grid.height, grid.width)
        start = self._start_with_margin(along, ship.size)
        offset = self._rng.randrange(across)
        return (start, offset, True) if horizontal else (offset, start, False)

    def _start_with_margin(self, length: int, size: int) -> int:
        free = length - size
        if free >= 2:
            return self._rng.randint(1, free - 1)
        return self._rng.randint(0, max(0, free))


class ManualShipPlacer:
    """Placement session for a player who picks every position.

    Ships are handed out in fleet order; a rejected position leaves the
    queue where it was so the caller can ask again.
    """

    def __init__(self, grid: Grid, fleet: Sequence[ShipConfig]) -> None:
        self._grid = grid
        self._queue: list[ShipConfig] = [config for config in fleet for _ in range(config.count)]
        self._index = 0
        self.placed: list[Ship] = []

    @property
    def next_config(self) -> ShipConfig | None:
        if self.is_complete:
            return None
        return self._queue[self._index]

    @property
    def pending(self) -> list[ShipConfig]:
        return self._queue[self._index :]

    @property
    def is_complete(self) -> bool:
        return self._index >= len(self._queue)

    def place(self, x: int, y: int, horizontal: bool) -> bool:
        config = self.next_config
        if config is None:
            raise RuntimeError("Every ship has already been placed.")
        ship = Ship(config)
        if not self._grid.place_ship(ship, x, y, horizontal):
            return False
        self.placed.append(ship)
        self._index += 1
        return True

    def reset(self) -> None:
        """Clear the grid and start the queue over."""
        self._grid.reset()
        self._index = 0
        self.placed.clear()
