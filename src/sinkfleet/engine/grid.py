"""Single-player grid: fleet placement, shot resolution and buffer-zone queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sinkfleet.telemetry import get_meter, get_tracer

from .cell import Cell, CellState, MoveResult
from .errors import InvalidCoordinateError
from .geometry import Coordinate, in_bounds, neighbourhood, ship_span
from .ship import Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("sinkfleet.engine.grid")
meter = get_meter("sinkfleet.engine.grid")

PLACEMENT_COUNTER = meter.create_counter(
    "sinkfleet_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "sinkfleet_engine_shots",
    unit="1",
    description="Shots received by a grid",
)


@dataclass(frozen=True)
class GridView:
    """What an attacker may know about a grid.

    Cell states are indexed ``states[x][y]``. Only ships that have been sunk
    are revealed, through ``sunk_cells``.
    """

    width: int
    height: int
    states: tuple[tuple[CellState, ...], ...]
    sunk_cells: frozenset[Coordinate] = frozenset()

    def is_valid_coordinate(self, x: int, y: int) -> bool:
        return in_bounds(x, y, self.width, self.height)

    def contains(self, coord: Coordinate) -> bool:
        return in_bounds(coord.x, coord.y, self.width, self.height)

    def state(self, coord: Coordinate) -> CellState:
        if not self.contains(coord):
            raise InvalidCoordinateError(coord.x, coord.y, self.width, self.height)
        return self.states[coord.x][coord.y]

    def coordinates(self) -> list[Coordinate]:
        """All coordinates, column by column."""
        return [Coordinate(x, y) for x in range(self.width) for y in range(self.height)]

    def is_not_fired(self, coord: Coordinate) -> bool:
        return self.state(coord) is CellState.NOT_FIRED

    def is_sunk_hit(self, coord: Coordinate) -> bool:
        return coord in self.sunk_cells

    def is_live_hit(self, coord: Coordinate) -> bool:
        """A hit on a ship that is still afloat; false outside the grid."""
        if not self.contains(coord):
            return False
        return self.states[coord.x][coord.y] is CellState.HIT and coord not in self.sunk_cells

    def is_area_clear_of_sunken_ships(self, coord: Coordinate) -> bool:
        if not self.contains(coord):
            raise InvalidCoordinateError(coord.x, coord.y, self.width, self.height)
        return not any(
            neighbour in self.sunk_cells
            for neighbour in neighbourhood(coord, self.width, self.height)
        )

    def is_potential_target(self, coord: Coordinate) -> bool:
        return self.is_not_fired(coord) and self.is_area_clear_of_sunken_ships(coord)

    def untouched_cells(self) -> list[Coordinate]:
        return [coord for coord in self.coordinates() if self.is_not_fired(coord)]

    def smart_untouched_cells(self) -> list[Coordinate]:
        return [coord for coord in self.coordinates() if self.is_potential_target(coord)]

    def live_hits(self) -> list[Coordinate]:
        return [coord for coord in self.coordinates() if self.is_live_hit(coord)]


class Grid:
    """A player's grid and the ships placed on it.

    The grid owns every cell and every ship. Cells refer to their ship by its
    index in ``ships``; ships refer to their cells by coordinate.
    """

    def __init__(self, width: int = 10, height: int = 10, owner: str = "unknown") -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Grid dimensions must be positive.")
        self.width = width
        self.height = height
        self.owner = owner
        self.cells: list[list[Cell]] = [
            [Cell(Coordinate(x, y)) for y in range(height)] for x in range(width)
        ]
        self.ships: list[Ship] = []

    def is_valid_coordinate(self, x: int, y: int) -> bool:
        """Check whether a coordinate lies inside the grid."""
        return in_bounds(x, y, self.width, self.height)

    def get_cell(self, x: int, y: int) -> Cell:
        if not self.is_valid_coordinate(x, y):
            raise InvalidCoordinateError(x, y, self.width, self.height)
        return self.cells[x][y]

    def get_cell_state(self, x: int, y: int) -> CellState:
        return self.get_cell(x, y).state

    def get_ship_at(self, x: int, y: int) -> Ship | None:
        ship_id = self.get_cell(x, y).ship_id
        return None if ship_id is None else self.ships[ship_id]

    # --- placement ---

    def can_place(self, size: int, x: int, y: int, horizontal: bool) -> bool:
        """Bounds check plus the buffer zone: no ship cell in any 3x3 neighbourhood."""
        coords = ship_span(size, x, y, horizontal)
        if not all(self.is_valid_coordinate(coord.x, coord.y) for coord in coords):
            return False
        for coord in coords:
            for neighbour in neighbourhood(coord, self.width, self.height):
                if self.cells[neighbour.x][neighbour.y].has_ship:
                    return False
        return True

    def place_ship(self, ship: Ship, x: int, y: int, horizontal: bool) -> bool:
        """Place ``ship`` with its bow at ``(x, y)``; nothing changes on failure."""
        if ship.is_placed:
            raise ValueError(f"{ship.name} is already placed.")
        with tracer.start_as_current_span("grid.place_ship") as span:
            span.set_attribute("ship.name", ship.name)
            span.set_attribute("ship.size", ship.size)
            span.set_attribute("ship.start.x", x)
            span.set_attribute("ship.start.y", y)
            span.set_attribute("ship.horizontal", horizontal)
            span.set_attribute("grid.owner", self.owner)
            details = {
                "owner": self.owner,
                "ship_name": ship.name,
                "horizontal": horizontal,
                "x": x,
                "y": y,
            }
            if not self.can_place(ship.size, x, y, horizontal):
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                logger.debug("ship_placement_rejected", extra=details)
                return False

            ship_id = len(self.ships)
            coords = ship_span(ship.size, x, y, horizontal)
            for coord in coords:
                self.cells[coord.x][coord.y].assign_ship(ship_id)
            ship.assign_cells(coords)
            self.ships.append(ship)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info("ship_placed", extra=details)
            return True

    # --- firing ---

    def fire(self, x: int, y: int) -> MoveResult:
        """Resolve a shot at ``(x, y)``."""
        with tracer.start_as_current_span("grid.fire") as span:
            span.set_attribute("shot.x", x)
            span.set_attribute("shot.y", y)
            span.set_attribute("grid.owner", self.owner)
            if not self.is_valid_coordinate(x, y):
                logger.error(
                    "shot_out_of_bounds", extra={"x": x, "y": y, "owner": self.owner}
                )
                raise InvalidCoordinateError(x, y, self.width, self.height)

            cell = self.cells[x][y]
            if cell.is_fired:
                result = MoveResult.ALREADY_FIRED
                logger.debug("shot_repeated", extra={"x": x, "y": y, "owner": self.owner})
            elif cell.ship_id is None:
                cell.mark(CellState.MISS)
                result = MoveResult.MISS
                logger.info("shot_miss", extra={"x": x, "y": y, "owner": self.owner})
            else:
                cell.mark(CellState.HIT)
                ship = self.ships[cell.ship_id]
                ship.hit()
                result = MoveResult.SUNK if ship.sunk else MoveResult.HIT
                logger.info(
                    "shot_sunk" if ship.sunk else "shot_hit",
                    extra={"x": x, "y": y, "ship_name": ship.name, "owner": self.owner},
                )

            span.set_attribute("shot.outcome", result.value)
            SHOT_COUNTER.add(1, attributes={"outcome": result.value, "owner": self.owner})
            return result

    # --- fleet status ---

    def all_ships_sunk(self) -> bool:
        return bool(self.ships) and all(ship.sunk for ship in self.ships)

    def ships_remaining(self) -> list[Ship]:
        return [ship for ship in self.ships if not ship.sunk]

    def sunk_ships(self) -> list[Ship]:
        return [ship for ship in self.ships if ship.sunk]

    # --- buffer-zone queries ---

    def is_area_clear_of_sunken_ships(self, x: int, y: int) -> bool:
        """False if any cell of the 3x3 block around ``(x, y)`` is a hit on a sunk ship."""
        centre = self.get_cell(x, y).coordinate
        for neighbour in neighbourhood(centre, self.width, self.height):
            cell = self.cells[neighbour.x][neighbour.y]
            if cell.state is CellState.HIT and cell.ship_id is not None:
                if self.ships[cell.ship_id].sunk:
                    return False
        return True

    def is_potential_target(self, x: int, y: int) -> bool:
        return (
            self.get_cell_state(x, y) is CellState.NOT_FIRED
            and self.is_area_clear_of_sunken_ships(x, y)
        )

    def untouched_cells(self) -> list[Coordinate]:
        return [cell.coordinate for column in self.cells for cell in column if not cell.is_fired]

    def smart_untouched_cells(self) -> list[Coordinate]:
        return [coord for coord in self.untouched_cells() if self.is_potential_target(coord.x, coord.y)]

    def view(self) -> GridView:
        """Snapshot of the grid as seen by the opposing player."""
        return GridView(
            width=self.width,
            height=self.height,
            states=tuple(tuple(cell.state for cell in column) for column in self.cells),
            sunk_cells=frozenset(coord for ship in self.sunk_ships() for coord in ship.cells),
        )

    def reset(self) -> None:
        """Clear every cell and forget the fleet, keeping the allocated cells."""
        for column in self.cells:
            for cell in column:
                cell.reset()
        self.ships.clear()
        logger.debug("grid_reset", extra={"owner": self.owner})

    def render(self, show_ships: bool = False) -> str:
        """Text rendering, one row per line (``S`` marks unfired ship cells when shown)."""
        rows = []
        for y in range(self.height):
            symbols = []
            for x in range(self.width):
                cell = self.cells[x][y]
                symbols.append("S" if show_ships and cell.has_ship and not cell.is_fired else cell.symbol)
            rows.append(" ".join(symbols))
        return "\n".join(rows)
