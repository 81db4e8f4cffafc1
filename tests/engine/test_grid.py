"""Tests for Grid placement, firing and buffer-zone queries."""

import random

import pytest
from sinkfleet.ai.placement import RandomShipPlacer
from sinkfleet.config import DEFAULT_FLEET
from sinkfleet.engine.cell import CellState, MoveResult
from sinkfleet.engine.errors import InvalidCoordinateError
from sinkfleet.engine.geometry import Coordinate, neighbourhood
from sinkfleet.engine.grid import Grid
from sinkfleet.engine.ship import Ship, ShipConfig

DESTROYER = ShipConfig("Destroyer", 2)
CRUISER = ShipConfig("Cruiser", 3)


def test_grid_rejects_non_positive_dimensions() -> None:
    with pytest.raises(ValueError):
        Grid(0, 10)


def test_place_ship_occupies_contiguous_cells() -> None:
    grid = Grid(10, 10)
    ship = Ship(DESTROYER)
    assert grid.place_ship(ship, 2, 2, horizontal=True)
    assert ship.cells == (Coordinate(2, 2), Coordinate(3, 2))
    assert grid.get_ship_at(2, 2) is ship
    assert grid.get_ship_at(3, 2) is ship
    assert grid.get_ship_at(4, 2) is None


def test_diagonal_neighbour_is_rejected_without_mutation() -> None:
    grid = Grid(10, 10)
    assert grid.place_ship(Ship(DESTROYER), 2, 2, horizontal=True)

    second = Ship(DESTROYER)
    assert not grid.place_ship(second, 3, 3, horizontal=True)
    assert not second.is_placed
    assert len(grid.ships) == 1
    assert grid.get_ship_at(3, 3) is None
    assert grid.get_ship_at(4, 3) is None


def test_out_of_bounds_placement_fails_cleanly() -> None:
    grid = Grid(10, 10)
    ship = Ship(CRUISER)
    assert not grid.place_ship(ship, 8, 0, horizontal=True)
    assert not grid.place_ship(ship, 0, 8, horizontal=False)
    assert not grid.place_ship(ship, -1, 0, horizontal=True)
    assert grid.ships == []
    assert all(not cell.has_ship for column in grid.cells for cell in column)


def test_overlapping_placement_fails() -> None:
    grid = Grid(10, 10)
    assert grid.place_ship(Ship(CRUISER), 4, 4, horizontal=False)
    assert not grid.place_ship(Ship(CRUISER), 3, 5, horizontal=True)
    assert len(grid.ships) == 1


def test_placed_ship_cannot_be_placed_again() -> None:
    grid = Grid(10, 10)
    ship = Ship(DESTROYER)
    grid.place_ship(ship, 0, 0, horizontal=True)
    with pytest.raises(ValueError):
        grid.place_ship(ship, 5, 5, horizontal=True)


def test_random_fleets_respect_buffer_zone() -> None:
    for seed in range(20):
        grid = Grid(10, 10)
        RandomShipPlacer(rng=random.Random(seed)).place_fleet(grid, DEFAULT_FLEET)
        for ship_id, ship in enumerate(grid.ships):
            for coord in ship.cells:
                for neighbour in neighbourhood(coord, grid.width, grid.height):
                    owner = grid.get_cell(neighbour.x, neighbour.y).ship_id
                    assert owner in (None, ship_id)


def test_fire_twice_on_empty_grid() -> None:
    grid = Grid(10, 10)
    assert grid.fire(0, 0) is MoveResult.MISS
    assert grid.fire(0, 0) is MoveResult.ALREADY_FIRED
    assert grid.get_cell_state(0, 0) is CellState.MISS


def test_repeated_fire_never_changes_ship_state() -> None:
    grid = Grid(10, 10)
    ship = Ship(CRUISER)
    grid.place_ship(ship, 1, 1, horizontal=True)

    assert grid.fire(1, 1) is MoveResult.HIT
    assert grid.fire(1, 1) is MoveResult.ALREADY_FIRED
    assert ship.hits == 1
    assert grid.fire(2, 1) is MoveResult.HIT
    assert grid.fire(3, 1) is MoveResult.SUNK
    assert grid.fire(3, 1) is MoveResult.ALREADY_FIRED
    assert ship.hits == ship.size
    assert ship.sunk


def test_fire_out_of_bounds_raises() -> None:
    grid = Grid(10, 10)
    with pytest.raises(InvalidCoordinateError):
        grid.fire(10, 0)
    with pytest.raises(IndexError):
        grid.get_cell_state(-1, 3)


def test_all_ships_sunk() -> None:
    grid = Grid(10, 10)
    assert not grid.all_ships_sunk()

    first = Ship(DESTROYER)
    second = Ship(DESTROYER)
    grid.place_ship(first, 0, 0, horizontal=True)
    grid.place_ship(second, 5, 5, horizontal=False)

    grid.fire(0, 0)
    grid.fire(1, 0)
    assert first.sunk
    assert not grid.all_ships_sunk()
    assert grid.ships_remaining() == [second]
    assert grid.sunk_ships() == [first]

    grid.fire(5, 5)
    grid.fire(5, 6)
    assert grid.all_ships_sunk()
    assert grid.ships_remaining() == []


def test_buffer_queries_around_sunken_ship() -> None:
    grid = Grid(10, 10)
    ship = Ship(DESTROYER)
    grid.place_ship(ship, 4, 4, horizontal=True)

    grid.fire(4, 4)
    assert grid.is_area_clear_of_sunken_ships(3, 3)
    assert grid.is_potential_target(3, 3)

    grid.fire(5, 4)
    ring = [(3, 3), (4, 3), (5, 3), (6, 3), (3, 4), (6, 4), (3, 5), (4, 5), (5, 5), (6, 5)]
    for x, y in ring:
        assert not grid.is_area_clear_of_sunken_ships(x, y)
        assert not grid.is_potential_target(x, y)
    assert grid.is_potential_target(7, 4)
    assert grid.is_potential_target(2, 2)

    smart = grid.smart_untouched_cells()
    assert Coordinate(3, 3) not in smart
    assert Coordinate(3, 3) in grid.untouched_cells()
    assert len(grid.untouched_cells()) == 98
    assert len(smart) == 100 - 2 - len(ring)


def test_view_only_reveals_sunk_ships() -> None:
    grid = Grid(10, 10)
    sunk = Ship(DESTROYER)
    afloat = Ship(CRUISER)
    grid.place_ship(sunk, 0, 0, horizontal=True)
    grid.place_ship(afloat, 5, 5, horizontal=True)
    for x, y in [(0, 0), (1, 0), (5, 5), (9, 9)]:
        grid.fire(x, y)

    view = grid.view()
    assert view.sunk_cells == frozenset({Coordinate(0, 0), Coordinate(1, 0)})
    assert view.is_live_hit(Coordinate(5, 5))
    assert not view.is_live_hit(Coordinate(0, 0))
    assert view.is_sunk_hit(Coordinate(1, 0))
    assert view.state(Coordinate(6, 5)) is CellState.NOT_FIRED
    assert view.state(Coordinate(9, 9)) is CellState.MISS
    assert view.live_hits() == [Coordinate(5, 5)]
    assert not view.is_potential_target(Coordinate(2, 1))
    assert view.smart_untouched_cells() == grid.smart_untouched_cells()

    with pytest.raises(InvalidCoordinateError):
        view.state(Coordinate(10, 0))


def test_reset_clears_cells_and_fleet() -> None:
    grid = Grid(6, 4)
    cells_before = grid.cells
    grid.place_ship(Ship(DESTROYER), 0, 0, horizontal=True)
    grid.fire(0, 0)
    grid.fire(5, 3)

    grid.reset()
    assert grid.ships == []
    assert grid.cells is cells_before
    assert len(grid.untouched_cells()) == 24
    assert grid.place_ship(Ship(DESTROYER), 0, 0, horizontal=True)


def test_render_marks_ships_and_shots() -> None:
    grid = Grid(3, 2)
    grid.place_ship(Ship(DESTROYER), 0, 0, horizontal=True)
    grid.fire(0, 0)
    grid.fire(2, 1)
    assert grid.render() == "X . .\n. . o"
    assert grid.render(show_ships=True) == "X S .\n. . o"
