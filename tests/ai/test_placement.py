import random

import pytest
from sinkfleet.ai.placement import (
    MAX_PLACEMENT_ATTEMPTS,
    HardShipPlacer,
    ManualShipPlacer,
    RandomShipPlacer,
)
from sinkfleet.config import DEFAULT_FLEET
from sinkfleet.engine.errors import FleetPlacementError
from sinkfleet.engine.geometry import neighbourhood
from sinkfleet.engine.grid import Grid
from sinkfleet.engine.ship import ShipConfig


def _assert_buffered(grid: Grid) -> None:
    for ship_id, ship in enumerate(grid.ships):
        for coord in ship.cells:
            for neighbour in neighbourhood(coord, grid.width, grid.height):
                assert grid.get_cell(neighbour.x, neighbour.y).ship_id in (None, ship_id)


@pytest.mark.parametrize("placer_cls", [RandomShipPlacer, HardShipPlacer])
def test_default_fleet_is_placed_legally(placer_cls) -> None:
    for seed in range(10):
        grid = Grid(10, 10)
        ships = placer_cls(rng=random.Random(seed)).place_fleet(grid, DEFAULT_FLEET)
        assert [ship.size for ship in ships] == [5, 4, 3, 3, 2]
        assert ships == grid.ships
        assert all(ship.is_placed for ship in ships)
        _assert_buffered(grid)


def test_counts_expand_into_ship_instances() -> None:
    grid = Grid(10, 10)
    fleet = (ShipConfig("Destroyer", 2, 3), ShipConfig("Patrol", 1, 2))
    ships = RandomShipPlacer(rng=random.Random(4)).place_fleet(grid, fleet)
    assert [ship.name for ship in ships] == ["Destroyer"] * 3 + ["Patrol"] * 2


def test_hard_placer_lays_long_ships_horizontally_off_the_edges() -> None:
    for seed in range(20):
        grid = Grid(10, 10)
        ships = HardShipPlacer(rng=random.Random(seed)).place_fleet(grid, DEFAULT_FLEET)
        for ship in ships:
            if ship.size <= 3:
                continue
            xs = {coord.x for coord in ship.cells}
            ys = {coord.y for coord in ship.cells}
            assert len(ys) == 1
            assert min(xs) >= 1
            assert max(xs) <= grid.width - 2


def test_impossible_fleet_raises_after_bounded_attempts() -> None:
    grid = Grid(3, 3)
    fleet = (ShipConfig("Cruiser", 3, 5),)
    with pytest.raises(FleetPlacementError, match=f"after {MAX_PLACEMENT_ATTEMPTS} attempts"):
        RandomShipPlacer(rng=random.Random(0)).place_fleet(grid, fleet)
    assert 1 <= len(grid.ships) <= 2


def test_attempt_limit_is_configurable() -> None:
    grid = Grid(2, 2)
    placer = RandomShipPlacer(rng=random.Random(0), max_attempts=3)
    with pytest.raises(FleetPlacementError, match="after 3 attempts"):
        placer.place_fleet(grid, (ShipConfig("Single", 1, 2),))


def test_manual_placer_walks_the_fleet_in_order() -> None:
    grid = Grid(10, 10)
    fleet = (ShipConfig("Cruiser", 3), ShipConfig("Destroyer", 2, 2))
    session = ManualShipPlacer(grid, fleet)

    assert session.next_config == ShipConfig("Cruiser", 3)
    assert len(session.pending) == 3

    assert session.place(0, 0, horizontal=True)
    assert session.next_config == ShipConfig("Destroyer", 2, 2)

    # Touching the cruiser diagonally is rejected and the queue stays put.
    assert not session.place(3, 1, horizontal=True)
    assert len(session.pending) == 2

    assert session.place(5, 5, horizontal=False)
    assert session.place(8, 0, horizontal=False)
    assert session.is_complete
    assert session.next_config is None
    assert [ship.name for ship in session.placed] == ["Cruiser", "Destroyer", "Destroyer"]

    with pytest.raises(RuntimeError):
        session.place(0, 9, horizontal=True)


def test_manual_placer_reset_clears_grid() -> None:
    grid = Grid(10, 10)
    session = ManualShipPlacer(grid, (ShipConfig("Destroyer", 2),))
    session.place(0, 0, horizontal=True)
    session.reset()
    assert grid.ships == []
    assert session.placed == []
    assert session.next_config == ShipConfig("Destroyer", 2)


def test_hard_placer_turns_long_ships_vertical_on_narrow_grids() -> None:
    for seed in range(10):
        grid = Grid(3, 12)
        (ship,) = HardShipPlacer(rng=random.Random(seed)).place_fleet(
            grid, (ShipConfig("Battleship", 4),)
        )
        assert len({coord.x for coord in ship.cells}) == 1
        assert min(coord.y for coord in ship.cells) >= 1
        assert max(coord.y for coord in ship.cells) <= grid.height - 2


def test_hard_placer_keeps_short_ships_in_the_orientation_that_fits() -> None:
    for seed in range(10):
        grid = Grid(2, 6)
        (ship,) = HardShipPlacer(rng=random.Random(seed)).place_fleet(
            grid, (ShipConfig("Cruiser", 3),)
        )
        assert len({coord.x for coord in ship.cells}) == 1
