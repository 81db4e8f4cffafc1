import random

import numpy as np
from sinkfleet.ai.heatmap import HeatmapStrategy
from sinkfleet.engine.cell import CellState
from sinkfleet.engine.geometry import Coordinate
from sinkfleet.engine.grid import GridView


def _view(width, height, hits=(), misses=(), sunk=()):
    states = [[CellState.NOT_FIRED] * height for _ in range(width)]
    for x, y in (*hits, *sunk):
        states[x][y] = CellState.HIT
    for x, y in misses:
        states[x][y] = CellState.MISS
    return GridView(
        width=width,
        height=height,
        states=tuple(tuple(column) for column in states),
        sunk_cells=frozenset(Coordinate(x, y) for x, y in sunk),
    )


def test_fresh_grid_has_uniform_heat() -> None:
    heat = HeatmapStrategy().heatmap(_view(6, 4))
    assert heat.shape == (6, 4)
    assert np.all(heat == 1)


def test_fired_cells_carry_no_heat() -> None:
    heat = HeatmapStrategy().heatmap(_view(5, 5, misses=[(2, 2)]))
    assert heat[2, 2] == 0
    assert heat[2, 3] == 1


def test_single_hit_heats_orthogonal_neighbours() -> None:
    heat = HeatmapStrategy().heatmap(_view(10, 10, hits=[(4, 4)]))
    for x, y in [(4, 3), (4, 5), (3, 4), (5, 4)]:
        assert heat[x, y] == 11
    assert heat[3, 3] == 1
    assert heat[4, 4] == 0


def test_line_continuation_gets_bonus() -> None:
    view = _view(10, 10, hits=[(4, 4), (5, 4)])
    heat = HeatmapStrategy().heatmap(view)
    assert heat[3, 4] == 36
    assert heat[6, 4] == 36
    assert heat[4, 3] == 11
    assert heat[5, 5] == 11

    for seed in range(10):
        move = HeatmapStrategy(rng=random.Random(seed)).choose_move(view, [3])
        assert move in {Coordinate(3, 4), Coordinate(6, 4)}


def test_weights_are_tunable() -> None:
    strategy = HeatmapStrategy(neighbour_heat=3, line_bonus=7)
    heat = strategy.heatmap(_view(10, 10, hits=[(4, 4), (5, 4)]))
    assert heat[6, 4] == 11
    assert heat[4, 5] == 4


def test_sunk_ship_zeroes_its_buffer() -> None:
    heat = HeatmapStrategy().heatmap(_view(10, 10, sunk=[(0, 0), (1, 0)]))
    for x in range(3):
        for y in range(2):
            assert heat[x, y] == 0
    assert heat[3, 0] == 1
    assert heat[0, 2] == 1


def test_fallback_uses_checkerboard_outside_buffers() -> None:
    view = _view(10, 10, sunk=[(4, 4), (4, 5)], misses=[(0, 0)])
    for seed in range(30):
        move = HeatmapStrategy(rng=random.Random(seed)).choose_move(view, [3, 2])
        assert (move.x + move.y) % 2 == 0
        assert view.is_potential_target(move)


def test_fallback_without_parity_cells() -> None:
    # Only (1, 0) is left and it has odd parity.
    view = _view(2, 1, misses=[(0, 0)])
    move = HeatmapStrategy(rng=random.Random(0)).choose_move(view, [1])
    assert move == Coordinate(1, 0)


def test_last_resort_fires_into_buffer() -> None:
    view = _view(3, 1, sunk=[(0, 0), (1, 0)])
    move = HeatmapStrategy(rng=random.Random(0)).choose_move(view, [1])
    assert move == Coordinate(2, 0)
