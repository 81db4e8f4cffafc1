"""Hard opponent: directional heatmap with a checkerboard search fallback."""

from __future__ import annotations

import random
from typing import TypeAlias

import numpy as np
import numpy.typing as npt

from sinkfleet.engine.geometry import Coordinate, Direction, neighbourhood
from sinkfleet.engine.grid import GridView

from .base import Difficulty, TargetingStrategy

HeatArray: TypeAlias = npt.NDArray[np.int64]


class HeatmapStrategy(TargetingStrategy):
    """Scores every cell from the live hits around it, recomputed on each call.

    Base heat is 1, fired cells are 0. Each live hit adds ``neighbour_heat``
    to its unfired orthogonal neighbours and ``line_bonus`` more when the hit
    on the far side continues the line. The 3x3 block around every sunk
    ship cell is zeroed. When nothing scores above ``fallback_threshold``
    the search falls back to cells with even ``x + y``.
    """

    difficulty = Difficulty.HARD

    def __init__(
        self,
        rng: random.Random | None = None,
        neighbour_heat: int = 10,
        line_bonus: int = 25,
        fallback_threshold: int = 1,
    ) -> None:
        super().__init__(rng)
        self.neighbour_heat = neighbour_heat
        self.line_bonus = line_bonus
        self.fallback_threshold = fallback_threshold

    def heatmap(self, view: GridView) -> HeatArray:
        """Heat per cell, indexed ``[x, y]``."""
        heat = np.ones((view.width, view.height), dtype=np.int64)
        for coord in view.coordinates():
            if not view.is_not_fired(coord):
                heat[coord.x, coord.y] = 0

        for hit in view.live_hits():
            for direction in Direction:
                target = hit.shifted(direction)
                if not view.contains(target) or not view.is_not_fired(target):
                    continue
                heat[target.x, target.y] += self.neighbour_heat
                if view.is_live_hit(hit.shifted(direction.opposite)):
                    heat[target.x, target.y] += self.line_bonus

        for sunk in view.sunk_cells:
            for coord in neighbourhood(sunk, view.width, view.height):
                heat[coord.x, coord.y] = 0
        return heat

    def _select(self, view: GridView, remaining_sizes: list[int]) -> Coordinate:
        heat = self.heatmap(view)
        best = int(heat.max())
        if best > self.fallback_threshold:
            return self._pick(_cells_where(heat == best))

        pool = _cells_where(heat > 0)
        parity = [coord for coord in pool if (coord.x + coord.y) % 2 == 0]
        if parity:
            return self._pick(parity)
        if pool:
            return self._pick(pool)
        return self._pick(view.untouched_cells())


def _cells_where(mask: npt.NDArray[np.bool_]) -> list[Coordinate]:
    return [Coordinate(int(x), int(y)) for x, y in np.argwhere(mask)]
