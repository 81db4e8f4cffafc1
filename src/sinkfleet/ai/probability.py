"""Expert opponent: probability density from every legal placement of the remaining fleet."""

from __future__ import annotations

import logging
import random
from typing import Sequence, TypeAlias

import numpy as np
import numpy.typing as npt

from sinkfleet.engine.cell import CellState
from sinkfleet.engine.geometry import Coordinate
from sinkfleet.engine.grid import GridView

from .base import Difficulty, TargetingStrategy

logger = logging.getLogger(__name__)

DensityArray: TypeAlias = npt.NDArray[np.float64]
Mask: TypeAlias = npt.NDArray[np.bool_]


class ProbabilityStrategy(TargetingStrategy):
    """Brute-force placement enumeration, recomputed from the view on every call.

    Every horizontal and vertical window of every remaining ship size is
    tested. A window is legal when none of its cells is a miss, a hit on a
    sunk ship, or inside the buffer zone of a sunk ship. A legal window adds
    ``1.0`` to each of its cells, or ``hit_weight_base ** k`` when it covers
    ``k`` live hits, so placements that extend a known line dominate
    exploratory ones.
    """

    difficulty = Difficulty.EXPERT

    def __init__(self, rng: random.Random | None = None, hit_weight_base: float = 20.0) -> None:
        super().__init__(rng)
        self.hit_weight_base = hit_weight_base

    def probability_map(self, view: GridView, remaining_sizes: Sequence[int]) -> DensityArray:
        """Accumulated placement weight per cell, indexed ``[x, y]``."""
        blocked, live = _classify(view)
        density = np.zeros((view.width, view.height), dtype=np.float64)
        for size in remaining_sizes:
            for x in range(view.width - size + 1):
                for y in range(view.height):
                    self._accumulate(density, blocked, live, (slice(x, x + size), y))
            for x in range(view.width):
                for y in range(view.height - size + 1):
                    self._accumulate(density, blocked, live, (x, slice(y, y + size)))
        return density

    def _accumulate(
        self,
        density: DensityArray,
        blocked: Mask,
        live: Mask,
        window: tuple[slice | int, slice | int],
    ) -> None:
        if blocked[window].any():
            return
        hits = int(live[window].sum())
        density[window] += 1.0 if hits == 0 else self.hit_weight_base**hits

    def _select(self, view: GridView, remaining_sizes: list[int]) -> Coordinate:
        density = self.probability_map(view, remaining_sizes)
        candidates = view.smart_untouched_cells()
        best = max((density[coord.x, coord.y] for coord in candidates), default=0.0)
        if best > 0:
            return self._pick([coord for coord in candidates if density[coord.x, coord.y] == best])

        logger.debug(
            "probability_map_empty",
            extra={"remaining_sizes": remaining_sizes, "candidates": len(candidates)},
        )
        return self._pick(view.untouched_cells())


def _classify(view: GridView) -> tuple[Mask, Mask]:
    """Cells no ship can use, and live hits."""
    blocked = np.zeros((view.width, view.height), dtype=bool)
    live = np.zeros((view.width, view.height), dtype=bool)
    for coord in view.coordinates():
        if (
            view.state(coord) is CellState.MISS
            or view.is_sunk_hit(coord)
            or not view.is_area_clear_of_sunken_ships(coord)
        ):
            blocked[coord.x, coord.y] = True
        elif view.is_live_hit(coord):
            live[coord.x, coord.y] = True
    return blocked, live
