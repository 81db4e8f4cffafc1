"""Easy opponent: fires anywhere it has not fired yet."""

from __future__ import annotations

from sinkfleet.engine.geometry import Coordinate
from sinkfleet.engine.grid import GridView

from .base import Difficulty, TargetingStrategy


class RandomStrategy(TargetingStrategy):
    difficulty = Difficulty.EASY

    def _select(self, view: GridView, remaining_sizes: list[int]) -> Coordinate:
        return self._pick(view.untouched_cells())
