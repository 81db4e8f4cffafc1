"""Opponent AI: targeting strategies and fleet placers."""

from __future__ import annotations

import random

from .base import Difficulty, TargetingStrategy
from .heatmap import HeatmapStrategy
from .hunt_target import HuntTargetStrategy
from .placement import (
    AutomaticShipPlacer,
    HardShipPlacer,
    ManualShipPlacer,
    RandomShipPlacer,
)
from .probability import ProbabilityStrategy
from .random_strategy import RandomStrategy

__all__ = [
    "AutomaticShipPlacer",
    "Difficulty",
    "HardShipPlacer",
    "HeatmapStrategy",
    "HuntTargetStrategy",
    "ManualShipPlacer",
    "ProbabilityStrategy",
    "RandomShipPlacer",
    "RandomStrategy",
    "TargetingStrategy",
    "create_strategy",
]

STRATEGIES: dict[Difficulty, type[TargetingStrategy]] = {
    Difficulty.EASY: RandomStrategy,
    Difficulty.MEDIUM: HuntTargetStrategy,
    Difficulty.HARD: HeatmapStrategy,
    Difficulty.EXPERT: ProbabilityStrategy,
}


def create_strategy(difficulty: Difficulty | str, rng: random.Random | None = None) -> TargetingStrategy:
    """Build the targeting strategy for ``difficulty`` (an enum member or its value)."""
    return STRATEGIES[Difficulty(difficulty)](rng=rng)
