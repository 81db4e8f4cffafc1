"""Targeting strategy contract shared by the four AI difficulty levels."""

from __future__ import annotations

import logging
import random
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence

from sinkfleet.engine.errors import NoLegalMoveError
from sinkfleet.engine.geometry import Coordinate
from sinkfleet.engine.grid import GridView
from sinkfleet.telemetry import get_tracer, record_duration, record_game_metric

logger = logging.getLogger(__name__)
tracer = get_tracer("sinkfleet.ai")


class Difficulty(Enum):
    """Available opponent strengths, one targeting strategy each."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class TargetingStrategy(ABC):
    """Chooses the next cell to fire at on the opponent's grid.

    Implementations only ever see a :class:`GridView`, so they know cell
    states and the position of sunk ships, never where a live ship is.
    """

    difficulty: Difficulty

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def choose_move(self, view: GridView, remaining_sizes: Sequence[int]) -> Coordinate:
        """Return a NOT_FIRED coordinate; raise :class:`NoLegalMoveError` if none is left."""
        start = time.perf_counter()
        with tracer.start_as_current_span("strategy.choose_move") as span:
            span.set_attribute("strategy", self.difficulty.value)
            span.set_attribute("remaining_ships", len(remaining_sizes))
            if not any(view.is_not_fired(coord) for coord in view.coordinates()):
                logger.error(
                    "strategy_no_legal_move",
                    extra={"strategy": self.difficulty.value, "width": view.width, "height": view.height},
                )
                raise NoLegalMoveError("No valid moves available")

            move = self._select(view, list(remaining_sizes))
            if not view.is_not_fired(move):
                raise RuntimeError(f"{type(self).__name__} chose already fired cell {move}")

            duration_ms = (time.perf_counter() - start) * 1000
            span.set_attribute("move.x", move.x)
            span.set_attribute("move.y", move.y)
            record_game_metric("sinkfleet_ai_moves_total", 1, {"strategy": self.difficulty.value})
            record_duration(
                "sinkfleet_ai_decision_latency_ms", duration_ms, {"strategy": self.difficulty.value}
            )
            logger.debug(
                "strategy_move_chosen",
                extra={"strategy": self.difficulty.value, "x": move.x, "y": move.y},
            )
            return move

    def reset(self) -> None:
        """Forget per-match state before a new match."""

    @abstractmethod
    def _select(self, view: GridView, remaining_sizes: list[int]) -> Coordinate:
        """Pick a move; ``view`` is guaranteed to hold at least one NOT_FIRED cell."""

    def _pick(self, cells: Sequence[Coordinate]) -> Coordinate:
        return self._rng.choice(list(cells))

    def _pick_smart(self, view: GridView) -> Coordinate:
        """Uniform pick among potential targets, else among any unfired cell."""
        smart = view.smart_untouched_cells()
        if smart:
            return self._pick(smart)
        return self._pick(view.untouched_cells())
