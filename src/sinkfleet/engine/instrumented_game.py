"""Match subclass that reports whole-game telemetry."""

from __future__ import annotations

import time
from typing import Any

from sinkfleet.telemetry import get_logger, get_tracer, record_duration, record_game_metric

from .cell import MoveResult
from .game import GamePhase, Match, Player
from .geometry import Coordinate


class InstrumentedMatch(Match):
    """Wraps a match in a game-level span and records shot and outcome metrics."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("sinkfleet.engine")
        self._tracer = get_tracer("sinkfleet.engine")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None
        self._game_id_counter = 0

    def start(self, first_player: Player = Player.PLAYER1) -> None:
        super().start(first_player)
        self._start_game_span()
        fleet_size = sum(ship.count for ship in self.config.fleet)
        record_game_metric(
            "sinkfleet_match_started_total",
            1,
            {"width": self.config.width, "height": self.config.height, "fleet_size": fleet_size},
        )
        self._logger.info(
            "Match %d started on a %dx%d grid", self._game_id_counter, self.config.width, self.config.height
        )

    def make_move(self, player: Player, coord: Coordinate) -> MoveResult:
        with self._tracer.start_as_current_span("sinkfleet.engine.make_move") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("player", player.name)
            span.set_attribute("coord.x", coord.x)
            span.set_attribute("coord.y", coord.y)

            try:
                result = super().make_move(player, coord)
            except (IndexError, RuntimeError) as exc:
                record_game_metric(
                    "sinkfleet_match_invalid_moves_total",
                    1,
                    {"player": player.name, "reason": type(exc).__name__},
                )
                span.record_exception(exc)
                span.set_attribute("error", True)
                self._logger.error("Invalid move from %s at (%d,%d): %s", player.name, coord.x, coord.y, exc)
                raise

            span.set_attribute("shot_outcome", result.name)
            record_game_metric("sinkfleet_shots_total", 1, {"player": player.name})
            record_game_metric(
                "sinkfleet_shots_by_result_total",
                1,
                {"player": player.name, "result": result.value},
            )

            if self.phase is GamePhase.FINISHED and self.winner:
                span.set_attribute("winner", self.winner.name)
                self._finish_game()

            return result

    def reset(self) -> None:
        self._close_game_span()
        super().reset()

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_id_counter += 1
        self._game_span_cm = self._tracer.start_as_current_span("sinkfleet.engine.match")
        self._game_span = self._game_span_cm.__enter__()
        self._game_span.set_attribute("game.id", self._game_id_counter)

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        shots = {
            player.name: sum(
                1 for column in self.enemy_grid(player).cells for cell in column if cell.is_fired
            )
            for player in Player
        }
        winner = self.winner.name if self.winner else "unknown"

        record_game_metric("sinkfleet_match_completed_total", 1, {"winner": winner})
        record_duration("sinkfleet_match_duration_ms", duration * 1000, {"winner": winner})

        if self._game_span is not None:
            self._game_span.set_attribute("winner", winner)
            self._game_span.set_attribute("shots.total", sum(shots.values()))
            self._game_span.set_attribute("duration_ms", duration * 1000)

        self._logger.info(
            "Match finished. Winner=%s shots=%s duration_s=%.3f", winner, shots, duration
        )
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
