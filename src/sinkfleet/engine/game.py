"""Two-player match coordinator."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from sinkfleet.ai.placement import AutomaticShipPlacer, RandomShipPlacer
from sinkfleet.config import GameConfig
from sinkfleet.telemetry import get_meter, get_tracer

from .cell import CellState, MoveResult
from .geometry import Coordinate
from .grid import Grid, GridView
from .ship import Ship

if TYPE_CHECKING:  # pragma: no cover - typing only
    from sinkfleet.ai.base import TargetingStrategy

logger = logging.getLogger(__name__)
tracer = get_tracer("sinkfleet.engine.game")
meter = get_meter("sinkfleet.engine.game")

MOVE_COUNTER = meter.create_counter(
    "sinkfleet_engine_moves",
    unit="1",
    description="Number of moves made in a Match",
)


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Player(Enum):
    """Available players."""

    PLAYER1 = "player1"
    PLAYER2 = "player2"

    def opponent(self) -> Player:
        """Return the opposing player."""
        return Player.PLAYER2 if self is Player.PLAYER1 else Player.PLAYER1


@dataclass(frozen=True)
class GridSnapshot:
    """Serializable view of one grid for state queries."""

    ships: tuple[tuple[Coordinate, ...], ...]
    shots: dict[Coordinate, CellState]


@dataclass(frozen=True)
class MatchState:
    """Immutable snapshot of the current match."""

    phase: GamePhase
    current_player: Player
    winner: Player | None
    grids: dict[Player, GridSnapshot]


class Match:
    """Holds both grids, whose turn it is and who won.

    A hit or a sink lets the shooter fire again; a miss passes the turn.
    """

    def __init__(self, config: GameConfig | None = None, rng_seed: int | None = None) -> None:
        self.config = config or GameConfig()
        self.grids: dict[Player, Grid] = {
            player: Grid(self.config.width, self.config.height, owner=player.value)
            for player in Player
        }
        self.phase: GamePhase = GamePhase.SETUP
        self.current_player: Player = Player.PLAYER1
        self.winner: Player | None = None
        self._rng = random.Random(rng_seed)

    @property
    def is_over(self) -> bool:
        return self.phase is GamePhase.FINISHED

    def grid(self, player: Player) -> Grid:
        return self.grids[player]

    def enemy_grid(self, player: Player) -> Grid:
        return self.grids[player.opponent()]

    def enemy_view(self, player: Player) -> GridView:
        return self.enemy_grid(player).view()

    def remaining_enemy_ship_sizes(self, player: Player) -> list[int]:
        return [ship.size for ship in self.enemy_grid(player).ships_remaining()]

    def sunk_ship_cells(self, player: Player) -> list[tuple[Coordinate, ...]]:
        """Cells of every enemy ship ``player`` has sunk, one tuple per ship."""
        return [ship.cells for ship in self.enemy_grid(player).sunk_ships()]

    # --- setup ---

    def _require_setup(self) -> None:
        if self.phase is not GamePhase.SETUP:
            raise RuntimeError("Ships can only be placed during setup.")

    def place_ship(self, player: Player, ship: Ship, x: int, y: int, horizontal: bool) -> bool:
        self._require_setup()
        return self.grids[player].place_ship(ship, x, y, horizontal)

    def place_fleet(self, player: Player, placer: AutomaticShipPlacer) -> list[Ship]:
        """Replace ``player``'s fleet with one laid out by ``placer``."""
        self._require_setup()
        grid = self.grids[player]
        grid.reset()
        ships = placer.place_fleet(grid, self.config.fleet)
        logger.debug("match_fleet_placed", extra={"player": player.value, "ships": len(ships)})
        return ships

    def fleet_complete(self, player: Player) -> bool:
        expected = sum(ship.count for ship in self.config.fleet)
        return len(self.grids[player].ships) == expected

    def setup_random(self, placer: AutomaticShipPlacer | None = None) -> None:
        """Place both fleets with ``placer`` (random by default) and start the match."""
        with tracer.start_as_current_span("match.setup_random") as span:
            placer = placer or RandomShipPlacer(rng=self._rng)
            span.set_attribute("placer", type(placer).__name__)
            for player in Player:
                self.place_fleet(player, placer)
            self.start()

    def start(self, first_player: Player = Player.PLAYER1) -> None:
        self._require_setup()
        missing = [player.value for player in Player if not self.fleet_complete(player)]
        if missing:
            raise RuntimeError(f"Fleets are incomplete for: {', '.join(missing)}")
        self.phase = GamePhase.IN_PROGRESS
        self.current_player = first_player
        self.winner = None
        logger.info(
            "match_started",
            extra={"phase": self.phase.value, "current_player": self.current_player.value},
        )

    # --- battle ---

    def make_move(self, player: Player, coord: Coordinate) -> MoveResult:
        """Fire ``player``'s shot at the enemy grid, enforcing turn order and win conditions."""
        with tracer.start_as_current_span("match.make_move") as span:
            span.set_attribute("player", player.value)
            span.set_attribute("x", coord.x)
            span.set_attribute("y", coord.y)
            if self.phase is not GamePhase.IN_PROGRESS:
                logger.error(
                    "move_rejected_match_not_in_progress",
                    extra={"player": player.value, "phase": self.phase.value},
                )
                raise RuntimeError("Match is not in progress.")
            if player is not self.current_player:
                logger.error(
                    "move_rejected_wrong_player",
                    extra={"player": player.value, "current": self.current_player.value},
                )
                raise RuntimeError("It is not this player's turn.")

            target = self.enemy_grid(player)
            result = target.fire(coord.x, coord.y)
            span.set_attribute("result", result.value)

            if result is MoveResult.ALREADY_FIRED:
                return result

            if target.all_ships_sunk():
                self.winner = player
                self.phase = GamePhase.FINISHED
                span.set_attribute("match.winner", player.value)
                logger.info("match_finished", extra={"winner": player.value})
            elif result is MoveResult.MISS:
                self.current_player = player.opponent()
                span.set_attribute("next_player", self.current_player.value)

            MOVE_COUNTER.add(1, attributes={"result": result.value, "player": player.value})
            return result

    def play_ai_turn(
        self, player: Player, strategy: TargetingStrategy
    ) -> tuple[Coordinate, MoveResult]:
        """Ask ``strategy`` for ``player``'s next shot and fire it."""
        coord = strategy.choose_move(
            self.enemy_view(player), self.remaining_enemy_ship_sizes(player)
        )
        return coord, self.make_move(player, coord)

    def valid_moves(self, player: Player) -> list[Coordinate]:
        """Return all coordinates the player can still fire at."""
        if self.phase is not GamePhase.IN_PROGRESS:
            return []
        return self.enemy_grid(player).untouched_cells()

    def get_state(self) -> MatchState:
        """Return an immutable view of the current match."""
        snapshots = {
            player: GridSnapshot(
                ships=tuple(ship.cells for ship in grid.ships),
                shots={
                    cell.coordinate: cell.state
                    for column in grid.cells
                    for cell in column
                    if cell.is_fired
                },
            )
            for player, grid in self.grids.items()
        }
        return MatchState(
            phase=self.phase,
            current_player=self.current_player,
            winner=self.winner,
            grids=snapshots,
        )

    def reset(self) -> None:
        """Clear both grids for a rematch."""
        for grid in self.grids.values():
            grid.reset()
        self.phase = GamePhase.SETUP
        self.current_player = Player.PLAYER1
        self.winner = None
        logger.info("match_reset")
