"""Decision and state core for a two-player sink-the-fleet game."""

from __future__ import annotations

from .ai import Difficulty, TargetingStrategy, create_strategy
from .config import DEFAULT_FLEET, GameConfig, load_game_config
from .engine.cell import CellState, MoveResult
from .engine.errors import (
    FleetPlacementError,
    InvalidCoordinateError,
    NoLegalMoveError,
    SinkFleetError,
)
from .engine.game import GamePhase, Match, Player
from .engine.geometry import Coordinate, Direction
from .engine.grid import Grid, GridView
from .engine.ship import Ship, ShipConfig

__version__ = "0.1.0"

__all__ = [
    "CellState",
    "Coordinate",
    "DEFAULT_FLEET",
    "Difficulty",
    "Direction",
    "FleetPlacementError",
    "GameConfig",
    "GamePhase",
    "Grid",
    "GridView",
    "InvalidCoordinateError",
    "Match",
    "MoveResult",
    "NoLegalMoveError",
    "Player",
    "Ship",
    "ShipConfig",
    "SinkFleetError",
    "TargetingStrategy",
    "create_strategy",
    "load_game_config",
]
