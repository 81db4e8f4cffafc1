"""Game configuration: grid dimensions and fleet composition."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sinkfleet.engine.ship import ShipConfig

DEFAULT_WIDTH = 10
DEFAULT_HEIGHT = 10

DEFAULT_FLEET: tuple[ShipConfig, ...] = (
    ShipConfig("Carrier", 5, 1),
    ShipConfig("Battleship", 4, 1),
    ShipConfig("Cruiser", 3, 1),
    ShipConfig("Submarine", 3, 1),
    ShipConfig("Destroyer", 2, 1),
)


def parse_fleet(raw: str) -> tuple[ShipConfig, ...]:
    """Parse ``"Carrier:5:1,Destroyer:2:2"``; the count may be omitted."""
    fleet: list[ShipConfig] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        fields = [item.strip() for item in part.split(":")]
        if len(fields) not in (2, 3):
            raise ValueError(f"Ship entry must be name:size[:count], got {part!r}")
        try:
            size = int(fields[1])
            count = int(fields[2]) if len(fields) == 3 else 1
        except ValueError as exc:
            raise ValueError(f"Ship size and count must be integers in {part!r}") from exc
        fleet.append(ShipConfig(fields[0], size, count))
    return tuple(fleet)


class GameConfig(BaseModel):
    """Grid size and fleet shared by both players of a match."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=DEFAULT_WIDTH, gt=0)
    height: int = Field(default=DEFAULT_HEIGHT, gt=0)
    fleet: tuple[ShipConfig, ...] = DEFAULT_FLEET

    @field_validator("fleet")
    @classmethod
    def _fleet_not_empty(cls, value: tuple[ShipConfig, ...]) -> tuple[ShipConfig, ...]:
        if not value:
            raise ValueError("A fleet needs at least one ship type.")
        return value

    def fleet_sizes(self) -> list[int]:
        """One entry per ship instance, counts expanded."""
        return [ship.size for ship in self.fleet for _ in range(ship.count)]

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Construct config from `SINKFLEET_GRID_*` and `SINKFLEET_FLEET`."""

        data: Dict[str, Any] = {}
        width = os.getenv("SINKFLEET_GRID_WIDTH")
        height = os.getenv("SINKFLEET_GRID_HEIGHT")
        fleet = os.getenv("SINKFLEET_FLEET")
        if width:
            data["width"] = int(width)
        if height:
            data["height"] = int(height)
        if fleet:
            data["fleet"] = parse_fleet(fleet)
        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_config() -> GameConfig:
    """Load and cache game config from the environment."""

    return GameConfig.from_env()
