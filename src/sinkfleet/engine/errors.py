"""Exceptions raised by the sinkfleet engine and strategies."""

from __future__ import annotations


class SinkFleetError(Exception):
    """Base class for engine errors."""


class InvalidCoordinateError(SinkFleetError, IndexError):
    """A coordinate outside the grid was used."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"Invalid coordinates: {x},{y} (grid is {width}x{height})")
        self.x = x
        self.y = y


class NoLegalMoveError(SinkFleetError, RuntimeError):
    """A targeting strategy was asked to move on a grid with nothing left to fire at."""


class FleetPlacementError(SinkFleetError, RuntimeError):
    """A fleet could not be laid out within the retry bound."""
