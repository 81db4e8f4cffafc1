"""Medium opponent: hunt for a hit, then follow the ship's axis until it sinks."""

from __future__ import annotations

import logging
import random

from sinkfleet.engine.geometry import Coordinate, Direction, orthogonal_neighbours
from sinkfleet.engine.grid import GridView

from .base import Difficulty, TargetingStrategy

logger = logging.getLogger(__name__)


class HuntTargetStrategy(TargetingStrategy):
    """Hunt/target state machine with directional memory.

    The strategy remembers the first hit on the current ship (the anchor),
    its most recent hit and, once two adjacent hits line up, the direction it
    is firing in. That memory is re-checked against the grid on every call:
    the outcome of the previous shot is read back from the view rather than
    reported to the strategy.
    """

    difficulty = Difficulty.MEDIUM

    def __init__(self, rng: random.Random | None = None) -> None:
        super().__init__(rng)
        self._anchor: Coordinate | None = None
        self._last_hit: Coordinate | None = None
        self._direction: Direction | None = None
        self._reversed = False
        self._last_shot: Coordinate | None = None

    @property
    def anchor(self) -> Coordinate | None:
        return self._anchor

    @property
    def direction(self) -> Direction | None:
        return self._direction

    @property
    def in_target_mode(self) -> bool:
        return self._direction is not None

    def reset(self) -> None:
        self._forget()
        self._last_shot = None

    def _select(self, view: GridView, remaining_sizes: list[int]) -> Coordinate:
        self._sync(view)
        move = self._continue_line(view)
        if move is None:
            move = self._hunt(view)
        if move is None:
            move = self._pick_smart(view)
        self._last_shot = move
        return move

    def _forget(self) -> None:
        self._anchor = None
        self._last_hit = None
        self._direction = None
        self._reversed = False

    def _sync(self, view: GridView) -> None:
        shot = self._last_shot
        if shot is not None and view.contains(shot):
            if view.is_sunk_hit(shot):
                self._forget()
            elif view.is_live_hit(shot):
                previous = self._last_hit
                if self._direction is None and previous is not None:
                    direction = Direction.between(previous, shot)
                    if direction is not None:
                        self._anchor = previous
                        self._direction = direction
                        self._reversed = False
                if self._anchor is None:
                    self._anchor = shot
                self._last_hit = shot
        if self._anchor is not None and not view.is_live_hit(self._anchor):
            self._forget()
        elif self._last_hit is not None and not view.is_live_hit(self._last_hit):
            self._last_hit = self._anchor

    def _continue_line(self, view: GridView) -> Coordinate | None:
        if self._direction is None or self._anchor is None or self._last_hit is None:
            return None
        move = self._extend(view, self._last_hit, self._direction)
        if move is not None:
            return move
        if not self._reversed:
            self._reversed = True
            self._direction = self._direction.opposite
            self._last_hit = self._anchor
            move = self._extend(view, self._anchor, self._direction)
            if move is not None:
                return move
        logger.debug(
            "hunt_target_axis_abandoned",
            extra={"anchor_x": self._anchor.x, "anchor_y": self._anchor.y},
        )
        self._forget()
        return None

    @staticmethod
    def _extend(view: GridView, start: Coordinate, direction: Direction) -> Coordinate | None:
        """First cell past the run of live hits from ``start``, if it can still hold a ship."""
        current = start.shifted(direction)
        while view.is_live_hit(current):
            current = current.shifted(direction)
        if view.contains(current) and view.is_potential_target(current):
            return current
        return None

    def _hunt(self, view: GridView) -> Coordinate | None:
        hits = view.live_hits()
        if not hits:
            return None
        if self._last_hit in hits:
            hits.remove(self._last_hit)
            hits.insert(0, self._last_hit)

        # Two adjacent live hits give the axis away.
        for hit in hits:
            for direction in Direction:
                neighbour = hit.shifted(direction)
                if not view.is_live_hit(neighbour):
                    continue
                self._anchor = hit
                self._last_hit = neighbour
                self._direction = direction
                self._reversed = False
                move = self._continue_line(view)
                if move is not None:
                    return move

        sources: dict[Coordinate, Coordinate] = {}
        for hit in hits:
            for neighbour in orthogonal_neighbours(hit, view.width, view.height):
                if neighbour not in sources and view.is_potential_target(neighbour):
                    sources[neighbour] = hit
        if not sources:
            return None

        candidates = list(sources)
        recent = self._last_hit
        if recent is not None:
            aligned = [c for c in candidates if c.x == recent.x or c.y == recent.y]
            if aligned:
                candidates = aligned
        move = self._pick(candidates)
        source = sources[move]
        if self._anchor is None:
            self._anchor = source
        self._last_hit = source
        return move
