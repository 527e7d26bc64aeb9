"""
Game Rules
==========

Handles movement bounds, terminal collisions and length limits.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from math_snake.snake_core.config_loader import GameConfig, get_config
from math_snake.snake_core.entities import Position


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, reason)


class TerminationRules:
    """
    Handles game termination conditions.

    - Wall: new head leaves the grid
    - Self: new head lands on any other segment
    - Shrunk: snake shorter than min_length
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize termination rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._tile_count = config.board.tile_count
        self._min_length = config.body.min_length

    def in_bounds(self, position: Position) -> bool:
        x, y = position
        return 0 <= x < self._tile_count and 0 <= y < self._tile_count

    def check_collision(self, snake: Sequence[Position]) -> TerminationResult:
        """
        Check the head (index 0) of a snake that has just moved.

        Args:
            snake: Segments head first, new head already prepended.

        Returns:
            TerminationResult indicating game state.
        """
        head = snake[0]
        if not self.in_bounds(head):
            return TerminationResult.game_over("wall")

        for i in range(1, len(snake)):
            if snake[i] == head:
                return TerminationResult.game_over("self")

        return TerminationResult.none()

    def check_length(self, length: int) -> TerminationResult:
        """Check whether a snake of this length is still alive."""
        if length < self._min_length:
            return TerminationResult.game_over("shrunk")
        return TerminationResult.none()


class GamePhase(Enum):
    """Session lifecycle. Only RUNNING processes ticks."""
    IDLE = "idle"
    RUNNING = "running"
    GAME_OVER = "game_over"
