"""
Board Entities
==============

Grid positions, directions and the collectibles placed on the board.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from math_snake.snake_core.questions import AnswerValue

Position = Tuple[int, int]


class Direction(Enum):
    """
    Movement direction as a grid step.

    Screen coordinates: y grows downward, so UP is (0, -1).
    """
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def is_horizontal(self) -> bool:
        return self.dy == 0

    def step(self, position: Position) -> Position:
        """Position one cell further in this direction."""
        return (position[0] + self.dx, position[1] + self.dy)

    def is_turn_from(self, current: "Direction") -> bool:
        """True if switching from `current` changes axis (no reversals, no repeats)."""
        return self.is_horizontal != current.is_horizontal

    @classmethod
    def coerce(cls, value: Union["Direction", Tuple[int, int], str]) -> Optional["Direction"]:
        """
        Convert a Direction, (dx, dy) vector or name to a Direction.

        Returns None for anything that is not one of the four unit steps.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        try:
            return cls(tuple(value))
        except (TypeError, ValueError):
            return None


# Stable action ordering for discrete action spaces
ACTION_DIRECTIONS: Tuple[Direction, ...] = (
    Direction.UP,
    Direction.DOWN,
    Direction.LEFT,
    Direction.RIGHT,
)


class PowerUpKind(Enum):
    """Special collectibles with a one-shot effect."""
    HAZARD = "hazard"   # Bomb: clears wrong answers, trims the tail
    GROWTH = "growth"   # Potion: adds tail segments
    BONUS = "bonus"     # Chest: score bonus

    @property
    def code(self) -> int:
        """1-based integer code for array observations (0 = none)."""
        return list(PowerUpKind).index(self) + 1


# Kinds the spawner may roll at random; BONUS is only ever forced by combos
RANDOM_POWER_UP_KINDS: Tuple[PowerUpKind, ...] = (PowerUpKind.HAZARD, PowerUpKind.GROWTH)


@dataclass(frozen=True)
class Food:
    """An answer option on the grid."""
    position: Position
    value: AnswerValue
    is_correct: bool

    @property
    def label(self) -> str:
        return self.value.display


@dataclass(frozen=True)
class PowerUp:
    """A power-up on the grid."""
    position: Position
    kind: PowerUpKind
