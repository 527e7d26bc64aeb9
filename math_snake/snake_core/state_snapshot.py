"""
State Snapshot
==============

Immutable view of the game handed to renderers and UI after each tick, plus
packing into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from math_snake.snake_core.config_loader import GameConfig, get_config
from math_snake.snake_core.entities import (
    ACTION_DIRECTIONS,
    Direction,
    Food,
    Position,
    PowerUp,
)
from math_snake.snake_core.questions import Question
from math_snake.snake_core.rules import GamePhase
from math_snake.snake_core.scoring import LootCounters

# Cell codes in the observation grid
CELL_EMPTY = 0
CELL_BODY = 1
CELL_HEAD = 2
CELL_FOOD = 3
CELL_POWER_UP = 4

# Foods per round (one answer, two distractors)
FOOD_SLOTS = 3


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete game state after a tick.

    Only tuples and frozen values, so a consumer cannot reach back into the
    game through it.
    """
    snake: Tuple[Position, ...]
    direction: Direction
    foods: Tuple[Food, ...]
    power_up: Optional[PowerUp]
    question: Optional[Question]
    score: int
    tier: int
    tier_name: str
    loot: LootCounters
    combo_streak: int
    phase: GamePhase
    high_score: int
    ticks: int
    termination_reason: str
    tile_count: int

    @property
    def is_running(self) -> bool:
        return self.phase is GamePhase.RUNNING

    @property
    def head(self) -> Optional[Position]:
        return self.snake[0] if self.snake else None

    @property
    def length(self) -> int:
        return len(self.snake)

    @property
    def correct_food(self) -> Optional[Food]:
        for food in self.foods:
            if food.is_correct:
                return food
        return None

    def occupied_cells(self) -> Dict[Position, str]:
        """Map of occupied cell -> occupant ("snake", "food", "power_up")."""
        cells: Dict[Position, str] = {}
        for segment in self.snake:
            cells[segment] = "snake"
        for food in self.foods:
            cells[food.position] = "food"
        if self.power_up is not None:
            cells[self.power_up.position] = "power_up"
        return cells

    def grid(self) -> np.ndarray:
        """(tile_count, tile_count) int8 cell codes, indexed [y, x]."""
        grid = np.zeros((self.tile_count, self.tile_count), dtype=np.int8)
        for x, y in _on_grid(self.snake[1:], self.tile_count):
            grid[y, x] = CELL_BODY
        for food in self.foods:
            x, y = food.position
            grid[y, x] = CELL_FOOD
        if self.power_up is not None:
            x, y = self.power_up.position
            grid[y, x] = CELL_POWER_UP
        for x, y in _on_grid(self.snake[:1], self.tile_count):
            grid[y, x] = CELL_HEAD
        return grid

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        food_xy = np.full((FOOD_SLOTS, 2), -1, dtype=np.int32)
        food_value = np.zeros(FOOD_SLOTS, dtype=np.float32)
        food_mask = np.zeros(FOOD_SLOTS, dtype=bool)
        for i, food in enumerate(self.foods[:FOOD_SLOTS]):
            food_xy[i] = food.position
            food_value[i] = float(food.value)
            food_mask[i] = True

        head = self.head if self.head is not None else (-1, -1)
        power_up_xy = self.power_up.position if self.power_up is not None else (-1, -1)
        power_up_kind = self.power_up.kind.code if self.power_up is not None else 0
        answer = float(self.question.answer) if self.question is not None else 0.0

        return {
            # Board
            "grid": self.grid(),
            "head": np.array(head, dtype=np.int32),
            "direction": np.array(ACTION_DIRECTIONS.index(self.direction), dtype=np.int32),
            "length": np.array(self.length, dtype=np.int32),

            # Round
            "food_xy": food_xy,
            "food_value": food_value,
            "food_mask": food_mask,
            "answer_value": np.array(answer, dtype=np.float32),
            "power_up_xy": np.array(power_up_xy, dtype=np.int32),
            "power_up_kind": np.array(power_up_kind, dtype=np.int32),

            # Progress
            "score": np.array(self.score, dtype=np.int64),
            "tier": np.array(self.tier, dtype=np.int32),
            "combo_streak": np.array(self.combo_streak, dtype=np.int32),
        }


def _on_grid(cells: Sequence[Position], tile_count: int):
    for x, y in cells:
        if 0 <= x < tile_count and 0 <= y < tile_count:
            yield x, y


class SnapshotBuilder:
    """Builds game state snapshots."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._tile_count = config.board.tile_count

    def build(
        self,
        snake: Sequence[Position],
        direction: Direction,
        foods: Sequence[Food],
        power_up: Optional[PowerUp],
        question: Optional[Question],
        score: int,
        tier: int,
        loot: LootCounters,
        combo_streak: int,
        phase: GamePhase,
        high_score: int,
        ticks: int,
        termination_reason: str = ""
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        return GameSnapshot(
            snake=tuple(snake),
            direction=direction,
            foods=tuple(foods),
            power_up=power_up,
            question=question,
            score=score,
            tier=tier,
            tier_name=self._config.get_tier(tier).name,
            loot=loot,
            combo_streak=combo_streak,
            phase=phase,
            high_score=high_score,
            ticks=ticks,
            termination_reason=termination_reason,
            tile_count=self._tile_count
        )
