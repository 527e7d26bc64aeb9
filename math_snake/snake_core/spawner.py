"""
Round Spawner
=============

Places the three answer options and the occasional power-up on free cells.

Placement is rejection sampling: draw a uniform cell, redraw while it is
occupied. Attempts are capped so a saturated grid fails loudly instead of
spinning forever.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from math_snake.snake_core.config_loader import GameConfig, get_config
from math_snake.snake_core.entities import (
    Food,
    Position,
    PowerUp,
    PowerUpKind,
    RANDOM_POWER_UP_KINDS,
)
from math_snake.snake_core.questions import Question


class PlacementExhaustedError(RuntimeError):
    """Raised when no free cell was found within the attempt budget."""


@dataclass
class RoundSpawn:
    """Result of spawning a round."""
    foods: Tuple[Food, ...]
    power_up: Optional[PowerUp]   # Newly spawned power-up, None if none spawned
    bonus_forced: bool            # True if a combo forced a chest this round
    combo_reset: bool = False     # True if the combo streak was consumed, chest or not


class RoundSpawner:
    """
    Builds the collectibles of a round on a bounded grid.

    Power-up rules:
    - A live power-up blocks any new one.
    - combo_streak >= combo_threshold forces a BONUS (checked first) and
      consumes the streak, even when a live power-up blocks the chest.
    - Otherwise a HAZARD or GROWTH appears with power_up_chance.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._tile_count = config.board.tile_count
        self._power_up_chance = config.spawn.power_up_chance
        self._combo_threshold = config.spawn.combo_threshold
        self._max_attempts = config.spawn.max_placement_attempts

    def reset(self, seed: Optional[int] = None) -> None:
        """Reseed the spawner. Keeps the current RNG if seed is None."""
        if seed is not None:
            self._rng = random.Random(seed)

    def random_cell(self, occupied: Set[Position]) -> Position:
        """
        Draw a uniformly random free cell.

        Args:
            occupied: Cells that must not be returned.

        Raises:
            PlacementExhaustedError: If the attempt budget runs out.
        """
        for _ in range(self._max_attempts):
            cell = (
                self._rng.randrange(self._tile_count),
                self._rng.randrange(self._tile_count)
            )
            if cell not in occupied:
                return cell
        raise PlacementExhaustedError(
            f"No free cell after {self._max_attempts} attempts "
            f"({len(occupied)} of {self._tile_count ** 2} cells occupied)"
        )

    def spawn_power_up(self, kind: PowerUpKind, occupied: Set[Position]) -> PowerUp:
        """Place a power-up of `kind` on a free cell."""
        return PowerUp(position=self.random_cell(occupied), kind=kind)

    def spawn_round(
        self,
        question: Question,
        snake: Iterable[Position],
        existing_power_up: Optional[PowerUp] = None,
        combo_streak: int = 0
    ) -> RoundSpawn:
        """
        Place the foods for a question and decide on a power-up.

        Args:
            question: The round's question.
            snake: Current snake segments.
            existing_power_up: The live power-up, if any. Its cell stays blocked
                and it prevents any new power-up.
            combo_streak: Current combo streak.

        Returns:
            RoundSpawn with three foods (correct first).

        Raises:
            PlacementExhaustedError: If the grid is too full to place everything.
        """
        occupied: Set[Position] = set(snake)
        if existing_power_up is not None:
            occupied.add(existing_power_up.position)

        foods: List[Food] = []
        for index, value in enumerate(question.options):
            food = Food(
                position=self.random_cell(occupied),
                value=value,
                is_correct=(index == 0)
            )
            occupied.add(food.position)
            foods.append(food)

        power_up = None
        bonus_forced = False
        combo_reset = combo_streak >= self._combo_threshold
        if existing_power_up is None:
            if combo_reset:
                power_up = self.spawn_power_up(PowerUpKind.BONUS, occupied)
                bonus_forced = True
            elif self._rng.random() < self._power_up_chance:
                kind = self._rng.choice(RANDOM_POWER_UP_KINDS)
                power_up = self.spawn_power_up(kind, occupied)

        return RoundSpawn(
            foods=tuple(foods),
            power_up=power_up,
            bonus_forced=bonus_forced,
            combo_reset=combo_reset
        )
