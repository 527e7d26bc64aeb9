"""
Scoring System
==============

Score, tier, combo streak and loot bookkeeping.

Tier policy: tier = min(max_tier, score // tier_step). The stored tier only
ever moves up within a session; penalties never demote it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from math_snake.snake_core.config_loader import GameConfig, get_config


def tier_for(score: int, tier_step: int = 25, max_tier: int = 3) -> int:
    """Map a score to its tier index. Pure."""
    return min(max_tier, max(0, score) // tier_step)


@dataclass(frozen=True)
class LootCounters:
    """Correct answers collected in the lower tiers (primary) and upper tiers (secondary)."""
    primary: int = 0
    secondary: int = 0


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    reason: str
    tier_before: int
    tier_after: int

    @property
    def tier_changed(self) -> bool:
        return self.tier_after != self.tier_before

    def __repr__(self) -> str:
        if self.tier_changed:
            return f"ScoreEvent({self.reason}={self.points:+d}, tier {self.tier_before}->{self.tier_after})"
        return f"ScoreEvent({self.reason}={self.points:+d})"


class ScoreTracker:
    """
    Tracks score, tier, combo streak and loot for one session.

    Loot goes to the primary counter while the tier is below 2 and to the
    secondary counter from tier 2 on, using the tier at the moment the
    answer was eaten.
    """

    # Tier from which loot counts as secondary
    SECONDARY_LOOT_TIER = 2

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._scoring = config.scoring
        self.reset()

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def tier(self) -> int:
        """Stored tier (monotonic within a session)."""
        return self._tier

    @property
    def combo_streak(self) -> int:
        """Correct answers since the last wrong answer or forced chest."""
        return self._combo

    @property
    def loot(self) -> LootCounters:
        return LootCounters(self._loot_primary, self._loot_secondary)

    @property
    def correct_answers(self) -> int:
        return self._correct

    @property
    def wrong_answers(self) -> int:
        return self._wrong

    def tier_for(self, score: int) -> int:
        """Tier a score maps to under the configured thresholds."""
        return tier_for(score, self._scoring.tier_step, self._scoring.max_tier)

    def _raise_tier(self) -> None:
        target = self.tier_for(self._score)
        if target > self._tier:
            self._tier = target

    def apply_correct(self) -> ScoreEvent:
        """
        Apply a correct answer: reward, loot, combo and tier update.

        Returns:
            ScoreEvent; tier_changed is True only on the answer that crosses
            a threshold for the first time this session.
        """
        tier_before = self._tier
        if tier_before < self.SECONDARY_LOOT_TIER:
            self._loot_primary += 1
        else:
            self._loot_secondary += 1

        points = self._scoring.correct_reward
        self._score += points
        self._combo += 1
        self._correct += 1
        self._raise_tier()
        return ScoreEvent(points, "correct", tier_before, self._tier)

    def apply_wrong(self) -> ScoreEvent:
        """Apply a wrong answer: penalty floored at 0, combo reset. Never lowers the tier."""
        before = self._score
        self._score = max(0, self._score - self._scoring.wrong_penalty)
        self._combo = 0
        self._wrong += 1
        return ScoreEvent(self._score - before, "wrong", self._tier, self._tier)

    def add_bonus(self, points: Optional[int] = None) -> ScoreEvent:
        """Add bonus points (chest power-up by default)."""
        if points is None:
            points = self._scoring.bonus_reward
        tier_before = self._tier
        self._score += points
        self._raise_tier()
        return ScoreEvent(points, "bonus", tier_before, self._tier)

    def reset_combo(self) -> None:
        """Clear the combo streak (after a forced chest spawn)."""
        self._combo = 0

    def reset(self) -> None:
        """Reset all counters to session start."""
        self._score = 0
        self._tier = 0
        self._combo = 0
        self._loot_primary = 0
        self._loot_secondary = 0
        self._correct = 0
        self._wrong = 0
