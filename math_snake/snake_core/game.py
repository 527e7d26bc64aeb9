"""
Core Game
=========

Main game state machine combining movement, collisions, scoring and rounds.

One tick, in order:
    1. pending direction becomes current
    2. new head is prepended
    3. wall / self collision ends the game
    4. food: none -> drop tail; correct -> grow, score, new round;
       wrong -> shrink, penalty, remove that food
    5. power-up: hazard / growth / bonus effect, then removed
    6. snapshot
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Tuple

from math_snake.snake_core.config_loader import GameConfig, get_config
from math_snake.snake_core.entities import Direction, Food, Position, PowerUp, PowerUpKind
from math_snake.snake_core.high_score import HighScoreStore, MemoryHighScoreStore
from math_snake.snake_core.questions import Question, QuestionGenerator
from math_snake.snake_core.rules import GamePhase, TerminationResult, TerminationRules
from math_snake.snake_core.scoring import LootCounters, ScoreEvent, ScoreTracker
from math_snake.snake_core.spawner import PlacementExhaustedError, RoundSpawner
from math_snake.snake_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)

TierChangeCallback = Callable[[int, int], None]

# Marker for "leave unchanged" in set_board()
_KEEP: Any = object()


@dataclass
class TickResult:
    """Result of a single tick."""
    snapshot: GameSnapshot
    terminated: bool
    termination_reason: str
    delta_score: int
    events: List[ScoreEvent] = field(default_factory=list)
    eaten: Optional[Food] = None
    power_up_used: Optional[PowerUpKind] = None
    tier_changed: bool = False
    new_round: bool = False


class CoreGame:
    """
    Main game simulation class.

    Owns the snake, the live foods and power-up, the current question and
    the score tracker. Has no clock: a driver calls tick() once per step.

    Phases:
        IDLE -> start_session() -> RUNNING -> (collision / shrink / stop()) -> GAME_OVER
        start_session() from any phase begins a fresh session.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        high_score_store: Optional[HighScoreStore] = None,
        on_tier_change: Optional[TierChangeCallback] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            high_score_store: Best-score persistence. In-memory if None.
            on_tier_change: Called as (old_tier, new_tier) whenever the tier rises.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._on_tier_change = on_tier_change
        self._store = high_score_store if high_score_store is not None else MemoryHighScoreStore()

        # Initialize subsystems
        self._questions = QuestionGenerator(config, seed)
        self._spawner = RoundSpawner(config, seed)
        self._scorer = ScoreTracker(config)
        self._rules = TerminationRules(config)
        self._snapshot_builder = SnapshotBuilder(config)

        # Game state
        self._phase = GamePhase.IDLE
        self._snake: Deque[Position] = deque(config.board.start_snake)
        self._direction = Direction(config.board.start_direction)
        self._pending = self._direction
        self._foods: List[Food] = []
        self._power_up: Optional[PowerUp] = None
        self._question: Optional[Question] = None
        self._ticks: int = 0
        self._termination_reason: str = ""
        self._high_score: int = self._store.read_high_score()

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is GamePhase.RUNNING

    @property
    def is_over(self) -> bool:
        """True if the last session has ended."""
        return self._phase is GamePhase.GAME_OVER

    @property
    def score(self) -> int:
        """Current score."""
        return self._scorer.score

    @property
    def tier(self) -> int:
        return self._scorer.tier

    @property
    def combo_streak(self) -> int:
        return self._scorer.combo_streak

    @property
    def loot(self) -> LootCounters:
        return self._scorer.loot

    @property
    def high_score(self) -> int:
        return self._high_score

    @property
    def snake(self) -> Tuple[Position, ...]:
        """Snake segments, head first."""
        return tuple(self._snake)

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def pending_direction(self) -> Direction:
        return self._pending

    @property
    def foods(self) -> Tuple[Food, ...]:
        return tuple(self._foods)

    @property
    def power_up(self) -> Optional[PowerUp]:
        return self._power_up

    @property
    def question(self) -> Optional[Question]:
        return self._question

    @property
    def ticks(self) -> int:
        """Ticks processed this session."""
        return self._ticks

    @property
    def termination_reason(self) -> str:
        """Reason for game end, or empty string."""
        return self._termination_reason

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def start_session(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Reset to the starting position and begin ticking.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Initial game snapshot.

        Raises:
            PlacementExhaustedError: If the first round could not be placed.
        """
        if seed is not None:
            self._seed = seed
        if self._seed is not None:
            self._questions.reset(self._seed)
            self._spawner.reset(self._seed)

        self._scorer.reset()
        self._snake = deque(self._config.board.start_snake)
        self._direction = Direction(self._config.board.start_direction)
        self._pending = self._direction
        self._foods = []
        self._power_up = None
        self._question = None
        self._ticks = 0
        self._termination_reason = ""
        self._high_score = self._store.read_high_score()
        self._phase = GamePhase.RUNNING

        self._start_round_or_abort()
        logger.info("Session started (seed=%s, high score %d)", self._seed, self._high_score)
        return self.snapshot()

    def stop(self) -> GameSnapshot:
        """End a running session immediately. No further tick will apply."""
        if self.is_running:
            self._end_session("stopped")
        return self.snapshot()

    def set_intent(self, direction) -> bool:
        """
        Buffer a direction change for the next tick.

        Only turns onto the other axis are accepted, judged against the
        direction applied on the last tick. The last accepted intent before
        a tick wins.

        Args:
            direction: Direction, (dx, dy) vector or direction name.

        Returns:
            True if the intent was buffered.
        """
        if not self.is_running:
            return False
        intent = Direction.coerce(direction)
        if intent is None or not intent.is_turn_from(self._direction):
            return False
        self._pending = intent
        return True

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> TickResult:
        """
        Advance the game by one step.

        Returns:
            TickResult with the new snapshot. Outside RUNNING nothing changes.

        Raises:
            PlacementExhaustedError: If the next round could not be placed.
                The session is ended before the error propagates.
        """
        if not self.is_running:
            return TickResult(
                snapshot=self.snapshot(),
                terminated=self.is_over,
                termination_reason=self._termination_reason,
                delta_score=0
            )

        score_before = self._scorer.score
        result = TickResult(snapshot=None, terminated=False, termination_reason="", delta_score=0)
        self._ticks += 1

        # 1-2. Turn and move
        self._direction = self._pending
        head = self._direction.step(self._snake[0])
        self._snake.appendleft(head)

        # 3. Wall / self
        term = self._rules.check_collision(self._snake)
        if term.terminated:
            return self._finish_tick(result, score_before, term)

        # 4. Foods
        food = self._food_at(head)
        if food is None:
            self._snake.pop()
        elif food.is_correct:
            result.eaten = food
            event = self._scorer.apply_correct()
            result.events.append(event)
            self._notify_tier_change(event, result)
            self._foods.remove(food)
            self._start_round_or_abort()
            result.new_round = True
        else:
            result.eaten = food
            result.events.append(self._scorer.apply_wrong())
            self._trim_tail(self._config.body.wrong_answer_removals)
            self._foods.remove(food)
            term = self._rules.check_length(len(self._snake))
            if term.terminated:
                return self._finish_tick(result, score_before, term)

        # 5. Power-up
        if self._power_up is not None and self._power_up.position == head:
            term = self._apply_power_up(self._power_up, result)
            if term.terminated:
                return self._finish_tick(result, score_before, term)

        # 6. Snapshot
        return self._finish_tick(result, score_before, TerminationResult.none())

    def _finish_tick(
        self,
        result: TickResult,
        score_before: int,
        term: TerminationResult
    ) -> TickResult:
        if term.terminated:
            self._end_session(term.reason)
        result.terminated = term.terminated
        result.termination_reason = term.reason
        result.delta_score = self._scorer.score - score_before
        result.snapshot = self.snapshot()
        return result

    def _food_at(self, position: Position) -> Optional[Food]:
        for food in self._foods:
            if food.position == position:
                return food
        return None

    def _trim_tail(self, count: int) -> None:
        """Remove up to `count` tail segments, never below an empty snake."""
        for _ in range(min(count, len(self._snake))):
            self._snake.pop()

    def _apply_power_up(self, power_up: PowerUp, result: TickResult) -> TerminationResult:
        """Apply a consumed power-up and remove it from the board."""
        self._power_up = None
        result.power_up_used = power_up.kind
        term = TerminationResult.none()

        if power_up.kind is PowerUpKind.HAZARD:
            self._foods = [f for f in self._foods if f.is_correct]
            self._trim_tail(self._config.body.hazard_trim)
            term = self._rules.check_length(len(self._snake))
        elif power_up.kind is PowerUpKind.GROWTH:
            tail = self._snake[-1]
            self._snake.extend([tail] * self._config.body.growth_segments)
        elif power_up.kind is PowerUpKind.BONUS:
            event = self._scorer.add_bonus()
            result.events.append(event)
            self._notify_tier_change(event, result)

        logger.debug("Power-up %s consumed at %s", power_up.kind.value, power_up.position)
        return term

    def _notify_tier_change(self, event: ScoreEvent, result: TickResult) -> None:
        if not event.tier_changed:
            return
        result.tier_changed = True
        logger.info(
            "Tier up: %s -> %s",
            self._config.get_tier(event.tier_before).name,
            self._config.get_tier(event.tier_after).name
        )
        if self._on_tier_change is not None:
            self._on_tier_change(event.tier_before, event.tier_after)

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def _start_round(self) -> None:
        """Replace the question and foods; keep a live power-up.

        Nothing is changed if placement fails.
        """
        question = self._questions.generate(self._scorer.tier)
        spawn = self._spawner.spawn_round(
            question,
            self._snake,
            existing_power_up=self._power_up,
            combo_streak=self._scorer.combo_streak
        )
        self._question = question
        self._foods = list(spawn.foods)
        if spawn.power_up is not None:
            self._power_up = spawn.power_up
        if spawn.combo_reset:
            self._scorer.reset_combo()
        logger.debug("New round: %s", self._question.text)

    def _start_round_or_abort(self) -> None:
        try:
            self._start_round()
        except PlacementExhaustedError as e:
            logger.error("Round spawn failed, ending session: %s", e)
            self._end_session("placement_exhausted")
            raise

    def _end_session(self, reason: str) -> None:
        self._phase = GamePhase.GAME_OVER
        self._termination_reason = reason
        score = self._scorer.score
        if score > self._high_score:
            self._high_score = score
            self._store.write_high_score(score)
        logger.info("Game over (%s) - score %d, best %d", reason, score, self._high_score)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(
            snake=self._snake,
            direction=self._direction,
            foods=self._foods,
            power_up=self._power_up,
            question=self._question,
            score=self._scorer.score,
            tier=self._scorer.tier,
            loot=self._scorer.loot,
            combo_streak=self._scorer.combo_streak,
            phase=self._phase,
            high_score=self._high_score,
            ticks=self._ticks,
            termination_reason=self._termination_reason
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._scorer.score,
            "tier": self._scorer.tier,
            "length": len(self._snake),
            "ticks": self._ticks,
            "combo_streak": self._scorer.combo_streak,
            "correct_answers": self._scorer.correct_answers,
            "wrong_answers": self._scorer.wrong_answers,
            "high_score": self._high_score,
            "terminated_reason": self._termination_reason,
        }

    def set_board(
        self,
        snake: Optional[Iterable[Position]] = None,
        direction: Optional[Direction] = None,
        foods: Optional[Iterable[Food]] = None,
        power_up: Optional[PowerUp] = _KEEP,
        question: Optional[Question] = None
    ) -> GameSnapshot:
        """
        Overwrite parts of the board (for tools and scripted scenarios).

        Arguments left at their defaults keep the current value. Pass
        power_up=None to clear the live power-up. Setting a direction also
        replaces the pending one.
        """
        if snake is not None:
            self._snake = deque(snake)
        if direction is not None:
            self._direction = direction
            self._pending = direction
        if foods is not None:
            self._foods = list(foods)
        if power_up is not _KEEP:
            self._power_up = power_up
        if question is not None:
            self._question = question
        return self.snapshot()
