"""
Tick Driver
===========

Fixed-period scheduler that turns host frame time into game ticks.

The game itself has no clock. A host loop (pygame, a test, a server timer)
reports elapsed milliseconds and the driver calls CoreGame.tick() once per
period, stopping as soon as the session ends.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from math_snake.snake_core.game import CoreGame, TickResult


class TickDriver:
    """
    Accumulator-based tick scheduler.

    Changing the period cancels the partially elapsed tick and starts a new
    one at the new rate, like clearing and re-arming an interval timer.
    """

    def __init__(
        self,
        game: CoreGame,
        period_ms: Optional[int] = None,
        on_tick: Optional[Callable[[TickResult], None]] = None
    ):
        """
        Initialize driver.

        Args:
            game: Game to drive.
            period_ms: Tick period. Uses config timing.tick_ms if None.
            on_tick: Called with each TickResult (render hook).
        """
        timing = game.config.timing
        self._game = game
        self._min_ms = timing.min_tick_ms
        self._max_ms = timing.max_tick_ms
        self._max_catch_up = timing.max_catch_up_ticks
        self._period_ms = self._clamp(period_ms if period_ms is not None else timing.tick_ms)
        self._on_tick = on_tick
        self._accumulator = 0.0
        self._active = False

    @property
    def period_ms(self) -> int:
        return self._period_ms

    @property
    def active(self) -> bool:
        """True while ticks are scheduled."""
        return self._active and self._game.is_running

    def _clamp(self, period_ms: float) -> int:
        return int(max(self._min_ms, min(self._max_ms, period_ms)))

    def set_period(self, period_ms: float) -> int:
        """
        Change the tick period; applies from the next tick.

        Returns:
            The period actually used after clamping to config bounds.
        """
        self._period_ms = self._clamp(period_ms)
        self._accumulator = 0.0
        return self._period_ms

    def start(self, seed: Optional[int] = None) -> None:
        """Start a new session and schedule ticks."""
        self._game.start_session(seed=seed)
        self._accumulator = 0.0
        self._active = True

    def stop(self) -> None:
        """Stop the session and cancel all pending ticks."""
        self._active = False
        self._accumulator = 0.0
        self._game.stop()

    def advance(self, elapsed_ms: float) -> List[TickResult]:
        """
        Report elapsed host time and run every tick that became due.

        At most max_catch_up_ticks run per call so a stalled host does not
        fast-forward the game.

        Args:
            elapsed_ms: Milliseconds since the previous call.

        Returns:
            TickResults in order; empty if nothing was due or the game is not running.
        """
        if not self.active:
            self._active = False
            self._accumulator = 0.0
            return []

        self._accumulator = min(
            self._accumulator + max(0.0, elapsed_ms),
            self._period_ms * self._max_catch_up
        )

        results: List[TickResult] = []
        while self._accumulator >= self._period_ms:
            self._accumulator -= self._period_ms
            result = self._game.tick()
            results.append(result)
            if self._on_tick is not None:
                self._on_tick(result)
            if result.terminated or not self._game.is_running:
                self._active = False
                self._accumulator = 0.0
                break
        return results
