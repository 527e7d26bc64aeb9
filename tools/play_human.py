"""
Human Play Mode
================

Play Math Snake interactively in a pygame window.

Controls:
    - Arrow keys / WASD: Steer
    - + / -: Faster / slower ticks
    - Space / R: Start or restart
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--speed MS] [--high-score-file PATH]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from math_snake.snake_core.config_loader import load_config, GameConfig
from math_snake.snake_core.entities import Direction, PowerUpKind
from math_snake.snake_core.game import CoreGame, TickResult
from math_snake.snake_core.high_score import default_store
from math_snake.snake_core.render_grid import FOOD_COLOR, POWER_UP_COLORS
from math_snake.snake_core.state_snapshot import GameSnapshot
from math_snake.snake_core.tick_driver import TickDriver

KEY_DIRECTIONS = {
    "up": Direction.UP, "w": Direction.UP,
    "down": Direction.DOWN, "s": Direction.DOWN,
    "left": Direction.LEFT, "a": Direction.LEFT,
    "right": Direction.RIGHT, "d": Direction.RIGHT,
}

# Period change per +/- key press
SPEED_STEP_MS = 20

POWER_UP_GLYPHS = {
    PowerUpKind.HAZARD: "B",
    PowerUpKind.GROWTH: "P",
    PowerUpKind.BONUS: "$",
}


class SnakeRenderer:
    """Draws snapshots with the tier theme, a HUD above the board and a key bar below."""

    def __init__(self, config: GameConfig):
        self._config = config
        self._cell = config.board.cell_size
        self._tiles = config.board.tile_count

        self._hud_height = 70
        self._footer_height = 30
        self._board_px = self._cell * self._tiles
        self.window_size = (self._board_px, self._board_px + self._hud_height + self._footer_height)

        self._text_light = (240, 240, 245)
        self._text_dim = (150, 150, 165)
        self._panel = (20, 20, 28)

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 34)
        self._font_medium = pygame.font.Font(None, 24)
        self._font_small = pygame.font.Font(None, 18)

    def render(self, screen: pygame.Surface, snapshot: GameSnapshot, period_ms: int) -> None:
        """Render the complete game scene."""
        style = self._config.get_tier(snapshot.tier)
        screen.fill(self._panel)
        pygame.draw.rect(
            screen, style.background_color,
            (0, self._hud_height, self._board_px, self._board_px)
        )

        self._draw_question_watermark(screen, snapshot)
        self._draw_snake(screen, snapshot, style.primary_color, style.accent_color)
        self._draw_foods(screen, snapshot)
        self._draw_power_up(screen, snapshot)
        self._draw_hud(screen, snapshot, style.name, style.primary_color)
        self._draw_footer(screen, period_ms)

        if not snapshot.is_running:
            self._draw_overlay(screen, snapshot)

    def _cell_rect(self, position: Tuple[int, int], pad: int = 1) -> pygame.Rect:
        x, y = position
        return pygame.Rect(
            x * self._cell + pad,
            self._hud_height + y * self._cell + pad,
            self._cell - 2 * pad,
            self._cell - 2 * pad
        )

    def _draw_question_watermark(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        if snapshot.question is None:
            return
        text = self._font_large.render(snapshot.question.text, True, (70, 70, 85))
        center = (self._board_px // 2, self._hud_height + self._board_px // 2)
        screen.blit(text, text.get_rect(center=center))

    def _draw_snake(self, screen, snapshot, primary, accent) -> None:
        for index in range(len(snapshot.snake) - 1, -1, -1):
            x, y = snapshot.snake[index]
            if not (0 <= x < self._tiles and 0 <= y < self._tiles):
                continue
            color = accent if index == 0 else primary
            pygame.draw.rect(screen, color, self._cell_rect((x, y)), border_radius=3)

    def _draw_foods(self, screen, snapshot) -> None:
        for food in snapshot.foods:
            rect = self._cell_rect(food.position, pad=0)
            pygame.draw.circle(screen, FOOD_COLOR, rect.center, self._cell // 2 + 2)
            label = self._font_small.render(food.label, True, (255, 255, 255))
            screen.blit(label, label.get_rect(center=rect.center))

    def _draw_power_up(self, screen, snapshot) -> None:
        if snapshot.power_up is None:
            return
        rect = self._cell_rect(snapshot.power_up.position, pad=2)
        pygame.draw.rect(screen, POWER_UP_COLORS[snapshot.power_up.kind], rect, border_radius=4)
        glyph = self._font_small.render(POWER_UP_GLYPHS[snapshot.power_up.kind], True, (20, 20, 20))
        screen.blit(glyph, glyph.get_rect(center=rect.center))

    def _draw_hud(self, screen, snapshot, tier_name, tier_color) -> None:
        score = self._font_large.render(f"{snapshot.score}", True, self._text_light)
        screen.blit(score, (12, 8))
        best = self._font_small.render(f"BEST {snapshot.high_score}", True, self._text_dim)
        screen.blit(best, (12, 40))

        badge = self._font_medium.render(tier_name, True, tier_color)
        badge_rect = badge.get_rect(topright=(self._board_px - 12, 10))
        pygame.draw.rect(screen, tier_color, badge_rect.inflate(12, 8), 2, border_radius=6)
        screen.blit(badge, badge_rect)

        stats = (f"combo {snapshot.combo_streak}   "
                 f"loot {snapshot.loot.primary}/{snapshot.loot.secondary}   "
                 f"len {snapshot.length}")
        stats_surface = self._font_small.render(stats, True, self._text_dim)
        screen.blit(stats_surface, stats_surface.get_rect(topright=(self._board_px - 12, 44)))

        if snapshot.question is not None:
            question = self._font_medium.render(snapshot.question.text, True, self._text_light)
            screen.blit(question, question.get_rect(center=(self._board_px // 2, 22)))

    def _draw_footer(self, screen, period_ms: int) -> None:
        y = self._hud_height + self._board_px + 8
        text = f"Arrows/WASD steer   +/- speed ({period_ms} ms)   Space restart   ESC quit"
        surface = self._font_small.render(text, True, self._text_dim)
        screen.blit(surface, (10, y))

    def _draw_overlay(self, screen, snapshot: GameSnapshot) -> None:
        overlay = pygame.Surface(self.window_size, pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

        if snapshot.termination_reason:
            title, hint = "GAME OVER", "Press Space to try again"
        else:
            title, hint = "READY?", "Press Space to start"

        center_x = self._board_px // 2
        center_y = self._hud_height + self._board_px // 2
        title_surface = self._font_large.render(title, True, self._text_light)
        screen.blit(title_surface, title_surface.get_rect(center=(center_x, center_y - 20)))
        hint_surface = self._font_medium.render(hint, True, self._text_dim)
        screen.blit(hint_surface, hint_surface.get_rect(center=(center_x, center_y + 15)))


class HumanPlayer:
    """
    Human-playable Math Snake game.

    pygame supplies frame time and key events; TickDriver converts frame time
    into game ticks at the chosen speed.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        period_ms: Optional[int] = None,
        high_score_file: Optional[str] = None,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._target_fps = target_fps

        self._game = CoreGame(
            config=config,
            seed=seed,
            high_score_store=default_store(high_score_file),
            on_tier_change=self._on_tier_change
        )
        self._driver = TickDriver(self._game, period_ms=period_ms, on_tick=self._on_tick)

        pygame.init()
        self._renderer = SnakeRenderer(config)
        self._screen = pygame.display.set_mode(self._renderer.window_size)
        pygame.display.set_caption("Math Snake")
        self._clock = pygame.time.Clock()

        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns the last session's score."""
        print("=== Math Snake ===")
        print("Steer into the correct answer. Space to start, ESC to quit.")
        print()

        while self._running:
            elapsed_ms = self._clock.tick(self._target_fps)
            self._handle_events()
            self._driver.advance(elapsed_ms)
            self._render()

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                name = pygame.key.name(event.key)
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in (pygame.K_SPACE, pygame.K_r):
                    if not self._game.is_running:
                        self._start()
                elif name in ("+", "=", "[+]"):
                    self._driver.set_period(self._driver.period_ms - SPEED_STEP_MS)
                elif name in ("-", "[-]"):
                    self._driver.set_period(self._driver.period_ms + SPEED_STEP_MS)
                elif name in KEY_DIRECTIONS:
                    self._game.set_intent(KEY_DIRECTIONS[name])

    def _start(self) -> None:
        self._driver.start(seed=self._seed)
        print(f"\n=== New game (best {self._game.high_score}) ===")

    def _on_tick(self, result: TickResult) -> None:
        if result.eaten is not None:
            verdict = "correct" if result.eaten.is_correct else "wrong"
            print(f"  {result.eaten.label}: {verdict} ({result.delta_score:+d}, total {self._game.score})")
        if result.power_up_used is not None:
            print(f"  power-up: {result.power_up_used.value}")
        if result.terminated:
            print(f"\nGAME OVER ({result.termination_reason}) - Score: {self._game.score}")

    def _on_tier_change(self, old_tier: int, new_tier: int) -> None:
        print(f"  Tier up: {self._config.get_tier(new_tier).name}")

    def _render(self) -> None:
        self._renderer.render(self._screen, self._game.snapshot(), self._driver.period_ms)
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Math Snake interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--speed", type=int, default=None, help="Tick period in ms (default: config)")
    parser.add_argument("--high-score-file", type=str, default=None,
                        help="High score JSON file (default: ~/.math_snake/high_score.json)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--verbose", action="store_true", help="Log game events")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            period_ms=args.speed,
            high_score_file=args.high_score_file,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
