"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Math Snake game.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from math_snake.snake_core.config_loader import GameConfig, load_config
from math_snake.snake_core.entities import ACTION_DIRECTIONS
from math_snake.snake_core.game import CoreGame
from math_snake.snake_core.high_score import HighScoreStore
from math_snake.snake_core.state_snapshot import CELL_POWER_UP, FOOD_SLOTS, GameSnapshot


class MathSnakeEnv(gym.Env):
    """
    Math Snake as a Gymnasium environment.

    Action Space:
        Discrete(4): UP, DOWN, LEFT, RIGHT. Each step buffers the action as
        the intent (reversals are ignored, like a keyboard) and runs one tick.

    Observation Space:
        Dict with the cell-code grid, head, foods, power-up and progress
        counters; optional RGB image. `answer_value` exposes the correct
        answer, so agents learn navigation rather than arithmetic.

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Info:
        Contains score, delta_score, length, tier, terminated_reason, etc.
    """

    metadata = {
        "render_modes": ["rgb_array"],
        "render_fps": 10,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        image_obs: Optional[bool] = None,
        image_width: Optional[int] = None,
        image_height: Optional[int] = None,
        high_score_store: Optional[HighScoreStore] = None,
        debug: bool = False,
    ):
        """
        Initialize Math Snake environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "rgb_array" for numpy frames, None for headless.
            image_obs: If True, include board_rgb in observations. Config default if None.
            image_width: Override observation image width.
            image_height: Override observation image height.
            high_score_store: Best-score persistence passed to the game.
            debug: If True, prints every step.
        """
        super().__init__()

        self._config = load_config(config_path)

        self.render_mode = render_mode
        self._image_obs = self._config.observation.image_enabled if image_obs is None else image_obs
        self._debug = debug

        self._img_width = image_width or self._config.observation.image_width
        self._img_height = image_height or self._config.observation.image_height

        self._game = CoreGame(config=self._config, high_score_store=high_score_store)
        self._last_snapshot: Optional[GameSnapshot] = None

        # Initialize renderer (lazy)
        self._renderer = None

        self.action_space = spaces.Discrete(len(ACTION_DIRECTIONS))
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] MathSnakeEnv initialized")
            print(f"[DEBUG]   Grid: {self._config.tile_count}x{self._config.tile_count}")
            print(f"[DEBUG]   Image obs: {self._image_obs}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        tiles = self._config.tile_count
        int_max = np.iinfo(np.int32).max

        obs_dict = {
            # Board
            "grid": spaces.Box(low=0, high=CELL_POWER_UP, shape=(tiles, tiles), dtype=np.int8),
            "head": spaces.Box(low=-1, high=tiles, shape=(2,), dtype=np.int32),
            "direction": spaces.Box(low=0, high=len(ACTION_DIRECTIONS) - 1, shape=(), dtype=np.int32),
            "length": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int32),

            # Round
            "food_xy": spaces.Box(low=-1, high=tiles - 1, shape=(FOOD_SLOTS, 2), dtype=np.int32),
            "food_value": spaces.Box(low=-np.inf, high=np.inf, shape=(FOOD_SLOTS,), dtype=np.float32),
            "food_mask": spaces.MultiBinary(FOOD_SLOTS),
            "answer_value": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "power_up_xy": spaces.Box(low=-1, high=tiles - 1, shape=(2,), dtype=np.int32),
            "power_up_kind": spaces.Box(low=0, high=3, shape=(), dtype=np.int32),

            # Progress
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "tier": spaces.Box(low=0, high=self._config.max_tier, shape=(), dtype=np.int32),
            "combo_streak": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int32),
        }

        if self._image_obs:
            obs_dict["board_rgb"] = spaces.Box(
                low=0,
                high=255,
                shape=(self._img_height, self._img_width, 3),
                dtype=np.uint8
            )

        return spaces.Dict(obs_dict)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.start_session(seed=seed)
        self._last_snapshot = snapshot

        obs = self._snapshot_to_obs(snapshot)
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: Index into (UP, DOWN, LEFT, RIGHT).

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])
        direction = ACTION_DIRECTIONS[int(action)]

        accepted = self._game.set_intent(direction)
        result = self._game.tick()
        self._last_snapshot = result.snapshot

        obs = self._snapshot_to_obs(result.snapshot)

        # Reward is always 0.0 - agents compute their own
        reward = 0.0

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["intent_accepted"] = accepted
        info["ate_correct"] = result.eaten is not None and result.eaten.is_correct
        info["ate_wrong"] = result.eaten is not None and not result.eaten.is_correct
        info["power_up"] = result.power_up_used.value if result.power_up_used else ""
        info["tier_changed"] = result.tier_changed

        if self._debug:
            print(f"[DEBUG] Step: action={direction.name}, delta_score={result.delta_score}, "
                  f"length={info['length']}, tier={info['tier']}")
            if result.terminated:
                print(f"[DEBUG] TERMINATED: {info.get('terminated_reason', 'unknown')}")

        return obs, reward, result.terminated, False, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        obs = snapshot.to_obs_dict()

        if self._image_obs:
            obs["board_rgb"] = self._render_to_array(snapshot)

        return obs

    def _render_to_array(self, snapshot: GameSnapshot) -> np.ndarray:
        """Render board to RGB array."""
        if self._renderer is None:
            from math_snake.snake_core.render_grid import GridRenderer
            self._renderer = GridRenderer(self._config)

        return self._renderer.render(snapshot, self._img_width, self._img_height)

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode == "rgb_array":
            snapshot = self._last_snapshot or self._game.snapshot()
            return self._render_to_array(snapshot)
        return None

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
