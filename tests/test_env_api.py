"""
Tests for Gymnasium environment API.
"""

import pytest
import numpy as np

from math_snake.snake_core.config_loader import load_config
from math_snake.snake_core.entities import ACTION_DIRECTIONS, Direction
from math_snake.snake_core.env_gym import MathSnakeEnv
from math_snake.snake_core.high_score import MemoryHighScoreStore


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def env():
    env = MathSnakeEnv(high_score_store=MemoryHighScoreStore())
    yield env
    env.close()


RIGHT = ACTION_DIRECTIONS.index(Direction.RIGHT)
UP = ACTION_DIRECTIONS.index(Direction.UP)


class TestMathSnakeEnv:
    """Test single environment API."""

    def test_reset_returns_obs_and_info(self, env):
        """Reset should return (observation, info) tuple."""
        result = env.reset(seed=42)

        assert isinstance(result, tuple)
        assert len(result) == 2

        obs, info = result
        assert isinstance(obs, dict)
        assert isinstance(info, dict)
        assert info["score"] == 0
        assert info["length"] == 3

    def test_observation_in_space(self, env):
        obs, _ = env.reset(seed=42)
        assert env.observation_space.contains(obs)

    def test_step_returns_five_values(self, env):
        """Step should return (obs, reward, terminated, truncated, info)."""
        env.reset(seed=42)

        result = env.step(RIGHT)

        assert isinstance(result, tuple)
        assert len(result) == 5

        obs, reward, terminated, truncated, info = result
        assert isinstance(obs, dict)
        assert reward == 0.0
        assert truncated is False
        assert "delta_score" in info
        assert "intent_accepted" in info

    def test_reversal_not_accepted(self, env):
        env.reset(seed=42)
        _, _, _, _, info = env.step(ACTION_DIRECTIONS.index(Direction.LEFT))
        assert info["intent_accepted"] is False
        assert env.game.direction is Direction.RIGHT

    def test_turn_accepted(self, env):
        env.reset(seed=42)
        env.game.set_board(foods=[], power_up=None)
        obs, _, _, _, info = env.step(UP)
        assert info["intent_accepted"] is True
        assert tuple(obs["head"]) == (10, 9)

    def test_numpy_action(self, env):
        env.reset(seed=42)
        env.game.set_board(foods=[], power_up=None)
        env.step(np.array(RIGHT))
        env.step(np.array([UP]))
        assert env.game.direction is Direction.UP

    def test_episode_terminates(self, env):
        env.reset(seed=42)
        for _ in range(env.config.tile_count):
            obs, _, terminated, _, info = env.step(RIGHT)
            assert env.observation_space.contains(obs)
            if terminated:
                break
        assert terminated
        assert info["terminated_reason"] in ("wall", "self", "shrunk")

    def test_deterministic_with_seed(self):
        actions = [RIGHT, UP, RIGHT, UP, RIGHT] * 4
        runs = []
        for _ in range(2):
            env = MathSnakeEnv(high_score_store=MemoryHighScoreStore())
            obs, _ = env.reset(seed=7)
            trace = [obs["food_xy"].tolist()]
            for action in actions:
                obs, _, terminated, _, _ = env.step(action)
                trace.append((obs["head"].tolist(), obs["food_xy"].tolist(), int(obs["score"])))
                if terminated:
                    break
            runs.append(trace)
            env.close()
        assert runs[0] == runs[1]

    def test_render_rgb_array(self, config):
        env = MathSnakeEnv(render_mode="rgb_array", high_score_store=MemoryHighScoreStore())
        env.reset(seed=1)
        frame = env.render()
        height = config.observation.image_height
        width = config.observation.image_width
        assert frame.shape == (height, width, 3)
        assert frame.dtype == np.uint8
        env.close()

    def test_render_none_without_mode(self, env):
        env.reset(seed=1)
        assert env.render() is None

    def test_image_observation(self):
        env = MathSnakeEnv(image_obs=True, image_width=120, image_height=80,
                           high_score_store=MemoryHighScoreStore())
        obs, _ = env.reset(seed=1)
        assert obs["board_rgb"].shape == (80, 120, 3)
        assert env.observation_space.contains(obs)
        env.close()
