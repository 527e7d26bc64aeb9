"""
Snake Core - The heart of the game.

This module provides the tick-driven game state machine, the question
generator, round spawning, scoring and a Gymnasium environment wrapper.

Main exports:
- CoreGame: Game state machine (start_session / set_intent / tick / stop)
- TickDriver: Fixed-period scheduler feeding CoreGame.tick()
- QuestionGenerator: Per-tier arithmetic questions
- RoundSpawner: Food and power-up placement
- MathSnakeEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
"""

from math_snake.snake_core.config_loader import GameConfig, load_config
from math_snake.snake_core.entities import Direction, Food, PowerUp, PowerUpKind
from math_snake.snake_core.questions import AnswerValue, Question, QuestionGenerator
from math_snake.snake_core.scoring import ScoreTracker, tier_for
from math_snake.snake_core.spawner import PlacementExhaustedError, RoundSpawner
from math_snake.snake_core.rules import GamePhase
from math_snake.snake_core.state_snapshot import GameSnapshot
from math_snake.snake_core.game import CoreGame, TickResult
from math_snake.snake_core.tick_driver import TickDriver
from math_snake.snake_core.high_score import JsonHighScoreStore, MemoryHighScoreStore
from math_snake.snake_core.env_gym import MathSnakeEnv

__all__ = [
    "GameConfig",
    "load_config",
    "Direction",
    "Food",
    "PowerUp",
    "PowerUpKind",
    "AnswerValue",
    "Question",
    "QuestionGenerator",
    "ScoreTracker",
    "tier_for",
    "PlacementExhaustedError",
    "RoundSpawner",
    "GamePhase",
    "GameSnapshot",
    "CoreGame",
    "TickResult",
    "TickDriver",
    "JsonHighScoreStore",
    "MemoryHighScoreStore",
    "MathSnakeEnv",
]
