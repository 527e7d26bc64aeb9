"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


@dataclass(frozen=True)
class BoardConfig:
    """Grid geometry and the starting snake."""
    tile_count: int                          # Cells per side of the square grid
    cell_size: int                           # Pixels per cell (renderers only)
    start_snake: Tuple[Tuple[int, int], ...] # Head first
    start_direction: Tuple[int, int]


@dataclass(frozen=True)
class ScoringConfig:
    """Score rewards, penalties and tier thresholds."""
    correct_reward: int
    wrong_penalty: int
    bonus_reward: int
    tier_step: int
    max_tier: int


@dataclass(frozen=True)
class BodyConfig:
    """Snake length rules."""
    min_length: int
    wrong_answer_removals: int
    hazard_trim: int
    growth_segments: int


@dataclass(frozen=True)
class SpawnConfig:
    """Round spawning parameters."""
    power_up_chance: float
    combo_threshold: int
    max_placement_attempts: int


@dataclass(frozen=True)
class QuestionConfig:
    """Question generator parameters."""
    addition_probability: float
    distractor_offset_max: Optional[int]  # None: generic [-3, 3] offsets


@dataclass(frozen=True)
class TimingConfig:
    """Tick period bounds used by external drivers."""
    tick_ms: int
    min_tick_ms: int
    max_tick_ms: int
    max_catch_up_ticks: int


@dataclass(frozen=True)
class TierStyle:
    """Name and colour theme of a difficulty tier."""
    name: str
    primary_color: Tuple[int, int, int]
    accent_color: Tuple[int, int, int]
    background_color: Tuple[int, int, int]


@dataclass(frozen=True)
class ObservationConfig:
    """Observation image parameters for the Gymnasium wrapper."""
    image_enabled: bool
    image_width: int
    image_height: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    scoring: ScoringConfig
    body: BodyConfig
    spawn: SpawnConfig
    questions: QuestionConfig
    timing: TimingConfig
    tiers: Tuple[TierStyle, ...]
    observation: ObservationConfig

    @property
    def tile_count(self) -> int:
        """Cells per side of the grid."""
        return self.board.tile_count

    @property
    def max_tier(self) -> int:
        """Highest reachable tier index."""
        return self.scoring.max_tier

    def get_tier(self, tier: int) -> TierStyle:
        """Get tier style by index."""
        if 0 <= tier < len(self.tiers):
            return self.tiers[tier]
        raise ValueError(f"Invalid tier: {tier}")


def _parse_pair(data: List, what: str) -> Tuple[int, int]:
    """Parse an [x, y] pair from YAML."""
    if len(data) != 2:
        raise ValueError(f"{what} must have 2 values [x, y], got {data}")
    return (int(data[0]), int(data[1]))


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_offset_max(value) -> Optional[int]:
    """Parse the distractor offset bound; null selects the generic offset range."""
    return None if value is None else int(value)


def _parse_tier(tier_data: dict) -> TierStyle:
    """Parse a single tier style from YAML."""
    primary = _parse_color(tier_data["primary_color"])
    return TierStyle(
        name=str(tier_data["name"]),
        primary_color=primary,
        accent_color=_parse_color(tier_data.get("accent_color", primary)),
        background_color=_parse_color(tier_data.get("background_color", [0, 0, 0]))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    board = config.board

    # Every tier needs a style
    if len(config.tiers) != config.scoring.max_tier + 1:
        raise ValueError(
            f"tiers length ({len(config.tiers)}) must be max_tier + 1 "
            f"({config.scoring.max_tier + 1})"
        )

    if config.scoring.tier_step <= 0:
        raise ValueError(f"tier_step must be positive, got {config.scoring.tier_step}")

    # Starting snake must be alive, on the grid and contiguous
    if len(board.start_snake) < config.body.min_length:
        raise ValueError(
            f"start_snake length ({len(board.start_snake)}) is below "
            f"min_length ({config.body.min_length})"
        )
    for x, y in board.start_snake:
        if not (0 <= x < board.tile_count and 0 <= y < board.tile_count):
            raise ValueError(f"start_snake segment ({x}, {y}) is off the grid")
    if len(set(board.start_snake)) != len(board.start_snake):
        raise ValueError("start_snake segments must be distinct")
    for (ax, ay), (bx, by) in zip(board.start_snake, board.start_snake[1:]):
        if abs(ax - bx) + abs(ay - by) != 1:
            raise ValueError(f"start_snake is not contiguous at ({ax}, {ay}) -> ({bx}, {by})")

    dx, dy = board.start_direction
    if abs(dx) + abs(dy) != 1:
        raise ValueError(f"start_direction must be a unit step, got {board.start_direction}")
    head_x, head_y = board.start_snake[0]
    if (head_x + dx, head_y + dy) == board.start_snake[1]:
        raise ValueError("start_direction points back into the snake")

    # Three foods, a power-up and the snake must fit on the grid
    cells = board.tile_count * board.tile_count
    if cells < len(board.start_snake) + 4:
        raise ValueError(f"Grid of {cells} cells is too small for a round")

    if not 0.0 <= config.spawn.power_up_chance <= 1.0:
        raise ValueError(f"power_up_chance must be in [0, 1], got {config.spawn.power_up_chance}")
    if not 0.0 <= config.questions.addition_probability <= 1.0:
        raise ValueError(
            f"addition_probability must be in [0, 1], got {config.questions.addition_probability}"
        )
    offset_max = config.questions.distractor_offset_max
    if offset_max is not None and offset_max < 1:
        raise ValueError("distractor_offset_max must be at least 1 to yield two distractors")

    timing = config.timing
    if not 0 < timing.min_tick_ms <= timing.tick_ms <= timing.max_tick_ms:
        raise ValueError(
            f"tick_ms ({timing.tick_ms}) must lie in "
            f"[{timing.min_tick_ms}, {timing.max_tick_ms}]"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        tile_count=int(board_data["tile_count"]),
        cell_size=int(board_data.get("cell_size", 20)),
        start_snake=tuple(_parse_pair(p, "start_snake segment") for p in board_data["start_snake"]),
        start_direction=_parse_pair(board_data.get("start_direction", [1, 0]), "start_direction")
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        correct_reward=int(scoring_data["correct_reward"]),
        wrong_penalty=int(scoring_data["wrong_penalty"]),
        bonus_reward=int(scoring_data.get("bonus_reward", 50)),
        tier_step=int(scoring_data["tier_step"]),
        max_tier=int(scoring_data.get("max_tier", 3))
    )

    body_data = raw["body"]
    body = BodyConfig(
        min_length=int(body_data.get("min_length", 3)),
        wrong_answer_removals=int(body_data["wrong_answer_removals"]),
        hazard_trim=int(body_data.get("hazard_trim", 3)),
        growth_segments=int(body_data.get("growth_segments", 2))
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        power_up_chance=float(spawn_data["power_up_chance"]),
        combo_threshold=int(spawn_data.get("combo_threshold", 3)),
        max_placement_attempts=int(spawn_data.get("max_placement_attempts", 4000))
    )

    questions_data = raw.get("questions", {})
    questions = QuestionConfig(
        addition_probability=float(questions_data.get("addition_probability", 0.7)),
        distractor_offset_max=_parse_offset_max(questions_data.get("distractor_offset_max", 4)),
    )

    timing_data = raw.get("timing", {})
    timing = TimingConfig(
        tick_ms=int(timing_data.get("tick_ms", 100)),
        min_tick_ms=int(timing_data.get("min_tick_ms", 40)),
        max_tick_ms=int(timing_data.get("max_tick_ms", 400)),
        max_catch_up_ticks=int(timing_data.get("max_catch_up_ticks", 5))
    )

    tiers = tuple(_parse_tier(t) for t in raw["tiers"])

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        image_enabled=bool(obs_data.get("image_enabled", False)),
        image_width=int(obs_data.get("image_width", 200)),
        image_height=int(obs_data.get("image_height", 200))
    )

    config = GameConfig(
        board=board,
        scoring=scoring,
        body=body,
        spawn=spawn,
        questions=questions,
        timing=timing,
        tiers=tiers,
        observation=observation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
