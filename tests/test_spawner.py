"""
Tests for round spawning and placement.
"""

from dataclasses import replace

import pytest

from math_snake.snake_core.config_loader import load_config
from math_snake.snake_core.entities import PowerUp, PowerUpKind
from math_snake.snake_core.questions import QuestionGenerator
from math_snake.snake_core.spawner import PlacementExhaustedError, RoundSpawner


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def question(config):
    return QuestionGenerator(config, seed=1).generate(0)


def _with_spawn(config, **changes):
    return replace(config, spawn=replace(config.spawn, **changes))


class TestPlacement:
    """Placed items never overlap each other or the snake."""

    def test_foods_avoid_snake_and_each_other(self, config, question):
        spawner = RoundSpawner(config, seed=42)
        snake = [(x, 5) for x in range(15, 2, -1)]

        for _ in range(200):
            spawn = spawner.spawn_round(question, snake)
            cells = [f.position for f in spawn.foods]
            if spawn.power_up is not None:
                cells.append(spawn.power_up.position)
            assert len(cells) == len(set(cells))
            assert not set(cells) & set(snake)
            for x, y in cells:
                assert 0 <= x < config.tile_count and 0 <= y < config.tile_count

    def test_exactly_one_correct_food(self, config, question):
        spawn = RoundSpawner(config, seed=3).spawn_round(question, [(1, 1), (0, 1), (0, 0)])
        assert len(spawn.foods) == 3
        assert [f.is_correct for f in spawn.foods] == [True, False, False]
        assert spawn.foods[0].value == question.answer

    def test_foods_avoid_live_power_up(self, config, question):
        spawner = RoundSpawner(config, seed=5)
        live = PowerUp(position=(4, 4), kind=PowerUpKind.GROWTH)
        for _ in range(200):
            spawn = spawner.spawn_round(question, [(1, 1)], existing_power_up=live)
            assert live.position not in {f.position for f in spawn.foods}

    def test_saturated_grid_raises(self, config):
        spawner = RoundSpawner(_with_spawn(config, max_placement_attempts=50), seed=0)
        tiles = config.tile_count
        full = {(x, y) for x in range(tiles) for y in range(tiles)}
        with pytest.raises(PlacementExhaustedError):
            spawner.random_cell(full)

    def test_last_free_cell_found(self, config):
        spawner = RoundSpawner(_with_spawn(config, max_placement_attempts=100000), seed=0)
        tiles = config.tile_count
        occupied = {(x, y) for x in range(tiles) for y in range(tiles)} - {(7, 3)}
        assert spawner.random_cell(occupied) == (7, 3)


class TestPowerUps:
    """Power-up spawn policy."""

    def test_combo_forces_bonus(self, config, question):
        spawner = RoundSpawner(_with_spawn(config, power_up_chance=0.0), seed=1)
        spawn = spawner.spawn_round(question, [(1, 1)], combo_streak=config.spawn.combo_threshold)
        assert spawn.bonus_forced
        assert spawn.combo_reset
        assert spawn.power_up is not None
        assert spawn.power_up.kind is PowerUpKind.BONUS

    def test_no_power_up_below_threshold_without_chance(self, config, question):
        spawner = RoundSpawner(_with_spawn(config, power_up_chance=0.0), seed=1)
        for combo in range(config.spawn.combo_threshold):
            spawn = spawner.spawn_round(question, [(1, 1)], combo_streak=combo)
            assert spawn.power_up is None
            assert not spawn.bonus_forced

    def test_random_power_up_is_hazard_or_growth(self, config, question):
        spawner = RoundSpawner(_with_spawn(config, power_up_chance=1.0), seed=1)
        kinds = set()
        for _ in range(100):
            spawn = spawner.spawn_round(question, [(1, 1)])
            assert spawn.power_up is not None
            kinds.add(spawn.power_up.kind)
        assert kinds == {PowerUpKind.HAZARD, PowerUpKind.GROWTH}

    def test_live_power_up_blocks_new_one(self, config, question):
        spawner = RoundSpawner(_with_spawn(config, power_up_chance=1.0), seed=1)
        live = PowerUp(position=(4, 4), kind=PowerUpKind.HAZARD)
        spawn = spawner.spawn_round(question, [(1, 1)], existing_power_up=live, combo_streak=10)
        assert spawn.power_up is None
        assert not spawn.bonus_forced
        assert spawn.combo_reset

    def test_seeded_spawns_repeat(self, config, question):
        a = RoundSpawner(config, seed=9)
        b = RoundSpawner(config, seed=9)
        snake = [(10, 10), (9, 10), (8, 10)]
        for _ in range(20):
            assert a.spawn_round(question, snake) == b.spawn_round(question, snake)
