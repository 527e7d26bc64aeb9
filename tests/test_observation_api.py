"""
Tests for snapshots, observation packing and the grid renderer.
"""

import dataclasses

import pytest
import numpy as np

from math_snake.snake_core.config_loader import load_config
from math_snake.snake_core.entities import PowerUp, PowerUpKind
from math_snake.snake_core.game import CoreGame
from math_snake.snake_core.render_grid import GridRenderer
from math_snake.snake_core.state_snapshot import (
    CELL_BODY,
    CELL_EMPTY,
    CELL_FOOD,
    CELL_HEAD,
    CELL_POWER_UP,
    FOOD_SLOTS,
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    g = CoreGame(config=config, seed=42)
    g.start_session()
    return g


class TestSnapshot:
    """Immutable state handed to renderers."""

    def test_snapshot_is_frozen(self, game):
        snapshot = game.snapshot()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.score = 100

    def test_snapshot_detached_from_game(self, game):
        snapshot = game.snapshot()
        game.set_board(foods=[])
        game.tick()
        assert len(snapshot.foods) == 3
        assert snapshot.ticks == 0

    def test_snapshot_fields(self, game, config):
        snapshot = game.snapshot()
        assert snapshot.is_running
        assert snapshot.head == (10, 10)
        assert snapshot.length == 3
        assert snapshot.tier_name == config.get_tier(0).name
        assert snapshot.correct_food.value == snapshot.question.answer

    def test_occupied_cells(self, game):
        snapshot = game.snapshot()
        cells = snapshot.occupied_cells()
        assert cells[(10, 10)] == "snake"
        for food in snapshot.foods:
            assert cells[food.position] == "food"


class TestObservation:
    """Fixed-size numpy packing."""

    def test_grid_codes(self, game, config):
        taken = game.snapshot().occupied_cells()
        free = next((x, 0) for x in range(config.tile_count) if (x, 0) not in taken)
        game.set_board(power_up=PowerUp(position=free, kind=PowerUpKind.GROWTH))
        snapshot = game.snapshot()
        grid = snapshot.grid()

        assert grid.shape == (config.tile_count, config.tile_count)
        assert grid[10, 10] == CELL_HEAD
        assert grid[10, 9] == CELL_BODY
        assert grid[10, 8] == CELL_BODY
        assert grid[0, free[0]] == CELL_POWER_UP
        for food in snapshot.foods:
            x, y = food.position
            assert grid[y, x] == CELL_FOOD
        assert np.count_nonzero(grid != CELL_EMPTY) == 3 + 3 + 1

    def test_obs_dict(self, game):
        snapshot = game.snapshot()
        obs = snapshot.to_obs_dict()

        assert obs["food_xy"].shape == (FOOD_SLOTS, 2)
        assert obs["food_mask"].all()
        assert obs["food_value"][0] == pytest.approx(float(snapshot.question.answer))
        assert float(obs["answer_value"]) == pytest.approx(float(snapshot.question.answer))
        assert tuple(obs["head"]) == (10, 10)
        assert int(obs["length"]) == 3
        assert int(obs["score"]) == 0

    def test_missing_items_padded(self, game):
        game.set_board(foods=[], power_up=None)
        obs = game.snapshot().to_obs_dict()
        assert not obs["food_mask"].any()
        assert (obs["food_xy"] == -1).all()
        assert tuple(obs["power_up_xy"]) == (-1, -1)
        assert int(obs["power_up_kind"]) == 0

    def test_power_up_code(self, game):
        game.set_board(power_up=PowerUp(position=(3, 4), kind=PowerUpKind.BONUS))
        obs = game.snapshot().to_obs_dict()
        assert tuple(obs["power_up_xy"]) == (3, 4)
        assert int(obs["power_up_kind"]) == PowerUpKind.BONUS.code == 3

    def test_off_grid_head_after_wall(self, game):
        game.set_board(snake=[(19, 10), (18, 10), (17, 10)], foods=[], power_up=None)
        game.tick()
        snapshot = game.snapshot()
        assert snapshot.head == (20, 10)
        grid = snapshot.grid()
        assert np.count_nonzero(grid == CELL_HEAD) == 0


class TestGridRenderer:
    """numpy board rendering."""

    def test_render_shape(self, game, config):
        renderer = GridRenderer(config)
        img = renderer.render(game.snapshot(), 200, 200)
        assert img.shape == (200, 200, 3)
        assert img.dtype == np.uint8

    def test_render_draws_snake_in_tier_colours(self, game, config):
        img = GridRenderer(config).render(game.snapshot(), 200, 200)
        style = config.get_tier(0)
        # 10 px cells on a 20x20 grid; centre of the head cell
        assert tuple(img[105, 105]) == style.accent_color
        assert tuple(img[105, 95]) == style.primary_color

    def test_render_non_square(self, game, config):
        img = GridRenderer(config).render(game.snapshot(), 120, 80)
        assert img.shape == (80, 120, 3)
