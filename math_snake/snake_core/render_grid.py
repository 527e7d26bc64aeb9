"""
Grid Renderer
=============

Fast numpy-based renderer that draws a snapshot as coloured cells.
Foods are drawn as identical circles so the image does not reveal which
one is correct; power-ups use a colour per kind.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np

from math_snake.snake_core.config_loader import GameConfig, get_config
from math_snake.snake_core.entities import PowerUpKind
from math_snake.snake_core.state_snapshot import GameSnapshot

FOOD_COLOR = (59, 130, 246)

POWER_UP_COLORS: Dict[PowerUpKind, Tuple[int, int, int]] = {
    PowerUpKind.HAZARD: (239, 68, 68),    # Red bomb
    PowerUpKind.GROWTH: (168, 85, 247),   # Purple potion
    PowerUpKind.BONUS: (234, 179, 8),     # Gold chest
}


class GridRenderer:
    """
    Renders the board to an RGB array.

    Colours follow the current tier's theme.
    Uses numpy only, no windowing library.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize renderer.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._tile_count = config.board.tile_count
        self._grid_line = np.array([40, 40, 50], dtype=np.uint8)

    def render(
        self,
        snapshot: GameSnapshot,
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render the game state to an RGB array.

        Args:
            snapshot: State to draw.
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        style = self._config.get_tier(snapshot.tier)

        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[:] = np.array(style.background_color, dtype=np.uint8)

        # Square cells, board centred
        cell = max(1, min(width, height) // self._tile_count)
        offset_x = (width - cell * self._tile_count) // 2
        offset_y = (height - cell * self._tile_count) // 2

        # Faint grid lines every cell
        if cell >= 4:
            for i in range(self._tile_count + 1):
                pos_x = min(width - 1, offset_x + i * cell)
                pos_y = min(height - 1, offset_y + i * cell)
                img[offset_y:offset_y + cell * self._tile_count, pos_x] = self._grid_line
                img[pos_y, offset_x:offset_x + cell * self._tile_count] = self._grid_line

        # Body first, head on top
        primary = np.array(style.primary_color, dtype=np.uint8)
        accent = np.array(style.accent_color, dtype=np.uint8)
        for index in range(len(snapshot.snake) - 1, -1, -1):
            color = accent if index == 0 else primary
            self._fill_cell(img, snapshot.snake[index], cell, offset_x, offset_y, color, pad=1)

        food_color = np.array(FOOD_COLOR, dtype=np.uint8)
        for food in snapshot.foods:
            self._draw_cell_circle(img, food.position, cell, offset_x, offset_y, food_color)

        if snapshot.power_up is not None:
            color = np.array(POWER_UP_COLORS[snapshot.power_up.kind], dtype=np.uint8)
            self._fill_cell(img, snapshot.power_up.position, cell, offset_x, offset_y, color,
                            pad=max(1, cell // 5))

        return img

    def _fill_cell(
        self,
        img: np.ndarray,
        position: Tuple[int, int],
        cell: int,
        offset_x: int,
        offset_y: int,
        color: np.ndarray,
        pad: int = 0
    ) -> None:
        """Fill one grid cell, inset by `pad` pixels. Off-grid cells are skipped."""
        x, y = position
        if not (0 <= x < self._tile_count and 0 <= y < self._tile_count):
            return
        pad = min(pad, (cell - 1) // 2)
        x0 = offset_x + x * cell + pad
        y0 = offset_y + y * cell + pad
        img[y0:offset_y + (y + 1) * cell - pad, x0:offset_x + (x + 1) * cell - pad] = color

    def _draw_cell_circle(
        self,
        img: np.ndarray,
        position: Tuple[int, int],
        cell: int,
        offset_x: int,
        offset_y: int,
        color: np.ndarray
    ) -> None:
        """Draw a filled circle inscribed in one grid cell."""
        x, y = position
        cx = offset_x + x * cell + cell // 2
        cy = offset_y + y * cell + cell // 2
        radius = max(1, cell // 2)

        img_height, img_width = img.shape[:2]
        y_min = max(0, cy - radius)
        y_max = min(img_height, cy + radius + 1)
        x_min = max(0, cx - radius)
        x_max = min(img_width, cx + radius + 1)
        if y_min >= y_max or x_min >= x_max:
            return

        yy, xx = np.meshgrid(np.arange(y_min, y_max), np.arange(x_min, x_max), indexing='ij')
        mask = (xx - cx) ** 2 + (yy - cy) ** 2 <= radius ** 2
        img[y_min:y_max, x_min:x_max][mask] = color

    def close(self) -> None:
        """Clean up resources (no-op for grid renderer)."""
        pass
