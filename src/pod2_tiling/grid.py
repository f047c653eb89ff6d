"""
Occupancy grid - tracks which 16x16 cells are already covered
"""

from typing import Optional, Tuple

import numpy as np

from .catalog import UNIT_SIZE
from .schemas import CanvasType
from ..common.exceptions import DimensionError, PlacementError


def validate_dimensions(width: int, height: int, max_size: Optional[int] = None):
    """
    Check that an image can be tiled on the 16px grid

    Args:
        width: Image width in pixels
        height: Image height in pixels
        max_size: Optional ceiling for both dimensions (None or 0 disables it)

    Raises:
        DimensionError: If a dimension is not a positive multiple of 16
            or exceeds the ceiling
    """
    if width <= 0 or height <= 0 or width % UNIT_SIZE != 0 or height % UNIT_SIZE != 0:
        raise DimensionError(
            f"image dimensions must be multiples of {UNIT_SIZE}: got {width}x{height}",
            width,
            height
        )
    if max_size and (width > max_size or height > max_size):
        raise DimensionError(
            f"image dimensions must be at most {max_size}x{max_size}: got {width}x{height}",
            width,
            height
        )


def grid_shape(width: int, height: int) -> Tuple[int, int]:
    """Get (rows, cols) of 16px cells covering the image"""
    return height // UNIT_SIZE, width // UNIT_SIZE


class OccupancyGrid:
    """Boolean rows x cols matrix, one cell per 16x16 pixel unit"""

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        self._cells = np.zeros((rows, cols), dtype=bool)

    def _window(self, row: int, col: int, height_units: int, width_units: int) -> np.ndarray:
        if (row < 0 or col < 0 or height_units <= 0 or width_units <= 0 or
                row + height_units > self.rows or col + width_units > self.cols):
            raise IndexError(
                f"rectangle ({row},{col}) {height_units}x{width_units} "
                f"outside {self.rows}x{self.cols} grid"
            )
        return self._cells[row:row + height_units, col:col + width_units]

    def is_free(self, row: int, col: int, height_units: int, width_units: int) -> bool:
        """True if every cell of the rectangle is unoccupied"""
        return not self._window(row, col, height_units, width_units).any()

    def mark(self, row: int, col: int, height_units: int, width_units: int):
        """Mark every cell of a free rectangle as occupied"""
        window = self._window(row, col, height_units, width_units)
        if window.any():
            raise PlacementError(
                f"rectangle ({row},{col}) {height_units}x{width_units} overlaps occupied cells"
            )
        window[...] = True

    def in_bounds(self, row: int, col: int, canvas: CanvasType) -> bool:
        """True if the canvas anchored at (row, col) stays inside the grid"""
        return row + canvas.units_height <= self.rows and col + canvas.units_width <= self.cols

    def fits(self, row: int, col: int, canvas: CanvasType) -> bool:
        """True if the canvas anchored at (row, col) is in bounds and free"""
        return (self.in_bounds(row, col, canvas) and
                self.is_free(row, col, canvas.units_height, canvas.units_width))

    def occupied_count(self) -> int:
        return int(self._cells.sum())

    def is_full(self) -> bool:
        return bool(self._cells.all())
