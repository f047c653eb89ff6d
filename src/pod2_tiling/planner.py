"""
Tile Planner - greedy largest-fit placement of canvases on the grid
"""

import logging
import time
from typing import List, Optional, Sequence

import numpy as np

from .catalog import CANVAS_CATALOG
from .grid import OccupancyGrid, validate_dimensions, grid_shape
from .schemas import CanvasType, PlacedTile, TilePlacement, TilePlan
from ..common.exceptions import NoFitError

logger = logging.getLogger(__name__)


def crop_region(image: np.ndarray, x: int, y: int, width: int, height: int) -> np.ndarray:
    """
    Copy a region of an RGBA image with alpha-premultiplied colors

    Fully opaque pixels keep their exact 8-bit values.

    Args:
        image: H x W x 4 uint8 RGBA array
        x: Left pixel coordinate
        y: Top pixel coordinate
        width: Region width in pixels
        height: Region height in pixels

    Returns:
        height x width x 4 uint8 array
    """
    region = image[y:y + height, x:x + width].astype(np.uint32)
    alpha = region[..., 3:4]
    # 8-bit -> 16-bit scale, premultiply, then keep the high byte
    rgb = (region[..., :3] * (alpha * 0x101) // 0xFF) >> 8
    return np.concatenate([rgb, alpha], axis=-1).astype(np.uint8)


class TilePlanner:
    """
    Greedy tile planner

    Scans grid cells in row-major order and anchors the largest catalog
    canvas that fits at every cell not yet covered. Not a global optimum.
    """

    def __init__(self, catalog: Optional[Sequence[CanvasType]] = None):
        """
        Initialize tile planner

        Args:
            catalog: Canvas types in preference order (defaults to CANVAS_CATALOG)
        """
        self.catalog = tuple(catalog) if catalog is not None else CANVAS_CATALOG

    def select_canvas(self, grid: OccupancyGrid, row: int, col: int) -> CanvasType:
        """
        Select the first catalog canvas that fits at a cell

        Raises:
            NoFitError: If no canvas fits
        """
        for canvas in self.catalog:
            if grid.fits(row, col, canvas):
                return canvas
        raise NoFitError(row, col)

    def layout(self, rows: int, cols: int) -> List[TilePlacement]:
        """
        Compute placements for a rows x cols grid

        The row-group index advances only after a scan row that started at
        least one tile. A row fully covered by taller tiles from the row
        above keeps the previous row-group index, so its successor shares
        the numbering.

        Args:
            rows: Grid rows
            cols: Grid columns

        Returns:
            Placements in planning order
        """
        grid = OccupancyGrid(rows, cols)
        placements = []

        row_index = 0
        for row in range(rows):
            tile_index = 0
            placed_in_row = False
            for col in range(cols):
                if not grid.is_free(row, col, 1, 1):
                    continue

                canvas = self.select_canvas(grid, row, col)
                grid.mark(row, col, canvas.units_height, canvas.units_width)
                placements.append(TilePlacement(
                    row=row,
                    col=col,
                    canvas=canvas,
                    row_index=row_index,
                    tile_index=tile_index
                ))
                placed_in_row = True
                tile_index += 1

            if placed_in_row:
                row_index += 1

        logger.debug(f"Planned {len(placements)} placements on {rows}x{cols} grid")
        return placements

    def plan(self, image: np.ndarray, max_size: Optional[int] = None) -> TilePlan:
        """
        Plan tiles for an RGBA image

        Args:
            image: H x W x 4 uint8 RGBA array
            max_size: Optional ceiling for both dimensions

        Returns:
            TilePlan with cropped tiles in planning order
        """
        start_time = time.time()
        height, width = image.shape[:2]
        validate_dimensions(width, height, max_size)

        rows, cols = grid_shape(width, height)
        logger.info(f"Tiling image into {rows}x{cols} grid ({rows * cols} cells)")

        tiles = []
        for placement in self.layout(rows, cols):
            pixels = crop_region(
                image,
                placement.x,
                placement.y,
                placement.canvas.px_width,
                placement.canvas.px_height
            )
            tiles.append(PlacedTile(placement=placement, pixels=pixels))

        plan = TilePlan(
            rows=rows,
            cols=cols,
            tiles=tiles,
            processing_time=time.time() - start_time
        )
        logger.info(f"Planning completed: {len(tiles)} tiles for {rows * cols} cells")

        return plan
