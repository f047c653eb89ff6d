"""
Schemas for tiling module
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import numpy as np

# Pixels per grid unit
UNIT_SIZE = 16


@dataclass(frozen=True)
class CanvasType:
    """Tile footprint supported by the renderer"""
    px_width: int
    px_height: int
    units_width: int
    units_height: int
    code: int

    @property
    def area(self) -> int:
        """Get footprint area in pixels"""
        return self.px_width * self.px_height

    @property
    def units(self) -> int:
        """Get number of grid cells covered"""
        return self.units_width * self.units_height


@dataclass(frozen=True)
class TilePlacement:
    """Geometry of a single placement decision"""
    row: int  # top-left grid cell
    col: int
    canvas: CanvasType
    row_index: int  # row-group index
    tile_index: int  # index within the row-group

    @property
    def x(self) -> int:
        """Get left pixel coordinate"""
        return self.col * UNIT_SIZE

    @property
    def y(self) -> int:
        """Get top pixel coordinate"""
        return self.row * UNIT_SIZE

    @property
    def pixel_bounds(self):
        """Get (minx, miny, maxx, maxy) in source pixels"""
        return (
            self.x,
            self.y,
            self.x + self.canvas.px_width,
            self.y + self.canvas.px_height
        )


@dataclass(frozen=True)
class PlacedTile:
    """Placed tile with its cropped RGBA pixels (H x W x 4, uint8)"""
    placement: TilePlacement
    pixels: np.ndarray = field(repr=False, compare=False)

    @property
    def canvas(self) -> CanvasType:
        return self.placement.canvas

    @property
    def code(self) -> int:
        return self.placement.canvas.code

    @property
    def row_index(self) -> int:
        return self.placement.row_index

    @property
    def tile_index(self) -> int:
        return self.placement.tile_index

    @property
    def row(self) -> int:
        return self.placement.row

    @property
    def col(self) -> int:
        return self.placement.col

    @property
    def width(self) -> int:
        return self.placement.canvas.px_width

    @property
    def height(self) -> int:
        return self.placement.canvas.px_height


@dataclass
class TilePlan:
    """Ordered result of planning an image"""
    rows: int
    cols: int
    tiles: List[PlacedTile] = field(default_factory=list)
    processing_time: Optional[float] = None  # seconds

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self) -> Iterator[PlacedTile]:
        return iter(self.tiles)

    def covered_units(self) -> int:
        """Get total number of grid cells covered by all tiles"""
        return sum(tile.canvas.units for tile in self.tiles)

    def get_tile_at(self, row: int, col: int) -> Optional[PlacedTile]:
        """Get the tile whose footprint covers a grid cell"""
        for tile in self.tiles:
            if (tile.row <= row < tile.row + tile.canvas.units_height and
                    tile.col <= col < tile.col + tile.canvas.units_width):
                return tile
        return None

    def get_coverage_map(self) -> Dict[str, Any]:
        """Get coverage statistics"""
        counts: Dict[int, int] = {}
        for tile in self.tiles:
            counts[tile.code] = counts.get(tile.code, 0) + 1

        return {
            'total_tiles': len(self.tiles),
            'grid_size': (self.rows, self.cols),
            'covered_units': self.covered_units(),
            'row_groups': len({tile.row_index for tile in self.tiles}),
            'tiles_by_code': counts
        }
