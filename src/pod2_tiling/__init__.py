"""
POD 2: Tiling Module
Packs the 16px grid with canvas-sized tiles
"""

from .catalog import CANVAS_CATALOG, UNIT_SIZE, get_canvas
from .grid import OccupancyGrid
from .planner import TilePlanner
from .schemas import CanvasType, PlacedTile, TilePlacement, TilePlan

__all__ = [
    "CANVAS_CATALOG",
    "UNIT_SIZE",
    "get_canvas",
    "OccupancyGrid",
    "TilePlanner",
    "CanvasType",
    "PlacedTile",
    "TilePlacement",
    "TilePlan"
]
