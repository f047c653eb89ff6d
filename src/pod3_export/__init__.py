"""
POD 3: Export Module
Writes .bmp and .paint artifacts for planned tiles
"""

from .exporter import TileExporter, extract_pixels, read_descriptor
from .identity import IdentityAssigner, tile_file_base
from .schemas import RunContext, PaintDescriptor, ExportedTile, ExportResult

__all__ = [
    "TileExporter",
    "extract_pixels",
    "read_descriptor",
    "IdentityAssigner",
    "tile_file_base",
    "RunContext",
    "PaintDescriptor",
    "ExportedTile",
    "ExportResult"
]
