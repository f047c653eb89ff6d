"""
Error types raised while tiling and exporting paintings
"""

from typing import Optional


class TilerError(Exception):
    """Base class for every fatal tiling error"""


class DimensionError(TilerError, ValueError):
    """Image dimensions are not tileable"""

    def __init__(self, message: str, width: int, height: int):
        super().__init__(message)
        self.width = width
        self.height = height


class NoFitError(TilerError, RuntimeError):
    """No canvas type fits at a free grid cell"""

    def __init__(self, row: int, col: int):
        super().__init__(f"no canvas fits at {row},{col}")
        self.row = row
        self.col = col


class PlacementError(TilerError, RuntimeError):
    """A placement overlaps cells that are already occupied"""


class ImageLoadError(TilerError, OSError):
    """Source image could not be decoded"""


class ExportError(TilerError, OSError):
    """Writing an output artifact failed"""

    def __init__(self, message: str, *, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
