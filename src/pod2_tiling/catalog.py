"""
Canvas catalog - the fixed tile footprints supported by the renderer
"""

from typing import Tuple

from .schemas import UNIT_SIZE, CanvasType


def _sorted_by_area(*canvases: CanvasType) -> Tuple[CanvasType, ...]:
    # sorted() is stable, so equal areas keep declaration order
    return tuple(sorted(canvases, key=lambda canvas: canvas.area, reverse=True))


# Joy of Painting canvas sizes, largest first
CANVAS_CATALOG: Tuple[CanvasType, ...] = _sorted_by_area(
    CanvasType(px_width=32, px_height=32, units_width=2, units_height=2, code=1),
    CanvasType(px_width=32, px_height=16, units_width=2, units_height=1, code=2),
    CanvasType(px_width=16, px_height=32, units_width=1, units_height=2, code=3),
    CanvasType(px_width=16, px_height=16, units_width=1, units_height=1, code=0),
)


def get_canvas(code: int) -> CanvasType:
    """Look up a canvas type by its code"""
    for canvas in CANVAS_CATALOG:
        if canvas.code == code:
            return canvas
    raise KeyError(f"Unknown canvas type code: {code}")
