"""
Image Loader - decoding and validation of source images
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from .schemas import ImageInfo
from ..common.config import settings
from ..common.exceptions import ImageLoadError
from ..pod2_tiling.grid import validate_dimensions

logger = logging.getLogger(__name__)


class ImageLoader:
    """
    Decodes source images into RGBA pixel arrays
    Any format Pillow can read is accepted (BMP, PNG, JPEG, ...)
    """

    def __init__(self, max_size: Optional[int] = -1):
        """
        Initialize image loader

        Args:
            max_size: Maximum width/height; -1 uses the configured value,
                None or 0 disables the check
        """
        self.max_size = settings.max_image_size if max_size == -1 else max_size

    @staticmethod
    def _to_rgba(img: Image.Image) -> Image.Image:
        """
        Convert to 8-bit RGBA, keeping the high byte of wider channels

        16-bit RGB(A) PNGs are already unpacked to their high bytes by
        Pillow; 16-bit grayscale ("I;16*", "I") is not and would be
        clamped to 255 by convert(), so it is shifted down here.
        """
        if img.mode == "I" or img.mode.startswith("I;16"):
            gray = np.asarray(img, dtype=np.uint32) >> 8
            img = Image.fromarray(np.clip(gray, 0, 0xFF).astype(np.uint8))
        return img.convert("RGBA")

    def load(self, image_path: str) -> Tuple[np.ndarray, ImageInfo]:
        """
        Load and validate an image

        Args:
            image_path: Path to input image

        Returns:
            Tuple of (H x W x 4 uint8 RGBA array, image info)
        """
        path = Path(image_path)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {image_path}")

        try:
            with Image.open(path) as img:
                source_mode = img.mode
                source_format = img.format
                rgba = self._to_rgba(img)
        except (UnidentifiedImageError, OSError) as e:
            raise ImageLoadError(f"decoding {str(path)!r}: {e}") from e

        width, height = rgba.size
        validate_dimensions(width, height, self.max_size)

        info = ImageInfo(
            file_path=str(path),
            name_root=path.stem,
            width=width,
            height=height,
            mode=source_mode,
            format=source_format
        )
        logger.info(f"Loaded {path.name}: {width}x{height} {source_format or ''} ({source_mode})")

        return np.asarray(rgba, dtype=np.uint8), info
