"""
POD 1: Image Ingestion Module
Handles decoding and dimension validation of source images
"""

from .loader import ImageLoader
from .schemas import ImageInfo

__all__ = [
    "ImageLoader",
    "ImageInfo"
]
