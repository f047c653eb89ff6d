"""
Schemas for image ingestion module
"""

from typing import Optional
from pydantic import BaseModel, Field, validator


class ImageInfo(BaseModel):
    """Metadata of a decoded source image"""
    file_path: str
    name_root: str = Field(description="File base name without extension")
    width: int
    height: int
    mode: str = Field(default="RGBA", description="Pillow mode of the source file")
    format: Optional[str] = None

    @validator('width', 'height')
    def validate_positive(cls, v):
        """Validate pixel dimensions"""
        if v <= 0:
            raise ValueError(f"Image dimension must be positive: {v}")
        return v

    @property
    def size(self):
        """Get (width, height)"""
        return self.width, self.height
