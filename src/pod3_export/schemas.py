"""
Schemas for export module
"""

import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, validator

from ..common.config import settings


class RunContext(BaseModel):
    """Per-run configuration shared by every exported tile"""
    author: str = Field(default="Unknown", description="Author written into .paint files")
    title: str = Field(default="Untitled", description="Title written into .paint files")
    output_dir: Path = Field(default=Path("tiles"), description="Directory receiving the artifacts")
    name_root: str = Field(description="Input file base name without extension")
    base_id: int = Field(description="Run-scoped numeric base of painting names")
    namespace: str = Field(default=settings.painting_namespace, description="Painting name prefix")

    class Config:
        frozen = True

    @validator('name_root')
    def validate_name_root(cls, v):
        """Validate file name root"""
        if not v:
            raise ValueError("Name root must not be empty")
        return v

    @validator('namespace')
    def validate_namespace(cls, v):
        """Validate namespace UUID"""
        UUID(v)
        return v

    @classmethod
    def from_input(
        cls,
        input_path: str,
        author: Optional[str] = None,
        title: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> "RunContext":
        """
        Build the context for a run over one input file

        The base id is captured from the wall clock in nanoseconds so
        runs started at different instants get disjoint painting names.
        """
        return cls(
            author=author if author is not None else settings.default_author,
            title=title if title is not None else settings.default_title,
            output_dir=Path(output_dir or settings.output_dir),
            name_root=Path(input_path).stem,
            base_id=time.time_ns(),
            namespace=settings.painting_namespace
        )


class PaintDescriptor(BaseModel):
    """Contents of a .paint file"""
    generation: int = 1
    ct: int
    pixels: List[int] = Field(description="Packed 0xAARRGGBB values, row-major")
    v: int = 2
    author: str
    title: str
    name: str

    @validator('ct')
    def validate_ct(cls, v):
        """Validate canvas type code"""
        if not 0 <= v <= 3:
            raise ValueError(f"Invalid canvas type code: {v}")
        return v


class ExportedTile(BaseModel):
    """Artifacts written for one tile"""
    file_base: str
    identity: str
    code: int
    row_index: int
    tile_index: int
    bitmap_path: str
    paint_path: str


class ExportResult(BaseModel):
    """Result of exporting a plan"""
    output_dir: str
    tiles: List[ExportedTile]
    total_tiles: int
    processing_time: float  # seconds
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def total_files(self) -> int:
        return 2 * self.total_tiles

    def get_tile_by_name(self, file_base: str) -> Optional[ExportedTile]:
        """Get exported tile by file base name"""
        for tile in self.tiles:
            if tile.file_base == file_base:
                return tile
        return None
