"""
Configuration management for Paint Tiler
"""

import logging
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


# Namespace UUID identifying paintings produced for the Joy of Painting mod
PAINTING_NAMESPACE = "d1ebe29f-f4e9-4572-83cd-8b2cdbfc2420"


class Settings(BaseSettings):
    """Application settings"""

    # Painting metadata
    default_author: str = Field(
        default="Unknown",
        description="Author written into .paint files"
    )
    default_title: str = Field(
        default="Untitled",
        description="Title written into .paint files"
    )
    painting_namespace: str = Field(
        default=PAINTING_NAMESPACE,
        description="Namespace prefix of every painting name"
    )

    # Storage
    output_dir: str = Field(
        default="tiles",
        description="Output directory for .bmp and .paint files"
    )

    # Tiling
    max_image_size: Optional[int] = Field(
        default=512,
        description="Maximum image width/height in pixels (0 or unset disables the check)"
    )

    # Performance
    max_workers: int = Field(
        default=1,
        description="Number of export worker threads"
    )
    show_progress: bool = Field(
        default=True,
        description="Show a progress bar while exporting"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path"
    )

    class Config:
        env_prefix = "PAINT_TILER_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """Configure root logging from settings"""
    handlers = [logging.StreamHandler()]
    log_file = log_file or settings.log_file
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format=settings.log_format,
        handlers=handlers
    )

    return logging.getLogger("src")


# Create global settings instance
settings = Settings()
