"""
Tile Exporter - writes .bmp and .paint artifacts for planned tiles
"""

import gzip
import io
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Tuple

import nbtlib
import numpy as np
from nbtlib import Byte, File, Int, IntArray, String
from PIL import Image
from tqdm import tqdm

from .identity import IdentityAssigner, tile_file_base
from .schemas import ExportedTile, ExportResult, PaintDescriptor, RunContext
from ..common.config import settings
from ..common.exceptions import ExportError
from ..pod2_tiling.schemas import PlacedTile, TilePlan

logger = logging.getLogger(__name__)

BITMAP_EXTENSION = ".bmp"
PAINT_EXTENSION = ".paint"

DESCRIPTOR_GENERATION = 1
DESCRIPTOR_VERSION = 2
OPAQUE_ALPHA = np.uint32(0xFF000000)


def extract_pixels(tile: PlacedTile) -> np.ndarray:
    """
    Pack tile pixels into 0xAARRGGBB values

    Values are row-major (y outer, x inner) over the cropped region and
    alpha is always 0xFF.

    Args:
        tile: Placed tile

    Returns:
        1-D uint32 array of length width * height
    """
    rgba = tile.pixels.astype(np.uint32)
    packed = (
        OPAQUE_ALPHA |
        (rgba[..., 0] << 16) |
        (rgba[..., 1] << 8) |
        rgba[..., 2]
    )
    return packed.reshape(-1).astype(np.uint32)


def read_descriptor(path: str) -> PaintDescriptor:
    """
    Read a .paint file back

    Args:
        path: Path to a gzip-compressed .paint file

    Returns:
        Parsed descriptor with pixels as unsigned values
    """
    tag = nbtlib.load(path)
    return PaintDescriptor(
        generation=int(tag["generation"]),
        ct=int(tag["ct"]),
        pixels=np.asarray(tag["pixels"]).astype(np.uint32).tolist(),
        v=int(tag["v"]),
        author=str(tag["author"]),
        title=str(tag["title"]),
        name=str(tag["name"])
    )


class TileExporter:
    """
    Exports planned tiles as a BMP raster plus a gzip-compressed NBT
    descriptor understood by the Joy of Painting renderer
    """

    def __init__(self, context: RunContext):
        """
        Initialize tile exporter

        Args:
            context: Run context (metadata and output directory)
        """
        self.context = context
        self.output_dir = Path(context.output_dir)

    def file_base(self, tile: PlacedTile) -> str:
        return tile_file_base(self.context.name_root, tile.row_index, tile.tile_index)

    def build_descriptor(self, tile: PlacedTile, identity: str) -> File:
        """
        Build the NBT compound for a tile

        Args:
            tile: Placed tile
            identity: Painting name for this tile

        Returns:
            Unnamed root NBT compound
        """
        pixels = extract_pixels(tile)
        return File({
            "generation": Int(DESCRIPTOR_GENERATION),
            "ct": Byte(tile.code),
            # IntArray stores signed 32-bit values, same bits
            "pixels": IntArray(pixels.view(np.int32)),
            "v": Int(DESCRIPTOR_VERSION),
            "author": String(self.context.author),
            "title": String(self.context.title),
            "name": String(identity)
        })

    def _artifact_paths(self, tile: PlacedTile) -> Tuple[Path, Path]:
        file_base = self.file_base(tile)
        return (
            self.output_dir / f"{file_base}{BITMAP_EXTENSION}",
            self.output_dir / f"{file_base}{PAINT_EXTENSION}"
        )

    def encode_bitmap(self, tile: PlacedTile) -> bytes:
        """
        Encode tile pixels as an uncompressed BMP

        Fully opaque tiles are written as 24-bit, others as 32-bit.
        """
        image = Image.fromarray(tile.pixels)
        if tile.pixels[..., 3].min() == 0xFF:
            image = image.convert("RGB")

        buffer = io.BytesIO()
        image.save(buffer, format="BMP")
        return buffer.getvalue()

    def encode_descriptor(self, descriptor: File) -> bytes:
        """Encode a descriptor as gzip-compressed NBT"""
        buffer = io.BytesIO()
        with gzip.GzipFile(fileobj=buffer, mode="wb") as compressed:
            descriptor.write(compressed)
        return buffer.getvalue()

    def render_tile(self, tile: PlacedTile, identity: str) -> Tuple[bytes, bytes]:
        """
        Encode both artifacts of a tile in memory

        Args:
            tile: Placed tile
            identity: Painting name for this tile

        Returns:
            Tuple of (bmp bytes, .paint bytes)
        """
        bitmap_path, paint_path = self._artifact_paths(tile)
        try:
            bitmap_data = self.encode_bitmap(tile)
        except (OSError, ValueError) as e:
            raise ExportError(f"encoding bmp {str(bitmap_path)!r}: {e}", path=str(bitmap_path)) from e
        try:
            paint_data = self.encode_descriptor(self.build_descriptor(tile, identity))
        except (OSError, ValueError, OverflowError) as e:
            raise ExportError(f"encoding nbt {str(paint_path)!r}: {e}", path=str(paint_path)) from e
        return bitmap_data, paint_data

    def _write_file(self, path: Path, data: bytes):
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise ExportError(f"writing {str(path)!r}: {e}", path=str(path)) from e

    def write_bitmap(self, tile: PlacedTile, path: Path):
        """
        Write tile pixels as an uncompressed BMP

        Args:
            tile: Placed tile
            path: Output file path
        """
        try:
            data = self.encode_bitmap(tile)
        except (OSError, ValueError) as e:
            raise ExportError(f"encoding bmp {str(path)!r}: {e}", path=str(path)) from e
        self._write_file(path, data)

    def write_descriptor(self, descriptor: File, path: Path):
        """
        Write a descriptor as gzip-compressed NBT

        Args:
            descriptor: NBT compound
            path: Output file path
        """
        try:
            data = self.encode_descriptor(descriptor)
        except (OSError, ValueError, OverflowError) as e:
            raise ExportError(f"encoding nbt {str(path)!r}: {e}", path=str(path)) from e
        self._write_file(path, data)

    def write_tile(self, tile: PlacedTile, identity: str, rendered: Tuple[bytes, bytes]) -> ExportedTile:
        """
        Write rendered artifacts of a tile, overwriting existing files

        Args:
            tile: Placed tile
            identity: Painting name for this tile
            rendered: Output of render_tile

        Returns:
            ExportedTile record
        """
        bitmap_path, paint_path = self._artifact_paths(tile)
        bitmap_data, paint_data = rendered

        self._write_file(bitmap_path, bitmap_data)
        self._write_file(paint_path, paint_data)

        return ExportedTile(
            file_base=self.file_base(tile),
            identity=identity,
            code=tile.code,
            row_index=tile.row_index,
            tile_index=tile.tile_index,
            bitmap_path=str(bitmap_path),
            paint_path=str(paint_path)
        )

    def export_tile(self, tile: PlacedTile, identity: str) -> ExportedTile:
        """
        Encode and write both artifacts of a tile

        Args:
            tile: Placed tile
            identity: Painting name for this tile

        Returns:
            ExportedTile record
        """
        return self.write_tile(tile, identity, self.render_tile(tile, identity))

    def _log_exported(self, exported: ExportedTile):
        logger.info(
            f"Exported {exported.file_base} "
            f"(\"{self.context.title} X {exported.row_index} Y {exported.tile_index}\" "
            f"by {self.context.author})"
        )

    def export_plan(
        self,
        plan: TilePlan,
        assigner: Optional[IdentityAssigner] = None,
        max_workers: Optional[int] = None,
        show_progress: Optional[bool] = None
    ) -> ExportResult:
        """
        Export every tile of a plan in planning order

        With more than one worker all identities are assigned up front and
        tiles are encoded on a thread pool, while files are still written
        in planning order by the calling thread. The first failure cancels
        pending work, so only tiles before it reach the disk.

        Args:
            plan: Tile plan
            assigner: Identity assigner (defaults to one built from the context)
            max_workers: Export threads (defaults to settings)
            show_progress: Show a progress bar (defaults to settings)

        Returns:
            ExportResult object
        """
        start_time = time.time()
        assigner = assigner or IdentityAssigner.for_context(self.context)
        max_workers = max_workers or settings.max_workers
        if show_progress is None:
            show_progress = settings.show_progress

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(
                f"creating output dir {str(self.output_dir)!r}: {e}",
                path=str(self.output_dir)
            ) from e

        exported = []
        with tqdm(total=len(plan), desc="Exporting", disable=not show_progress) as pbar:
            if max_workers > 1:
                identities = assigner.assign(len(plan))
                with ThreadPoolExecutor(max_workers=max_workers) as executor:
                    futures = [
                        executor.submit(self.render_tile, tile, identity)
                        for tile, identity in zip(plan.tiles, identities)
                    ]
                    try:
                        for tile, identity, future in zip(plan.tiles, identities, futures):
                            record = self.write_tile(tile, identity, future.result())
                            self._log_exported(record)
                            exported.append(record)
                            pbar.update(1)
                    except Exception:
                        for future in futures:
                            future.cancel()
                        raise
            else:
                for tile in plan:
                    record = self.export_tile(tile, assigner.next_identity())
                    self._log_exported(record)
                    exported.append(record)
                    pbar.update(1)

        processing_time = time.time() - start_time
        result = ExportResult(
            output_dir=str(self.output_dir),
            tiles=exported,
            total_tiles=len(exported),
            processing_time=processing_time
        )

        logger.info(f"Export completed: {len(exported)} tiles in {processing_time:.2f} seconds")

        return result
