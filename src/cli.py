#!/usr/bin/env python3
"""
Paint Tiler - split an image into Joy of Painting canvases

Every 16px-aligned image is packed greedily with 32x32, 32x16, 16x32 and
16x16 tiles; each tile is written as <name>_<row>_<index>.bmp and
<name>_<row>_<index>.paint.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .common.config import settings, setup_logging
from .common.exceptions import TilerError
from .pod1_image_ingestion import ImageLoader
from .pod2_tiling import TilePlanner
from .pod3_export import IdentityAssigner, RunContext, TileExporter, ExportResult

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser"""
    parser = argparse.ArgumentParser(
        prog="paint-tiler",
        description="Split an image into Joy of Painting canvases (.bmp + .paint)"
    )

    parser.add_argument(
        '--input',
        type=str,
        required=True,
        help='Path to input image (bmp, png, jpeg)'
    )

    parser.add_argument(
        '--author',
        type=str,
        default=settings.default_author,
        help='Author name for .paint files'
    )

    parser.add_argument(
        '--title',
        type=str,
        default=settings.default_title,
        help='Title for .paint files'
    )

    parser.add_argument(
        '--out',
        type=str,
        default=settings.output_dir,
        help='Output directory for tiles and .paint files'
    )

    parser.add_argument(
        '--max-size',
        type=int,
        default=settings.max_image_size,
        help='Maximum image width/height in pixels (0 disables the check)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        default=settings.max_workers,
        help='Number of export threads'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable the progress bar'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def run(args: argparse.Namespace) -> ExportResult:
    """
    Load, plan and export one image

    Args:
        args: Parsed command-line arguments

    Returns:
        ExportResult object
    """
    context = RunContext.from_input(
        args.input,
        author=args.author,
        title=args.title,
        output_dir=args.out
    )

    image, info = ImageLoader(max_size=args.max_size).load(args.input)

    plan = TilePlanner().plan(image, max_size=args.max_size)
    logger.info(f"Planned {len(plan)} tiles for {info.name_root} ({info.width}x{info.height})")

    exporter = TileExporter(context)
    return exporter.export_plan(
        plan,
        IdentityAssigner.for_context(context),
        max_workers=max(1, args.workers),
        show_progress=not args.no_progress
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit status"""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.input.strip():
        parser.error("argument --input: expected a non-empty path")

    setup_logging("DEBUG" if args.verbose else None)

    try:
        result = run(args)
    except (TilerError, OSError) as e:
        logger.error(f"Tiling failed: {e}")
        return 1

    logger.info(f"Wrote {result.total_files} files to {result.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
