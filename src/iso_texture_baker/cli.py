"""
Command-Line Interface for the Isometric Texture Baker

Usage:
    isobake textures.png
    isobake textures.png -o src/textures.rs --no-debug
    isobake textures.png --preview tiles.png --preview-scale 4 -v

"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
import time

from . import __version__
from .converter import TextureConverter, DEFAULT_OUTPUT_PATH
from .exporters.debug_sink import DEFAULT_SINK_PATH


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="isobake",
        description="Isometric Texture Baker - Bake a block texture map into isometric tiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  isobake textures.png
      Bake into ./src/textures.rs and write the debug frame

  isobake textures.png -o game/src/textures.rs --no-debug
      Bake into a custom path without touching the debug sink

  isobake textures.png --preview tiles.png --preview-scale 4
      Also save an upscaled PNG strip of the baked tiles

Layout:
  The texture map is 368x48: 23 columns of blocks, 3 rows of sides
  (top, left, right), each cell 16x16 pixels.
        """
    )

    parser.add_argument(
        "input",
        help="Input texture map (PNG recommended)"
    )

    parser.add_argument(
        "-o", "--output",
        default=DEFAULT_OUTPUT_PATH,
        help=f"Output source file (default: {DEFAULT_OUTPUT_PATH})"
    )

    # Debug frame
    parser.add_argument(
        "--debug-sink",
        default=DEFAULT_SINK_PATH,
        help=f"File backing the debug frame (default: {DEFAULT_SINK_PATH})"
    )

    parser.add_argument(
        "--no-debug",
        action="store_true",
        help="Don't write the debug frame"
    )

    # Previews
    parser.add_argument(
        "--preview",
        help="Save the baked tiles as a PNG strip"
    )

    parser.add_argument(
        "--faces-preview",
        help="Save the extracted faces as a PNG sheet"
    )

    parser.add_argument(
        "--preview-scale",
        type=int,
        default=1,
        help="Upscale factor for previews (default: 1)"
    )

    # Misc
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with statistics"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print palette and tile statistics"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def print_stats(stats: dict):
    """Print run statistics."""
    print("\nBake Statistics:")
    print(f"  Image size: {stats['image_size'][0]}x{stats['image_size'][1]}")
    print(f"  Matches layout: {stats['matches_layout']}")
    print(f"  Unique colors: {stats['unique_colors']}")
    print(f"  Palette size: {stats['palette_size']}")
    print(f"  Faces: {stats['face_count']}")
    print(f"  Tiles: {stats['tile_count']}")
    print(f"  Opaque tile pixels: {stats['opaque_tile_pixels']}")


def process(args) -> int:
    """Bake a single texture map."""
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    start_time = time.time()

    try:
        converter = TextureConverter(
            output_path=args.output,
            debug_sink_path=args.debug_sink,
            write_debug_frame=not args.no_debug
        )

        if args.verbose:
            print(f"Loading: {input_path}")

        converter.load_image(input_path)
        output_path = converter.run()

        if args.verbose:
            print(f"Exported: {output_path}")
            if not args.no_debug:
                print(f"Debug frame: {args.debug_sink}")

        if args.preview:
            converter.export_preview(
                args.preview,
                scale=args.preview_scale,
                faces_path=args.faces_preview
            )
            if args.verbose:
                print(f"Preview: {args.preview}")

        if args.stats or args.verbose:
            print_stats(converter.get_stats())

        elapsed = time.time() - start_time
        if args.verbose:
            print(f"\nCompleted in {elapsed:.2f}s")

        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.faces_preview and not args.preview:
        parser.error("--faces-preview requires --preview")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    return process(args)


if __name__ == "__main__":
    sys.exit(main())
