#!/usr/bin/env python3
"""
Isometric Texture Baker Demo Script

This script demonstrates the full baking pipeline by:
1. Creating a synthetic texture map (no external images needed)
2. Baking it into isometric tiles
3. Exporting the Rust source and PNG previews
4. Printing statistics

Run with: python examples/demo.py
"""

import sys
from pathlib import Path
import numpy as np
import time

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from iso_texture_baker import TextureConverter
from iso_texture_baker.layout import (
    TEXTURE_SRC_SIZE, TEXTURE_WIDTH, TEXTURE_HEIGHT, BLOCKS, Side,
)


def create_texture_map() -> np.ndarray:
    """
    Create a texture map with a different hue per block and a darker
    tone per side.

    Returns:
        RGBA array of shape (TEXTURE_HEIGHT, TEXTURE_WIDTH, 4)
    """
    rgba = np.zeros((TEXTURE_HEIGHT, TEXTURE_WIDTH, 4), dtype=np.uint8)
    size = TEXTURE_SRC_SIZE
    shade = {Side.TOP: 1.0, Side.LEFT: 0.75, Side.RIGHT: 0.5}

    for block in range(BLOCKS):
        hue = block / BLOCKS
        base = np.array([
            127 + 127 * np.cos(2 * np.pi * hue),
            127 + 127 * np.cos(2 * np.pi * (hue + 1 / 3)),
            127 + 127 * np.cos(2 * np.pi * (hue + 2 / 3)),
        ])
        for side in Side:
            y0 = side * size
            x0 = block * size
            color = (base * shade[side]).astype(np.uint8)
            rgba[y0:y0 + size, x0:x0 + size, :3] = color
            rgba[y0:y0 + size, x0:x0 + size, 3] = 255
            # Border so the face edges are visible in the tiles
            rgba[y0, x0:x0 + size, :3] = color // 2
            rgba[y0:y0 + size, x0, :3] = color // 2

    # Leave the last block fully transparent
    rgba[:, (BLOCKS - 1) * size:, 3] = 0

    return rgba


def run_demo():
    """Run the full pipeline on the synthetic texture map."""
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    print("=" * 60)
    print("Isometric Texture Baker Demo")
    print("=" * 60)

    start = time.time()
    converter = TextureConverter(
        output_path=output_dir / "textures.rs",
        write_debug_frame=False
    )
    converter.load_array(create_texture_map())
    path = converter.run()
    converter.export_preview(
        output_dir / "tiles.png",
        scale=4,
        faces_path=output_dir / "faces.png"
    )
    elapsed = time.time() - start

    stats = converter.get_stats()
    print(f"\nSource:         {path}")
    print(f"Previews:       {output_dir / 'tiles.png'}, {output_dir / 'faces.png'}")
    print(f"Unique colors:  {stats['unique_colors']}")
    print(f"Palette size:   {stats['palette_size']}")
    print(f"Tiles:          {stats['tile_count']}")
    print(f"Opaque pixels:  {stats['opaque_tile_pixels']}")
    print(f"\nCompleted in {elapsed:.2f}s")


if __name__ == "__main__":
    run_demo()
