"""
Isometric Texture Baker
=======================

Bakes a flat block texture map into isometric tiles for the game.

The texture map is a grid of 16x16 faces: one column per block and one row
per side (top, left, right). Each block's three faces are projected with
2D affine transforms into a 32x32 isometric tile, and all tiles are written
out as a Rust ``TEXTURES`` constant.

Key Features:
- Palette with derived water and shadow variants of every color
- Inverse-mapped, nearest-pixel face projection (Numba JIT kernel)
- Rust source output, PNG previews, and a shared-memory debug frame

Example Usage:
    from iso_texture_baker import TextureConverter

    converter = TextureConverter(output_path="src/textures.rs")
    converter.load_image("textures.png")
    converter.run()
"""

__version__ = "1.0.0"

from .converter import TextureConverter
from .color import Palette, PaletteLookupError, build_palette
from .faces import extract_faces
from .ingestion import TextureMapLoader, normalize_transparent_pixels
from .projection import FaceTransform, IsometricProjector, fits_inside_rect

__all__ = [
    "TextureConverter",
    "Palette",
    "PaletteLookupError",
    "build_palette",
    "extract_faces",
    "TextureMapLoader",
    "normalize_transparent_pixels",
    "FaceTransform",
    "IsometricProjector",
    "fits_inside_rect",
]
