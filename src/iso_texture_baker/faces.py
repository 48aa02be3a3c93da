"""
Face Extraction Module

Slices the texture map into one 16x16 texture per (block, side) and
stores them flat, row-major, in a single (FACE_COUNT, FACE_PIXELS, 4)
array. Every stored pixel is the palette entry matching the source
pixel.
"""

import logging
import numpy as np

from .color import Palette
from .layout import (
    TEXTURE_SRC_SIZE, BLOCKS, SIDES, FACE_COUNT, FACE_PIXELS,
    PLACEHOLDER_COLOR, face_index,
)


logger = logging.getLogger(__name__)


def empty_face_grid() -> np.ndarray:
    """Face grid filled with the placeholder color."""
    grid = np.empty((FACE_COUNT, FACE_PIXELS, 4), dtype=np.uint8)
    grid[:] = PLACEHOLDER_COLOR
    return grid


def extract_faces(image: np.ndarray, palette: Palette) -> np.ndarray:
    """
    Extract the per-face textures from a normalized texture map.

    The cell at columns [16*block, 16*block+16) and rows [16*side,
    16*side+16) becomes face ``side + block * SIDES``, with local pixel
    (x, y) at offset ``x + y * 16``. Cells the image does not cover keep
    the placeholder color.

    Args:
        image: Normalized RGBA array of shape (H, W, 4)
        palette: Palette built from the same image

    Returns:
        Array of shape (FACE_COUNT, FACE_PIXELS, 4)

    Raises:
        PaletteLookupError: If a source pixel has no palette entry
    """
    grid = empty_face_grid()
    img_h, img_w = image.shape[:2]
    size = TEXTURE_SRC_SIZE

    for block in range(BLOCKS):
        x0 = block * size
        if x0 >= img_w:
            break
        for side in range(SIDES):
            y0 = side * size
            if y0 >= img_h:
                break

            cell = image[y0:y0 + size, x0:x0 + size]
            h, w = cell.shape[:2]
            canonical = palette.canonicalize(cell.reshape(-1, 4)).reshape(h, w, 4)

            face = grid[face_index(block, side)].reshape(size, size, 4)
            face[:h, :w] = canonical

    logger.debug("Extracted %d faces from %dx%d image", FACE_COUNT, img_w, img_h)
    return grid


def get_face(grid: np.ndarray, block: int, side: int) -> np.ndarray:
    """
    Get one face as a 16x16 image.

    Args:
        grid: Face grid from extract_faces
        block: Block index
        side: Side index (top=0, left=1, right=2)

    Returns:
        Array of shape (16, 16, 4)
    """
    if not 0 <= block < BLOCKS or not 0 <= side < SIDES:
        raise IndexError(f"Face ({block}, {side}) out of range")
    return grid[face_index(block, side)].reshape(TEXTURE_SRC_SIZE, TEXTURE_SRC_SIZE, 4)
