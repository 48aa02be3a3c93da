"""
Texture Map Layout Constants

The source texture map is a grid of 16x16 cells:
- Columns are blocks (0..BLOCKS)
- Rows are sides, in the order top, left, right

Each block is baked into one ISOMETRIC_WIDTH x ISOMETRIC_HEIGHT tile.
"""

from enum import IntEnum


TEXTURE_SRC_SIZE = 16
BLOCKS = 23
SIDES = 3

TEXTURE_WIDTH = TEXTURE_SRC_SIZE * BLOCKS
TEXTURE_HEIGHT = TEXTURE_SRC_SIZE * SIDES

FACE_PIXELS = TEXTURE_SRC_SIZE * TEXTURE_SRC_SIZE
FACE_COUNT = BLOCKS * SIDES

ISOMETRIC_WIDTH = TEXTURE_SRC_SIZE * 2
ISOMETRIC_HEIGHT = TEXTURE_SRC_SIZE * 2
TILE_PIXELS = ISOMETRIC_WIDTH * ISOMETRIC_HEIGHT

# Faces the texture map does not cover
PLACEHOLDER_COLOR = (255, 0, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


class Side(IntEnum):
    """Face sides, in texture map row order."""
    TOP = 0
    LEFT = 1
    RIGHT = 2


def face_index(block: int, side: int) -> int:
    """Index of a (block, side) face in the flat face grid."""
    return side + block * SIDES
