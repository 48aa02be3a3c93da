"""
Isometric Projection of Block Faces

This module composites the three square faces of a block (top, left,
right) into one isometric tile by inverse mapping: for every destination
pixel we compute the source face position it comes from and copy that
pixel, so the tile has no holes.

Face Transforms (destination -> source, columns as given):
- Top:   inverse of [(1, -0.5), (1, 0.5)], destination y shifted by H/4
- Left:  shear [(1, -0.5), (0, 1)],        destination y shifted by H/4
- Right: shear [(1, 0.5), (0, 1)],         destination recentered on H/2

The sampling loop runs over 0..=WIDTH x 0..=HEIGHT, one step past the
canvas; samples that land outside the canvas are dropped. The top face
offset leaves the first canvas row blank.
"""

from dataclasses import dataclass, field
import logging
from typing import Sequence, Tuple
import numpy as np
from numba import njit

from .layout import (
    TEXTURE_SRC_SIZE, SIDES, ISOMETRIC_WIDTH, ISOMETRIC_HEIGHT, Side,
)


logger = logging.getLogger(__name__)


def fits_inside_rect(x: float, y: float, rect_size: float = TEXTURE_SRC_SIZE) -> bool:
    """Check that a sample position lies in [0, rect_size) on both axes."""
    return x < rect_size and y < rect_size and x >= 0.0 and y >= 0.0


def matrix_from_cols(cols: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Build a 2x2 matrix from its columns.

    Args:
        cols: Two columns, e.g. [[1.0, -0.5], [1.0, 0.5]]

    Returns:
        2x2 float64 matrix
    """
    return np.array(cols, dtype=np.float64).T


@dataclass
class FaceTransform:
    """
    Destination-to-source mapping for one face.

    A destination pixel (x, y) samples the face at
    ``matrix @ ((x, y) - offset)``.
    """

    matrix: np.ndarray
    offset: np.ndarray = field(default_factory=lambda: np.zeros(2))

    def __post_init__(self):
        self.matrix = np.asarray(self.matrix, dtype=np.float64)
        self.offset = np.asarray(self.offset, dtype=np.float64)

    @classmethod
    def top(cls, height: int = ISOMETRIC_HEIGHT) -> "FaceTransform":
        """Top face: inverse of the diamond map, shifted down by a quarter tile."""
        forward = matrix_from_cols([[1.0, -0.5], [1.0, 0.5]])
        return cls(np.linalg.inv(forward), [0.0, float(height // 4)])

    @classmethod
    def left(cls, height: int = ISOMETRIC_HEIGHT) -> "FaceTransform":
        """Left face: vertical shear, shifted down by a quarter tile."""
        shear = matrix_from_cols([[1.0, -0.5], [0.0, 1.0]])
        return cls(shear, [0.0, float(height // 4)])

    @classmethod
    def right(cls, height: int = ISOMETRIC_HEIGHT) -> "FaceTransform":
        """Right face: opposite shear around the tile center."""
        center = height / 2.0
        shear = matrix_from_cols([[1.0, 0.5], [0.0, 1.0]])
        return cls(shear, [center, center])

    def sample(self, x: float, y: float) -> Tuple[float, float]:
        """
        Source position for one destination pixel.

        Args:
            x, y: Destination pixel coordinates

        Returns:
            (sx, sy): Position in the source face
        """
        pos = self.matrix @ (np.array([x, y], dtype=np.float64) - self.offset)
        return (float(pos[0]), float(pos[1]))

    def sample_positions(
        self,
        width: int = ISOMETRIC_WIDTH,
        height: int = ISOMETRIC_HEIGHT
    ) -> np.ndarray:
        """
        Batch source positions for the whole sampling range.

        Args:
            width, height: Canvas size (the range is inclusive of both)

        Returns:
            Array of shape (height + 1, width + 1, 2) with (sx, sy)
        """
        ys, xs = np.mgrid[0:height + 1, 0:width + 1].astype(np.float64)
        pos = np.stack([xs - self.offset[0], ys - self.offset[1]], axis=-1)
        return pos @ self.matrix.T


@njit(cache=True)
def _fits(x: float, y: float, rect_size: int) -> bool:
    return x < rect_size and y < rect_size and x >= 0.0 and y >= 0.0


@njit(cache=True)
def _sample_face(
    face: np.ndarray,
    matrix: np.ndarray,
    offset: np.ndarray,
    canvas: np.ndarray,
    src_size: int
):
    """
    Copy every accepted sample of one face into the canvas.

    Args:
        face: Source face of shape (src_size * src_size, 4)
        matrix: 2x2 destination-to-source matrix
        offset: Destination offset subtracted before mapping
        canvas: Destination of shape (H, W, 4), modified in place
        src_size: Source face edge length
    """
    height = canvas.shape[0]
    width = canvas.shape[1]

    for y in range(height + 1):
        for x in range(width + 1):
            px = x - offset[0]
            py = y - offset[1]
            sx = matrix[0, 0] * px + matrix[0, 1] * py
            sy = matrix[1, 0] * px + matrix[1, 1] * py

            if not _fits(sx, sy, src_size):
                continue
            # Past the canvas edge
            if y >= height or x >= width:
                continue

            idx = int(np.floor(sx)) + int(np.floor(sy)) * src_size
            for c in range(4):
                canvas[y, x, c] = face[idx, c]


class IsometricProjector:
    """
    Projects block faces into isometric tiles.

    Faces are composited in order top, left, right onto a transparent
    black canvas; a later face overwrites an earlier one wherever both
    accept a sample.
    """

    def __init__(
        self,
        width: int = ISOMETRIC_WIDTH,
        height: int = ISOMETRIC_HEIGHT,
        src_size: int = TEXTURE_SRC_SIZE
    ):
        """
        Initialize the projector.

        Args:
            width: Tile width in pixels
            height: Tile height in pixels
            src_size: Edge length of the square source faces
        """
        self.width = width
        self.height = height
        self.src_size = src_size
        self.transforms = {
            Side.TOP: FaceTransform.top(height),
            Side.LEFT: FaceTransform.left(height),
            Side.RIGHT: FaceTransform.right(height),
        }

    def project_block(
        self,
        top: np.ndarray,
        left: np.ndarray,
        right: np.ndarray
    ) -> np.ndarray:
        """
        Composite the three faces of one block.

        Args:
            top, left, right: Faces of shape (src_size * src_size, 4)

        Returns:
            Flat row-major tile of shape (width * height, 4)
        """
        canvas = np.zeros((self.height, self.width, 4), dtype=np.uint8)

        for side, face in ((Side.TOP, top), (Side.LEFT, left), (Side.RIGHT, right)):
            transform = self.transforms[side]
            _sample_face(
                np.ascontiguousarray(face, dtype=np.uint8),
                transform.matrix,
                transform.offset,
                canvas,
                self.src_size
            )

        return canvas.reshape(-1, 4)

    def project_all(self, faces: np.ndarray) -> np.ndarray:
        """
        Project every block of a face grid.

        Args:
            faces: Face grid of shape (BLOCKS * SIDES, src_size^2, 4)

        Returns:
            Tiles of shape (BLOCKS, width * height, 4)
        """
        blocks = len(faces) // SIDES
        tiles = np.zeros((blocks, self.width * self.height, 4), dtype=np.uint8)

        for block in range(blocks):
            top, left, right = faces[block * SIDES:(block + 1) * SIDES]
            tiles[block] = self.project_block(top, left, right)

        logger.debug("Projected %d blocks to %dx%d tiles", blocks, self.width, self.height)
        return tiles

    def tile_image(self, tile: np.ndarray) -> np.ndarray:
        """Reshape a flat tile back to (height, width, 4)."""
        return tile.reshape(self.height, self.width, 4)


def coverage_mask(
    width: int = ISOMETRIC_WIDTH,
    height: int = ISOMETRIC_HEIGHT,
    src_size: int = TEXTURE_SRC_SIZE
) -> np.ndarray:
    """
    Canvas pixels that at least one face samples.

    Args:
        width, height: Tile size
        src_size: Source face edge length

    Returns:
        Boolean array of shape (height, width)
    """
    mask = np.zeros((height, width), dtype=bool)
    projector = IsometricProjector(width, height, src_size)
    for transform in projector.transforms.values():
        pos = transform.sample_positions(width, height)
        inside = (
            (pos[..., 0] < src_size) & (pos[..., 1] < src_size) &
            (pos[..., 0] >= 0.0) & (pos[..., 1] >= 0.0)
        )
        mask |= inside[:height, :width]
    return mask

