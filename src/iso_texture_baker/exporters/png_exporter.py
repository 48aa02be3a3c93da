"""
PNG Preview Exporter

Saves the extracted faces and the baked tiles as PNG sheets so they can be
checked in any image viewer.
"""

import logging
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image

from ..layout import (
    TEXTURE_SRC_SIZE, BLOCKS, SIDES, ISOMETRIC_WIDTH, ISOMETRIC_HEIGHT,
)


logger = logging.getLogger(__name__)


class PNGExporter:
    """Exporter for face sheets and tile strips."""

    def __init__(self, scale: int = 1):
        """
        Initialize the exporter.

        Args:
            scale: Integer upscale factor (nearest neighbor)
        """
        if scale < 1:
            raise ValueError("Scale must be at least 1")
        self.scale = scale

    def face_sheet(self, faces: np.ndarray) -> np.ndarray:
        """
        Lay faces out like the source texture map.

        Args:
            faces: Face grid of shape (BLOCKS * SIDES, FACE_PIXELS, 4)

        Returns:
            RGBA array of shape (16 * SIDES, 16 * BLOCKS, 4)
        """
        size = TEXTURE_SRC_SIZE
        grid = faces.reshape(BLOCKS, SIDES, size, size, 4)
        return grid.transpose(1, 2, 0, 3, 4).reshape(SIDES * size, BLOCKS * size, 4)

    def tile_strip(self, tiles: np.ndarray) -> np.ndarray:
        """
        Lay tiles out in a single row.

        Args:
            tiles: Tiles of shape (N, TILE_PIXELS, 4)

        Returns:
            RGBA array of shape (ISOMETRIC_HEIGHT, N * ISOMETRIC_WIDTH, 4)
        """
        n = len(tiles)
        grid = tiles.reshape(n, ISOMETRIC_HEIGHT, ISOMETRIC_WIDTH, 4)
        return grid.transpose(1, 0, 2, 3).reshape(ISOMETRIC_HEIGHT, n * ISOMETRIC_WIDTH, 4)

    def _save(self, rgba: np.ndarray, output_path: Union[str, Path]):
        img = Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))
        if self.scale != 1:
            img = img.resize(
                (img.width * self.scale, img.height * self.scale),
                Image.Resampling.NEAREST
            )
        img.save(output_path)
        logger.info("Saved preview %s", output_path)

    def export_tiles(self, tiles: np.ndarray, output_path: Union[str, Path]):
        """Save the tile strip as a PNG."""
        self._save(self.tile_strip(tiles), output_path)

    def export_faces(self, faces: np.ndarray, output_path: Union[str, Path]):
        """Save the face sheet as a PNG."""
        self._save(self.face_sheet(faces), output_path)
