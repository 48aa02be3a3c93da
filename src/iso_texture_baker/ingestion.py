"""
Texture Map Ingestion Module

This module handles:
- Loading the flat texture map as an RGBA numpy array
- Normalizing fully transparent pixels to a single canonical color
- Reporting how the loaded image relates to the expected grid layout
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union
import numpy as np
from PIL import Image

from .layout import TEXTURE_WIDTH, TEXTURE_HEIGHT


logger = logging.getLogger(__name__)


def normalize_transparent_pixels(image: np.ndarray) -> np.ndarray:
    """
    Force transparent pixels to the same color.

    Any pixel with alpha == 0 has its RGB channels set to zero. Alpha is
    left untouched.

    Args:
        image: RGBA array of shape (H, W, 4)

    Returns:
        Normalized copy of the image
    """
    normalized = image.copy()
    transparent = normalized[:, :, 3] == 0
    normalized[transparent, :3] = 0
    return normalized


class TextureMapLoader:
    """
    Loader for the block texture map.

    The image is decoded with Pillow, converted to RGBA and normalized
    once on load. Dimensions other than TEXTURE_WIDTH x TEXTURE_HEIGHT are
    accepted; only the covered part of the layout is used downstream.
    """

    def __init__(self):
        self._image: Optional[np.ndarray] = None
        self._source_path: Optional[Path] = None

    def load(self, image_path: Union[str, Path]) -> "TextureMapLoader":
        """
        Load a texture map from disk.

        Args:
            image_path: Path to the texture map (PNG recommended)

        Returns:
            self for method chaining
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise FileNotFoundError(f"Texture map not found: {image_path}")

        with Image.open(image_path) as img:
            if img.mode != "RGBA":
                img = img.convert("RGBA")
            rgba = np.array(img, dtype=np.uint8)

        self._source_path = image_path
        logger.debug("Loaded %s (%dx%d)", image_path, rgba.shape[1], rgba.shape[0])
        return self._set_image(rgba)

    def load_from_array(self, rgba_array: np.ndarray) -> "TextureMapLoader":
        """
        Load from a numpy array instead of a file.

        Args:
            rgba_array: RGBA image array of shape (H, W, 4)

        Returns:
            self for method chaining
        """
        if rgba_array.ndim != 3 or rgba_array.shape[2] != 4:
            raise ValueError("Color array must have shape (H, W, 4)")

        self._source_path = None
        return self._set_image(rgba_array.astype(np.uint8))

    def _set_image(self, rgba: np.ndarray) -> "TextureMapLoader":
        if rgba.shape[:2] != (TEXTURE_HEIGHT, TEXTURE_WIDTH):
            logger.warning(
                "Texture map is %dx%d, expected %dx%d; faces outside the image keep the placeholder",
                rgba.shape[1], rgba.shape[0], TEXTURE_WIDTH, TEXTURE_HEIGHT
            )
        self._image = normalize_transparent_pixels(rgba)
        return self

    @property
    def image(self) -> np.ndarray:
        """Get the normalized RGBA image array."""
        if self._image is None:
            raise RuntimeError("No texture map loaded")
        return self._image

    @property
    def source_path(self) -> Optional[Path]:
        """Path the image was loaded from, if any."""
        return self._source_path

    @property
    def size(self) -> Tuple[int, int]:
        """Get image size as (width, height)."""
        image = self.image
        return (image.shape[1], image.shape[0])

    @property
    def matches_layout(self) -> bool:
        """Check whether the image has exactly the expected dimensions."""
        return self.size == (TEXTURE_WIDTH, TEXTURE_HEIGHT)
