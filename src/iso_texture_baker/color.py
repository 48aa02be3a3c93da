"""
Palette Module

Handles:
- Collecting the unique colors of the texture map in first-seen order
- Deriving "water" and "shadow" variants for in-game color variation
- Exact palette lookup for face extraction

Palette Layout:
    [ originals (U) | water of originals (U) | shadow of originals (U) | shadow of water (U) ]

Shadows are derived from the palette *after* the water pass, so the
palette always holds 4 * U entries. Entries are not deduplicated across
the groups.
"""

import logging
from typing import Optional
import numpy as np


logger = logging.getLogger(__name__)

WATER_BLUE = 255 // 2


class PaletteLookupError(LookupError):
    """Raised when a color has no exact match in the palette."""

    def __init__(self, color):
        self.color = tuple(int(c) for c in color)
        super().__init__(f"Color {self.color} is not in the palette")


def pack_rgba(colors: np.ndarray) -> np.ndarray:
    """
    Pack RGBA colors into single uint32 keys.

    Args:
        colors: Array of shape (N, 4) with uint8 RGBA values

    Returns:
        Array of shape (N,) with uint32 keys
    """
    c = colors.astype(np.uint32)
    return (c[:, 0] << 24) | (c[:, 1] << 16) | (c[:, 2] << 8) | c[:, 3]


def unique_in_order(colors: np.ndarray) -> np.ndarray:
    """
    Unique colors in the order they are first seen.

    Args:
        colors: Array of shape (N, 4)

    Returns:
        Array of shape (U, 4)
    """
    if len(colors) == 0:
        return np.zeros((0, 4), dtype=np.uint8)
    _, first_index = np.unique(pack_rgba(colors), return_index=True)
    return colors[np.sort(first_index)].astype(np.uint8)


def water_variant(colors: np.ndarray) -> np.ndarray:
    """Half red and green, blue fixed at 127, alpha unchanged."""
    water = colors.copy()
    water[:, 0:2] //= 2
    water[:, 2] = WATER_BLUE
    return water


def shadow_variant(colors: np.ndarray) -> np.ndarray:
    """Half brightness, alpha unchanged."""
    shadow = colors.copy()
    shadow[:, 0:3] //= 2
    return shadow


class Palette:
    """
    Ordered color palette with derived water and shadow entries.

    Attributes:
        colors: Array of shape (4 * U, 4) with uint8 RGBA values
        unique_count: Number of distinct colors in the source image (U)
    """

    def __init__(self, colors: np.ndarray, unique_count: int):
        self.colors = colors.astype(np.uint8)
        self.unique_count = unique_count
        self._sorted_keys: Optional[np.ndarray] = None
        self._order: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self.colors)

    def __contains__(self, color) -> bool:
        key = pack_rgba(np.asarray(color, dtype=np.uint8).reshape(1, 4))
        return bool(np.any(pack_rgba(self.colors) == key[0]))

    @property
    def originals(self) -> np.ndarray:
        """Colors collected from the image."""
        return self.colors[:self.unique_count]

    @property
    def water(self) -> np.ndarray:
        """Water variants of the originals."""
        u = self.unique_count
        return self.colors[u:2 * u]

    @property
    def shadows(self) -> np.ndarray:
        """Shadow variants of the originals followed by those of the water entries."""
        return self.colors[2 * self.unique_count:]

    def _build_index(self):
        # Stable sort keeps the lowest palette index first among equal keys
        keys = pack_rgba(self.colors)
        self._order = np.argsort(keys, kind="stable")
        self._sorted_keys = keys[self._order]

    def lookup_indices(self, colors: np.ndarray) -> np.ndarray:
        """
        Find the first exact palette match for each color.

        Args:
            colors: Array of shape (N, 4) with RGBA values

        Returns:
            Array of shape (N,) with palette indices

        Raises:
            PaletteLookupError: If any color is not in the palette
        """
        if len(colors) == 0:
            return np.zeros(0, dtype=np.intp)
        if len(self.colors) == 0:
            raise PaletteLookupError(colors[0])

        if self._sorted_keys is None:
            self._build_index()

        keys = pack_rgba(colors)
        pos = np.searchsorted(self._sorted_keys, keys, side="left")
        pos = np.minimum(pos, len(self._sorted_keys) - 1)
        found = self._sorted_keys[pos] == keys
        if not np.all(found):
            missing = int(np.argmin(found))
            raise PaletteLookupError(colors[missing])

        return self._order[pos]

    def canonicalize(self, colors: np.ndarray) -> np.ndarray:
        """
        Replace each color with its palette entry.

        Args:
            colors: Array of shape (N, 4)

        Returns:
            Array of shape (N, 4) taken from the palette
        """
        return self.colors[self.lookup_indices(colors)]


def build_palette(image: np.ndarray) -> Palette:
    """
    Build the palette for a normalized texture map.

    Args:
        image: Normalized RGBA array of shape (H, W, 4)

    Returns:
        Palette with originals, water and shadow entries
    """
    originals = unique_in_order(image.reshape(-1, 4))

    colors = np.concatenate([originals, water_variant(originals)])
    colors = np.concatenate([colors, shadow_variant(colors)])

    logger.debug("Palette: %d unique colors, %d entries", len(originals), len(colors))
    return Palette(colors, len(originals))
