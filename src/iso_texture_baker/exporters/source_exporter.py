"""
Rust Source Exporter

Writes the baked tiles as a constant the game compiles in:

    pub const TEXTURES: [[[u8; 4]; 1024]; 23] = [
    [
    [r, g, b, a],[r, g, b, a],...],
    ...
    ];

Each tile opens with "[\\n", every pixel is written as "[r, g, b, a],"
and the tile closes with "],\\n". Byte values are plain decimal.
"""

import logging
from pathlib import Path
from typing import Iterator, Union
import numpy as np

from ..layout import BLOCKS, TILE_PIXELS


logger = logging.getLogger(__name__)


class TextureSourceExporter:
    """
    Exporter for the TEXTURES source constant.

    The file is truncated before writing. Any I/O error propagates and may
    leave a partial file behind.
    """

    def __init__(self, const_name: str = "TEXTURES"):
        """
        Initialize the exporter.

        Args:
            const_name: Name of the generated constant
        """
        self.const_name = const_name

    def _check_tiles(self, tiles: np.ndarray):
        if tiles.shape != (BLOCKS, TILE_PIXELS, 4):
            raise ValueError(
                f"Expected tiles of shape {(BLOCKS, TILE_PIXELS, 4)}, got {tiles.shape}"
            )

    def header(self) -> str:
        """Declaration line of the constant."""
        return f"pub const {self.const_name}: [[[u8; 4]; {TILE_PIXELS}]; {BLOCKS}] = [\n"

    @staticmethod
    def format_tile(tile: np.ndarray) -> str:
        """Format one flat tile as a nested array literal."""
        pixels = "".join(f"[{r}, {g}, {b}, {a}]," for r, g, b, a in tile.tolist())
        return f"[\n{pixels}],\n"

    def iter_chunks(self, tiles: np.ndarray) -> Iterator[str]:
        """Yield the source text one tile at a time."""
        self._check_tiles(tiles)
        yield self.header()
        for tile in tiles:
            yield self.format_tile(tile)
        yield "];"

    def to_source(self, tiles: np.ndarray) -> str:
        """
        Build the whole source text.

        Args:
            tiles: Array of shape (BLOCKS, TILE_PIXELS, 4)

        Returns:
            Source text of the constant
        """
        return "".join(self.iter_chunks(tiles))

    def export(self, tiles: np.ndarray, output_path: Union[str, Path]):
        """
        Write the constant to a file.

        Args:
            tiles: Array of shape (BLOCKS, TILE_PIXELS, 4)
            output_path: Destination file, overwritten if it exists
        """
        output_path = Path(output_path)
        tiles = np.asarray(tiles, dtype=np.uint8)
        self._check_tiles(tiles)

        with open(output_path, "w", encoding="ascii", newline="\n") as f:
            for chunk in self.iter_chunks(tiles):
                f.write(chunk)

        logger.info("Wrote %d textures to %s", len(tiles), output_path)
