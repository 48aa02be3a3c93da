"""
Main TextureConverter Class

This is the primary interface for the baking pipeline.
It orchestrates:
1. Texture map loading and transparent-pixel normalization
2. Palette construction (originals, water, shadow)
3. Face extraction
4. Isometric projection
5. Export of the TEXTURES source constant (+ debug frame)

A converter is built for one run and discarded afterwards.

Example Usage:
    converter = TextureConverter(output_path="src/textures.rs")
    converter.load_image("textures.png")
    converter.run()
"""

import logging
from pathlib import Path
from typing import Optional, Union
import numpy as np

from .ingestion import TextureMapLoader
from .color import Palette, build_palette
from .faces import extract_faces
from .projection import IsometricProjector
from .exporters import TextureSourceExporter, DebugFrameWriter, PNGExporter
from .exporters.debug_sink import DEFAULT_SINK_PATH


logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = "./src/textures.rs"


class TextureConverter:
    """
    High-level interface for baking isometric block textures.

    Attributes:
        palette: Palette built from the texture map
        faces: Face grid of shape (FACE_COUNT, FACE_PIXELS, 4)
        tiles: Isometric tiles of shape (BLOCKS, TILE_PIXELS, 4)
    """

    def __init__(
        self,
        output_path: Union[str, Path] = DEFAULT_OUTPUT_PATH,
        debug_sink_path: Union[str, Path] = DEFAULT_SINK_PATH,
        write_debug_frame: bool = True
    ):
        """
        Initialize the converter.

        Args:
            output_path: Where the TEXTURES constant is written
            debug_sink_path: File backing the debug frame
            write_debug_frame: Whether run() writes the debug frame
        """
        self.output_path = Path(output_path)
        self.debug_sink_path = Path(debug_sink_path)
        self.write_debug_frame = write_debug_frame

        self._loader: Optional[TextureMapLoader] = None
        self._palette: Optional[Palette] = None
        self._faces: Optional[np.ndarray] = None
        self._tiles: Optional[np.ndarray] = None
        self._projector = IsometricProjector()

    def load_image(self, image_path: Union[str, Path]) -> "TextureConverter":
        """
        Load the texture map from disk.

        Args:
            image_path: Path to the texture map

        Returns:
            self for method chaining
        """
        self._loader = TextureMapLoader().load(image_path)
        return self

    def load_array(self, rgba_array: np.ndarray) -> "TextureConverter":
        """
        Load the texture map from a numpy array.

        Args:
            rgba_array: RGBA image array of shape (H, W, 4)

        Returns:
            self for method chaining
        """
        self._loader = TextureMapLoader().load_from_array(rgba_array)
        return self

    def build_palette(self) -> "TextureConverter":
        """Collect the palette of the loaded image."""
        if self._loader is None:
            raise RuntimeError("No texture map loaded. Call load_image() first.")

        self._palette = build_palette(self._loader.image)
        return self

    def extract_faces(self) -> "TextureConverter":
        """Slice the texture map into palette-canonical faces."""
        if self._palette is None:
            self.build_palette()

        self._faces = extract_faces(self._loader.image, self._palette)
        return self

    def project(self) -> "TextureConverter":
        """Project every block into an isometric tile."""
        if self._faces is None:
            self.extract_faces()

        self._tiles = self._projector.project_all(self._faces)
        return self

    def bake(self) -> "TextureConverter":
        """Run every in-memory stage of the pipeline."""
        return self.build_palette().extract_faces().project()

    def export_source(self, output_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Write the TEXTURES constant.

        Args:
            output_path: Destination (defaults to the configured output path)

        Returns:
            Path that was written
        """
        if self._tiles is None:
            raise RuntimeError("No tiles. Call bake() first.")

        path = Path(output_path) if output_path is not None else self.output_path
        TextureSourceExporter().export(self._tiles, path)
        return path

    def to_source(self) -> str:
        """Get the TEXTURES constant as text."""
        if self._tiles is None:
            raise RuntimeError("No tiles. Call bake() first.")
        return TextureSourceExporter().to_source(self._tiles)

    def debug_draw(self, sink_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Write the debug frame for an external viewer.

        Args:
            sink_path: Sink file (defaults to the configured sink path)

        Returns:
            Path of the sink file
        """
        if self._tiles is None:
            raise RuntimeError("No tiles. Call bake() first.")

        writer = DebugFrameWriter(sink_path if sink_path is not None else self.debug_sink_path)
        return writer.write(self._faces, self._tiles)

    def export_preview(
        self,
        output_path: Union[str, Path],
        scale: int = 1,
        faces_path: Optional[Union[str, Path]] = None
    ):
        """
        Save the tiles (and optionally the faces) as PNG previews.

        Args:
            output_path: PNG path for the tile strip
            scale: Integer upscale factor
            faces_path: Optional PNG path for the face sheet
        """
        if self._tiles is None:
            raise RuntimeError("No tiles. Call bake() first.")

        exporter = PNGExporter(scale=scale)
        exporter.export_tiles(self._tiles, output_path)
        if faces_path is not None:
            exporter.export_faces(self._faces, faces_path)

    def run(self) -> Path:
        """
        Bake the loaded texture map and write all outputs.

        Returns:
            Path of the written source file
        """
        self.bake()

        if self.write_debug_frame:
            self.debug_draw()

        path = self.export_source()
        logger.info("Baked %d tiles into %s", len(self._tiles), path)
        return path

    @property
    def palette(self) -> Optional[Palette]:
        """Get the current palette."""
        return self._palette

    @property
    def faces(self) -> Optional[np.ndarray]:
        """Get the current face grid."""
        return self._faces

    @property
    def tiles(self) -> Optional[np.ndarray]:
        """Get the current isometric tiles."""
        return self._tiles

    @property
    def image(self) -> Optional[np.ndarray]:
        """Get the normalized texture map."""
        if self._loader is None:
            return None
        return self._loader.image

    def get_stats(self) -> dict:
        """
        Get statistics about the current run.

        Returns:
            Dictionary with palette, face and tile counts
        """
        if self._loader is None:
            return {"error": "No texture map loaded"}

        stats = {
            "image_size": self._loader.size,
            "matches_layout": self._loader.matches_layout,
        }

        if self._palette is not None:
            stats["unique_colors"] = self._palette.unique_count
            stats["palette_size"] = len(self._palette)

        if self._faces is not None:
            stats["face_count"] = len(self._faces)

        if self._tiles is not None:
            stats["tile_count"] = len(self._tiles)
            stats["opaque_tile_pixels"] = int(np.count_nonzero(self._tiles[:, :, 3]))

        return stats
