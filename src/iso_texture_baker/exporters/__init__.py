"""
Export modules for baked textures.

Supported outputs:
- Rust source (.rs) - The TEXTURES constant compiled into the game
- Debug frame sink - Raw RGBA frame for an external viewer
- PNG preview - Face sheet and tile strip for quick inspection
"""

from .source_exporter import TextureSourceExporter
from .debug_sink import DebugFrameWriter
from .png_exporter import PNGExporter

__all__ = ["TextureSourceExporter", "DebugFrameWriter", "PNGExporter"]
