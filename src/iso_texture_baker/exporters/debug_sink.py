"""
Debug Frame Sink

Renders the extracted faces and the first tiles into a 640x480 RGBA frame
and writes it into a memory-mapped file that an external viewer polls.

Frame Layout:
- Rows 0..48: face grid, one 16x16 cell per (block, side) as in the source map
- Rows 48..80: the first 15 isometric tiles side by side
"""

import fcntl
import logging
import mmap
import os
from pathlib import Path
from typing import Union
import numpy as np

from ..layout import (
    TEXTURE_SRC_SIZE, SIDES, ISOMETRIC_WIDTH, ISOMETRIC_HEIGHT,
)


logger = logging.getLogger(__name__)

FRAME_WIDTH = 640
FRAME_HEIGHT = 480
FRAME_BYTES = FRAME_WIDTH * FRAME_HEIGHT * 4
PREVIEW_TILES = 15
DEFAULT_SINK_PATH = "/tmp/imagesink"


class DebugFrameWriter:
    """
    Writer for the shared debug frame.

    Not part of the baked output; the frame format is not versioned.
    """

    def __init__(self, sink_path: Union[str, Path] = DEFAULT_SINK_PATH):
        """
        Initialize the writer.

        Args:
            sink_path: File backing the shared frame
        """
        self.sink_path = Path(sink_path)

    def render_frame(self, faces: np.ndarray, tiles: np.ndarray) -> np.ndarray:
        """
        Render faces and tiles into a frame.

        Args:
            faces: Face grid of shape (FACE_COUNT, FACE_PIXELS, 4)
            tiles: Tiles of shape (BLOCKS, TILE_PIXELS, 4)

        Returns:
            Zero-initialized frame of shape (FRAME_HEIGHT, FRAME_WIDTH, 4)
        """
        frame = np.zeros((FRAME_HEIGHT, FRAME_WIDTH, 4), dtype=np.uint8)
        size = TEXTURE_SRC_SIZE

        for index, face in enumerate(faces):
            block, side = divmod(index, SIDES)
            x0 = block * size
            y0 = side * size
            if x0 + size > FRAME_WIDTH:
                continue
            frame[y0:y0 + size, x0:x0 + size] = face.reshape(size, size, 4)

        y0 = size * SIDES
        for index, tile in enumerate(tiles[:PREVIEW_TILES]):
            x0 = ISOMETRIC_WIDTH * index
            frame[y0:y0 + ISOMETRIC_HEIGHT, x0:x0 + ISOMETRIC_WIDTH] = tile.reshape(
                ISOMETRIC_HEIGHT, ISOMETRIC_WIDTH, 4
            )

        return frame

    def write(self, faces: np.ndarray, tiles: np.ndarray) -> Path:
        """
        Render a frame and write it to the sink.

        Args:
            faces: Face grid
            tiles: Isometric tiles

        Returns:
            Path of the sink file
        """
        frame = self.render_frame(faces, tiles)
        self.write_frame(frame)
        return self.sink_path

    def write_frame(self, frame: np.ndarray):
        """
        Write a raw frame into the memory-mapped sink.

        The sink is created if needed and sized to FRAME_BYTES. An
        exclusive advisory lock is held while the frame is copied.
        """
        data = np.ascontiguousarray(frame, dtype=np.uint8).tobytes()
        if len(data) != FRAME_BYTES:
            raise ValueError(f"Frame must be {FRAME_BYTES} bytes, got {len(data)}")

        fd = os.open(self.sink_path, os.O_RDWR | os.O_CREAT, 0o644)
        with os.fdopen(fd, "r+b") as f:
            f.truncate(FRAME_BYTES)
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                with mmap.mmap(f.fileno(), FRAME_BYTES) as mm:
                    mm[:] = data
                    mm.flush()
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        logger.debug("Wrote debug frame to %s", self.sink_path)
