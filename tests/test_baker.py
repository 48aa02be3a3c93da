"""
Unit tests for the Isometric Texture Baker.
"""

import sys
import tempfile
from pathlib import Path
import numpy as np
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from PIL import Image

from iso_texture_baker import TextureConverter
from iso_texture_baker.cli import main as cli_main
from iso_texture_baker.color import (
    PaletteLookupError, build_palette, unique_in_order,
)
from iso_texture_baker.exporters import TextureSourceExporter, DebugFrameWriter, PNGExporter
from iso_texture_baker.exporters.debug_sink import FRAME_BYTES
from iso_texture_baker.faces import extract_faces, get_face
from iso_texture_baker.ingestion import TextureMapLoader, normalize_transparent_pixels
from iso_texture_baker.layout import (
    BLOCKS, SIDES, FACE_COUNT, FACE_PIXELS, TILE_PIXELS, TEXTURE_WIDTH,
    TEXTURE_HEIGHT, ISOMETRIC_WIDTH, PLACEHOLDER_COLOR, face_index,
)
from iso_texture_baker.projection import (
    FaceTransform, IsometricProjector, coverage_mask, fits_inside_rect,
)


RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


def make_coded_texture_map() -> np.ndarray:
    """Texture map where each pixel encodes (block, side, local offset)."""
    rows, cols = np.mgrid[0:TEXTURE_HEIGHT, 0:TEXTURE_WIDTH]
    rgba = np.zeros((TEXTURE_HEIGHT, TEXTURE_WIDTH, 4), dtype=np.uint8)
    rgba[:, :, 0] = cols // 16
    rgba[:, :, 1] = rows // 16
    rgba[:, :, 2] = (cols % 16) + 16 * (rows % 16)
    rgba[:, :, 3] = 255
    return rgba


def make_solid_sides_map() -> np.ndarray:
    """Texture map with solid red tops, green lefts and blue rights."""
    rgba = np.zeros((TEXTURE_HEIGHT, TEXTURE_WIDTH, 4), dtype=np.uint8)
    rgba[0:16] = RED
    rgba[16:32] = GREEN
    rgba[32:48] = BLUE
    return rgba


def tile_pixel(tile: np.ndarray, x: int, y: int) -> tuple:
    return tuple(int(c) for c in tile[x + y * ISOMETRIC_WIDTH])


class TestNormalization(unittest.TestCase):
    """Tests for transparent pixel normalization."""

    def test_transparent_rgb_zeroed(self):
        """Test that alpha=0 pixels lose their color."""
        rgba = np.array([[[10, 20, 30, 0], [10, 20, 30, 1]]], dtype=np.uint8)
        out = normalize_transparent_pixels(rgba)

        assert list(out[0, 0]) == [0, 0, 0, 0]
        assert list(out[0, 1]) == [10, 20, 30, 1]

    def test_input_not_modified(self):
        """Test that normalization returns a copy."""
        rgba = np.full((2, 2, 4), 50, dtype=np.uint8)
        rgba[:, :, 3] = 0
        normalize_transparent_pixels(rgba)
        assert np.all(rgba[:, :, :3] == 50)

    def test_loader_normalizes(self):
        """Test that the loader stores the normalized image."""
        rgba = np.zeros((4, 4, 4), dtype=np.uint8)
        rgba[..., :3] = 200
        loader = TextureMapLoader().load_from_array(rgba)
        assert np.all(loader.image == 0)

    def test_loader_rejects_bad_shape(self):
        """Test that non-RGBA arrays are rejected."""
        with self.assertRaises(ValueError):
            TextureMapLoader().load_from_array(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_missing_file(self):
        """Test that a missing texture map is fatal."""
        with self.assertRaises(FileNotFoundError):
            TextureMapLoader().load("/nonexistent/textures.png")


class TestPalette(unittest.TestCase):
    """Tests for palette construction and lookup."""

    def setUp(self):
        rgba = np.array([
            [[10, 20, 30, 255], [200, 101, 51, 128]],
            [[5, 6, 7, 0], [10, 20, 30, 255]],
        ], dtype=np.uint8)
        self.image = normalize_transparent_pixels(rgba)
        self.palette = build_palette(self.image)

    def test_first_seen_order(self):
        """Test originals are unique and in raster order."""
        assert self.palette.unique_count == 3
        assert self.palette.originals.tolist() == [
            [10, 20, 30, 255], [200, 101, 51, 128], [0, 0, 0, 0],
        ]

    def test_size_is_four_times_unique(self):
        """Test palette doubles twice."""
        assert len(self.palette) == 4 * self.palette.unique_count

    def test_water_variants(self):
        """Test water entries halve red/green and fix blue at 127."""
        assert self.palette.water.tolist() == [
            [5, 10, 127, 255], [100, 50, 127, 128], [0, 0, 127, 0],
        ]

    def test_shadow_variants(self):
        """Test shadows are derived from originals and water entries."""
        assert self.palette.shadows.tolist() == [
            [5, 10, 15, 255], [100, 50, 25, 128], [0, 0, 0, 0],
            [2, 5, 63, 255], [50, 25, 63, 128], [0, 0, 63, 0],
        ]

    def test_shadow_property(self):
        """Test shadow entry 2U + j halves palette entry j."""
        u = self.palette.unique_count
        colors = self.palette.colors.astype(int)
        for j in range(2 * u):
            expected = [colors[j, 0] // 2, colors[j, 1] // 2, colors[j, 2] // 2, colors[j, 3]]
            assert colors[2 * u + j].tolist() == expected

    def test_lookup_first_match(self):
        """Test duplicate entries resolve to the earliest index."""
        # (0, 0, 0, 0) is both an original and a shadow
        indices = self.palette.lookup_indices(np.array([[0, 0, 0, 0]], dtype=np.uint8))
        assert indices.tolist() == [2]

    def test_lookup_miss_is_fatal(self):
        """Test that unknown colors raise."""
        with self.assertRaises(PaletteLookupError) as ctx:
            self.palette.lookup_indices(np.array([[1, 2, 3, 4]], dtype=np.uint8))
        assert ctx.exception.color == (1, 2, 3, 4)

    def test_contains(self):
        """Test membership check."""
        assert (100, 50, 127, 128) in self.palette
        assert (1, 2, 3, 4) not in self.palette

    def test_empty_image(self):
        """Test an empty image gives an empty palette that fails lookups."""
        palette = build_palette(np.zeros((0, 0, 4), dtype=np.uint8))
        assert len(palette) == 0
        with self.assertRaises(PaletteLookupError):
            palette.lookup_indices(np.array([[0, 0, 0, 0]], dtype=np.uint8))

    def test_unique_in_order(self):
        """Test first-seen ordering is kept."""
        colors = np.array([[3, 0, 0, 0], [1, 0, 0, 0], [3, 0, 0, 0], [2, 0, 0, 0]], dtype=np.uint8)
        assert unique_in_order(colors)[:, 0].tolist() == [3, 1, 2]

    def test_palette_from_coded_map(self):
        """Test 4U with a full texture map."""
        image = make_coded_texture_map()
        palette = build_palette(image)
        u = len(np.unique(image.reshape(-1, 4), axis=0))
        assert palette.unique_count == u
        assert len(palette) == 4 * u


class TestFaceExtractor(unittest.TestCase):
    """Tests for face extraction."""

    def test_face_layout(self):
        """Test every pixel lands in the right face and offset."""
        image = make_coded_texture_map()
        faces = extract_faces(image, build_palette(image))

        assert faces.shape == (FACE_COUNT, FACE_PIXELS, 4)
        for block in range(BLOCKS):
            for side in range(SIDES):
                face = faces[face_index(block, side)]
                assert np.all(face[:, 0] == block)
                assert np.all(face[:, 1] == side)
                assert face[:, 2].tolist() == list(range(FACE_PIXELS))

    def test_faces_are_palette_members(self):
        """Test every face pixel is a palette entry."""
        image = make_solid_sides_map()
        palette = build_palette(image)
        faces = extract_faces(image, palette)

        palette_set = {tuple(c) for c in palette.colors.tolist()}
        face_set = {tuple(c) for c in faces.reshape(-1, 4).tolist()}
        assert face_set <= palette_set

    def test_partial_image_keeps_placeholder(self):
        """Test uncovered faces stay magenta."""
        image = np.zeros((16, 16, 4), dtype=np.uint8)
        image[:] = RED
        faces = extract_faces(image, build_palette(image))

        assert np.all(faces[face_index(0, 0)] == RED)
        assert np.all(faces[face_index(0, 1)] == PLACEHOLDER_COLOR)
        assert np.all(faces[face_index(5, 2)] == PLACEHOLDER_COLOR)

    def test_lookup_miss_is_fatal(self):
        """Test a palette built from another image fails."""
        image = make_solid_sides_map()
        other = np.zeros((1, 1, 4), dtype=np.uint8)
        with self.assertRaises(PaletteLookupError):
            extract_faces(image, build_palette(other))

    def test_get_face(self):
        """Test 16x16 face access."""
        image = make_coded_texture_map()
        faces = extract_faces(image, build_palette(image))
        face = get_face(faces, 3, 2)
        assert face.shape == (16, 16, 4)
        assert face[1, 2, 2] == 2 + 16
        with self.assertRaises(IndexError):
            get_face(faces, BLOCKS, 0)


class TestProjection(unittest.TestCase):
    """Tests for the isometric projection."""

    def test_fits_inside_rect_bounds(self):
        """Test the half-open sample range."""
        assert fits_inside_rect(0.0, 0.0, 16)
        assert fits_inside_rect(15.999, 15.999, 16)
        assert not fits_inside_rect(16.0, 0.0, 16)
        assert not fits_inside_rect(0.0, 16.0, 16)
        assert not fits_inside_rect(-0.001, 5.0, 16)

    def test_top_matrix_is_inverted(self):
        """Test the top face uses the inverse diamond map."""
        top = FaceTransform.top()
        assert np.allclose(top.matrix, [[0.5, -1.0], [0.5, 1.0]])
        assert top.offset.tolist() == [0.0, 8.0]

    def test_shear_matrices(self):
        """Test left and right shears and offsets."""
        left = FaceTransform.left()
        right = FaceTransform.right()
        assert left.matrix.tolist() == [[1.0, 0.0], [-0.5, 1.0]]
        assert right.matrix.tolist() == [[1.0, 0.0], [0.5, 1.0]]
        assert right.offset.tolist() == [16.0, 16.0]

    def test_sample_positions_match_sample(self):
        """Test batch and scalar sampling agree."""
        for transform in (FaceTransform.top(), FaceTransform.left(), FaceTransform.right()):
            pos = transform.sample_positions()
            assert pos.shape == (33, 33, 2)
            for x, y in [(0, 0), (16, 8), (7, 21), (32, 32)]:
                assert np.allclose(pos[y, x], transform.sample(x, y))

    def test_known_samples(self):
        """Test a few hand-computed sample positions."""
        assert np.allclose(FaceTransform.top().sample(16, 8), (8.0, 8.0))
        assert np.allclose(FaceTransform.left().sample(0, 16), (0.0, 8.0))
        assert np.allclose(FaceTransform.right().sample(16, 16), (0.0, 0.0))

    def test_faces_land_in_place(self):
        """Test each side shows up where its transform samples."""
        image = make_solid_sides_map()
        faces = extract_faces(image, build_palette(image))
        tile = IsometricProjector().project_block(faces[0], faces[1], faces[2])

        assert tile.shape == (TILE_PIXELS, 4)
        assert tile_pixel(tile, 16, 8) == RED
        assert tile_pixel(tile, 0, 16) == GREEN
        assert tile_pixel(tile, 16, 16) == BLUE

    def test_top_row_blank(self):
        """Test the first canvas row is never sampled."""
        image = make_solid_sides_map()
        faces = extract_faces(image, build_palette(image))
        tile = IsometricProjector().project_block(faces[0], faces[1], faces[2])

        assert np.all(tile[:ISOMETRIC_WIDTH] == 0)

    def test_opaque_only_where_sampled(self):
        """Test opaque pixels match the coverage mask exactly."""
        image = make_solid_sides_map()
        faces = extract_faces(image, build_palette(image))
        tile = IsometricProjector().project_block(faces[0], faces[1], faces[2])

        opaque = tile[:, 3].reshape(32, 32) > 0
        assert np.array_equal(opaque, coverage_mask())

    def test_nearest_pixel_sampling(self):
        """Test tile pixels are copied from the floored sample position."""
        image = make_coded_texture_map()
        faces = extract_faces(image, build_palette(image))
        projector = IsometricProjector()
        tile = projector.project_block(faces[0], faces[1], faces[2])

        sx, sy = FaceTransform.top().sample(20, 10)
        assert tile_pixel(tile, 20, 10)[2] == int(np.floor(sx)) + int(np.floor(sy)) * 16

    def test_single_red_face(self):
        """Test a lone red top face with placeholder sides."""
        image = np.zeros((16, 16, 4), dtype=np.uint8)
        image[:] = RED
        converter = TextureConverter(write_debug_frame=False)
        converter.load_array(image).bake()
        tile = converter.tiles[0]

        transforms = [FaceTransform.top(), FaceTransform.left(), FaceTransform.right()]
        for y in range(32):
            for x in range(32):
                hits = [fits_inside_rect(*t.sample(x, y), 16) for t in transforms]
                if hits[1] or hits[2]:
                    expected = PLACEHOLDER_COLOR
                elif hits[0]:
                    expected = RED
                else:
                    expected = (0, 0, 0, 0)
                assert tile_pixel(tile, x, y) == expected

    def test_project_all(self):
        """Test one tile per block."""
        image = make_solid_sides_map()
        faces = extract_faces(image, build_palette(image))
        tiles = IsometricProjector().project_all(faces)

        assert tiles.shape == (BLOCKS, TILE_PIXELS, 4)
        assert all(np.array_equal(tiles[0], tile) for tile in tiles)


class TestExporters(unittest.TestCase):
    """Tests for the output writers."""

    def setUp(self):
        self.tiles = np.zeros((BLOCKS, TILE_PIXELS, 4), dtype=np.uint8)
        self.tiles[0, 0] = [1, 2, 3, 4]
        self.tiles[22, TILE_PIXELS - 1] = [255, 128, 0, 255]

    def test_source_format(self):
        """Test the generated constant text."""
        text = TextureSourceExporter().to_source(self.tiles)

        assert text.startswith("pub const TEXTURES: [[[u8; 4]; 1024]; 23] = [\n[\n[1, 2, 3, 4],[0, 0, 0, 0],")
        assert text.endswith("[255, 128, 0, 255],],\n];")
        assert text.count("],\n") == BLOCKS
        assert text.count("[0, 0, 0, 0],") == BLOCKS * TILE_PIXELS - 2

    def test_wrong_tile_count(self):
        """Test exactly 23 tiles are required."""
        with self.assertRaises(ValueError):
            TextureSourceExporter().to_source(self.tiles[:5])

    def test_export_overwrites(self):
        """Test existing content is replaced."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "textures.rs"
            path.write_text("x" * (1 << 20))
            TextureSourceExporter().export(self.tiles, path)
            assert path.read_text() == TextureSourceExporter().to_source(self.tiles)

    def test_export_bad_path(self):
        """Test output failures propagate."""
        with self.assertRaises(OSError):
            TextureSourceExporter().export(self.tiles, "/nonexistent/dir/textures.rs")

    def test_debug_frame_layout(self):
        """Test faces and the first tiles are placed in the frame."""
        image = make_coded_texture_map()
        faces = extract_faces(image, build_palette(image))
        tiles = np.full((BLOCKS, TILE_PIXELS, 4), 9, dtype=np.uint8)
        frame = DebugFrameWriter().render_frame(faces, tiles)

        assert frame.shape == (480, 640, 4)
        assert np.array_equal(frame[0:16, 0:16], get_face(faces, 0, 0))
        assert np.array_equal(frame[16:32, 0:16], get_face(faces, 0, 1))
        assert np.array_equal(frame[0:16, 16:32], get_face(faces, 1, 0))
        assert np.all(frame[48:80, 0:480] == 9)
        assert np.all(frame[48:80, 480:] == 0)
        assert np.all(frame[80:] == 0)

    def test_debug_frame_write(self):
        """Test the sink file holds the raw frame."""
        image = make_solid_sides_map()
        faces = extract_faces(image, build_palette(image))
        tiles = IsometricProjector().project_all(faces)

        with tempfile.TemporaryDirectory() as tmp:
            writer = DebugFrameWriter(Path(tmp) / "imagesink")
            path = writer.write(faces, tiles)
            data = path.read_bytes()

        assert len(data) == FRAME_BYTES
        assert data == writer.render_frame(faces, tiles).tobytes()

    def test_png_preview(self):
        """Test preview sheets have the expected sizes."""
        image = make_solid_sides_map()
        faces = extract_faces(image, build_palette(image))
        tiles = IsometricProjector().project_all(faces)
        exporter = PNGExporter(scale=2)

        assert np.array_equal(exporter.face_sheet(faces), image)
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "tiles.png"
            exporter.export_tiles(tiles, path)
            with Image.open(path) as img:
                assert img.size == (BLOCKS * 32 * 2, 32 * 2)


class TestTextureConverter(unittest.TestCase):
    """Integration tests for TextureConverter."""

    def test_idempotent(self):
        """Test two runs give identical text."""
        image = make_coded_texture_map()
        first = TextureConverter(write_debug_frame=False).load_array(image).bake().to_source()
        second = TextureConverter(write_debug_frame=False).load_array(image).bake().to_source()
        assert first == second

    def test_run_from_file(self):
        """Test the full pipeline from a PNG on disk."""
        with tempfile.TemporaryDirectory() as tmp:
            tmp = Path(tmp)
            Image.fromarray(make_solid_sides_map()).save(tmp / "textures.png")

            converter = TextureConverter(
                output_path=tmp / "textures.rs",
                debug_sink_path=tmp / "imagesink"
            )
            converter.load_image(tmp / "textures.png")
            path = converter.run()

            assert path.read_text().startswith("pub const TEXTURES")
            assert (tmp / "imagesink").stat().st_size == FRAME_BYTES

        stats = converter.get_stats()
        assert stats["matches_layout"]
        assert stats["unique_colors"] == 3
        assert stats["palette_size"] == 12
        assert stats["tile_count"] == BLOCKS

    def test_requires_image(self):
        """Test stages need a loaded texture map."""
        with self.assertRaises(RuntimeError):
            TextureConverter().bake()
        with self.assertRaises(RuntimeError):
            TextureConverter().export_source()


class TestCLI(unittest.TestCase):
    """Tests for the command-line interface."""

    def test_bake(self):
        """Test a successful run."""
        with tempfile.TemporaryDirectory() as tmp:
            tmp = Path(tmp)
            Image.fromarray(make_solid_sides_map()).save(tmp / "textures.png")
            code = cli_main([
                str(tmp / "textures.png"),
                "-o", str(tmp / "textures.rs"),
                "--no-debug",
                "--preview", str(tmp / "tiles.png"),
            ])

            assert code == 0
            assert (tmp / "textures.rs").exists()
            assert (tmp / "tiles.png").exists()

    def test_missing_input(self):
        """Test a missing input fails."""
        assert cli_main(["/nonexistent/textures.png", "--no-debug"]) == 1


if __name__ == "__main__":
    unittest.main(verbosity=2)
