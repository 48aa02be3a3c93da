#!/usr/bin/env python3
"""
Isometric Texture Baker Web Interface

A simple Gradio-based web UI for baking a block texture map into
isometric tiles and previewing the result.

Run with: python app.py
Then open http://localhost:7860 in your browser
"""

import sys
from pathlib import Path
import tempfile
import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import gradio as gr
from iso_texture_baker import TextureConverter
from iso_texture_baker.exporters import PNGExporter
from iso_texture_baker.layout import TEXTURE_WIDTH, TEXTURE_HEIGHT, TEXTURE_SRC_SIZE, BLOCKS


def process_image(image, preview_scale: int):
    """
    Bake an uploaded texture map.

    Returns tile preview, face preview, stats text, and the source file path.
    """
    if image is None:
        return None, None, "Please upload a texture map first.", None

    if isinstance(image, np.ndarray):
        if image.ndim == 2:
            rgba = np.stack([image, image, image, np.full_like(image, 255)], axis=-1)
        elif image.shape[2] == 3:
            rgba = np.concatenate([image, np.full((*image.shape[:2], 1), 255, dtype=np.uint8)], axis=-1)
        else:
            rgba = image.astype(np.uint8)
    else:
        return None, None, "Invalid image format.", None

    converter = TextureConverter(write_debug_frame=False)
    converter.load_array(rgba)
    converter.bake()

    stats = converter.get_stats()
    stats_text = f"""## Bake Complete!

| Metric | Value |
|--------|-------|
| Input Size | {rgba.shape[1]} x {rgba.shape[0]} pixels |
| Matches Layout | {"yes" if stats['matches_layout'] else f"no (expected {TEXTURE_WIDTH} x {TEXTURE_HEIGHT})"} |
| Unique Colors | {stats['unique_colors']:,} |
| Palette Size | {stats['palette_size']:,} |
| Tiles | {stats['tile_count']} |
| Opaque Tile Pixels | {stats['opaque_tile_pixels']:,} |
"""

    exporter = PNGExporter()
    tiles_preview = exporter.tile_strip(converter.tiles)
    faces_preview = exporter.face_sheet(converter.faces)
    scale = int(preview_scale)
    tiles_preview = tiles_preview.repeat(scale, axis=0).repeat(scale, axis=1)
    faces_preview = faces_preview.repeat(scale, axis=0).repeat(scale, axis=1)

    export_dir = tempfile.mkdtemp(prefix="isobake_")
    source_path = str(Path(export_dir) / "textures.rs")
    converter.export_source(source_path)

    return tiles_preview, faces_preview, stats_text, source_path


def create_demo_image(style: str):
    """Create a demo texture map."""
    if not style:
        return None

    size = TEXTURE_SRC_SIZE
    rgba = np.zeros((TEXTURE_HEIGHT, TEXTURE_WIDTH, 4), dtype=np.uint8)

    if style == "Grass":
        for block in range(BLOCKS):
            x0 = block * size
            rgba[0:size, x0:x0 + size] = [60, 170, 60, 255]
            rgba[size:3 * size, x0:x0 + size] = [120, 80, 40, 255]
            rgba[size:size + 3, x0:x0 + size] = [60, 170, 60, 255]

    elif style == "Checker":
        for y in range(TEXTURE_HEIGHT):
            for x in range(TEXTURE_WIDTH):
                if ((x // 4) + (y // 4)) % 2 == 0:
                    rgba[y, x] = [230, 230, 230, 255]
                else:
                    rgba[y, x] = [40, 40, 40, 255]

    elif style == "Sides":
        rgba[0:size] = [220, 60, 60, 255]
        rgba[size:2 * size] = [60, 220, 60, 255]
        rgba[2 * size:3 * size] = [60, 60, 220, 255]

    return rgba


# Build the Gradio interface
with gr.Blocks(title="Isometric Texture Baker") as app:

    gr.Markdown("""
    # Isometric Texture Baker
    ### Bake block face textures into isometric tiles

    Upload a 368x48 texture map (23 blocks x top/left/right) or try a demo.
    """)

    with gr.Row():
        with gr.Column(scale=1):
            gr.Markdown("### Input Texture Map")

            image_input = gr.Image(
                label="Upload Texture Map (PNG)",
                type="numpy",
                image_mode="RGBA"
            )

            with gr.Row():
                demo_dropdown = gr.Dropdown(
                    choices=["Grass", "Checker", "Sides"],
                    label="Or try a demo"
                )
                demo_btn = gr.Button("Load Demo")

            preview_scale = gr.Slider(
                minimum=1,
                maximum=8,
                value=4,
                step=1,
                label="Preview Scale"
            )

            generate_btn = gr.Button("Bake Textures", variant="primary")

        with gr.Column(scale=2):
            gr.Markdown("### Tiles")
            tiles_output = gr.Image(label="Isometric Tiles", image_mode="RGBA")

            gr.Markdown("### Faces")
            faces_output = gr.Image(label="Extracted Faces", image_mode="RGBA")

            stats_output = gr.Markdown(
                value="Upload a texture map and click 'Bake' to see results."
            )

        with gr.Column(scale=1):
            gr.Markdown("### Downloads")
            source_output = gr.File(label="textures.rs")

    demo_btn.click(
        fn=create_demo_image,
        inputs=[demo_dropdown],
        outputs=[image_input]
    )

    generate_btn.click(
        fn=process_image,
        inputs=[image_input, preview_scale],
        outputs=[tiles_output, faces_output, stats_output, source_output]
    )


if __name__ == "__main__":
    print("\n" + "="*60)
    print("Isometric Texture Baker Web Interface")
    print("="*60)
    print("\nStarting server...")
    print("Open http://localhost:7860 in your browser\n")

    app.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=False
    )
