from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from asciicanvas.canvas import Canvas


def load_font(font_path: str | Path | None = None, font_size: int = 16):
    """Load a TrueType font, or Pillow's built-in font when no path is given (size is then ignored)."""
    if font_path is None:
        return ImageFont.load_default()
    return ImageFont.truetype(str(font_path), font_size)


def cell_metrics(font) -> tuple[int, int, int, int]:
    """Return (cell_width, cell_height, x_offset, y_offset) measured from "M"."""
    bbox = font.getbbox("M")
    cell_width = max(bbox[2] - bbox[0], 1)
    cell_height = max(bbox[3] - bbox[1], 1)
    return cell_width, cell_height, -bbox[0], -bbox[1]


def build_glyph_masks(font, values: np.ndarray) -> tuple[np.ndarray, int, int]:
    """Pre-render each cell byte in ``values`` as a coverage mask.

    Returns:
        masks: float32 array of shape (len(values), cell_h, cell_w), values 0-1
        cell_width: pixel width of one cell
        cell_height: pixel height of one cell
    """
    cell_width, cell_height, x_offset, y_offset = cell_metrics(font)
    masks = np.zeros((len(values), cell_height, cell_width), dtype=np.float32)
    for i, value in enumerate(values):
        char = chr(int(value))
        # Control bytes and blanks have no ink
        if not char.isprintable() or char.isspace():
            continue
        img = Image.new("L", (cell_width, cell_height), 0)
        draw = ImageDraw.Draw(img)
        draw.text((x_offset, y_offset), char, fill=255, font=font)
        masks[i] = np.asarray(img, dtype=np.float32) / 255.0
    return masks, cell_width, cell_height


def render_image(
    canvas: Canvas,
    font_path: str | Path | None = None,
    font_size: int = 16,
    fg: int = 255,
    bg: int = 0,
) -> Image.Image:
    """Draw every cell of the canvas into a greyscale image, one glyph cell per canvas cell."""
    font = load_font(font_path, font_size)
    rows, cols = canvas.shape
    values, inverse = np.unique(canvas.cells, return_inverse=True)
    masks, cw, ch = build_glyph_masks(font, values)
    if rows == 0 or cols == 0:
        return Image.new("L", (cols * cw, rows * ch), bg)

    # (rows, cols, cell_h, cell_w) -> (rows * cell_h, cols * cell_w)
    cells = masks[inverse.reshape(rows, cols)]
    coverage = cells.transpose(0, 2, 1, 3).reshape(rows * ch, cols * cw)
    pixels = bg + coverage * (fg - bg)
    return Image.fromarray(np.clip(np.rint(pixels), 0, 255).astype(np.uint8))


def save_image(canvas: Canvas, path: str | Path, **kwargs) -> None:
    render_image(canvas, **kwargs).save(Path(path))
