"""
Token Image Renderer

Draws the record's text lines over the template image with Pillow.
"""

import io
from pathlib import Path
from typing import List, Sequence

from PIL import Image, ImageDraw, ImageFont

from live_nft.core.config import Settings
from live_nft.core.exceptions import RenderError

TEMPLATE_FILENAME = "template.png"
FONT_FILENAME = "Rubik-Medium.ttf"


def load_template(files_dir: str) -> Image.Image:
    path = Path(files_dir) / TEMPLATE_FILENAME
    try:
        with Image.open(path) as image:
            return image.convert("RGBA")
    except OSError as e:
        raise RenderError(f"Cannot load template image {path}: {e}") from e


def load_font(files_dir: str, size: int) -> ImageFont.FreeTypeFont:
    path = Path(files_dir) / FONT_FILENAME
    try:
        return ImageFont.truetype(str(path), size)
    except OSError as e:
        raise RenderError(f"Cannot load font {path}: {e}") from e


def render_lines(
    lines: Sequence[str],
    template: Image.Image,
    font: ImageFont.FreeTypeFont,
    position: tuple,
    color: str = "white",
    line_spacing: int = 48
) -> bytes:
    """
    Render text lines onto a copy of the template and encode it as PNG.

    Each line is right-aligned with its baseline on the anchor point; the
    first line sits at ``position`` and the rest follow ``line_spacing``
    pixels lower.
    """
    canvas = Image.new("RGBA", template.size)
    canvas.alpha_composite(template)

    draw = ImageDraw.Draw(canvas)
    x, y = position
    try:
        for index, line in enumerate(lines):
            draw.text((x, y + index * line_spacing), line, font=font, fill=color, anchor="rs")
    except ValueError as e:
        # unknown colour names and bitmap fonts without anchor support
        raise RenderError(f"Cannot draw text: {e}") from e

    buffer = io.BytesIO()
    canvas.save(buffer, format="PNG")
    return buffer.getvalue()


def render_image(lines: List[str], settings: Settings) -> bytes:
    """Render with the template, font and layout from settings."""
    template = load_template(settings.FILES_DIR)
    font = load_font(settings.FILES_DIR, settings.FONT_SIZE)
    return render_lines(
        lines,
        template,
        font,
        position=(settings.TEXT_X, settings.TEXT_Y),
        color=settings.TEXT_COLOR,
        line_spacing=settings.LINE_SPACING,
    )
