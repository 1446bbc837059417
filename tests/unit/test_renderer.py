import io

import pytest
from PIL import Image, ImageFont

from live_nft.core.exceptions import RenderError
from live_nft.engines.render.renderer import load_font, load_template, render_image, render_lines


def _open(png: bytes) -> Image.Image:
    return Image.open(io.BytesIO(png)).convert("RGBA")


def test_render_keeps_template_size(settings, default_font):
    png = render_image(["42"], settings)

    image = _open(png)
    assert png.startswith(b"\x89PNG")
    assert image.size == (1000, 300)


def test_text_is_right_aligned_left_of_anchor(settings, default_font):
    image = _open(render_image(["1 234 567"], settings))
    background = (10, 20, 30, 255)

    # white glyph pixels end left of x=980 and sit above the baseline at y=250
    text_pixels = [
        (x, y)
        for x in range(600, 1000)
        for y in range(180, 280)
        if image.getpixel((x, y)) != background
    ]
    assert text_pixels
    assert max(x for x, _ in text_pixels) <= 982
    assert max(y for _, y in text_pixels) <= 255


def test_additional_lines_go_below(settings, default_font):
    settings.TEXT_Y = 100
    settings.LINE_SPACING = 60
    single = _open(render_image(["13°C"], settings))
    double = _open(render_image(["13°C", "Clouds"], settings))

    # second line only changes pixels below the first baseline
    diff = [
        y
        for x in range(0, 1000, 2)
        for y in range(0, 300, 2)
        if single.getpixel((x, y)) != double.getpixel((x, y))
    ]
    assert diff
    assert min(diff) > 100


def test_missing_template(tmp_path):
    with pytest.raises(RenderError, match="template"):
        load_template(str(tmp_path))


def test_missing_font(files_dir):
    with pytest.raises(RenderError, match="font"):
        load_font(str(files_dir), 36)


def test_unknown_color_is_a_render_error():
    template = Image.new("RGBA", (100, 50))

    with pytest.raises(RenderError):
        render_lines(["1"], template, ImageFont.load_default(size=12), position=(90, 40), color="not-a-colour")
