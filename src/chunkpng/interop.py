"""
Pillow interop - convert between PngImage documents and PIL images.

Supported PIL modes: 1, L, LA, RGB, RGBA and P. Anything else is converted
to RGBA first. Sub-8-bit grayscale is scaled to the full 0-255 range on the
way out to PIL, since Pillow's L mode is always 8-bit.
"""

import logging
from typing import Optional

from PIL import Image

from .codec import Codec
from .constants import BitDepth, ColorType
from .png_file import PngImage
from .pixels import compute_max_sample_value

logger = logging.getLogger(__name__)

COLOR_TYPE_MODES = {
    ColorType.GRAYSCALE: "L",
    ColorType.TRUECOLOR: "RGB",
    ColorType.INDEXED: "P",
    ColorType.GRAYSCALE_AND_ALPHA: "LA",
    ColorType.TRUECOLOR_AND_ALPHA: "RGBA",
}

MODE_COLOR_TYPES = {
    "L": ColorType.GRAYSCALE,
    "RGB": ColorType.TRUECOLOR,
    "P": ColorType.INDEXED,
    "LA": ColorType.GRAYSCALE_AND_ALPHA,
    "RGBA": ColorType.TRUECOLOR_AND_ALPHA,
}


def to_pil_image(png: PngImage) -> Image.Image:
    """Build a PIL image holding the same pixels, palette and transparency."""
    mode = COLOR_TYPE_MODES[png.color_type]
    raw = png.get_raw_data()

    if png.is_grayscale() and png.depth != BitDepth.EIGHT:
        limit = compute_max_sample_value(png.depth)
        raw = bytes(value * 255 // limit for value in raw)

    image = Image.frombytes(mode, (png.width, png.height), raw)

    if png.is_indexed():
        flat = [sample for color in png.get_palette() for sample in color]
        image.putpalette(flat)
        if png.trns is not None:
            image.info["transparency"] = bytes(png.get_transparencies())
    elif png.trns is not None:
        keys = png.get_transparencies()
        if keys:
            key = keys[0]
            image.info["transparency"] = key[0] if len(key) == 1 else tuple(key)

    return image


def from_pil_image(image: Image.Image, codec: Optional[Codec] = None) -> PngImage:
    """Build a PngImage from a PIL image (8-bit, or 1-bit for mode "1")."""
    width, height = image.size

    if image.mode == "1":
        png = PngImage(width=width, height=height, depth=BitDepth.ONE,
                       color_type=ColorType.GRAYSCALE, codec=codec)
        png.set_raw_data([1 if value else 0 for value in image.convert("L").tobytes()])
        return png

    if image.mode not in MODE_COLOR_TYPES:
        logger.debug(f"Converting PIL mode {image.mode} to RGBA")
        image = image.convert("RGBA")

    color_type = MODE_COLOR_TYPES[image.mode]
    png = PngImage(width=width, height=height, depth=BitDepth.EIGHT,
                   color_type=color_type, codec=codec)
    raw = image.tobytes()
    transparency = image.info.get("transparency")

    if color_type == ColorType.INDEXED:
        flat = image.getpalette() or []
        used = max(raw) + 1 if raw else 0
        count = min(256, max(len(flat) // 3, used))
        flat = flat + [0] * (count * 3 - len(flat))
        for index in range(count):
            png.set_palette_color_of(index, flat[index * 3:index * 3 + 3])
        if isinstance(transparency, int):
            png.set_transparency(0, transparency)
        elif isinstance(transparency, bytes):
            for index, alpha in enumerate(transparency[:count]):
                png.set_transparency(alpha, index)
    elif transparency is not None and color_type in (ColorType.GRAYSCALE, ColorType.TRUECOLOR):
        png.set_transparency(transparency)

    png.set_raw_data(raw)
    return png
