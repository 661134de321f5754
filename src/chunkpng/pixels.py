"""Color-type predicates and pixel layout arithmetic."""

from .constants import ColorType


def is_indexed(color_type: int) -> bool:
    return color_type == ColorType.INDEXED


def is_grayscale(color_type: int) -> bool:
    return color_type == ColorType.GRAYSCALE


def is_truecolor(color_type: int) -> bool:
    return color_type == ColorType.TRUECOLOR


def is_grayscale_with_alpha(color_type: int) -> bool:
    return color_type == ColorType.GRAYSCALE_AND_ALPHA


def is_truecolor_with_alpha(color_type: int) -> bool:
    return color_type == ColorType.TRUECOLOR_AND_ALPHA


def has_alpha_sample(color_type: int) -> bool:
    return color_type in (ColorType.GRAYSCALE_AND_ALPHA, ColorType.TRUECOLOR_AND_ALPHA)


def is_grayscale_family(color_type: int) -> bool:
    return color_type in (ColorType.GRAYSCALE, ColorType.GRAYSCALE_AND_ALPHA)


def determine_pixel_color_size(color_type: int) -> int:
    """Number of color samples per pixel, alpha excluded."""
    if color_type in (ColorType.TRUECOLOR, ColorType.TRUECOLOR_AND_ALPHA):
        return 3
    return 1


def determine_full_pixel_size(color_type: int) -> int:
    """Bytes per pixel in the internal raster (color samples plus alpha)."""
    return determine_pixel_color_size(color_type) + (1 if has_alpha_sample(color_type) else 0)


def determine_required_samples(color_type: int) -> int:
    """Samples a caller must supply to set one pixel (RGB for indexed images)."""
    if is_indexed(color_type):
        return 3
    return determine_full_pixel_size(color_type)


def determine_data_row_length(depth: int, color_type: int, width: int) -> int:
    """Bytes in one packed scanline, filter byte excluded."""
    bits = width * determine_full_pixel_size(color_type) * depth
    return (bits + 7) // 8


def determine_filter_unit(depth: int, color_type: int) -> int:
    """Byte distance to the corresponding byte of the previous pixel."""
    return max(1, determine_full_pixel_size(color_type) * depth // 8)


def compute_number_of_pixels(width: int, height: int) -> int:
    return width * height


def compute_max_number_of_colors(depth: int) -> int:
    return min(2 ** depth, 256)


def compute_max_sample_value(depth: int) -> int:
    return (1 << depth) - 1
