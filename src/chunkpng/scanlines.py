"""
Scanline framing: bit packing, filter-type bytes and defiltering.

The internal raster holds one byte per sample. On the wire each scanline is
a filter-type byte followed by the samples packed at the image bit depth,
most significant bits first, with the last byte of each row zero-padded.
"""

from typing import Sequence

from .constants import FilterType
from .errors import NotAPng


def pack_row(samples: Sequence[int], depth: int) -> bytes:
    """Pack one row of samples into depth-bit fields."""
    if depth == 8:
        return bytes(samples)
    per_byte = 8 // depth
    mask = (1 << depth) - 1
    out = bytearray((len(samples) + per_byte - 1) // per_byte)
    for i, value in enumerate(samples):
        shift = 8 - depth * (i % per_byte + 1)
        out[i // per_byte] |= (value & mask) << shift
    return bytes(out)


def unpack_row(packed: Sequence[int], depth: int, count: int) -> bytes:
    """Unpack count depth-bit samples from one packed row."""
    if depth == 8:
        return bytes(packed[:count])
    per_byte = 8 // depth
    mask = (1 << depth) - 1
    out = bytearray(count)
    for i in range(count):
        shift = 8 - depth * (i % per_byte + 1)
        out[i] = (packed[i // per_byte] >> shift) & mask
    return bytes(out)


def pack_samples(samples: Sequence[int], depth: int, row_samples: int, height: int) -> bytes:
    """Pack a whole raster row by row (rows are byte aligned)."""
    out = bytearray()
    for y in range(height):
        out += pack_row(samples[y * row_samples:(y + 1) * row_samples], depth)
    return bytes(out)


def unpack_samples(packed: Sequence[int], depth: int, row_samples: int, row_length: int, height: int) -> bytes:
    out = bytearray()
    for y in range(height):
        out += unpack_row(packed[y * row_length:(y + 1) * row_length], depth, row_samples)
    return bytes(out)


def add_filter_fields(data: Sequence[int], row_length: int, height: int,
                      filter_type: int = FilterType.NONE) -> bytes:
    """Prefix every row of data with a filter-type byte."""
    out = bytearray()
    for y in range(height):
        out.append(filter_type)
        out += bytes(data[y * row_length:(y + 1) * row_length])
    return bytes(out)


def remove_filter_fields(data: Sequence[int], row_length: int, height: int) -> bytes:
    """Strip the filter-type byte from every row."""
    out = bytearray()
    stride = row_length + 1
    for y in range(height):
        out += bytes(data[y * stride + 1:(y + 1) * stride])
    return bytes(out)


def paeth_predictor(a: int, b: int, c: int) -> int:
    p = a + b - c
    pa = abs(p - a)
    pb = abs(p - b)
    pc = abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    if pb <= pc:
        return b
    return c


def undo_filter(filter_type: int, scanline: bytearray, previous: Sequence[int], filter_unit: int):
    """
    Undo the filter of one scanline in place.

    scanline excludes the filter-type byte; previous is the already
    reconstructed row above (all zeros for the first row).
    """
    if filter_type == FilterType.NONE:
        return
    if filter_type == FilterType.SUB:
        for i in range(filter_unit, len(scanline)):
            scanline[i] = (scanline[i] + scanline[i - filter_unit]) & 0xFF
    elif filter_type == FilterType.UP:
        for i in range(len(scanline)):
            scanline[i] = (scanline[i] + previous[i]) & 0xFF
    elif filter_type == FilterType.AVERAGE:
        for i in range(len(scanline)):
            a = scanline[i - filter_unit] if i >= filter_unit else 0
            scanline[i] = (scanline[i] + ((a + previous[i]) >> 1)) & 0xFF
    elif filter_type == FilterType.PAETH:
        for i in range(len(scanline)):
            if i >= filter_unit:
                a = scanline[i - filter_unit]
                c = previous[i - filter_unit]
            else:
                a = c = 0
            scanline[i] = (scanline[i] + paeth_predictor(a, previous[i], c)) & 0xFF
    else:
        raise NotAPng(f"Invalid scanline filter type: {filter_type}")


def defilter(data: bytearray, row_length: int, height: int, filter_unit: int):
    """
    Reconstruct every scanline of filtered data in place.

    Filter-type bytes are reset to NONE once their row is reconstructed.
    """
    stride = row_length + 1
    previous = bytes(row_length)
    for y in range(height):
        start = y * stride
        row = bytearray(data[start + 1:start + stride])
        undo_filter(data[start], row, previous, filter_unit)
        data[start] = FilterType.NONE
        data[start + 1:start + stride] = row
        previous = row
