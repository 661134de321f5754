"""
PNG constant tables: signature, chunk type magic, color types and bit depths.

Reference: PNG (Second Edition), W3C REC-PNG-20031110, sections 5 and 11.
"""

from enum import IntEnum


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Chunk framing sizes (bytes)
CHUNK_LENGTH_SIZE = 4
CHUNK_TYPE_SIZE = 4
CHUNK_CRC32_SIZE = 4
CHUNK_FRAME_SIZE = CHUNK_LENGTH_SIZE + CHUNK_TYPE_SIZE + CHUNK_CRC32_SIZE

IHDR_PAYLOAD_SIZE = 13
MAX_CHUNK_PAYLOAD = 2 ** 31 - 1


class ColorType(IntEnum):
    GRAYSCALE = 0
    TRUECOLOR = 2
    INDEXED = 3
    GRAYSCALE_AND_ALPHA = 4
    TRUECOLOR_AND_ALPHA = 6


class BitDepth(IntEnum):
    ONE = 1
    TWO = 2
    FOUR = 4
    EIGHT = 8
    SIXTEEN = 16


class FilterType(IntEnum):
    """Per-scanline filter type byte (filter method 0)."""
    NONE = 0
    SUB = 1
    UP = 2
    AVERAGE = 3
    PAETH = 4


# Highest depth this codec handles; 16-bit samples are rejected.
MAX_SUPPORTED_DEPTH = BitDepth.EIGHT

# Allowed depths per color type (PNG table 11.1)
ALLOWED_BIT_DEPTHS = {
    ColorType.GRAYSCALE: (1, 2, 4, 8, 16),
    ColorType.TRUECOLOR: (8, 16),
    ColorType.INDEXED: (1, 2, 4, 8),
    ColorType.GRAYSCALE_AND_ALPHA: (8, 16),
    ColorType.TRUECOLOR_AND_ALPHA: (8, 16),
}

DEFAULT_COMPRESSION = 0
DEFAULT_FILTER = 0
DEFAULT_INTERLACE = 0

# Canonical write order (signature excluded). tRNS and bKGD sit between
# PLTE and IDAT as required by the chunk ordering rules.
SUPPORTED_CHUNKS = ("IHDR", "PLTE", "tRNS", "bKGD", "IDAT", "IEND")

CHUNK_HEADER_SEQUENCES = {name: name.encode("ascii") for name in SUPPORTED_CHUNKS}

# Stored (uncompressed) deflate container layout, used for size prediction
ZLIB_HEADER_SIZE = 2
DEFLATE_STORED_BLOCK_HEADER_SIZE = 5
DEFLATE_STORED_BLOCK_MAX = 0xFFFF
ADLER_CHECKSUM_SIZE = 4
