"""
Compression codecs for the pixel-data chunk.

A codec is any object exposing ``deflate(bytes) -> bytes`` and
``inflate(bytes) -> bytes`` producing/consuming a zlib container
(RFC 1950) around deflate data (RFC 1951).

StoredDeflateCodec writes only stored (BTYPE=00) blocks, so its output
length is a pure function of the input length:

    2 (zlib header) + n + 5 * ceil(n / 0xFFFF) + 4 (Adler-32)

with at least one block even for empty input. The pixel-data chunk relies on
that to size its buffer before compressing.
"""

import zlib
from typing import Protocol, runtime_checkable

from .constants import (
    ZLIB_HEADER_SIZE,
    DEFLATE_STORED_BLOCK_HEADER_SIZE,
    DEFLATE_STORED_BLOCK_MAX,
    ADLER_CHECKSUM_SIZE,
)
from .errors import InvalidCodec


# CMF=0x78 (deflate, 32K window), FLG=0x01 (fastest, FCHECK so CMF*256+FLG % 31 == 0)
STORED_ZLIB_HEADER = b"\x78\x01"


@runtime_checkable
class Codec(Protocol):
    def deflate(self, data: bytes) -> bytes: ...

    def inflate(self, data: bytes) -> bytes: ...


def validate_codec(codec) -> Codec:
    """Return codec unchanged, or raise InvalidCodec if it lacks deflate/inflate."""
    if not callable(getattr(codec, "deflate", None)) or not callable(getattr(codec, "inflate", None)):
        raise InvalidCodec(f"Codec {codec!r} is missing required methods deflate/inflate")
    return codec


def count_stored_blocks(size: int) -> int:
    """Number of stored deflate blocks needed for size bytes (minimum 1)."""
    return max(1, (size + DEFLATE_STORED_BLOCK_MAX - 1) // DEFLATE_STORED_BLOCK_MAX)


def predict_stored_size(size: int) -> int:
    """Exact zlib container size for size bytes written as stored blocks."""
    return (ZLIB_HEADER_SIZE
            + size
            + DEFLATE_STORED_BLOCK_HEADER_SIZE * count_stored_blocks(size)
            + ADLER_CHECKSUM_SIZE)


class StoredDeflateCodec:
    """Deterministic, uncompressed zlib codec (stored blocks only)."""

    def deflate(self, data: bytes) -> bytes:
        data = bytes(data)
        out = bytearray(STORED_ZLIB_HEADER)
        blocks = count_stored_blocks(len(data))
        for i in range(blocks):
            block = data[i * DEFLATE_STORED_BLOCK_MAX:(i + 1) * DEFLATE_STORED_BLOCK_MAX]
            size = len(block)
            out.append(0x01 if i == blocks - 1 else 0x00)  # BFINAL, BTYPE=00
            out += size.to_bytes(2, "little")
            out += (size ^ 0xFFFF).to_bytes(2, "little")
            out += block
        out += (zlib.adler32(data) & 0xFFFFFFFF).to_bytes(4, "big")
        return bytes(out)

    def inflate(self, data: bytes) -> bytes:
        return zlib.decompress(bytes(data))

    def __repr__(self) -> str:
        return "StoredDeflateCodec()"


class ZlibCodec:
    """Entropy-coded zlib codec. Output size is not predictable in advance."""

    def __init__(self, level: int = zlib.Z_DEFAULT_COMPRESSION):
        if not -1 <= level <= 9:
            raise ValueError(f"Invalid zlib level: {level}")
        self.level = level

    def deflate(self, data: bytes) -> bytes:
        return zlib.compress(bytes(data), self.level)

    def inflate(self, data: bytes) -> bytes:
        return zlib.decompress(bytes(data))

    def __repr__(self) -> str:
        return f"ZlibCodec(level={self.level})"
