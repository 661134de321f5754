"""
IHDR Chunk - Image Header

Payload (13 bytes, big endian):
    width        uint32
    height       uint32
    bit depth    uint8
    color type   uint8
    compression  uint8   (0 = deflate)
    filter       uint8   (0 = adaptive, five filter types)
    interlace    uint8   (0 = none; Adam7 unsupported)
"""

from dataclasses import dataclass, field, asdict

from ..constants import (
    ColorType,
    BitDepth,
    ALLOWED_BIT_DEPTHS,
    MAX_SUPPORTED_DEPTH,
    MAX_CHUNK_PAYLOAD,
    IHDR_PAYLOAD_SIZE,
    DEFAULT_COMPRESSION,
    DEFAULT_FILTER,
    DEFAULT_INTERLACE,
)
from ..errors import InvalidMetadata
from ..utils.binary import IoBuffer, IoWriter
from .base import PngChunk, register_chunk


@dataclass
class PngMetadata:
    """Resolved image metadata, as stored in IHDR."""
    width: int = 0
    height: int = 0
    depth: int = BitDepth.EIGHT
    color_type: int = ColorType.INDEXED
    compression: int = DEFAULT_COMPRESSION
    filter: int = DEFAULT_FILTER
    interlace: int = DEFAULT_INTERLACE

    def to_dict(self) -> dict:
        return {key: int(value) for key, value in asdict(self).items()}


def validate_metadata(meta: PngMetadata) -> PngMetadata:
    """
    Check bit depth, color type and method tokens.

    Returns a copy with depth and color_type normalized to their enums.
    """
    valid_depths = [int(d) for d in BitDepth]
    if meta.depth not in valid_depths:
        raise InvalidMetadata(f"Invalid bit depth: {meta.depth}")
    if meta.depth > MAX_SUPPORTED_DEPTH:
        raise InvalidMetadata(f"Bit depth {meta.depth} is not supported (maximum {int(MAX_SUPPORTED_DEPTH)})")

    valid_color_types = [int(c) for c in ColorType]
    if meta.color_type not in valid_color_types:
        raise InvalidMetadata(f"Invalid color type: {meta.color_type}")

    color_type = ColorType(meta.color_type)
    if meta.depth not in ALLOWED_BIT_DEPTHS[color_type]:
        raise InvalidMetadata(f"Bit depth {meta.depth} is not allowed for {color_type.name}")

    for name in ("width", "height"):
        value = getattr(meta, name)
        if not isinstance(value, int) or value < 0 or value > MAX_CHUNK_PAYLOAD:
            raise InvalidMetadata(f"Invalid {name}: {value!r}")

    if meta.compression != DEFAULT_COMPRESSION:
        raise InvalidMetadata(f"Unknown compression method: {meta.compression}")
    if meta.filter != DEFAULT_FILTER:
        raise InvalidMetadata(f"Unknown filter method: {meta.filter}")
    if meta.interlace != DEFAULT_INTERLACE:
        raise InvalidMetadata(f"Interlace method {meta.interlace} is not supported")

    return PngMetadata(
        width=meta.width,
        height=meta.height,
        depth=BitDepth(meta.depth),
        color_type=color_type,
        compression=meta.compression,
        filter=meta.filter,
        interlace=meta.interlace,
    )


@register_chunk("IHDR")
@dataclass
class IHDR(PngChunk):
    """Image header chunk. Always first after the signature."""
    metadata: PngMetadata = field(default_factory=PngMetadata)

    def get_metadata(self) -> PngMetadata:
        return PngMetadata(**asdict(self.metadata))

    def set_metadata(self, meta: PngMetadata) -> 'IHDR':
        self.metadata = PngMetadata(**asdict(meta))
        return self

    def calculate_payload_size(self) -> int:
        return IHDR_PAYLOAD_SIZE

    def write_payload(self, stream: IoWriter):
        meta = self.metadata
        stream.write_uint32(meta.width)
        stream.write_uint32(meta.height)
        stream.write_byte(meta.depth)
        stream.write_byte(meta.color_type)
        stream.write_byte(meta.compression)
        stream.write_byte(meta.filter)
        stream.write_byte(meta.interlace)

    def read_payload(self, stream: IoBuffer, length: int):
        if length != IHDR_PAYLOAD_SIZE:
            raise InvalidMetadata(f"IHDR payload must be {IHDR_PAYLOAD_SIZE} bytes, got {length}")
        self.metadata = PngMetadata(
            width=stream.read_uint32(),
            height=stream.read_uint32(),
            depth=stream.read_byte(),
            color_type=stream.read_byte(),
            compression=stream.read_byte(),
            filter=stream.read_byte(),
            interlace=stream.read_byte(),
        )
