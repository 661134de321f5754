"""
PNG Chunk Base Class

Every chunk owns a backing buffer holding its complete framed form:

    +--------+------+---------+-------+
    | length | type | payload | CRC32 |
    +--------+------+---------+-------+
       4       4      length     4

length counts the payload only; the CRC covers type + payload.
"""

import logging
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from ..constants import (
    CHUNK_LENGTH_SIZE,
    CHUNK_TYPE_SIZE,
    CHUNK_CRC32_SIZE,
    CHUNK_FRAME_SIZE,
)
from ..errors import NotAPng, CrcMismatch
from ..utils.binary import IoBuffer, IoWriter, BytesLike, index_of_sequence, read_uint32_at

logger = logging.getLogger(__name__)


@dataclass
class PngChunk(ABC):
    """
    Base class for all PNG chunks.

    Subclasses provide the payload layout through calculate_payload_size,
    write_payload and read_payload; framing, CRC and buffer management live
    here.
    """
    chunk_type: ClassVar[str] = ""

    buffer: bytearray = field(default_factory=bytearray, repr=False)
    crc_valid: Optional[bool] = None

    @abstractmethod
    def calculate_payload_size(self) -> int:
        """Payload length for the current state, framing excluded."""

    @abstractmethod
    def write_payload(self, stream: IoWriter):
        """Write the payload at the stream cursor."""

    @abstractmethod
    def read_payload(self, stream: IoBuffer, length: int):
        """Parse a payload of length bytes."""

    @property
    def header_sequence(self) -> bytes:
        return self.chunk_type.encode("ascii")

    def calculate_chunk_length(self) -> int:
        """Length field + type field + payload + CRC."""
        return CHUNK_FRAME_SIZE + self.calculate_payload_size()

    def calculate_data_offset(self) -> int:
        """Offset of the payload from the start of the length field."""
        return CHUNK_LENGTH_SIZE + CHUNK_TYPE_SIZE

    def initialize(self, chunk_length: int):
        self.buffer = bytearray(chunk_length)

    def update(self) -> 'PngChunk':
        """Re-encode length, type, payload and CRC into the backing buffer."""
        chunk_length = self.calculate_chunk_length()
        if len(self.buffer) != chunk_length:
            self.initialize(chunk_length)

        stream = IoWriter(self.buffer)
        stream.write_uint32(chunk_length - CHUNK_FRAME_SIZE)
        stream.write_string8(self.chunk_type)
        self.write_payload(stream)

        crc_offset = chunk_length - CHUNK_CRC32_SIZE
        if stream.position != crc_offset:
            raise ValueError(
                f"{self.chunk_type}: payload wrote {stream.position - self.calculate_data_offset()} bytes, "
                f"expected {crc_offset - self.calculate_data_offset()}"
            )
        stream.write_uint32_at(crc_offset, self.calculate_crc32())
        return self

    def calculate_crc32(self) -> int:
        """CRC-32 over the type field and payload of the backing buffer."""
        end = len(self.buffer) - CHUNK_CRC32_SIZE
        return zlib.crc32(self.buffer[CHUNK_LENGTH_SIZE:end]) & 0xFFFFFFFF

    def load(self, data: BytesLike, strict: bool = False) -> 'PngChunk':
        """
        Parse this chunk from data, which starts at the chunk's length field.

        The CRC is only enforced when strict is set; otherwise a mismatch is
        logged and the chunk loads anyway.
        """
        self.buffer = self.extract_chunk(data)
        self.crc_valid = self.check_crc(strict)

        payload_length = len(self.buffer) - CHUNK_FRAME_SIZE
        offset = self.calculate_data_offset()
        stream = IoBuffer.from_bytes(self.buffer[offset:offset + payload_length])
        self.read_payload(stream, payload_length)
        logger.debug(f"{self.chunk_type}: loaded {payload_length} byte payload")
        return self

    def extract_chunk(self, data: BytesLike) -> bytearray:
        """Copy one framed chunk of this type from the start of data."""
        if len(data) < CHUNK_FRAME_SIZE:
            raise NotAPng(f"{self.chunk_type}: truncated chunk header")

        payload_length = read_uint32_at(data, 0)
        type_code = bytes(data[CHUNK_LENGTH_SIZE:CHUNK_LENGTH_SIZE + CHUNK_TYPE_SIZE])
        if type_code != self.header_sequence:
            raise NotAPng(f"Expected {self.chunk_type} chunk, found {type_code!r}")

        end = CHUNK_FRAME_SIZE + payload_length
        if len(data) < end:
            raise NotAPng(f"{self.chunk_type}: payload of {payload_length} bytes runs past end of buffer")
        return bytearray(data[:end])

    def check_crc(self, strict: bool = False) -> bool:
        stored = read_uint32_at(self.buffer, len(self.buffer) - CHUNK_CRC32_SIZE)
        computed = self.calculate_crc32()
        if stored == computed:
            return True
        if strict:
            raise CrcMismatch(f"{self.chunk_type}: CRC {stored:#010x} != computed {computed:#010x}")
        logger.warning(f"{self.chunk_type}: CRC mismatch (stored {stored:#010x}, computed {computed:#010x})")
        return False

    def verify(self, data: BytesLike) -> bool:
        """Structural presence check: does this chunk's type magic occur in data."""
        return index_of_sequence(data, self.header_sequence) != -1

    def copy_into(self, target: bytearray, offset: int) -> int:
        """Copy the backing buffer into target at offset; returns the end offset."""
        end = offset + len(self.buffer)
        target[offset:end] = self.buffer
        return end

    def __str__(self) -> str:
        return f"{self.chunk_type} ({self.calculate_payload_size()} bytes)"


# Chunk type registry - maps 4-char codes to chunk classes
CHUNK_TYPES: dict[str, type] = {}


def register_chunk(type_code: str):
    """Decorator to register a chunk type."""
    def decorator(cls):
        cls.chunk_type = type_code
        CHUNK_TYPES[type_code] = cls
        return cls
    return decorator


def get_chunk_class(type_code: str) -> type:
    """Get chunk class for a type code."""
    try:
        return CHUNK_TYPES[type_code]
    except KeyError:
        raise KeyError(f"Unsupported chunk type: {type_code}") from None
