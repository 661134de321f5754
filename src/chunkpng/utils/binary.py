"""Clean binary I/O utilities for PNG chunk parsing and framing."""

import struct
from enum import Enum
from typing import BinaryIO, Union
from io import BytesIO


BytesLike = Union[bytes, bytearray, memoryview]


class ByteOrder(Enum):
    """Byte order enum for struct packing/unpacking."""
    BIG_ENDIAN = ">"


class IoBuffer:
    """Binary reader with endian support."""

    def __init__(self, stream: BinaryIO, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN):
        self.stream = stream
        self.byte_order = byte_order

    @classmethod
    def from_bytes(cls, data: BytesLike, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN) -> 'IoBuffer':
        """Create from bytes."""
        return cls(BytesIO(bytes(data)), byte_order)

    def read_bytes(self, count: int) -> bytes:
        """Read raw bytes."""
        return self.stream.read(count)

    def read_byte(self) -> int:
        """Read single byte (0-255)."""
        data = self.stream.read(1)
        if not data:
            raise EOFError("Unexpected end of buffer")
        return data[0]

    def read_uint16(self) -> int:
        """Read unsigned 16-bit integer."""
        return self._unpack("H", 2)

    def read_uint32(self) -> int:
        """Read unsigned 32-bit integer."""
        return self._unpack("I", 4)

    def _unpack(self, code: str, size: int) -> int:
        data = self.stream.read(size)
        if len(data) != size:
            raise EOFError(f"Needed {size} bytes, got {len(data)}")
        return struct.unpack(f"{self.byte_order.value}{code}", data)[0]


class IoWriter:
    """
    Binary writer over a pre-sized bytearray.

    Keeps a cursor for sequential writes and offers *_at variants for
    fixed-offset writes. The target buffer is mutated in place and is
    never reallocated.
    """

    def __init__(self, buffer: bytearray, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN):
        self.buffer = buffer
        self.byte_order = byte_order
        self.position = 0

    def write_bytes(self, data: BytesLike):
        """Write raw bytes at the cursor."""
        self.position = self.write_bytes_at(self.position, data)

    def write_byte(self, value: int):
        """Write single byte."""
        self.position = self.write_uint8_at(self.position, value)

    def write_uint16(self, value: int):
        """Write unsigned 16-bit integer."""
        self.position = self.write_uint16_at(self.position, value)

    def write_uint32(self, value: int):
        """Write unsigned 32-bit integer."""
        self.position = self.write_uint32_at(self.position, value)

    def write_string8(self, value: str):
        """Write an ASCII tag, one byte per character."""
        self.write_bytes(value.encode('ascii'))

    def write_bytes_at(self, offset: int, data: BytesLike) -> int:
        end = offset + len(data)
        if end > len(self.buffer):
            raise ValueError(f"Write of {len(data)} bytes at {offset} overruns buffer of {len(self.buffer)}")
        self.buffer[offset:end] = data
        return end

    def write_uint8_at(self, offset: int, value: int) -> int:
        return self.write_bytes_at(offset, struct.pack('B', value))

    def write_uint16_at(self, offset: int, value: int) -> int:
        return self.write_bytes_at(offset, struct.pack(f"{self.byte_order.value}H", value))

    def write_uint32_at(self, offset: int, value: int) -> int:
        return self.write_bytes_at(offset, struct.pack(f"{self.byte_order.value}I", value))


def read_uint32_at(data: BytesLike, offset: int, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN) -> int:
    """Read an unsigned 32-bit integer at a fixed offset."""
    return struct.unpack_from(f"{byte_order.value}I", data, offset)[0]


def index_of_sequence(data: BytesLike, sequence: bytes, start: int = 0) -> int:
    """Return the offset of the first occurrence of sequence at or after start, or -1."""
    return bytes(data).find(sequence, start) if isinstance(data, memoryview) else data.find(sequence, start)
