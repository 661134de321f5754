"""Byte-buffer helpers shared by the chunk readers and writers."""
from .binary import IoBuffer, IoWriter, ByteOrder, index_of_sequence, read_uint32_at

__all__ = ["IoBuffer", "IoWriter", "ByteOrder", "index_of_sequence", "read_uint32_at"]
