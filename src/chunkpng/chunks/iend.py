"""IEND Chunk - end marker with an empty payload."""

from dataclasses import dataclass

from ..utils.binary import IoBuffer, IoWriter
from .base import PngChunk, register_chunk


@register_chunk("IEND")
@dataclass
class IEND(PngChunk):

    def calculate_payload_size(self) -> int:
        return 0

    def write_payload(self, stream: IoWriter):
        pass

    def read_payload(self, stream: IoBuffer, length: int):
        pass
