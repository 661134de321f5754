"""
bKGD Chunk - Background Color

    INDEXED                 1 byte palette index
    GRAYSCALE(+ALPHA)       2-byte gray sample
    TRUECOLOR(+ALPHA)       2-byte R, G, B samples

Samples are in the image bit depth's range.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from ..constants import ColorType
from ..errors import SampleCountMismatch, SampleOutOfRange
from ..pixels import is_indexed, is_grayscale_family
from ..utils.binary import IoBuffer, IoWriter
from .base import PngChunk, register_chunk


def determine_background_samples_per_entry(color_type: int) -> int:
    if is_indexed(color_type) or is_grayscale_family(color_type):
        return 1
    return 3


@register_chunk("bKGD")
@dataclass
class bKGD(PngChunk):
    color_type: int = ColorType.INDEXED
    # Highest sample (or palette index) the bit depth allows
    max_sample_value: int = 255
    background_color: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not self.background_color:
            self.background_color = [0] * determine_background_samples_per_entry(self.color_type)

    def set_background_color(self, color: Sequence[int]) -> 'bKGD':
        required = determine_background_samples_per_entry(self.color_type)
        if len(color) != required:
            raise SampleCountMismatch(f"Background needs {required} samples, got {len(color)}")
        for sample in color:
            if not 0 <= sample <= self.max_sample_value:
                raise SampleOutOfRange(f"Background sample {sample} outside 0-{self.max_sample_value}")
        self.background_color = [int(sample) for sample in color]
        return self

    def get_background_color(self) -> List[int]:
        return list(self.background_color)

    def calculate_payload_size(self) -> int:
        if is_indexed(self.color_type):
            return 1
        return determine_background_samples_per_entry(self.color_type) * 2

    def write_payload(self, stream: IoWriter):
        if is_indexed(self.color_type):
            stream.write_byte(self.background_color[0])
            return
        for sample in self.background_color:
            stream.write_uint16(sample)

    def read_payload(self, stream: IoBuffer, length: int):
        expected = self.calculate_payload_size()
        if length != expected:
            raise SampleCountMismatch(f"bKGD payload must be {expected} bytes, got {length}")
        if is_indexed(self.color_type):
            color = [stream.read_byte()]
        else:
            count = determine_background_samples_per_entry(self.color_type)
            color = [stream.read_uint16() for _ in range(count)]
        self.set_background_color(color)
