"""
tRNS Chunk - Transparency

Two mutually exclusive layouts, selected by color type:

    INDEXED     one alpha byte per palette index, starting at index 0;
                indices past the end of the table are fully opaque
    GRAYSCALE   2-byte gray sample per color key
    TRUECOLOR   2-byte R, G, B samples per color key

A color key marks every pixel of exactly that color fully transparent.
The chunk is not permitted for color types with an alpha channel.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..constants import ColorType
from ..errors import (
    IndexOutOfRange,
    SampleCountMismatch,
    SampleOutOfRange,
    UnsupportedOperation,
)
from ..pixels import (
    is_indexed,
    has_alpha_sample,
    determine_pixel_color_size,
)
from ..utils.binary import IoBuffer, IoWriter
from .base import PngChunk, register_chunk

logger = logging.getLogger(__name__)

OPAQUE = 255
ColorKey = Tuple[int, ...]


@register_chunk("tRNS")
@dataclass
class tRNS(PngChunk):
    color_type: int = ColorType.INDEXED
    max_number_of_colors: int = 256
    # Highest color key sample the bit depth allows
    max_sample_value: int = 255
    # Indexed images: palette index -> alpha
    alphas: Dict[int, int] = field(default_factory=dict)
    # Grayscale / truecolor images: ordered color keys
    color_keys: List[ColorKey] = field(default_factory=list)

    def __post_init__(self):
        if has_alpha_sample(self.color_type):
            raise UnsupportedOperation(f"tRNS is not allowed for color type {ColorType(self.color_type).name}")

    @property
    def is_indexed(self) -> bool:
        return is_indexed(self.color_type)

    def set_transparency(self, value: Union[int, Sequence[int]], index: Optional[int] = None) -> 'tRNS':
        """
        With index: value is the alpha byte for that palette index.
        Without: value is a color key (gray sample or RGB triple).
        """
        if index is not None:
            if not self.is_indexed:
                raise UnsupportedOperation("Per-index alpha is only available for indexed images")
            if not 0 <= index < self.max_number_of_colors:
                raise IndexOutOfRange(f"Palette index {index} out of range (maximum {self.max_number_of_colors - 1})")
            if not 0 <= value <= 255:
                raise SampleOutOfRange(f"Alpha {value} outside 0-255")
            self.alphas[index] = int(value)
            return self

        if self.is_indexed:
            raise UnsupportedOperation("Indexed images need a palette index to set transparency")
        key = self._to_color_key(value)
        if key not in self.color_keys:
            self.color_keys.append(key)
        return self

    def get_value_of(self, index: int) -> Optional[int]:
        """Stored alpha for a palette index, or None (caller treats as opaque)."""
        return self.alphas.get(index)

    def is_transparency_set(self, color_data: Union[int, Sequence[int]]) -> bool:
        if self.is_indexed:
            return False
        return self._to_color_key(color_data) in self.color_keys

    def remove_transparency_of(self, index: int) -> 'tRNS':
        self.alphas.pop(index, None)
        return self

    def remove_transparency(self, color_data: Union[int, Sequence[int]]) -> 'tRNS':
        key = self._to_color_key(color_data)
        if key in self.color_keys:
            self.color_keys.remove(key)
        return self

    def get_transparencies(self) -> List:
        """
        Indexed: alpha per palette index up to the highest one set (gaps are
        opaque). Otherwise: the color keys as lists.
        """
        if self.is_indexed:
            return list(self._alpha_table())
        return [list(key) for key in self.color_keys]

    def _alpha_table(self) -> bytes:
        if not self.alphas:
            return b""
        table = bytearray([OPAQUE] * (max(self.alphas) + 1))
        for index, alpha in self.alphas.items():
            table[index] = alpha
        return bytes(table)

    def _to_color_key(self, color_data: Union[int, Sequence[int]]) -> ColorKey:
        if isinstance(color_data, int):
            color_data = [color_data]
        samples = determine_pixel_color_size(self.color_type)
        if len(color_data) != samples:
            raise SampleCountMismatch(f"Color key needs {samples} samples, got {len(color_data)}")
        for sample in color_data:
            if not 0 <= sample <= self.max_sample_value:
                raise SampleOutOfRange(f"Color key sample {sample} outside 0-{self.max_sample_value}")
        return tuple(int(sample) for sample in color_data)

    def calculate_payload_size(self) -> int:
        if self.is_indexed:
            return len(self._alpha_table())
        return len(self.color_keys) * determine_pixel_color_size(self.color_type) * 2

    def write_payload(self, stream: IoWriter):
        if self.is_indexed:
            stream.write_bytes(self._alpha_table())
            return
        if len(self.color_keys) > 1:
            logger.warning(f"tRNS: writing {len(self.color_keys)} color keys; most decoders only honor the first")
        for key in self.color_keys:
            for sample in key:
                stream.write_uint16(sample)

    def read_payload(self, stream: IoBuffer, length: int):
        self.alphas = {}
        self.color_keys = []
        if self.is_indexed:
            if length > self.max_number_of_colors:
                raise IndexOutOfRange(f"tRNS has {length} entries, maximum is {self.max_number_of_colors}")
            for index, alpha in enumerate(stream.read_bytes(length)):
                self.alphas[index] = alpha
            return

        entry_size = determine_pixel_color_size(self.color_type) * 2
        if length % entry_size:
            raise SampleCountMismatch(f"tRNS payload length {length} is not a multiple of {entry_size}")
        for _ in range(length // entry_size):
            key = tuple(stream.read_uint16() for _ in range(entry_size // 2))
            self.color_keys.append(key)
