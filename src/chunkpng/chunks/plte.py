"""
PLTE Chunk - Color Palette

Payload is a run of RGB triples, 3 bytes each. The number of entries is
bounded by 2 ** bit depth (at most 256).
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..errors import IndexOutOfRange, PaletteFull, SampleCountMismatch, SampleOutOfRange
from ..utils.binary import IoBuffer, IoWriter
from .base import PngChunk, register_chunk

logger = logging.getLogger(__name__)


# Simple RGB tuple type for colors
Color = Tuple[int, int, int]


def to_color(color_data: Sequence[int]) -> Color:
    """Validate and normalize an RGB sequence."""
    if len(color_data) != 3:
        raise SampleCountMismatch(f"Palette colors need 3 samples, got {len(color_data)}")
    for sample in color_data:
        if not 0 <= sample <= 255:
            raise SampleOutOfRange(f"Palette sample {sample} outside 0-255")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


@register_chunk("PLTE")
@dataclass
class PLTE(PngChunk):
    """
    Color palette chunk for indexed images.
    Colors are looked up by exact RGB match; no deduplication beyond that.
    """
    max_number_of_colors: int = 256
    colors: List[Color] = field(default_factory=list)

    def add_color(self, color_data: Sequence[int]) -> int:
        """Append a color and return its index."""
        color = to_color(color_data)
        if len(self.colors) >= self.max_number_of_colors:
            raise PaletteFull(f"Palette already holds the maximum of {self.max_number_of_colors} colors")
        self.colors.append(color)
        return len(self.colors) - 1

    def is_color_in_palette(self, color_data: Sequence[int]) -> bool:
        return self.get_palette_index(color_data) is not None

    def get_palette_index(self, color_data: Sequence[int]) -> Optional[int]:
        """Index of the first entry equal to color_data, or None."""
        color = tuple(color_data)
        for index, entry in enumerate(self.colors):
            if entry == color:
                return index
        return None

    def set_color_of(self, index: int, color_data: Sequence[int]) -> 'PLTE':
        """
        Overwrite the entry at index. Writing one past the end appends, so
        index 0 of an empty palette can be set (background alias).
        """
        color = to_color(color_data)
        if index == len(self.colors) and index < self.max_number_of_colors:
            self.colors.append(color)
        elif 0 <= index < len(self.colors):
            self.colors[index] = color
        else:
            raise IndexOutOfRange(f"Palette index {index} out of range (size {len(self.colors)})")
        return self

    def replace_color(self, target_color: Sequence[int], new_color: Sequence[int]) -> 'PLTE':
        index = self.get_palette_index(target_color)
        if index is None:
            logger.debug(f"PLTE: replace_color target {tuple(target_color)} not in palette")
            return self
        return self.set_color_of(index, new_color)

    def get_color_of(self, index: int) -> List[int]:
        if not 0 <= index < len(self.colors):
            raise IndexOutOfRange(f"Palette index {index} out of range (size {len(self.colors)})")
        return list(self.colors[index])

    def get_palette(self) -> List[List[int]]:
        return [list(color) for color in self.colors]

    def convert_to_pixels(self, indices: Sequence[int]) -> List[int]:
        """Resolve a run of palette indices to flat RGB samples."""
        out: List[int] = []
        for index in indices:
            out.extend(self.get_color_of(index))
        return out

    def calculate_payload_size(self) -> int:
        return 3 * len(self.colors)

    def write_payload(self, stream: IoWriter):
        if not self.colors:
            logger.warning("PLTE: writing an empty palette")
        for r, g, b in self.colors:
            stream.write_byte(r)
            stream.write_byte(g)
            stream.write_byte(b)

    def read_payload(self, stream: IoBuffer, length: int):
        if length % 3:
            raise SampleCountMismatch(f"PLTE payload length {length} is not a multiple of 3")
        num_entries = length // 3
        if num_entries > self.max_number_of_colors:
            raise PaletteFull(f"PLTE has {num_entries} entries, maximum is {self.max_number_of_colors}")

        self.colors = []
        for _ in range(num_entries):
            r = stream.read_byte()
            g = stream.read_byte()
            b = stream.read_byte()
            self.colors.append((r, g, b))

    def __len__(self) -> int:
        return len(self.colors)
