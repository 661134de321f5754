"""
IDAT Chunk - Image Data

Owns the decoded raster: one byte per sample, row major, no padding,
``width * height * full_pixel_size`` bytes long. Palette images store
raw palette indices here.

Encode path (update):
    raster -> pack to bit depth (per row) -> prefix filter byte NONE
           -> codec.deflate -> payload

Decode path (load):
    payload(s) -> codec.inflate -> undo scanline filters
               -> strip filter bytes -> unpack to one byte per sample

The payload size is predicted without compressing by assuming the codec
writes stored deflate blocks (see codec.predict_stored_size). Once update()
has run, the real encoded length is used until the raster changes again.
"""

import logging
import zlib
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from ..constants import BitDepth, ColorType, CHUNK_FRAME_SIZE
from ..codec import Codec, StoredDeflateCodec, validate_codec, predict_stored_size
from ..errors import IndexOutOfRange, NotAPng, SampleCountMismatch, SampleOutOfRange
from ..pixels import (
    determine_pixel_color_size,
    determine_full_pixel_size,
    determine_data_row_length,
    determine_filter_unit,
    compute_number_of_pixels,
    compute_max_sample_value,
    has_alpha_sample,
    is_indexed,
)
from ..scanlines import (
    pack_samples,
    unpack_samples,
    add_filter_fields,
    remove_filter_fields,
    defilter,
)
from ..utils.binary import IoBuffer, IoWriter, BytesLike
from .base import PngChunk, register_chunk

logger = logging.getLogger(__name__)

PixelValue = Union[int, List[int]]


@register_chunk("IDAT")
@dataclass
class IDAT(PngChunk):
    width: int = 0
    height: int = 0
    depth: int = BitDepth.EIGHT
    color_type: int = ColorType.INDEXED
    codec: Codec = field(default_factory=StoredDeflateCodec)
    pixel_data: bytearray = field(default_factory=bytearray, repr=False)

    # Codec output from the last update(); cleared by any raster change
    _encoded: Optional[bytes] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        validate_codec(self.codec)
        self.apply_layout_information(self.width, self.height, self.depth, self.color_type)

    # ── Layout ─────────────────────────────────────────────────────────────

    def apply_layout_information(self, width: int, height: int, depth: int, color_type: int) -> 'IDAT':
        """Configure the raster layout; reallocates (zeroed) when the size changes."""
        self.width = width
        self.height = height
        self.depth = depth
        self.color_type = color_type
        self.pixel_color_size = determine_pixel_color_size(color_type)
        self.has_alpha_sample = has_alpha_sample(color_type)
        self.number_of_pixels = compute_number_of_pixels(width, height)

        raster_size = self.number_of_pixels * self.full_pixel_size
        if len(self.pixel_data) != raster_size:
            self.pixel_data = bytearray(raster_size)
        self._encoded = None
        return self

    @property
    def full_pixel_size(self) -> int:
        return determine_full_pixel_size(self.color_type)

    @property
    def row_length(self) -> int:
        """Packed bytes per scanline, filter byte excluded."""
        return determine_data_row_length(self.depth, self.color_type, self.width)

    def apply_codec(self, codec: Codec) -> 'IDAT':
        self.codec = validate_codec(codec)
        self._encoded = None
        return self

    # ── Sizing ─────────────────────────────────────────────────────────────

    def calculate_pixel_and_filter_size(self) -> int:
        """Filtered scanline bytes: one filter byte plus the packed row, per row."""
        return (self.row_length + 1) * self.height

    def predict_payload_size(self) -> int:
        return predict_stored_size(self.calculate_pixel_and_filter_size())

    def calculate_payload_size(self) -> int:
        if self._encoded is not None:
            return len(self._encoded)
        return self.predict_payload_size()

    # ── Encode ─────────────────────────────────────────────────────────────

    def update(self) -> 'IDAT':
        row_samples = self.width * self.full_pixel_size
        packed = pack_samples(self.pixel_data, self.depth, row_samples, self.height)
        filtered = add_filter_fields(packed, self.row_length, self.height)

        self._encoded = bytes(self.codec.deflate(filtered))
        predicted = self.predict_payload_size()
        if len(self._encoded) != predicted:
            logger.debug(f"IDAT: codec produced {len(self._encoded)} bytes, stored-block prediction was {predicted}")
        return super().update()

    def write_payload(self, stream: IoWriter):
        stream.write_bytes(self._encoded)

    # ── Decode ─────────────────────────────────────────────────────────────

    def load(self, data: BytesLike, strict: bool = False) -> 'IDAT':
        """
        Load image data starting at the first IDAT chunk's length field.
        Consecutive IDAT chunks are concatenated before inflation.
        """
        view = memoryview(data)
        compressed = bytearray()
        offset = 0
        count = 0
        first = None
        crc_valid = True
        while offset + CHUNK_FRAME_SIZE <= len(view) and bytes(view[offset + 4:offset + 8]) == self.header_sequence:
            chunk = self.extract_chunk(view[offset:])
            self.buffer = chunk
            crc_valid = self.check_crc(strict) and crc_valid
            compressed += chunk[self.calculate_data_offset():-4]
            offset += len(chunk)
            count += 1
            if first is None:
                first = chunk

        if first is None:
            raise NotAPng("No IDAT chunk at the given offset")
        self.buffer = first
        self.crc_valid = crc_valid
        logger.debug(f"IDAT: {count} chunk(s), {len(compressed)} compressed bytes")

        self.read_payload(IoBuffer.from_bytes(compressed), len(compressed))
        return self

    def read_payload(self, stream: IoBuffer, length: int):
        try:
            raw = bytearray(self.codec.inflate(stream.read_bytes(length)))
        except zlib.error as e:
            raise NotAPng(f"IDAT data does not inflate: {e}") from e

        expected = self.calculate_pixel_and_filter_size()
        if len(raw) < expected:
            raise NotAPng(f"IDAT inflated to {len(raw)} bytes, expected {expected}")
        if len(raw) > expected:
            logger.debug(f"IDAT: ignoring {len(raw) - expected} trailing bytes")
            del raw[expected:]

        defilter(raw, self.row_length, self.height, determine_filter_unit(self.depth, self.color_type))
        packed = remove_filter_fields(raw, self.row_length, self.height)
        row_samples = self.width * self.full_pixel_size
        self.pixel_data = bytearray(unpack_samples(packed, self.depth, row_samples, self.row_length, self.height))
        self._encoded = None

    # ── Pixel access ───────────────────────────────────────────────────────

    def translate_xy_to_index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexOutOfRange(f"Position ({x}, {y}) outside {self.width}x{self.height} image")
        full_pixel_size = self.full_pixel_size
        return y * (self.width * full_pixel_size) + x * full_pixel_size

    def get_pixel_of(self, index: int) -> PixelValue:
        """Single value for one-sample pixels, list of samples otherwise."""
        size = self.full_pixel_size
        self._check_index(index, size)
        if size == 1:
            return self.pixel_data[index]
        return list(self.pixel_data[index:index + size])

    def set_pixel_of(self, index: int, value: Union[int, Sequence[int]]) -> 'IDAT':
        if isinstance(value, int):
            return self.set_value_at(index, value)
        if len(value) > self.full_pixel_size:
            raise SampleCountMismatch(f"Pixel takes at most {self.full_pixel_size} samples, got {len(value)}")
        self._check_index(index, len(value))
        for sample in value:
            self._check_sample(sample)
        self.pixel_data[index:index + len(value)] = bytes(value)
        self._encoded = None
        return self

    def get_value_at(self, index: int) -> int:
        self._check_index(index)
        return self.pixel_data[index]

    def set_value_at(self, index: int, value: int) -> 'IDAT':
        self._check_index(index)
        self._check_sample(value)
        self.pixel_data[index] = value
        self._encoded = None
        return self

    def set_alpha(self, value: int, index: int) -> 'IDAT':
        """Write the alpha sample of the pixel starting at index."""
        if not self.has_alpha_sample:
            raise SampleCountMismatch("Raster has no alpha sample")
        return self.set_value_at(index + self.pixel_color_size, value)

    def get_pixel_palette_indices(self) -> List[int]:
        """Sorted distinct palette indices referenced by the raster."""
        if not is_indexed(self.color_type):
            return []
        return sorted(set(self.pixel_data))

    def get_data(self) -> bytes:
        return bytes(self.pixel_data)

    def set_pixel_data(self, samples: Sequence[int]) -> 'IDAT':
        expected = self.number_of_pixels * self.full_pixel_size
        if len(samples) != expected:
            raise SampleCountMismatch(f"Raster needs {expected} samples, got {len(samples)}")
        for sample in samples:
            self._check_sample(sample)
        self.pixel_data = bytearray(samples)
        self._encoded = None
        return self

    def _check_index(self, index: int, span: int = 1):
        if not isinstance(index, int) or index < 0 or index + span > len(self.pixel_data):
            raise IndexOutOfRange(f"Raster index {index} out of range (size {len(self.pixel_data)})")

    def _check_sample(self, value: int):
        limit = compute_max_sample_value(self.depth)
        if not 0 <= value <= limit:
            raise SampleOutOfRange(f"Sample {value} outside 0-{limit} for bit depth {int(self.depth)}")
