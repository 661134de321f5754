"""
PNG Image Document

Composes the chunk set of one image and routes pixel, palette,
transparency and background operations to the chunk(s) responsible for
them, given the active color type.

Chunk slots are fixed: signature, IHDR, IDAT and IEND always exist;
PLTE, tRNS and bKGD are optional. Serialization always follows the
canonical order in constants.SUPPORTED_CHUNKS.

Positions passed to pixel methods are either an (x, y) pair or a raw
raster offset (sample index into the internal raster).
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .chunks import (
    Signature,
    IHDR,
    PLTE,
    tRNS,
    bKGD,
    IDAT,
    IEND,
    PngMetadata,
    validate_metadata,
    get_chunk_class,
)
from .codec import Codec, StoredDeflateCodec, validate_codec
from .constants import (
    BitDepth,
    ColorType,
    CHUNK_LENGTH_SIZE,
    CHUNK_HEADER_SEQUENCES,
    SUPPORTED_CHUNKS,
    PNG_SIGNATURE,
)
from .errors import (
    IndexOutOfRange,
    InsufficientSamples,
    NoBackground,
    NoPalette,
    NoTransparency,
    NotAPng,
    SampleOutOfRange,
    UnsupportedOperation,
)
from .pixels import (
    is_indexed,
    is_grayscale,
    is_truecolor,
    is_grayscale_with_alpha,
    is_truecolor_with_alpha,
    has_alpha_sample,
    determine_required_samples,
    compute_number_of_pixels,
    compute_max_number_of_colors,
    compute_max_sample_value,
)
from .utils.binary import BytesLike, index_of_sequence

logger = logging.getLogger(__name__)

Position = Union[int, Sequence[int]]
OPAQUE = 255


class PngImage:
    """
    One PNG document: metadata, chunk set and the injected codec.

    Usage:
        png = PngImage(width=2, height=1, color_type=ColorType.INDEXED)
        png.set_pixel_at((0, 0), [255, 0, 0])
        data = png.save()

        same = PngImage.from_bytes(data)
        same.get_palette_color_at((0, 0))   # [255, 0, 0]
    """

    def __init__(self, metadata: Optional[PngMetadata] = None, *,
                 width: int = 0, height: int = 0,
                 depth: int = BitDepth.EIGHT,
                 color_type: int = ColorType.INDEXED,
                 codec: Optional[Codec] = None):
        if metadata is None:
            metadata = PngMetadata(width=width, height=height, depth=depth, color_type=color_type)
        self._apply_metadata(metadata)
        self._codec = validate_codec(codec) if codec is not None else StoredDeflateCodec()

        self.signature = Signature()
        self.ihdr: IHDR = IHDR(metadata=self._metadata)
        self.plte: Optional[PLTE] = None
        self.trns: Optional[tRNS] = None
        self.bkgd: Optional[bKGD] = None
        self.idat: IDAT = IDAT(codec=self._codec)
        self.iend: IEND = IEND()
        self._initialize_chunks()

    # ── Construction / file I/O ────────────────────────────────────────────

    @classmethod
    def from_bytes(cls, data: BytesLike, codec: Optional[Codec] = None, strict: bool = False) -> 'PngImage':
        """Parse a PNG from bytes."""
        return cls(codec=codec).load(data, strict=strict)

    @classmethod
    def read(cls, path: Union[str, Path], codec: Optional[Codec] = None, strict: bool = False) -> 'PngImage':
        """Read a PNG file from disk."""
        return cls.from_bytes(Path(path).read_bytes(), codec=codec, strict=strict)

    def write(self, path: Union[str, Path]) -> int:
        """Serialize to disk; returns the number of bytes written."""
        data = self.save()
        Path(path).write_bytes(data)
        return len(data)

    # ── Metadata ───────────────────────────────────────────────────────────

    def _apply_metadata(self, metadata: PngMetadata):
        self._metadata = validate_metadata(metadata)

    def _initialize_chunks(self):
        meta = self._metadata
        self.ihdr.set_metadata(meta)
        self.idat.apply_layout_information(meta.width, meta.height, meta.depth, meta.color_type)
        self.plte = PLTE(max_number_of_colors=self._max_number_of_colors) if self.is_indexed() else None
        self.trns = None
        self.bkgd = None

    def get_metadata(self) -> PngMetadata:
        return PngMetadata(**vars(self._metadata))

    @property
    def width(self) -> int:
        return self._metadata.width

    @property
    def height(self) -> int:
        return self._metadata.height

    @property
    def depth(self) -> int:
        return self._metadata.depth

    @property
    def color_type(self) -> ColorType:
        return self._metadata.color_type

    @property
    def codec(self) -> Codec:
        return self._codec

    @property
    def _max_number_of_colors(self) -> int:
        return compute_max_number_of_colors(self._metadata.depth)

    @property
    def _number_of_pixels(self) -> int:
        return compute_number_of_pixels(self._metadata.width, self._metadata.height)

    # ── Serialization ──────────────────────────────────────────────────────

    def _present_chunks(self) -> list:
        slots = {
            "IHDR": self.ihdr,
            "PLTE": self.plte,
            "tRNS": self.trns,
            "bKGD": self.bkgd,
            "IDAT": self.idat,
            "IEND": self.iend,
        }
        return [slots[name] for name in SUPPORTED_CHUNKS if slots[name] is not None]

    def get_chunks_used(self) -> List[str]:
        """Names of present chunks in write order (signature excluded)."""
        return [chunk.chunk_type for chunk in self._present_chunks()]

    def save(self) -> bytes:
        """Serialize the document to a PNG byte string."""
        if self.is_indexed() and self.plte is not None and not len(self.plte):
            logger.warning("Saving an indexed image with an empty palette")

        parts = [self.signature] + self._present_chunks()
        for part in parts:
            part.update()

        total_size = sum(part.calculate_chunk_length() for part in parts)
        buffer = bytearray(total_size)
        offset = 0
        for part in parts:
            offset = part.copy_into(buffer, offset)
        return bytes(buffer)

    def load(self, data: BytesLike, strict: bool = False) -> 'PngImage':
        """
        Replace this document's contents with the PNG in data.

        Chunks are located by scanning for their type magic. Ancillary chunks
        are only searched for between IHDR and the first IDAT. CRCs are only
        enforced when strict is set.

        Every chunk is parsed before anything is assigned, so a failed load
        leaves the document as it was.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"PNG data must be bytes-like, not {type(data).__name__}")
        data = bytes(data)
        view = memoryview(data)

        if (not self.signature.verify(data)
                or not self.ihdr.verify(data)
                or not self.idat.verify(data)
                or not self.iend.verify(data)):
            raise NotAPng("Attempting to load data that is not a PNG")

        ihdr_at = index_of_sequence(data, CHUNK_HEADER_SEQUENCES["IHDR"], len(PNG_SIGNATURE))
        ihdr = IHDR().load(view[ihdr_at - CHUNK_LENGTH_SIZE:], strict=strict)
        metadata = validate_metadata(ihdr.get_metadata())
        logger.debug(f"IHDR: {metadata}")

        search_from = ihdr_at - CHUNK_LENGTH_SIZE + ihdr.calculate_chunk_length()
        idat_at = index_of_sequence(data, CHUNK_HEADER_SEQUENCES["IDAT"], search_from)
        if idat_at == -1:
            raise NotAPng("No IDAT chunk after IHDR")

        optional = {}
        for name in ("PLTE", "tRNS", "bKGD"):
            found = data.find(CHUNK_HEADER_SEQUENCES[name], search_from, idat_at)
            if found == -1:
                continue
            optional[name] = self._load_chunk(name, metadata, view[found - CHUNK_LENGTH_SIZE:], strict)

        idat = IDAT(codec=self._codec)
        idat.apply_layout_information(metadata.width, metadata.height, metadata.depth, metadata.color_type)
        idat.load(view[idat_at - CHUNK_LENGTH_SIZE:], strict=strict)

        ihdr.set_metadata(metadata)
        self._metadata = metadata
        self.ihdr = ihdr
        self.plte = optional.get("PLTE")
        self.trns = optional.get("tRNS")
        self.bkgd = optional.get("bKGD")
        self.idat = idat
        return self

    def _create_chunk(self, name: str, metadata: Optional[PngMetadata] = None):
        """Construct an empty optional chunk configured from metadata (current by default)."""
        meta = metadata if metadata is not None else self._metadata
        max_colors = compute_max_number_of_colors(meta.depth)
        max_sample = compute_max_sample_value(meta.depth)
        options = {
            "PLTE": {"max_number_of_colors": max_colors},
            "tRNS": {"color_type": meta.color_type, "max_number_of_colors": max_colors,
                     "max_sample_value": max_sample},
            "bKGD": {"color_type": meta.color_type, "max_sample_value": max_sample},
        }[name]
        return get_chunk_class(name)(**options)

    def _load_chunk(self, name: str, metadata: PngMetadata, data: BytesLike, strict: bool):
        """Parse one optional chunk; returns None when the color type forbids it."""
        try:
            chunk = self._create_chunk(name, metadata)
        except UnsupportedOperation as e:
            logger.warning(f"Ignoring {name} chunk: {e}")
            return None
        return chunk.load(data, strict=strict)

    # ── Raw raster access ──────────────────────────────────────────────────

    def _resolve_index(self, pos: Position) -> int:
        if isinstance(pos, (list, tuple)) and len(pos) == 2:
            return self.idat.translate_xy_to_index(*pos)
        if isinstance(pos, int):
            return pos
        raise TypeError(f"Position must be an index or an (x, y) pair, not {pos!r}")

    def get_raw_data(self) -> bytes:
        """Copy of the internal raster (palette indices for indexed images)."""
        return self.idat.get_data()

    def set_raw_data(self, samples: Sequence[int]) -> 'PngImage':
        self.idat.set_pixel_data(samples)
        return self

    def get_data(self) -> List[int]:
        """
        The whole image as flat samples. Indexed images are resolved to RGB,
        or RGBA when a tRNS chunk exists.
        """
        raw = self.idat.get_data()
        if not self.is_indexed():
            return list(raw)

        palette = self._require_palette("resolve pixel data")
        if self.trns is None:
            return palette.convert_to_pixels(raw)
        out: List[int] = []
        for index in raw:
            out.extend(palette.get_color_of(index))
            alpha = self.trns.get_value_of(index)
            out.append(OPAQUE if alpha is None else alpha)
        return out

    # ── Pixels ─────────────────────────────────────────────────────────────

    def get_pixel_at(self, pos: Position) -> List[int]:
        index = self._resolve_index(pos)
        pixel = self.idat.get_pixel_of(index)

        if self.has_alpha_channel():
            return pixel

        if self.is_indexed():
            palette = self._require_palette("get a pixel color")
            color = palette.get_color_of(pixel)
            if self.trns is not None:
                opacity = self.trns.get_value_of(pixel)
                color.append(OPAQUE if opacity is None else opacity)
            return color

        return [pixel] if isinstance(pixel, int) else pixel

    def set_pixel_at(self, pos: Position, data: Union[int, Sequence[int]]) -> 'PngImage':
        """
        Write a pixel.

        data carries the color samples for the color type (RGB for indexed
        images). Alpha types take their alpha in data; other types accept one
        extra trailing opacity sample, which updates the tRNS chunk.

        On grayscale and truecolor images an opacity of 255 only removes an
        existing color key for the color; it never inserts one (a key always
        means fully transparent), so no opaque key is ever written.
        """
        index = self._resolve_index(pos)
        if isinstance(data, int):
            data = [data]
        data = list(data)

        required = determine_required_samples(self._metadata.color_type)
        if len(data) < required:
            raise InsufficientSamples(f"Not enough samples supplied for pixel; expected {required}")

        if self.has_alpha_channel():
            self.idat.set_pixel_of(index, data[:required])
            return self

        color_data = data[:required]
        opacity = data[required] if len(data) > required else None
        if opacity is not None and not 0 <= opacity <= OPAQUE:
            raise SampleOutOfRange(f"Opacity {opacity} outside 0-255")

        if self.is_indexed():
            palette = self._require_palette("set a pixel color")
            palette_index = palette.get_palette_index(color_data)
            if palette_index is None:
                palette_index = palette.add_color(color_data)
            self.idat.set_value_at(index, palette_index)
            if opacity is not None:
                self.set_transparency(opacity, palette_index)
            return self

        self.idat.set_pixel_of(index, color_data)
        if opacity is not None:
            if opacity == OPAQUE:
                if self.does_color_exist_in_transparencies(color_data):
                    self.remove_transparency(color_data)
            else:
                self.set_transparency(color_data)
        return self

    def get_opacities(self) -> List[int]:
        """Opacity of every pixel, in raster order."""
        if self.has_alpha_channel():
            size = self.idat.full_pixel_size
            return list(self.idat.get_data()[size - 1::size])
        return [OPAQUE] * self._number_of_pixels

    def set_opacity_at(self, pos: Position, value: int) -> 'PngImage':
        if not self.has_alpha_channel() and not self.is_indexed():
            raise UnsupportedOperation(
                f"Cannot set per-pixel opacity on color type {self._metadata.color_type.name}"
            )
        index = self._resolve_index(pos)

        if self.has_alpha_channel():
            self.idat.set_alpha(value, index)
            return self

        palette = self._require_palette("set the opacity of a palette entry")
        palette_index = self.idat.get_value_at(index)
        if palette_index >= len(palette):
            raise IndexOutOfRange(f"Palette index {palette_index} is not in the palette")
        self.set_transparency(value, palette_index)
        return self

    # ── Palette ────────────────────────────────────────────────────────────

    def _require_palette(self, action: str) -> PLTE:
        if self.plte is None:
            raise NoPalette(f"Attempting to {action} when no palette exists")
        return self.plte

    def get_palette(self) -> List[List[int]]:
        return self._require_palette("get the palette").get_palette()

    def get_palette_index_at(self, pos: Position) -> int:
        palette = self._require_palette("get a palette index")
        palette_index = self.idat.get_value_at(self._resolve_index(pos))
        if palette_index >= len(palette):
            raise IndexOutOfRange(f"Palette index {palette_index} exceeds palette size {len(palette)}")
        return palette_index

    def get_palette_color_at(self, pos: Position) -> List[int]:
        self._require_palette("get a palette color")
        return self.plte.get_color_of(self.get_palette_index_at(pos))

    def set_palette_color_of(self, index: int, color_data: Sequence[int]) -> 'PngImage':
        self._require_palette("set a palette color").set_color_of(index, color_data)
        return self

    def replace_palette_color(self, target_color: Sequence[int], new_color: Sequence[int]) -> 'PngImage':
        self._require_palette("swap a palette color").replace_color(target_color, new_color)
        return self

    # ── Transparency ───────────────────────────────────────────────────────

    def set_transparency(self, value: Union[int, Sequence[int]], index: Optional[int] = None) -> 'PngImage':
        """
        index given: alpha for that palette index (indexed images).
        Otherwise: value is a color key made fully transparent.
        The tRNS chunk is created on first use.
        """
        trns = self.trns if self.trns is not None else self._create_chunk("tRNS")
        trns.set_transparency(value, index)
        self.trns = trns
        return self

    def remove_transparency(self, color_data: Union[int, Sequence[int]]) -> 'PngImage':
        if self.trns is None:
            raise NoTransparency("Attempting to remove a transparency when no transparency exists")

        if self.is_indexed():
            palette_index = self._require_palette("remove a transparency").get_palette_index(color_data)
            if palette_index is None:
                logger.debug(f"remove_transparency: {color_data} not in palette")
                return self
            self.trns.remove_transparency_of(palette_index)
            return self

        self.trns.remove_transparency(color_data)
        return self

    def remove_transparencies(self) -> 'PngImage':
        self.trns = None
        return self

    def get_transparencies(self) -> list:
        if self.trns is not None:
            return self.trns.get_transparencies()
        return []

    def does_color_exist_in_transparencies(self, color_data: Union[int, Sequence[int]]) -> bool:
        if self.trns is not None:
            return self.trns.is_transparency_set(color_data)
        return False

    # ── Background ─────────────────────────────────────────────────────────

    def get_background(self) -> List[int]:
        """
        Background samples from bKGD. Indexed images without bKGD fall back to
        palette entry 0; a suggested palette on other color types does not.
        """
        if self.bkgd is not None:
            return self.bkgd.get_background_color()
        if self.is_indexed() and self.plte is not None and len(self.plte):
            return self.plte.get_color_of(0)
        raise NoBackground("Image has no background color")

    def set_background(self, color_data: Sequence[int]) -> 'PngImage':
        """
        Indexed images without bKGD: color_data is RGB and replaces palette
        entry 0. With bKGD it is the palette index. Other color types always
        write bKGD samples.
        """
        if self.is_indexed() and self.bkgd is None:
            # Palette index 0 acts as the background color
            self._require_palette("set the background color").set_color_of(0, color_data)
            return self

        if self.is_indexed():
            palette = self._require_palette("set the background index")
            if color_data and not 0 <= color_data[0] < len(palette):
                raise IndexOutOfRange(f"Background index {color_data[0]} is not in the palette")

        bkgd = self.bkgd if self.bkgd is not None else self._create_chunk("bKGD")
        bkgd.set_background_color(color_data)
        self.bkgd = bkgd
        return self

    def remove_background(self) -> 'PngImage':
        self.bkgd = None
        return self

    # ── Codec ──────────────────────────────────────────────────────────────

    def apply_codec(self, codec: Codec) -> 'PngImage':
        self._codec = validate_codec(codec)
        self.idat.apply_codec(codec)
        return self

    # ── Color type predicates ──────────────────────────────────────────────

    def is_indexed(self) -> bool:
        return is_indexed(self._metadata.color_type)

    def is_grayscale(self) -> bool:
        return is_grayscale(self._metadata.color_type)

    def is_truecolor(self) -> bool:
        return is_truecolor(self._metadata.color_type)

    def is_grayscale_with_alpha(self) -> bool:
        return is_grayscale_with_alpha(self._metadata.color_type)

    def is_truecolor_with_alpha(self) -> bool:
        return is_truecolor_with_alpha(self._metadata.color_type)

    def has_alpha_channel(self) -> bool:
        return has_alpha_sample(self._metadata.color_type)

    def __repr__(self) -> str:
        meta = self._metadata
        return (f"PngImage({meta.width}x{meta.height}, depth={int(meta.depth)}, "
                f"color_type={meta.color_type.name}, chunks={self.get_chunks_used()})")
