"""chunkpng - chunk-level PNG reader/writer with per-pixel editing."""
from .png_file import PngImage
from .chunks import (
    PngChunk, PngMetadata, register_chunk, get_chunk_class, CHUNK_TYPES,
    IHDR, PLTE, tRNS, bKGD, IDAT, IEND, Signature,
)
from .codec import Codec, StoredDeflateCodec, ZlibCodec, validate_codec
from .constants import ColorType, BitDepth, FilterType, PNG_SIGNATURE
from .errors import (
    PngError,
    InvalidMetadata,
    NotAPng,
    CrcMismatch,
    InvalidCodec,
    NoPalette,
    NoTransparency,
    NoBackground,
    IndexOutOfRange,
    PaletteFull,
    InsufficientSamples,
    SampleCountMismatch,
    SampleOutOfRange,
    UnsupportedOperation,
)

__version__ = "1.0.0"

__all__ = [
    'PngImage',
    # Chunks
    'PngChunk', 'PngMetadata', 'register_chunk', 'get_chunk_class', 'CHUNK_TYPES',
    'IHDR', 'PLTE', 'tRNS', 'bKGD', 'IDAT', 'IEND', 'Signature',
    # Codecs
    'Codec', 'StoredDeflateCodec', 'ZlibCodec', 'validate_codec',
    # Constants
    'ColorType', 'BitDepth', 'FilterType', 'PNG_SIGNATURE',
    # Errors
    'PngError', 'InvalidMetadata', 'NotAPng', 'CrcMismatch', 'InvalidCodec',
    'NoPalette', 'NoTransparency', 'NoBackground', 'IndexOutOfRange',
    'PaletteFull', 'InsufficientSamples', 'SampleCountMismatch',
    'SampleOutOfRange', 'UnsupportedOperation',
]
