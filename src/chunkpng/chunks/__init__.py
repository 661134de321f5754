"""
PNG Chunks package - the closed set of chunk types this codec reads and writes.

Importing the package registers every chunk class in CHUNK_TYPES.
"""
from .base import PngChunk, register_chunk, get_chunk_class, CHUNK_TYPES
from .prefix import Signature
from .ihdr import IHDR, PngMetadata, validate_metadata
from .plte import PLTE, Color
from .trns import tRNS
from .bkgd import bKGD, determine_background_samples_per_entry
from .idat import IDAT
from .iend import IEND

__all__ = [
    'PngChunk', 'register_chunk', 'get_chunk_class', 'CHUNK_TYPES',
    'Signature',
    'IHDR', 'PngMetadata', 'validate_metadata',
    'PLTE', 'Color',
    'tRNS',
    'bKGD', 'determine_background_samples_per_entry',
    'IDAT',
    'IEND',
]
