"""
Error taxonomy for chunkpng.

Every error derives from PngError and from the closest built-in exception,
so callers catching ValueError / IndexError / LookupError keep working.
"""


class PngError(Exception):
    """Base class for all chunkpng errors."""


class InvalidMetadata(PngError, ValueError):
    """Bad bit depth, color type or header field."""


class NotAPng(PngError, ValueError):
    """Buffer is missing a required structural marker."""


class CrcMismatch(NotAPng):
    """A chunk's stored CRC disagrees with its contents (strict loads only)."""


class InvalidCodec(PngError, TypeError):
    """Injected codec does not expose callable deflate and inflate."""


class NoPalette(PngError, LookupError):
    pass


class NoTransparency(PngError, LookupError):
    pass


class NoBackground(PngError, LookupError):
    pass


class IndexOutOfRange(PngError, IndexError):
    """Palette or raster index exceeds bounds."""


class PaletteFull(PngError, ValueError):
    """Adding a color would exceed 2 ** depth entries."""


class InsufficientSamples(PngError, ValueError):
    pass


class SampleCountMismatch(PngError, ValueError):
    pass


class SampleOutOfRange(PngError, ValueError):
    """A sample value does not fit the configured bit depth."""


class UnsupportedOperation(PngError, TypeError):
    """Operation is not valid for the active color type."""
