"""
Exception types raised by the Pixel Gen core.

All quantizer, codec and generation failures derive from PixelGenError so
callers can surface them as recoverable conditions without crashing the
editing session.
"""


class PixelGenError(Exception):
    """Base class for recoverable Pixel Gen failures."""


class ResamplingError(PixelGenError):
    """The bitmap could not be decoded or the resampled surface could not be produced."""


class RecordFormatError(PixelGenError, ValueError):
    """An RLE record is malformed; the whole import is rejected."""


class GenerationError(PixelGenError):
    """The external image provider failed or returned no image."""
