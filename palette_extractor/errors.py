"""
Palette Extractor Errors

Exceptions raised by the extraction pipeline and the palette store, plus the
non-fatal warning emitted when an image has fewer distinct colors than requested.
"""


class PaletteError(Exception):
    """Base class for all palette extractor errors."""
    pass


class EmptyImageError(PaletteError):
    """The image has no pixels to sample."""
    pass


class InvalidKError(PaletteError, ValueError):
    """Requested palette size is below 1."""
    pass


class MalformedHexError(PaletteError, ValueError):
    """A string is not a #rgb or #rrggbb hex color."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Malformed hex color: {value!r}")


class InvalidPaletteError(PaletteError, ValueError):
    """A palette has no colors or more colors than allowed."""
    pass


class ImageDecodeError(PaletteError, ValueError):
    """Image bytes or data URI could not be turned into a pixel buffer."""

    def __init__(self, message: str, unsupported_type: bool = False):
        self.unsupported_type = unsupported_type
        super().__init__(message)


class StorageIOError(PaletteError):
    """Durable storage could not be read or written."""
    pass


class StorageCorruptError(PaletteError):
    """Persisted palettes exist but cannot be parsed."""
    pass


class InsufficientColorsWarning(UserWarning):
    """Fewer distinct colors exist than the requested palette size."""
    pass
