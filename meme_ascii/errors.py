"""
Error taxonomy for MemeAscii.

Every error raised by the library derives from MemeAsciiError so callers
can catch the whole family in one place and still tell kinds apart.
"""


class MemeAsciiError(Exception):
    """Base class for all MemeAscii errors."""


class DecodeError(MemeAsciiError):
    """Source bytes could not be interpreted as an image."""


class InvalidOptionsError(MemeAsciiError, ValueError):
    """A conversion option is out of range or of the wrong type."""


class InvalidDimensionError(InvalidOptionsError):
    """Requested output width or source geometry is degenerate."""


class EmptyCharsetError(MemeAsciiError):
    """The resolved character ramp has no glyphs (registry corruption)."""


class EmptyResponseError(MemeAsciiError):
    """The remote enhancement returned no usable output."""


class EnhancerUnavailableError(MemeAsciiError):
    """No enhancement backend could be set up (missing library or API key)."""


class NoArtError(MemeAsciiError):
    """An action needs ASCII art (or a source image) but none is loaded."""


class HistoryEntryNotFoundError(MemeAsciiError, KeyError):
    """No history entry carries the requested id."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead
        return str(self.args[0]) if self.args else ""
