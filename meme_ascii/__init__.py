"""
MemeAscii - Image-to-ASCII Meme Generator

Converts images into character-grid art and optionally punches them up
with an LLM:
- Area downsampling with monospace aspect correction (OpenCV)
- BT.601 luminance mapped onto named glyph ramps
- Gemini / Groq meme enhancement with sanitized input and output
- Bounded history, text/PNG/HTML export
"""

__version__ = "0.1.0"

from .charsets import ASCII_CHARSETS, DEFAULT_CHARSET_KEY, AsciiCharset, get_charset, list_charsets
from .config import ConversionOptions, Settings
from .enhancer import AsciiMemeEnhancer, enhance, sanitize_ascii
from .errors import (
    DecodeError,
    EmptyCharsetError,
    EmptyResponseError,
    EnhancerUnavailableError,
    HistoryEntryNotFoundError,
    InvalidDimensionError,
    InvalidOptionsError,
    MemeAsciiError,
    NoArtError,
)
from .history import AsciiHistory, HistoryEntry
from .pipeline import MemeAsciiSession, convert, convert_bytes, convert_file, image_to_ascii
from .result import AsciiResult

__all__ = [
    "ASCII_CHARSETS",
    "DEFAULT_CHARSET_KEY",
    "AsciiCharset",
    "get_charset",
    "list_charsets",
    "ConversionOptions",
    "Settings",
    "AsciiMemeEnhancer",
    "enhance",
    "sanitize_ascii",
    "AsciiHistory",
    "HistoryEntry",
    "MemeAsciiSession",
    "convert",
    "convert_bytes",
    "convert_file",
    "image_to_ascii",
    "AsciiResult",
    "MemeAsciiError",
    "DecodeError",
    "InvalidOptionsError",
    "InvalidDimensionError",
    "EmptyCharsetError",
    "EmptyResponseError",
    "EnhancerUnavailableError",
    "NoArtError",
    "HistoryEntryNotFoundError",
]
