"""
Character Ramp Definitions and Registry

Provides the named glyph ramps used for luminance-to-character mapping:
- standard: 70-character ramp for detailed gradients (default)
- simple: 10 classic ASCII characters
- block: Unicode shading blocks (░▒▓█)
- detailed_alt: Alternative detailed ramp
- symbols: Common symbols for a distinct texture

Every ramp is ordered from "least ink" (index 0) to "most ink".
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional

from .errors import EmptyCharsetError

logger = logging.getLogger(__name__)


# ============================================================================
# RAMP DEFINITIONS
# ============================================================================

RAMP_STANDARD = " .'`^\",:;Il!i><~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$"

RAMP_SIMPLE = " .:-=+*#%@"

# Space plus U+2591, U+2592, U+2593, U+2588
RAMP_BLOCK = " ░▒▓█"

RAMP_DETAILED_ALT = " `.-':_,^=;><+!rc*/z?sLTv)J7(|Fi{C}fI31tlu[neoZ5YxjAdPQPDSGFBJOMWX%#@$"

RAMP_SYMBOLS = " .,*&%#@$+"


@dataclass(frozen=True)
class AsciiCharset:
    """
    A named glyph ramp.

    Attributes:
        name: Display name
        chars: Glyphs ordered from least to most ink
        description: One-line summary for pickers
    """
    name: str
    chars: str
    description: str = ""

    @property
    def length(self) -> int:
        return len(self.chars)

    def __len__(self) -> int:
        return len(self.chars)


# ============================================================================
# REGISTRY
# ============================================================================

ASCII_CHARSETS: Mapping[str, AsciiCharset] = MappingProxyType({
    "standard": AsciiCharset(
        name="Standard",
        chars=RAMP_STANDARD,
        description="A comprehensive set for detailed gradients.",
    ),
    "simple": AsciiCharset(
        name="Simple",
        chars=RAMP_SIMPLE,
        description="Basic characters for a classic ASCII look.",
    ),
    "block": AsciiCharset(
        name="Block",
        chars=RAMP_BLOCK,
        description="Uses block characters for a pixelated effect.",
    ),
    "detailed_alt": AsciiCharset(
        name="Detailed Alt",
        chars=RAMP_DETAILED_ALT,
        description="An alternative detailed character set.",
    ),
    "symbols": AsciiCharset(
        name="Symbols",
        chars=RAMP_SYMBOLS,
        description="Uses common symbols for a unique texture.",
    ),
})

DEFAULT_CHARSET_KEY = "standard"


def validate_registry(
    registry: Mapping[str, AsciiCharset],
    default_key: str,
) -> None:
    """
    Check registry integrity.

    Raises:
        EmptyCharsetError: if the default key is missing or any ramp is empty
    """
    if default_key not in registry:
        raise EmptyCharsetError(
            f"Default charset '{default_key}' missing from registry. "
            f"Available: {list(registry.keys())}"
        )
    for key, charset in registry.items():
        if not charset.chars:
            raise EmptyCharsetError(f"Charset '{key}' has no glyphs")
        if len(charset.chars) == 1:
            logger.warning("Charset '%s' has a single glyph; output will be flat", key)


def get_charset(
    key: Optional[str] = None,
    registry: Optional[Mapping[str, AsciiCharset]] = None,
    default_key: Optional[str] = None,
) -> AsciiCharset:
    """
    Resolve a charset by key.

    Unknown or missing keys resolve to the registry default rather than
    raising, since pickers always offer a valid default.

    Args:
        key: Registry key (e.g. "simple", "block")
        registry: Mapping to look in (defaults to ASCII_CHARSETS)
        default_key: Fallback key (defaults to DEFAULT_CHARSET_KEY)

    Returns:
        AsciiCharset instance
    """
    registry = ASCII_CHARSETS if registry is None else registry
    default_key = DEFAULT_CHARSET_KEY if default_key is None else default_key

    if key in registry:
        return registry[key]

    logger.debug("Unknown charset %r, using default %r", key, default_key)
    if default_key not in registry:
        raise EmptyCharsetError(f"Default charset '{default_key}' missing from registry")
    return registry[default_key]


def list_charsets(registry: Optional[Mapping[str, AsciiCharset]] = None) -> List[str]:
    """List all available charset keys."""
    registry = ASCII_CHARSETS if registry is None else registry
    return list(registry.keys())


validate_registry(ASCII_CHARSETS, DEFAULT_CHARSET_KEY)
