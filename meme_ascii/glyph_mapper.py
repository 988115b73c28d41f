"""
Luminance-to-Glyph Mapper

Converts a downsampled RGBA grid into ASCII art text:
1. BT.601 luma (alpha ignored)
2. Optional inversion
3. Contrast around mid-gray: L' = (L - 127.5) * contrast + 127.5
4. Clamp to [0, 255]
5. Ramp index = floor(L / 255 * (n - 1))

Rows are joined with a single newline and no trailing newline.
"""

import math
from typing import Optional

import numpy as np

from .charsets import AsciiCharset
from .errors import EmptyCharsetError, InvalidOptionsError

MID_GRAY = 127.5

# BT.601 weights scaled to integers so (255, 255, 255) maps to exactly 255
_LUMA_WEIGHTS = np.array([299, 587, 114], dtype=np.int64)


def luminance(rgba: np.ndarray) -> np.ndarray:
    """Per-sample luma 0.299R + 0.587G + 0.114B as float64."""
    rgb = np.asarray(rgba)[..., :3].astype(np.int64)
    return (rgb @ _LUMA_WEIGHTS) / 1000.0


def adjust_luminance(lum: np.ndarray, invert: bool = False, contrast: float = 1.0) -> np.ndarray:
    """Apply inversion, then contrast, then clamp to [0, 255]."""
    if not (math.isfinite(contrast) and contrast > 0):
        raise InvalidOptionsError(f"contrast must be a positive finite number, got {contrast}")

    out = np.asarray(lum, dtype=np.float64)
    if invert:
        out = 255.0 - out
    if contrast != 1.0:
        out = (out - MID_GRAY) * contrast + MID_GRAY
    return np.clip(out, 0.0, 255.0)


def glyph_indices(lum: np.ndarray, ramp_length: int) -> np.ndarray:
    """Map adjusted luminance onto ramp indices."""
    if ramp_length <= 0:
        raise EmptyCharsetError("Character ramp is empty")
    indices = np.floor((lum / 255.0) * (ramp_length - 1)).astype(np.int64)
    return np.clip(indices, 0, ramp_length - 1)


class GlyphMapper:
    """
    Maps RGBA sample grids to glyphs from a single ramp.

    Example:
        >>> mapper = GlyphMapper(get_charset("simple"), invert=False)
        >>> mapper.convert(grid)
    """

    def __init__(self, charset: AsciiCharset, invert: bool = False, contrast: float = 1.0):
        if not charset.chars:
            raise EmptyCharsetError(f"Charset '{charset.name}' has no glyphs")
        if not (math.isfinite(contrast) and contrast > 0):
            raise InvalidOptionsError(f"contrast must be a positive finite number, got {contrast}")
        self.charset = charset
        self.invert = invert
        self.contrast = contrast
        self.char_array = np.array(list(charset.chars))

    def indices(self, rgba: np.ndarray) -> np.ndarray:
        """Ramp index for every sample, shape (H, W)."""
        lum = adjust_luminance(luminance(rgba), self.invert, self.contrast)
        return glyph_indices(lum, len(self.char_array))

    def convert(self, rgba: np.ndarray) -> str:
        """Render the grid as newline-joined rows of glyphs."""
        char_map = self.char_array[self.indices(rgba)]
        lines = [''.join(row) for row in char_map]
        return '\n'.join(lines)


def map_to_glyphs(
    rgba: np.ndarray,
    charset: AsciiCharset,
    invert: bool = False,
    contrast: Optional[float] = 1.0,
) -> str:
    """Functional shortcut for GlyphMapper(...).convert(rgba)."""
    return GlyphMapper(charset, invert=invert, contrast=1.0 if contrast is None else contrast).convert(rgba)
