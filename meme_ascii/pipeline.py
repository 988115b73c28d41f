"""
End-to-End Image-to-ASCII Pipeline

Unified interface combining:
- Image decoding and area downsampling (rasterizer)
- Luminance-to-glyph mapping over named ramps (glyph_mapper)
- Optional AI meme enhancement (enhancer)
- Bounded history and export helpers

This is the main entry point for the library.
"""

import logging
import time
from typing import Mapping, Optional

from PIL import Image

from .charsets import DEFAULT_CHARSET_KEY, AsciiCharset, get_charset
from .config import DEFAULT_MAX_HISTORY, ConversionOptions
from .enhancer import AsciiMemeEnhancer, get_enhancer
from .errors import DecodeError, NoArtError
from .exporter import (
    DEFAULT_EXPORT_FILENAME,
    data_url_to_bytes,
    image_to_data_url,
    render_ascii_to_image,
    save_text,
    share_payload,
)
from .glyph_mapper import GlyphMapper
from .history import AsciiHistory, HistoryEntry
from .rasterizer import (
    ImageLike,
    decode_image,
    downsample,
    load_image_file,
    read_image_bytes,
    sniff_mime_type,
)
from .result import AsciiResult, create_result

logger = logging.getLogger(__name__)


# =============================================================================
# Conversion entry points
# =============================================================================

def convert(
    image: ImageLike,
    options: Optional[ConversionOptions] = None,
    registry: Optional[Mapping[str, AsciiCharset]] = None,
    default_key: str = DEFAULT_CHARSET_KEY,
) -> str:
    """
    Convert a decoded image to ASCII art.

    Pure and deterministic: the same image and options always give the
    same string.

    Args:
        image: Decoded PIL image or uint8 RGB/RGBA array
        options: Conversion options (defaults if None)
        registry: Charset registry override (defaults to ASCII_CHARSETS)
        default_key: Registry key used when options.charset_key is unknown

    Returns:
        Rows of exactly options.output_width glyphs joined by newlines
    """
    options = options or ConversionOptions()
    charset = get_charset(options.charset_key, registry=registry, default_key=default_key)

    mapper = GlyphMapper(charset, invert=options.invert, contrast=options.contrast)
    grid = downsample(image, options.output_width)
    return mapper.convert(grid)


def convert_bytes(data: bytes, options: Optional[ConversionOptions] = None) -> str:
    """Decode image bytes and convert them."""
    return convert(decode_image(data), options)


def convert_file(path: str, options: Optional[ConversionOptions] = None) -> str:
    """Read an image file and convert it."""
    return convert(load_image_file(path), options)


def image_to_ascii(image: ImageLike, **option_fields) -> str:
    """
    Quick function to convert an image with keyword options.

    Example:
        >>> image_to_ascii(img, output_width=60, charset_key="block", invert=False)
    """
    return convert(image, ConversionOptions.from_dict(option_fields))


# =============================================================================
# Session
# =============================================================================

class MemeAsciiSession:
    """
    Holds the working state of one user: source image, options, current
    art and history.

    Regeneration is explicit: change options with update_options() (which
    regenerates) or call regenerate() directly.

    Example:
        >>> session = MemeAsciiSession()
        >>> session.load_image_file("cat.png")
        >>> session.update_options(charset_key="block")
        >>> session.enhance()
        >>> session.export_text("cat.txt")
    """

    def __init__(
        self,
        options: Optional[ConversionOptions] = None,
        history: Optional[AsciiHistory] = None,
        enhancer: Optional[AsciiMemeEnhancer] = None,
        max_history: int = DEFAULT_MAX_HISTORY,
        history_file: Optional[str] = None,
    ):
        self.options = options or ConversionOptions()
        self.history_file = history_file
        if history is not None:
            self.history = history
        elif history_file:
            self.history = AsciiHistory.load(history_file, max_items=max_history)
        else:
            self.history = AsciiHistory(max_items=max_history)
        self._enhancer = enhancer

        self.image: Optional[Image.Image] = None
        self.image_ref: Optional[str] = None
        self.current_art: Optional[str] = None
        self.current_enhanced = False

    @property
    def enhancer(self) -> AsciiMemeEnhancer:
        if self._enhancer is None:
            self._enhancer = get_enhancer()
        return self._enhancer

    @property
    def has_image(self) -> bool:
        return self.image is not None

    # --- Input

    def load_image(self, data: bytes, mime_type: Optional[str] = None) -> str:
        """
        Decode a new source image and convert it with the current options.

        Raises:
            DecodeError: the bytes are not an image (session state unchanged)
        """
        image = decode_image(data)
        self.image = image
        self.image_ref = image_to_data_url(data, mime_type or sniff_mime_type(data))
        self.current_art = None
        logger.info("Loaded %dx%d source image", image.width, image.height)
        return self.regenerate()

    def load_image_file(self, path: str) -> str:
        return self.load_image(read_image_bytes(path))

    # --- Conversion

    def update_options(self, **changes) -> Optional[str]:
        """Apply option changes; regenerates when an image is loaded."""
        self.options = self.options.replace(**changes)
        if self.image is None:
            return None
        return self.regenerate()

    def regenerate(self) -> str:
        """
        Convert the source image with the current options.

        On failure the current art is cleared and the error propagates.
        """
        if self.image is None:
            raise NoArtError("No source image loaded. Please upload an image first.")

        start = time.time()
        try:
            art = convert(self.image, self.options)
        except Exception:
            self.current_art = None
            raise
        logger.debug("Converted in %.3fs", time.time() - start)

        self.current_art = art
        self.current_enhanced = False
        self._record(art)
        return art

    def enhance(self) -> str:
        """
        Run the current art through the AI enhancer.

        On any failure the current art is left untouched.
        """
        if not self.current_art:
            raise NoArtError("No ASCII art to enhance. Please generate base ASCII first.")

        enhanced = self.enhancer.enhance(self.current_art)
        self.current_art = enhanced
        self.current_enhanced = True
        self._record(enhanced)
        logger.info("AI enhancement applied")
        return enhanced

    # --- History

    def _record(self, art: str) -> None:
        if not self.image_ref:
            return
        self.history.add(art, self.options, self.image_ref)
        self._persist_history()

    def _persist_history(self) -> None:
        if self.history_file:
            self.history.save(self.history_file)

    def load_from_history(self, entry_id: str) -> HistoryEntry:
        """Restore art, options and source image from a history entry."""
        entry = self.history.get(entry_id)
        self.current_art = entry.ascii_art
        self.current_enhanced = False
        self.options = entry.options
        self.image_ref = entry.image_ref
        try:
            self.image = decode_image(data_url_to_bytes(entry.image_ref))
        except (ValueError, DecodeError):
            logger.warning("History entry %s has no decodable source image", entry_id)
            self.image = None
        return entry

    def delete_from_history(self, entry_id: str) -> bool:
        removed = self.history.delete(entry_id)
        if removed:
            self._persist_history()
        return removed

    # --- Export

    def _require_art(self) -> str:
        if not self.current_art:
            raise NoArtError("No ASCII art available to export.")
        return self.current_art

    def export_text(self, path: str = DEFAULT_EXPORT_FILENAME) -> str:
        return save_text(self._require_art(), path)

    def export_png(self, path: str = "outputs/ascii_export.png", **render_kwargs) -> Optional[str]:
        return render_ascii_to_image(self._require_art(), path, **render_kwargs)

    def share_payload(self) -> dict:
        return share_payload(self._require_art())

    def result(self) -> AsciiResult:
        art = self._require_art()
        return create_result(
            text=art,
            options=self.options,
            source_image=self.image,
            charset=get_charset(self.options.charset_key).name,
            enhanced=self.current_enhanced,
        )
