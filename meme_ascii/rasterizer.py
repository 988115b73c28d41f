"""
Image Decoding and Grid Downsampling

Turns raw image bytes into an RGBA pixel grid with exactly one sample per
output glyph. Output height is derived from the source aspect ratio and a
fixed character-cell correction, since monospace glyphs are taller than wide.
"""

import io
import logging
import math
from typing import Optional, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, InvalidDimensionError

logger = logging.getLogger(__name__)

# Character aspect ratio correction; lower value = taller characters in output
CHAR_ASPECT_RATIO_CORRECTION = 0.55

ImageLike = Union[Image.Image, np.ndarray]


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw bytes into an RGBA PIL image.

    Raises:
        DecodeError: if the bytes are empty, truncated or not an image
    """
    if not data:
        raise DecodeError("Failed to load image: no data.")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to load image: {e}") from e

    if image.mode.startswith("I"):
        # 16-bit integer samples: keep the high byte, as Pillow's convert() clips instead
        wide = np.asarray(image).astype(np.int64)
        image = Image.fromarray(np.clip(wide >> 8, 0, 255).astype(np.uint8))
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    logger.debug("Decoded %dx%d image", image.width, image.height)
    return image


def sniff_mime_type(data: bytes) -> Optional[str]:
    """MIME type of encoded image bytes, from the header only."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return Image.MIME.get(image.format or "")
    except (UnidentifiedImageError, OSError, ValueError):
        return None


def read_image_bytes(path: str) -> bytes:
    """Read raw image bytes; unreadable files raise DecodeError."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise DecodeError(f"Failed to read file: {e}") from e


def load_image_file(path: str) -> Image.Image:
    """Read an image file from disk and decode it."""
    return decode_image(read_image_bytes(path))


def output_height_for(width: int, height: int, output_width: int) -> int:
    """Number of glyph rows for a source of the given natural size."""
    if output_width <= 0:
        raise InvalidDimensionError(f"output_width must be positive, got {output_width}")
    if width <= 0 or height <= 0:
        raise InvalidDimensionError(f"Source image has degenerate size {width}x{height}")
    image_aspect_ratio = height / width
    return max(1, math.floor(output_width * image_aspect_ratio * CHAR_ASPECT_RATIO_CORRECTION))


def to_rgba_array(image: ImageLike) -> np.ndarray:
    """
    Normalise a PIL image or uint8 array to an (H, W, 4) RGBA array.

    Grayscale arrays are broadcast to RGB; RGB arrays get an opaque alpha.
    """
    if isinstance(image, Image.Image):
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return np.asarray(image, dtype=np.uint8)

    arr = np.asarray(image)
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)

    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise InvalidDimensionError(f"Expected an (H, W), (H, W, 3) or (H, W, 4) array, got {arr.shape}")
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=-1)
    return arr


def downsample(image: ImageLike, output_width: int) -> np.ndarray:
    """
    Resample an image to the output character grid.

    Uses area interpolation, so each output cell averages the source region
    it covers.

    Args:
        image: Decoded PIL image or uint8 array
        output_width: Glyph columns wanted

    Returns:
        (output_height, output_width, 4) uint8 RGBA array, row-major
    """
    rgba = to_rgba_array(image)
    src_h, src_w = rgba.shape[:2]
    out_h = output_height_for(src_w, src_h, output_width)

    if (src_w, src_h) == (output_width, out_h):
        return rgba

    # cv2 takes (width, height)
    resized = cv2.resize(np.ascontiguousarray(rgba), (output_width, out_h), interpolation=cv2.INTER_AREA)
    return np.ascontiguousarray(resized, dtype=np.uint8)
