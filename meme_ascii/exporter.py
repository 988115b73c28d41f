"""
Export helpers: plain-text download, share payloads, PNG rendering, and
data: URLs for source images kept in history.
"""

import base64
import binascii
import logging
import os
import re
from typing import Dict, Optional

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_FILENAME = "meme-ascii.txt"
SHARE_TITLE = "My ASCII Meme"

# Monospace fonts with block-element coverage, most preferred first
FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",  # Linux
    "/System/Library/Fonts/Menlo.ttc",  # macOS
    "DejaVuSansMono.ttf",
    "consola.ttf",  # Windows
]

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<b64>;base64)?,(?P<payload>.*)$", re.DOTALL)


def to_text_bytes(ascii_art: str) -> bytes:
    """UTF-8 plain-text payload, glyphs as produced."""
    return ascii_art.encode("utf-8")


def save_text(ascii_art: str, path: str = DEFAULT_EXPORT_FILENAME) -> str:
    """Write the art to a .txt file and return its absolute path."""
    path = os.path.abspath(path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(to_text_bytes(ascii_art))
    logger.info("Saved ASCII art to %s", path)
    return path


def share_payload(ascii_art: str, snippet_length: int = 200) -> Dict[str, str]:
    """Title and text/plain body for a platform share action (art is truncated to a snippet)."""
    return {
        "title": SHARE_TITLE,
        "text": f"Check out this ASCII art I made:\n\n{ascii_art[:snippet_length]}...",
        "mime_type": "text/plain",
    }


def _load_font(font_size: int) -> ImageFont.ImageFont:
    for font_path in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(font_path, font_size)
        except OSError:
            continue
    logger.debug("No monospace TrueType font found; using Pillow default")
    return ImageFont.load_default()


def render_ascii_to_image(
    ascii_text: str,
    path: str = "outputs/ascii_export.png",
    font_size: int = 18,
    bg_color: str = "white",
    text_color: str = "black",
) -> Optional[str]:
    """
    Render ASCII art to a PNG image.

    Returns:
        Absolute path of the saved image, or None for empty art
    """
    lines = ascii_text.splitlines()
    if not lines:
        return None

    font = _load_font(font_size)

    # Measure a full block so shaded glyphs fit the cell
    left, top, right, bottom = font.getbbox("█")
    char_width = max(1, right - left)
    char_height = max(1, bottom - top) + 2

    max_line_len = max(len(line) for line in lines)
    img_width = max_line_len * char_width + 40
    img_height = len(lines) * char_height + 40

    image = Image.new("RGB", (img_width, img_height), color=bg_color)
    draw = ImageDraw.Draw(image)

    y_text = 20
    for line in lines:
        draw.text((20, y_text), line, font=font, fill=text_color)
        y_text += char_height

    output_path = os.path.abspath(path)
    os.makedirs(os.path.dirname(output_path), exist_ok=True)
    image.save(output_path, format="PNG")
    logger.info("Rendered ASCII art to %s", output_path)
    return output_path


def image_to_data_url(data: bytes, mime_type: Optional[str] = None) -> str:
    """Encode image bytes as a base64 data: URL."""
    mime_type = mime_type or "application/octet-stream"
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def data_url_to_bytes(url: str) -> bytes:
    """Decode a base64 data: URL back to bytes."""
    match = _DATA_URL.match(url)
    if not match or not match.group("b64"):
        raise ValueError("Not a base64 data: URL")
    try:
        return base64.b64decode(match.group("payload"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Malformed data: URL payload: {e}") from e
