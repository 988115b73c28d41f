"""
ASCII Art Result Container

Provides the AsciiResult dataclass for storing and displaying results,
with support for terminal display, HTML export, and file saving.
"""

import html
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from PIL import Image

from .config import ConversionOptions


@dataclass
class AsciiResult:
    """
    Container for one piece of ASCII art and how it was made.

    Attributes:
        text: The ASCII art string
        options: Conversion options used
        source_image: The decoded source image, if kept
        metadata: Extra details (charset name, enhancement flag, timings)
    """
    text: str
    options: Optional[ConversionOptions] = None
    source_image: Optional[Image.Image] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def lines(self):
        return self.text.split('\n')

    @property
    def width(self) -> int:
        """Width in characters."""
        return max((len(line) for line in self.lines), default=0)

    @property
    def height(self) -> int:
        """Height in lines."""
        return len(self.lines)

    def save(self, path: str, format: str = "auto"):
        """
        Save ASCII art to a file.

        Args:
            path: Output file path
            format: "txt", "html", or "auto" (detect from extension)
        """
        if format == "auto":
            format = "html" if path.endswith(('.html', '.htm')) else "txt"

        content = self.to_html() if format == "html" else self.text
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)

    def to_html(
        self,
        font_family: str = "Menlo, Monaco, 'DejaVu Sans Mono', 'Courier New', monospace",
        font_size: str = "10px",
        bg_color: str = "#1e1e1e",
        fg_color: str = "#d4d4d4",
        title: str = "MemeAscii",
    ) -> str:
        """Convert ASCII art to a standalone styled HTML page."""
        escaped_text = html.escape(self.text)

        meta_items = [
            f"<li><strong>{html.escape(str(key))}:</strong> {html.escape(str(value))}</li>"
            for key, value in self.metadata.items()
        ]
        if self.options is not None:
            meta_items.extend(
                f"<li><strong>{key}:</strong> {html.escape(str(value))}</li>"
                for key, value in self.options.to_dict().items()
            )
        meta_html = ""
        if meta_items:
            meta_html = f"""
        <div class="metadata">
            <h3>Generation Details</h3>
            <ul>{''.join(meta_items)}</ul>
        </div>
"""

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <style>
        body {{
            background-color: {bg_color};
            color: {fg_color};
            font-family: {font_family};
            font-size: {font_size};
            line-height: 1.0;
            padding: 20px;
            margin: 0;
        }}
        pre {{
            margin: 0;
            white-space: pre;
            overflow-x: auto;
        }}
        .metadata {{
            margin-top: 20px;
            padding-top: 20px;
            border-top: 1px solid #444;
            font-size: 12px;
        }}
        .metadata ul {{
            list-style: none;
            padding: 0;
        }}
    </style>
</head>
<body>
    <pre>{escaped_text}</pre>
{meta_html}
</body>
</html>"""

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the ASCII art."""
        unique_chars = set(self.text.replace('\n', ''))
        return {
            'width': self.width,
            'height': self.height,
            'total_characters': sum(len(line) for line in self.lines),
            'unique_characters': len(unique_chars),
        }

    def __repr__(self) -> str:
        return f"AsciiResult(width={self.width}, height={self.height})"

    def __str__(self) -> str:
        return self.text


def create_result(
    text: str,
    options: Optional[ConversionOptions] = None,
    source_image: Optional[Image.Image] = None,
    charset: Optional[str] = None,
    enhanced: bool = False,
    **extra_metadata
) -> AsciiResult:
    """
    Factory function to create an AsciiResult with standard metadata.

    Args:
        text: ASCII art string
        options: Options the art was converted with
        source_image: Source image
        charset: Display name of the charset used
        enhanced: Whether the art went through AI enhancement
        **extra_metadata: Additional metadata
    """
    metadata: Dict[str, Any] = {
        'generated_at': datetime.now().isoformat(timespec='seconds'),
    }
    if charset:
        metadata['charset'] = charset
    if enhanced:
        metadata['enhanced'] = True
    metadata.update(extra_metadata)

    return AsciiResult(
        text=text,
        options=options,
        source_image=source_image,
        metadata=metadata,
    )
