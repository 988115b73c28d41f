"""
Configuration for MemeAscii.

Two layers:
- ConversionOptions: immutable per-call settings for image-to-ASCII conversion
- Settings: process-level settings (AI backend, API keys, history, logging)
  read from environment variables with sane fallbacks

Usage:
    from meme_ascii.config import ConversionOptions, Settings
    opts = ConversionOptions(output_width=80, charset_key="block")
    settings = Settings.from_env()
"""

import logging
import math
import os
import dataclasses
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .charsets import DEFAULT_CHARSET_KEY
from .errors import InvalidDimensionError, InvalidOptionsError

# UI control limits (the core accepts any positive value)
WIDTH_RANGE: Tuple[int, int] = (30, 300)
WIDTH_STEP = 10
CONTRAST_RANGE: Tuple[float, float] = (0.5, 2.5)
CONTRAST_STEP = 0.1

DEFAULT_OUTPUT_WIDTH = 100
DEFAULT_MAX_HISTORY = 10

DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "groq": "llama-3.1-8b-instant",
}

# Original camelCase option names map onto snake_case fields
_OPTION_ALIASES = {
    "outputWidth": "output_width",
    "width": "output_width",
    "charsetKey": "charset_key",
    "charset": "charset_key",
    "invertColors": "invert",
    "invert_colors": "invert",
}


@dataclass(frozen=True)
class ConversionOptions:
    """Options consumed by one conversion call."""
    output_width: int = DEFAULT_OUTPUT_WIDTH   # Glyph columns in the result
    charset_key: str = DEFAULT_CHARSET_KEY     # Unknown keys fall back to the default
    invert: bool = True                        # Reflect luminance (light art on dark backgrounds)
    contrast: float = 1.0                      # Multiplier around mid-gray (1.0 = none)

    def __post_init__(self):
        if isinstance(self.output_width, bool) or not isinstance(self.output_width, int):
            raise InvalidOptionsError(f"output_width must be an integer, got {self.output_width!r}")
        if self.output_width <= 0:
            raise InvalidDimensionError(f"output_width must be positive, got {self.output_width}")
        if isinstance(self.contrast, bool) or not isinstance(self.contrast, (int, float)):
            raise InvalidOptionsError(f"contrast must be a number, got {self.contrast!r}")
        if not (math.isfinite(self.contrast) and self.contrast > 0):
            raise InvalidOptionsError(f"contrast must be a positive finite number, got {self.contrast}")

    def replace(self, **changes) -> "ConversionOptions":
        """Return a copy with some fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ConversionOptions":
        """
        Build options from a mapping.

        Accepts snake_case field names as well as the camelCase names used by
        browser front-ends. Missing fields take their defaults; unknown keys
        are ignored.
        """
        fields: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name in cls.__dataclass_fields__ and value is not None:
                fields[name] = value
        return cls(**fields)


# ----------------------------
# Coercion helpers
# ----------------------------

def _coerce_int(v: Any, default: int, minmax: Optional[Tuple[int, int]] = None) -> int:
    try:
        x = int(v)
    except (TypeError, ValueError):
        return int(default)
    if minmax:
        lo, hi = minmax
        x = max(lo, min(hi, x))
    return x


def _coerce_choice(v: Any, choices: Tuple[str, ...], default: str) -> str:
    s = str(v).strip().lower() if v is not None else ""
    return s if s in choices else default


def _coerce_level(v: Any, default: str = "INFO") -> str:
    s = str(v).strip().upper() if v else ""
    return s if s in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET") else default


@dataclass
class Settings:
    """Process-level settings, normally read once from the environment."""
    backend: str = "gemini"                    # gemini | groq
    model: Optional[str] = None                # None = backend default
    gemini_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    history_file: Optional[str] = None         # JSON file; None = in-memory only
    max_history: int = DEFAULT_MAX_HISTORY
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODELS[self.backend]

    @property
    def api_key(self) -> Optional[str]:
        """API key for the selected backend."""
        return self.gemini_api_key if self.backend == "gemini" else self.groq_api_key

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        backend = _coerce_choice(env.get("MEME_ASCII_BACKEND"), tuple(DEFAULT_MODELS), "gemini")
        history_file = env.get("MEME_ASCII_HISTORY_FILE")
        log_file = env.get("MEME_ASCII_LOG_FILE")
        return cls(
            backend=backend,
            model=env.get("MEME_ASCII_MODEL") or None,
            gemini_api_key=env.get("GEMINI_API_KEY") or env.get("GOOGLE_API_KEY") or None,
            groq_api_key=env.get("GROQ_API_KEY") or None,
            history_file=os.path.expanduser(history_file) if history_file else None,
            max_history=_coerce_int(env.get("MEME_ASCII_MAX_HISTORY"), DEFAULT_MAX_HISTORY, (1, 100)),
            log_level=_coerce_level(env.get("MEME_ASCII_LOG_LEVEL")),
            log_file=os.path.expanduser(log_file) if log_file else None,
        )

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)


__all__ = [
    "ConversionOptions",
    "Settings",
    "WIDTH_RANGE",
    "CONTRAST_RANGE",
    "DEFAULT_MODELS",
]
