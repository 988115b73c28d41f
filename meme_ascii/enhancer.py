"""
LLM-Powered ASCII Meme Enhancer

Sends ASCII art to Gemini or Groq with a fixed instruction to exaggerate its
meme-like character while keeping the original structure.

Key Features:
- Input and output sanitized to a fixed allowed character set
- Exactly one remote call per enhancement (no retry, no backend fallback)
- Empty replies surface as EmptyResponseError instead of being papered over
"""

import logging
import re
from typing import Any, Dict, Optional

from .config import DEFAULT_MODELS, Settings
from .errors import EmptyResponseError, EnhancerUnavailableError

logger = logging.getLogger(__name__)

# Optional backends: only the configured one has to be installed
try:
    from google import genai
    from google.genai import types
    GEMINI_AVAILABLE = True
except ImportError:
    GEMINI_AVAILABLE = False

try:
    from groq import Groq
    GROQ_AVAILABLE = True
except ImportError:
    GROQ_AVAILABLE = False


# =============================================================================
# Sanitization
# =============================================================================
# Allowed: printable ASCII (U+0020-U+007E), LF, CR, and the shading blocks
# U+2591, U+2592, U+2593, U+2588
ALLOWED_CHARS_PATTERN = re.compile("[^ -~\n\r░▒▓█]")

# Opening fence alone on its line (optional language word), closing fence alone on the last line
_CODE_FENCE = re.compile(r"\A\s*```[\w+-]*[ \t]*\r?\n(.*?)\r?\n```[ \t]*\s*\Z", re.DOTALL)


def sanitize_ascii(text: str) -> str:
    """Replace every character outside the allowed set with a space."""
    return ALLOWED_CHARS_PATTERN.sub(" ", text)


def strip_code_fence(text: str) -> str:
    """
    Unwrap a reply that arrived inside a Markdown code fence.

    Backtick is a ramp glyph, so a body holding further fence-like rows is
    treated as art and returned untouched.
    """
    match = _CODE_FENCE.match(text)
    if not match:
        return text
    body = match.group(1)
    if any(line.lstrip().startswith("```") for line in body.split("\n")):
        return text
    return body


# =============================================================================
# Prompt
# =============================================================================
ENHANCE_PROMPT = """You are an AI meme artist who specializes in taking boring ASCII art and making it hilarious.
Take the following ASCII art and modify it to emphasize meme characteristics and make it funnier.
Make sure to preserve the original structure and content as much as possible, only add details to emphasize the meme characteristics.
Only use standard printable ASCII characters (Unicode U+0020 to U+007E), newlines, and the block characters (░▒▓█ - U+2591, U+2592, U+2593, U+2588) in your output. Do not use other symbols or Unicode characters.
Return ONLY the enhanced ASCII art. No explanations, no code fences."""


def build_prompt(ascii_art: str) -> str:
    return f"{ENHANCE_PROMPT}\n\nASCII Art:\n{ascii_art}"


# =============================================================================
# Enhancer
# =============================================================================
class AsciiMemeEnhancer:
    """Enhances ASCII art through a single remote text-generation call."""

    def __init__(
        self,
        backend: str = "gemini",
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Any = None,
        temperature: float = 0.7,
        max_output_tokens: int = 8192,
    ):
        if backend not in DEFAULT_MODELS:
            raise ValueError(f"Unknown backend: {backend}. Available: {list(DEFAULT_MODELS)}")
        self.backend = backend
        self.api_key = api_key
        self.model = model or DEFAULT_MODELS[backend]
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.client = client if client is not None else self._setup_client()

    @classmethod
    def from_settings(cls, settings: Settings) -> "AsciiMemeEnhancer":
        return cls(backend=settings.backend, api_key=settings.api_key, model=settings.model)

    def _setup_client(self) -> Any:
        """Build the SDK client for the configured backend, or None."""
        if not self.api_key:
            logger.info("No API key for %s; AI enhancement disabled", self.backend)
            return None
        if self.backend == "gemini":
            if not GEMINI_AVAILABLE:
                logger.warning("google-genai is not installed; AI enhancement disabled")
                return None
            client = genai.Client(api_key=self.api_key)
        else:
            if not GROQ_AVAILABLE:
                logger.warning("groq is not installed; AI enhancement disabled")
                return None
            client = Groq(api_key=self.api_key)
        logger.info("%s enhancer initialized (model %s)", self.backend.capitalize(), self.model)
        return client

    @property
    def is_available(self) -> bool:
        return self.client is not None

    def get_status(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "model": self.model,
            "available": self.is_available,
        }

    def enhance(self, ascii_art: str) -> str:
        """
        Enhance ASCII art with meme-style emphasis.

        Args:
            ascii_art: Art to enhance; disallowed characters become spaces

        Returns:
            Enhanced art, restricted to the allowed character set

        Raises:
            EnhancerUnavailableError: no backend client is configured
            EmptyResponseError: the model returned nothing usable
        """
        if not self.is_available:
            raise EnhancerUnavailableError(
                f"AI enhancement unavailable: configure an API key for '{self.backend}'."
            )

        sanitized = sanitize_ascii(ascii_art)
        logger.info("Requesting enhancement from %s (%d chars)", self.backend, len(sanitized))

        if self.backend == "gemini":
            raw = self._call_gemini(sanitized)
        else:
            raw = self._call_groq(sanitized)

        if raw is None or not raw.strip():
            raise EmptyResponseError("AI did not return an output for ASCII enhancement.")

        enhanced = sanitize_ascii(strip_code_fence(raw))
        if not enhanced.strip():
            raise EmptyResponseError("AI did not return an output for ASCII enhancement.")
        return enhanced

    def _call_gemini(self, ascii_art: str) -> Optional[str]:
        response = self.client.models.generate_content(
            model=self.model,
            contents=build_prompt(ascii_art),
            config=types.GenerateContentConfig(
                max_output_tokens=self.max_output_tokens,
                temperature=self.temperature,
            ),
        )
        return response.text

    def _call_groq(self, ascii_art: str) -> Optional[str]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": ENHANCE_PROMPT},
                {"role": "user", "content": f"ASCII Art:\n{ascii_art}"},
            ],
            max_tokens=self.max_output_tokens,
            temperature=self.temperature,
        )
        if not response.choices:
            return None
        return response.choices[0].message.content


# =============================================================================
# Singleton and Public API
# =============================================================================
_enhancer: Optional[AsciiMemeEnhancer] = None


def get_enhancer() -> AsciiMemeEnhancer:
    """Get or create the enhancer configured from the environment."""
    global _enhancer
    if _enhancer is None:
        _enhancer = AsciiMemeEnhancer.from_settings(Settings.from_env())
    return _enhancer


def set_enhancer(enhancer: Optional[AsciiMemeEnhancer]) -> None:
    """Replace (or reset with None) the shared enhancer."""
    global _enhancer
    _enhancer = enhancer


def enhance(ascii_art: str) -> str:
    """Public API: enhance ASCII art with the shared enhancer."""
    return get_enhancer().enhance(ascii_art)
