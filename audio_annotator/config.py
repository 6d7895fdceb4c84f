"""Configuration constants, supported audio types, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Supported audio extensions and AI defaults are
plain data structures, not buried in logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level dicts and strings. load_api_key() gives a clear error
when the key is missing.

RULES:
- SUPPORTED_AUDIO_FORMATS maps lowercase extensions (with dot) to MIME types
- The API key is read from GEMINI_API_KEY (API_KEY accepted as fallback),
  never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Audio input
# ---------------------------------------------------------------------------

SUPPORTED_AUDIO_FORMATS: dict[str, str] = {
    ".aac": "audio/aac",
    ".aiff": "audio/aiff",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".mp3": "audio/mpeg",
    ".oga": "audio/ogg",
    ".ogg": "audio/ogg",
    ".opus": "audio/opus",
    ".wav": "audio/wav",
    ".weba": "audio/webm",
}
"""Audio file extensions accepted for annotation (lowercase, with dot)."""


def guess_audio_mime_type(filename: str) -> Optional[str]:
    """Return the audio MIME type for a filename, or None if unsupported."""
    return SUPPORTED_AUDIO_FORMATS.get(Path(filename).suffix.lower())


# ---------------------------------------------------------------------------
# Export naming
# ---------------------------------------------------------------------------

DEFAULT_BASE_NAME = "annotations"
"""Base filename for exports when no source media is loaded."""

# ---------------------------------------------------------------------------
# AI collaborator defaults
# ---------------------------------------------------------------------------

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
DEFAULT_TEMPLATE = os.getenv("DEFAULT_TEMPLATE", "General")


def load_api_key() -> str:
    """Load the Gemini API key from the environment.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()
    if not key:
        raise ValueError(
            "Gemini API key not configured. "
            "Add GEMINI_API_KEY to the .env file in the app folder."
        )
    return key
