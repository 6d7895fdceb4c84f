"""Gemini API client package: async HTTP interface to the AI annotator.

WHY: The initial annotation batch for an upload comes from a generative
model. This package keeps all of that communication behind one async
client so the workspace only sees the collaborator contract.

HOW: GeminiClient wraps httpx.AsyncClient. prompts.py holds the
templates, their instruction texts and the reply schema.

RULES:
- All HTTP calls go through GeminiClient (no direct httpx usage elsewhere)
- Authentication is via the x-goog-api-key header from config
"""

from audio_annotator.api.client import GeminiAPIError, GeminiClient
from audio_annotator.api.prompts import Template, instructions_for

__all__ = ["GeminiAPIError", "GeminiClient", "Template", "instructions_for"]
