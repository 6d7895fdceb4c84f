"""Async HTTP client for Gemini audio annotation.

WHY: The initial annotation batch comes from a generative model that
listens to the audio and returns time-coded segments. This module hides
the HTTP details behind one coroutine with the collaborator contract the
workspace expects: ``annotate(audio, mime_type, instructions) -> records``.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. GeminiClient is an
async context manager: enter it to get an authenticated client, exit to
close the connection pool. annotate() sends the audio inline (base64)
together with the template instructions and a structured-output schema,
then parses the JSON reply and validates it with jsonschema.

RULES:
- Always use the async context manager (async with GeminiClient() as client:)
- Default model is gemini-2.5-flash
- Inline audio is limited to 20 MB; larger payloads fail before any request
- Non-2xx responses raise GeminiAPIError (status code + body)
- Replies that are not a valid annotation array raise GeminiResponseError
- No automatic retry; the caller decides what to do with failures
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List

import httpx
import jsonschema

from audio_annotator.api.prompts import RAW_ANNOTATIONS_JSON_SCHEMA, RESPONSE_SCHEMA
from audio_annotator.config import GEMINI_BASE_URL, GEMINI_MODEL, load_api_key

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INLINE_MAX_BYTES = 20 * 1024 * 1024


class GeminiAPIError(Exception):
    """Raised when the Gemini API returns an error response.

    The message keeps the status code and body text, which is what the
    workspace inspects to tell auth and quota failures apart.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Gemini API error {status_code}: {message}")


class GeminiResponseError(Exception):
    """Raised when a successful response does not hold a usable annotation array."""


class AudioTooLargeError(ValueError):
    """Raised when the audio payload exceeds the inline request limit.

    Raised before any API call is made; the message includes the actual
    size and the limit.
    """


class GeminiClient:
    """Async client for the Gemini ``generateContent`` endpoint.

    RULES:
    - Use as: async with GeminiClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url and model default to GEMINI_BASE_URL / GEMINI_MODEL
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._model = model or GEMINI_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(600.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GeminiClient must be used as an async context manager: "
                "async with GeminiClient() as client: ..."
            )
        return self._client

    async def annotate(
        self,
        audio: bytes,
        mime_type: str,
        instructions: str,
    ) -> List[Dict[str, Any]]:
        """Send audio plus instructions and return the raw annotation records.

        Args:
            audio: Raw audio bytes.
            mime_type: MIME type of the audio, e.g. ``"audio/mpeg"``.
            instructions: Template instruction text.

        Returns:
            List of dicts with startTime, endTime, transcript and optional
            speaker, sentimentTags, soundTags.
        """
        client = self._ensure_client()
        _validate_audio_size(audio)

        body = build_request_body(audio, mime_type, instructions)
        logger.info(
            "Requesting annotations from %s (%d bytes of %s)",
            self._model, len(audio), mime_type,
        )

        resp = await client.post(f"/models/{self._model}:generateContent", json=body)
        if resp.status_code != 200:
            raise GeminiAPIError(resp.status_code, resp.text)

        records = parse_annotation_reply(resp.json())
        logger.info("Received %d annotation record(s)", len(records))
        return records


# ---------------------------------------------------------------------------
# Request/response helpers (module-private, exposed for tests)
# ---------------------------------------------------------------------------


def build_request_body(audio: bytes, mime_type: str, instructions: str) -> Dict[str, Any]:
    """Assemble the generateContent request: inline audio, then the prompt."""
    return {
        "contents": [
            {
                "parts": [
                    {
                        "inline_data": {
                            "mime_type": mime_type,
                            "data": base64.b64encode(audio).decode("ascii"),
                        }
                    },
                    {"text": instructions},
                ]
            }
        ],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def parse_annotation_reply(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Extract and validate the annotation array from a generateContent reply.

    The model's answer is JSON text spread over the first candidate's
    parts; the parts are concatenated before parsing.
    """
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise GeminiResponseError(
            "Gemini response has no candidate content: {}".format(
                json.dumps(payload)[:500]
            )
        ) from None

    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    try:
        records = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GeminiResponseError(
            "Gemini response is not valid JSON: {}".format(exc)
        ) from exc

    try:
        jsonschema.validate(instance=records, schema=RAW_ANNOTATIONS_JSON_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise GeminiResponseError(
            "Gemini response does not match the annotation schema: {}".format(exc.message)
        ) from exc

    return records


def _validate_audio_size(audio: bytes) -> None:
    if len(audio) > _INLINE_MAX_BYTES:
        raise AudioTooLargeError(
            f"Audio payload ({len(audio):,} bytes) exceeds the inline request "
            f"limit of {_INLINE_MAX_BYTES:,} bytes."
        )
