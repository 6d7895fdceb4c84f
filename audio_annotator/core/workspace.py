"""The annotation workspace: one loaded recording and its editable history.

WHY: A user session is more than the history. It also has the loaded
source file (which names every export), the template chosen for the AI
pass, the last error to show, and whether a batch request is still
running. Front ends (CLI, HTTP API) need one object that holds all of
that and funnels every change through the mutation API.

HOW: Workspace wraps an AnnotationEditor. load_source() validates the
upload and resets state. generate() awaits the external AI collaborator
and applies its batch with on_batch_ready(), or classifies the failure
with on_failure(). fetch_batch() is the same call without the apply
step, for callers that commit under their own lock. export() renders
history.current() through the formatter registry.

RULES:
- Loading a new source or clearing always resets history to empty
- A non-audio upload raises InvalidInputError and leaves the workspace empty
- A successful AI batch is one undo step; a failed one changes nothing
- Upstream failures are classified (auth, quota, unknown), never retried
- Exports are pure reads of the current snapshot
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from audio_annotator.api.prompts import Template, instructions_for
from audio_annotator.config import guess_audio_mime_type
from audio_annotator.core.ir import AnnotationCollection
from audio_annotator.core.mutations import AnnotationEditor, RawRecord
from audio_annotator.core.timecode import parse_timecode
from audio_annotator.errors import (
    IndexOutOfRangeError,
    InvalidInputError,
    UpstreamError,
    classify_upstream_error,
)
from audio_annotator.formatters import export_annotations
from audio_annotator.formatters.base import FormatterOutput, base_filename

logger = logging.getLogger(__name__)

# The AI collaborator: (audio bytes, MIME type, instructions) -> raw records.
AnnotateFn = Callable[[bytes, str, str], Awaitable[List[Dict[str, Any]]]]


class Workspace:
    """State for annotating one audio recording.

    Attributes:
        editor: The single mutation entry point; use it for all edits.
        template: Template used for the next AI pass.
        source_filename: Loaded media filename, or None.
        mime_type: MIME type of the loaded media, or None.
        last_error: Message of the most recent failure, or None.
    """

    def __init__(self, template: "str | Template | None" = None) -> None:
        self.editor = AnnotationEditor()
        self.template = Template.parse(template)
        self.source_filename: Optional[str] = None
        self.mime_type: Optional[str] = None
        self.last_error: Optional[str] = None
        self._generating = False

    @property
    def annotations(self) -> AnnotationCollection:
        return self.editor.annotations

    @property
    def history(self):
        return self.editor.history

    @property
    def is_generating(self) -> bool:
        """True while an AI batch request is outstanding."""
        return self._generating

    # ------------------------------------------------------------------
    # Source lifecycle
    # ------------------------------------------------------------------

    def load_source(self, filename: str, mime_type: Optional[str] = None) -> None:
        """Load a new recording, discarding all annotations and history.

        Raises:
            InvalidInputError: The file is not audio. The workspace is left
                empty with ``last_error`` set.
        """
        self.editor.reset()
        self.source_filename = None
        self.mime_type = None
        self.last_error = None

        resolved = mime_type or guess_audio_mime_type(filename)
        if not resolved or not resolved.startswith("audio/"):
            self.last_error = "Please upload a valid audio file."
            logger.warning("Rejected non-audio source %s (%s)", filename, resolved)
            raise InvalidInputError(
                "'{}' is not an audio file ({}).".format(filename, resolved or "unknown type")
            )

        self.source_filename = filename
        self.mime_type = resolved
        logger.info("Loaded source %s (%s)", filename, resolved)

    def clear(self) -> None:
        """Remove the source file and all annotations; template back to General."""
        self.editor.reset()
        self.source_filename = None
        self.mime_type = None
        self.last_error = None
        self.template = Template.GENERAL

    def base_filename(self) -> str:
        return base_filename(self.source_filename)

    # ------------------------------------------------------------------
    # AI collaborator
    # ------------------------------------------------------------------

    def on_batch_ready(self, records: Iterable[RawRecord]) -> AnnotationCollection:
        self.last_error = None
        return self.editor.replace_all(records)

    def on_failure(self, exc: BaseException) -> UpstreamError:
        error = classify_upstream_error(exc)
        self.last_error = error.message
        logger.warning("Annotation request failed (%s): %s", type(error).__name__, exc)
        return error

    async def fetch_batch(self, annotate: AnnotateFn, audio: bytes) -> List[Dict[str, Any]]:
        """Run one AI pass over ``audio`` and return the raw records.

        History is not touched; callers that share the workspace across
        threads apply the result with on_batch_ready() under their own lock.

        Raises:
            InvalidInputError: No source is loaded.
            UpstreamError: The collaborator failed (classified subclass).
        """
        if self.source_filename is None or self.mime_type is None:
            raise InvalidInputError("No file provided for annotation.")

        self._generating = True
        self.last_error = None
        try:
            return await annotate(audio, self.mime_type, instructions_for(self.template))
        except Exception as exc:
            raise self.on_failure(exc) from exc
        finally:
            self._generating = False

    async def generate(self, annotate: AnnotateFn, audio: bytes) -> AnnotationCollection:
        """Run one AI pass over ``audio`` and apply the batch.

        Args:
            annotate: The collaborator coroutine, e.g. GeminiClient.annotate.
            audio: Raw bytes of the loaded source.

        Raises:
            InvalidInputError: No source is loaded.
            UpstreamError: The collaborator failed (classified subclass).
        """
        records = await self.fetch_batch(annotate, audio)
        return self.on_batch_ready(records)

    # ------------------------------------------------------------------
    # Playback and export
    # ------------------------------------------------------------------

    def seek_position(self, index: int) -> float:
        """Seconds to seek the player to for the annotation at ``index``."""
        annotations = self.annotations
        if not isinstance(index, int) or not 0 <= index < len(annotations):
            raise IndexOutOfRangeError(index, len(annotations))
        return parse_timecode(annotations[index].start_time)

    def export(self, format_key: str) -> FormatterOutput:
        return export_annotations(format_key, self.annotations, self.source_filename)
