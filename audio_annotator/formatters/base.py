"""Export format descriptor, output container, and shared helpers.

WHY: Every export consumes the same annotation collection but produces a
different payload. A small descriptor per format lets the CLI, the HTTP
API and the workspace treat all nine formats generically.

HOW: ExportFormat bundles a format's identity (key, display name, file
suffix, MIME type) with a pure render function. Renderers are plain
functions ``(annotations, base_name) -> str | bytes``; adding a format
means writing one function and one registry entry, no subclassing.
FormatterOutput is what an export hands to the file-system boundary.

RULES:
- Renderers never mutate the collection
- ``suffix`` is appended to the base name, e.g. ``"_annotations.json"``
- Base names come from base_filename(), never from renderers
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, Tuple, Union

from audio_annotator.config import DEFAULT_BASE_NAME
from audio_annotator.core.ir import Annotation
from audio_annotator.core.timecode import ordered_times

Payload = Union[str, bytes]
Renderer = Callable[[Sequence[Annotation], str], Payload]

UNKNOWN_SPEAKER = "Unknown Speaker"


@dataclass(frozen=True)
class ExportFormat:
    """One entry of the export registry.

    Attributes:
        key: Identifier used in CLI flags and API paths, e.g. ``"srt"``.
        name: Human-readable name, e.g. ``"SRT Subtitles"``.
        suffix: Appended to the base name, e.g. ``".srt"``.
        media_type: MIME type of the payload.
        render: Pure function producing the payload.
    """

    key: str
    name: str
    suffix: str
    media_type: str
    render: Renderer


@dataclass
class FormatterOutput:
    """One exported file.

    Attributes:
        filename: Full output filename, e.g. ``"interview.srt"``.
        content: Text payload (str) or binary payload (bytes, PDF).
        media_type: MIME type for the content.
    """

    filename: str
    content: Payload
    media_type: str

    def as_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")


def base_filename(source_filename: Optional[str]) -> str:
    """Source media name without its last extension, or the default base.

    ``"interview.final.mp3"`` -> ``"interview.final"``; ``None`` -> ``"annotations"``.
    """
    if not source_filename:
        return DEFAULT_BASE_NAME
    stem = Path(source_filename).stem
    return stem or DEFAULT_BASE_NAME


def iter_ordered(
    annotations: Sequence[Annotation],
) -> Iterator[Tuple[str, str, Annotation]]:
    """Yield ``(start, end, annotation)`` with start/end swapped into order."""
    for annotation in annotations:
        start, end = ordered_times(annotation.start_time, annotation.end_time)
        yield start, end, annotation


def has_text(annotation: Annotation) -> bool:
    return bool(annotation.transcript.strip())
