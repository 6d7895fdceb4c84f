"""Annotation record and the field/tag vocabularies used to edit it.

WHY: Every mutation, history snapshot and exporter works on the same
record shape. Making it immutable lets the history keep snapshots by
reference: an edit builds a new record instead of changing one that an
older snapshot still points at.

HOW: Annotation is a frozen dataclass. Tag sequences are tuples so the
whole record is hashable and comparable by value. from_dict() accepts
the camelCase wire form produced by the AI collaborator and by the JSON
export; to_dict() writes it back.

RULES:
- start_time/end_time are stored exactly as entered (never reordered)
- Tag tuples keep insertion order and never hold empty or duplicate strings
- speaker defaults to "" and transcript to ""
- A collection is a tuple of Annotation; its order is display/export order
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Tuple

from audio_annotator.core.timecode import ZERO_TIMECODE
from audio_annotator.errors import InvalidInputError


class TagType(str, enum.Enum):
    """The two tag sequences an annotation carries."""

    SENTIMENT = "sentiment"
    SOUND = "sound"

    @property
    def attribute(self) -> str:
        return "sentiment_tags" if self is TagType.SENTIMENT else "sound_tags"

    @classmethod
    def parse(cls, value: "str | TagType") -> "TagType":
        """Accept ``sentiment``/``sound`` or the wire names
        ``sentimentTags``/``soundTags``."""
        if isinstance(value, TagType):
            return value
        normalized = str(value).strip()
        if normalized in _TAG_WIRE_NAMES:
            return _TAG_WIRE_NAMES[normalized]
        try:
            return cls(normalized.lower())
        except ValueError:
            raise InvalidInputError(
                "Unknown tag type '{}'. Expected 'sentiment' or 'sound'.".format(value)
            ) from None


_TAG_WIRE_NAMES = {
    "sentimentTags": TagType.SENTIMENT,
    "soundTags": TagType.SOUND,
}

# Wire name -> attribute name for the plain-text fields edit_field accepts.
EDITABLE_FIELDS: Dict[str, str] = {
    "startTime": "start_time",
    "endTime": "end_time",
    "transcript": "transcript",
    "speaker": "speaker",
}


def resolve_field(name: str) -> str:
    """Return the attribute name for an editable field.

    Both wire names (``startTime``) and attribute names (``start_time``)
    are accepted.
    """
    if name in EDITABLE_FIELDS:
        return EDITABLE_FIELDS[name]
    if name in EDITABLE_FIELDS.values():
        return name
    raise InvalidInputError(
        "Field '{}' is not editable. Expected one of: {}".format(
            name, ", ".join(EDITABLE_FIELDS)
        )
    )


def clean_tags(tags: Iterable[Any] | None) -> Tuple[str, ...]:
    """Strip tags and drop empties and duplicates, keeping first occurrences."""
    if isinstance(tags, str):
        tags = [tags]
    cleaned: list[str] = []
    for tag in tags or ():
        if tag is None:
            continue
        text = str(tag).strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return tuple(cleaned)


@dataclass(frozen=True)
class Annotation:
    """One time-coded segment of the recording.

    Attributes:
        start_time: Start timecode as entered, canonically ``HH:MM:SS.mmm``.
        end_time: End timecode as entered. May be earlier than start_time.
        transcript: Spoken text for the segment, possibly empty.
        speaker: Speaker label, "" when unknown.
        sentiment_tags: Tone/emotion tags, e.g. ("calm", "urgent").
        sound_tags: Sound-event tags, e.g. ("music", "applause").
    """

    start_time: str
    end_time: str
    transcript: str = ""
    speaker: str = ""
    sentiment_tags: Tuple[str, ...] = field(default_factory=tuple)
    sound_tags: Tuple[str, ...] = field(default_factory=tuple)

    def tags(self, tag_type: TagType) -> Tuple[str, ...]:
        return getattr(self, tag_type.attribute)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Annotation:
        """Build an Annotation from a raw camelCase record.

        Missing speaker, transcript and tag lists default to empty; missing
        times default to zero. Snake_case keys are accepted as well.
        """
        def pick(wire: str, attr: str, default: Any = None) -> Any:
            value = data.get(wire)
            if value is None:
                value = data.get(attr)
            return default if value is None else value

        return cls(
            start_time=str(pick("startTime", "start_time", ZERO_TIMECODE)),
            end_time=str(pick("endTime", "end_time", ZERO_TIMECODE)),
            transcript=str(pick("transcript", "transcript", "")),
            speaker=str(pick("speaker", "speaker", "")),
            sentiment_tags=clean_tags(pick("sentimentTags", "sentiment_tags")),
            sound_tags=clean_tags(pick("soundTags", "sound_tags")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase wire form with list-valued tags."""
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "transcript": self.transcript,
            "speaker": self.speaker,
            "sentimentTags": list(self.sentiment_tags),
            "soundTags": list(self.sound_tags),
        }


AnnotationCollection = Tuple[Annotation, ...]

EMPTY_COLLECTION: AnnotationCollection = ()
