"""Copy-on-write edits to annotation collections, recorded in history.

WHY: All mutation paths have to end up as exactly one history snapshot,
and a failed or no-op edit must leave history alone. Keeping each edit a
pure ``(collection) -> collection`` function makes that easy to get right
and easy to test; AnnotationEditor is the single place that commits.

HOW: Module-level functions take a collection and return a new tuple,
or the same tuple object when nothing changed. AnnotationEditor reads
history.current(), applies one of them, and commits only when the result
is a different object.

RULES:
- Never mutate the input collection or its records (dataclasses.replace)
- Valid indexes are 0 <= index < len(collection); negatives are rejected
- add_tag/remove_tag no-ops do not commit (history length unchanged)
- edit_field always commits, even when the value is unchanged
- insert_at_front prepends, so manual insertions read newest-first
- replace_all commits the whole AI batch as one undo step
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Iterable, Mapping, Union

from audio_annotator.core.history import History
from audio_annotator.core.ir import (
    Annotation,
    AnnotationCollection,
    TagType,
    resolve_field,
)
from audio_annotator.core.timecode import format_timecode
from audio_annotator.errors import IndexOutOfRangeError

logger = logging.getLogger(__name__)

RawRecord = Union[Annotation, Mapping[str, Any]]


def _check_index(collection: AnnotationCollection, index: int) -> None:
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(collection):
        raise IndexOutOfRangeError(index, len(collection))


def _replace_at(
    collection: AnnotationCollection,
    index: int,
    annotation: Annotation,
) -> AnnotationCollection:
    return collection[:index] + (annotation,) + collection[index + 1:]


def edit_field(
    collection: AnnotationCollection,
    index: int,
    field_name: str,
    value: str,
) -> AnnotationCollection:
    """Replace one text field (startTime, endTime, transcript, speaker)."""
    _check_index(collection, index)
    attribute = resolve_field(field_name)
    updated = dataclasses.replace(collection[index], **{attribute: str(value)})
    return _replace_at(collection, index, updated)


def add_tag(
    collection: AnnotationCollection,
    index: int,
    tag_type: "str | TagType",
    text: str,
) -> AnnotationCollection:
    """Append a stripped tag unless it is empty or already present."""
    _check_index(collection, index)
    kind = TagType.parse(tag_type)
    tag = (text or "").strip()
    annotation = collection[index]
    current = annotation.tags(kind)
    if not tag or tag in current:
        return collection
    updated = dataclasses.replace(annotation, **{kind.attribute: current + (tag,)})
    return _replace_at(collection, index, updated)


def remove_tag(
    collection: AnnotationCollection,
    index: int,
    tag_type: "str | TagType",
    text: str,
) -> AnnotationCollection:
    """Remove a tag by exact match; a missing tag changes nothing."""
    _check_index(collection, index)
    kind = TagType.parse(tag_type)
    annotation = collection[index]
    current = annotation.tags(kind)
    if text not in current:
        return collection
    remaining = tuple(tag for tag in current if tag != text)
    updated = dataclasses.replace(annotation, **{kind.attribute: remaining})
    return _replace_at(collection, index, updated)


def insert_at_front(
    collection: AnnotationCollection,
    position_seconds: float,
) -> AnnotationCollection:
    """Prepend an empty annotation starting and ending at the playback position."""
    timecode = format_timecode(position_seconds)
    return (Annotation(start_time=timecode, end_time=timecode),) + collection


def delete_at(collection: AnnotationCollection, index: int) -> AnnotationCollection:
    _check_index(collection, index)
    return collection[:index] + collection[index + 1:]


def normalize_batch(records: Iterable[RawRecord]) -> AnnotationCollection:
    """Turn raw collaborator records into Annotations (missing tags -> empty,
    missing speaker -> "")."""
    return tuple(
        record if isinstance(record, Annotation) else Annotation.from_dict(record)
        for record in records
    )


class AnnotationEditor:
    """The mutation entry point: every change to a workspace goes through here.

    Each public method reads ``history.current()``, computes the next
    collection with one of the pure functions above, and commits it.
    Exceptions propagate before anything is committed.
    """

    def __init__(self, history: History | None = None) -> None:
        self.history = history if history is not None else History()

    @property
    def annotations(self) -> AnnotationCollection:
        return self.history.current()

    def _apply(self, result: AnnotationCollection) -> AnnotationCollection:
        if result is self.history.current():
            return result
        return self.history.commit(result)

    def edit_field(self, index: int, field_name: str, value: str) -> AnnotationCollection:
        # Committed unconditionally: every confirmed edit is one undo step.
        return self.history.commit(edit_field(self.annotations, index, field_name, value))

    def add_tag(self, index: int, tag_type: "str | TagType", text: str) -> AnnotationCollection:
        return self._apply(add_tag(self.annotations, index, tag_type, text))

    def remove_tag(self, index: int, tag_type: "str | TagType", text: str) -> AnnotationCollection:
        return self._apply(remove_tag(self.annotations, index, tag_type, text))

    def insert_at_front(self, position_seconds: float) -> AnnotationCollection:
        return self._apply(insert_at_front(self.annotations, position_seconds))

    def delete_at(self, index: int) -> AnnotationCollection:
        return self._apply(delete_at(self.annotations, index))

    def replace_all(self, records: Iterable[RawRecord]) -> AnnotationCollection:
        batch = normalize_batch(records)
        logger.info("Applying batch of %d annotation(s)", len(batch))
        return self.history.commit(batch)

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def reset(self) -> None:
        self.history.reset()
