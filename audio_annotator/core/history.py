"""Linear undo/redo history over immutable annotation collections.

WHY: Every edit (AI batch, field edit, tag change, insert, delete) must be
undoable, and a fresh edit after an undo must discard the redo tail the
way every editor users know behaves.

HOW: An append-only list of snapshots plus a cursor. Because snapshots are
tuples of frozen Annotation records, undo/redo are O(1) cursor moves and
nothing is ever deep-copied.

RULES:
- There is always at least one snapshot; index 0 is the empty collection
- The cursor is always a valid index into the snapshot list
- commit() truncates everything after the cursor, appends, moves to the tail
- undo()/redo() only move the cursor; at the bounds they are no-ops
- reset() restores the single empty snapshot
- No depth limit
"""

from __future__ import annotations

import logging
from typing import Iterable, Tuple

from audio_annotator.core.ir import EMPTY_COLLECTION, Annotation, AnnotationCollection

logger = logging.getLogger(__name__)


class History:
    """Snapshot list and cursor for one annotation workspace."""

    def __init__(self) -> None:
        self._snapshots: list[AnnotationCollection] = [EMPTY_COLLECTION]
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def snapshots(self) -> Tuple[AnnotationCollection, ...]:
        return tuple(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def current(self) -> AnnotationCollection:
        return self._snapshots[self._cursor]

    def commit(self, collection: Iterable[Annotation]) -> AnnotationCollection:
        """Make ``collection`` the new current snapshot, dropping any redo tail."""
        snapshot = tuple(collection)
        dropped = len(self._snapshots) - self._cursor - 1
        del self._snapshots[self._cursor + 1:]
        self._snapshots.append(snapshot)
        self._cursor = len(self._snapshots) - 1
        logger.debug(
            "Committed snapshot %d (%d annotation(s), %d redo step(s) dropped)",
            self._cursor, len(snapshot), dropped,
        )
        return snapshot

    def undo(self) -> bool:
        """Step back one snapshot. Returns False when already at the start."""
        if not self.can_undo:
            return False
        self._cursor -= 1
        logger.debug("Undo -> snapshot %d", self._cursor)
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. Returns False when already at the tail."""
        if not self.can_redo:
            return False
        self._cursor += 1
        logger.debug("Redo -> snapshot %d", self._cursor)
        return True

    def reset(self) -> None:
        self._snapshots = [EMPTY_COLLECTION]
        self._cursor = 0
