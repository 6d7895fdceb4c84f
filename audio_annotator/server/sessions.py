"""In-memory annotation session store with TTL cleanup.

WHY: The HTTP API serves several users at once, each editing their own
recording. Every user needs a workspace (history included) that lives
across requests, and abandoned workspaces must not pile up forever.
Persistence across restarts is out of scope, so memory is enough.

HOW: Three components work together:
  SessionStatus: enum of the AI-pass lifecycle
  Session: dataclass holding the Workspace plus status/timing
  SessionStore: thread-safe dict-based store with create/get/list/update/
                delete and idle-TTL cleanup

RULES:
- All store mutations are protected by threading.Lock
- Session IDs are UUID4 hex strings generated at creation time
- get_session() refreshes last_access; expiry is measured from last_access
- Sessions still generating are never expired
- Default TTL is 1 hour (3600 seconds); at most max_sessions live at once
"""

from __future__ import annotations

import enum
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from audio_annotator.core.workspace import Workspace

logger = logging.getLogger(__name__)

# Default idle time-to-live for sessions (seconds)
DEFAULT_TTL_SECONDS = 3600


class SessionStatus(str, enum.Enum):
    """Where a session is in its AI pass.

    RULES:
    - pending: created, AI pass not started yet
    - generating: waiting for the AI collaborator
    - ready: annotations available for editing/export
    - failed: the AI pass failed; the workspace is empty but still editable
    """

    PENDING = "pending"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


@dataclass
class Session:
    """One user's annotation workspace and its bookkeeping."""

    id: str
    workspace: Workspace
    status: SessionStatus
    created_at: float
    last_access: float
    error: Optional[str] = None
    error_kind: Optional[str] = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class SessionStore:
    """Thread-safe in-memory store for annotation sessions.

    RULES:
    - create_session() raises ValueError when max_sessions is reached
    - get_session() returns None for unknown IDs (no exceptions)
    - Each Session carries its own lock; hold it while mutating the workspace
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_sessions: int = 100,
    ) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def create_session(self, workspace: Workspace) -> Session:
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of concurrent sessions ({}) reached".format(
                        self.max_sessions
                    )
                )

            session_id = uuid.uuid4().hex
            now = time.time()
            session = Session(
                id=session_id,
                workspace=workspace,
                status=SessionStatus.PENDING,
                created_at=now,
                last_access=now,
            )
            self._sessions[session_id] = session

        logger.info("Created session %s for %s", session_id, workspace.source_filename)
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        """Return the live session (not a copy) and refresh its last access time."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_access = time.time()
            return session

    def list_sessions(self) -> List[Session]:
        """All sessions, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def update_status(
        self,
        session_id: str,
        status: SessionStatus,
        error: Optional[str] = None,
        error_kind: Optional[str] = None,
    ) -> Optional[Session]:
        """Set a session's status (and error on failure). None if unknown."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            session.status = status
            session.error = error
            session.error_kind = error_kind
            session.last_access = time.time()
            return session

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info("Deleted session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove sessions idle longer than the TTL. Returns how many were removed."""
        now = time.time()
        expired: List[Session] = []

        with self._lock:
            for session_id, session in list(self._sessions.items()):
                if session.status == SessionStatus.GENERATING:
                    continue
                if now - session.last_access > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for session in expired:
            logger.info(
                "Expired session %s (idle %.0fs)", session.id, now - session.last_access
            )
        return len(expired)
