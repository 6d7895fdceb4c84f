"""FastAPI application exposing annotation sessions over HTTP.

WHY: Browser front ends and other tools need to upload a recording, get
the AI draft, edit it with undo/redo, and download exports without
linking the Python package. FastAPI gives request validation, background
tasks and OpenAPI docs for free.

HOW: POST /sessions stores the upload in a new Workspace and runs the AI
pass as a background task. Every edit endpoint takes the session lock,
calls the workspace's mutation API and returns the full session state.
Exports stream the rendered payload with a Content-Disposition filename.

RULES:
- Error responses use a consistent ErrorResponse schema
- IndexOutOfRangeError -> 404, InvalidInputError -> 400, unknown session -> 404
- Edits while the AI pass is pending or running -> 409
- A failed AI pass marks the session failed; its history stays empty
- The session store is a module-level singleton with periodic TTL cleanup
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List, Optional
from urllib.parse import quote

from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from audio_annotator import __version__
from audio_annotator.api.client import GeminiClient
from audio_annotator.api.prompts import TEMPLATE_DESCRIPTIONS, Template
from audio_annotator.core.workspace import Workspace
from audio_annotator.errors import (
    IndexOutOfRangeError,
    InvalidInputError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamQuotaError,
)
from audio_annotator.formatters import FORMATTERS
from audio_annotator.server.models import (
    AnnotationModel,
    ErrorResponse,
    FieldEdit,
    FormatInfo,
    HealthResponse,
    InsertRequest,
    SessionCreatedResponse,
    SessionResponse,
    TagRequest,
    TemplateInfo,
)
from audio_annotator.server.sessions import Session, SessionStatus, SessionStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()

# Statuses during which the AI batch may still be committed.
_BUSY_STATUSES = (SessionStatus.PENDING, SessionStatus.GENERATING)


async def _periodic_cleanup() -> None:
    """Run session cleanup every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Audio Annotator API",
    description=(
        "Upload an audio recording, get AI-generated time-coded annotations, "
        "edit them with undo/redo, and export JSON, text, Markdown, CSV, XML, "
        "SRT, VTT, PDF or Word."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Session or annotation not found"}}
_EDIT_ERRORS = {
    **_NOT_FOUND,
    400: {"model": ErrorResponse, "description": "Invalid field, tag type or value"},
    409: {"model": ErrorResponse, "description": "AI pass still running"},
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_kind(error: UpstreamError) -> str:
    if isinstance(error, UpstreamAuthError):
        return "auth"
    if isinstance(error, UpstreamQuotaError):
        return "quota"
    return "unknown"


def _session_to_response(session: Session) -> SessionResponse:
    """Convert an internal Session to a SessionResponse Pydantic model."""
    workspace = session.workspace
    history = workspace.history
    return SessionResponse(
        id=session.id,
        status=session.status.value,
        filename=workspace.source_filename,
        template=workspace.template.value,
        error=session.error,
        error_kind=session.error_kind,
        history_length=len(history),
        history_cursor=history.cursor,
        can_undo=history.can_undo,
        can_redo=history.can_redo,
        annotations=[AnnotationModel.from_annotation(a) for a in workspace.annotations],
    )


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name plus the RFC 5987 UTF-8 name."""
    fallback = "".join(
        ch if 32 <= ord(ch) < 127 and ch not in '"\\' else "_" for ch in filename
    )
    return "attachment; filename=\"{}\"; filename*=UTF-8''{}".format(
        fallback, quote(filename, safe="")
    )


def _get_session_or_404(session_id: str) -> Session:
    session = session_store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return session


def _edit(session_id: str, action) -> SessionResponse:
    """Run one workspace edit under the session lock, mapping errors to HTTP.

    The status is checked under the same lock the background AI pass holds
    while it commits its batch, so an edit never lands underneath it.
    """
    session = _get_session_or_404(session_id)
    with session.lock:
        if session.status in _BUSY_STATUSES:
            raise HTTPException(
                status_code=409,
                detail="Annotations are still being generated for this session.",
            )
        try:
            action(session.workspace)
        except IndexOutOfRangeError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        except InvalidInputError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return _session_to_response(session)


async def _run_annotation_pipeline(
    session_id: str,
    store: SessionStore,
    audio: bytes,
) -> None:
    """Background task: run the AI pass for a session and record the outcome.

    RULES:
    - Status goes generating -> ready, or generating -> failed
    - Failures are classified and stored on the session, never raised
    """
    session = store.get_session(session_id)
    if session is None:
        return

    store.update_status(session_id, SessionStatus.GENERATING)
    try:
        async with GeminiClient() as client:
            records = await session.workspace.fetch_batch(client.annotate, audio)
    except UpstreamError as exc:
        store.update_status(
            session_id, SessionStatus.FAILED, error=exc.message, error_kind=_error_kind(exc)
        )
        return
    except Exception as exc:
        logger.exception("Annotation pipeline failed for session %s", session_id)
        error = session.workspace.on_failure(exc)
        store.update_status(
            session_id, SessionStatus.FAILED, error=error.message, error_kind=_error_kind(error)
        )
        return

    with session.lock:
        session.workspace.on_batch_ready(records)
        store.update_status(session_id, SessionStatus.READY)


def _run_annotation_sync(session_id: str, store: SessionStore, audio: bytes) -> None:
    """Synchronous wrapper so BackgroundTasks can run the async pipeline."""
    asyncio.run(_run_annotation_pipeline(session_id, store, audio))


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionCreatedResponse,
    status_code=201,
    tags=["sessions"],
    summary="Upload audio and start an annotation session",
    description=(
        "Upload an audio file. Returns a session ID immediately; the AI pass "
        "runs in the background. Poll GET /sessions/{id} until the status is "
        "'ready' or 'failed'."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Not an audio file"},
        429: {"model": ErrorResponse, "description": "Too many concurrent sessions"},
    },
)
async def create_session(
    background_tasks: BackgroundTasks,
    file: Annotated[UploadFile, File(description="Audio file to annotate")],
    template: Annotated[
        str,
        Form(description="Annotation template: General, Legal, Medical, Academic or Accessibility."),
    ] = Template.GENERAL.value,
) -> SessionCreatedResponse:
    # Sanitize filename to prevent path traversal
    filename = Path(file.filename or "upload").name

    workspace = Workspace(template=template)
    try:
        workspace.load_source(filename, file.content_type)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        session = session_store.create_session(workspace)
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))

    audio = await file.read()
    background_tasks.add_task(_run_annotation_sync, session.id, session_store, audio)

    return SessionCreatedResponse(
        id=session.id,
        status=session.status.value,
        filename=filename,
        template=workspace.template.value,
    )


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session state and current annotations",
    responses=_NOT_FOUND,
)
async def get_session(session_id: str) -> SessionResponse:
    return _session_to_response(_get_session_or_404(session_id))


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Delete a session and its annotations",
    responses=_NOT_FOUND,
)
async def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Annotations
# ---------------------------------------------------------------------------


@app.post(
    "/sessions/{session_id}/annotations",
    response_model=SessionResponse,
    status_code=201,
    tags=["annotations"],
    summary="Insert an empty annotation at the playback position",
    description="The new annotation is prepended; start and end are both the given position.",
    responses=_EDIT_ERRORS,
)
async def insert_annotation(session_id: str, body: InsertRequest) -> SessionResponse:
    return _edit(session_id, lambda ws: ws.editor.insert_at_front(body.position_seconds))


@app.patch(
    "/sessions/{session_id}/annotations/{index}",
    response_model=SessionResponse,
    tags=["annotations"],
    summary="Edit one field of an annotation",
    responses=_EDIT_ERRORS,
)
async def edit_annotation(session_id: str, index: int, body: FieldEdit) -> SessionResponse:
    return _edit(session_id, lambda ws: ws.editor.edit_field(index, body.field, body.value))


@app.delete(
    "/sessions/{session_id}/annotations/{index}",
    response_model=SessionResponse,
    tags=["annotations"],
    summary="Delete an annotation",
    responses=_EDIT_ERRORS,
)
async def delete_annotation(session_id: str, index: int) -> SessionResponse:
    return _edit(session_id, lambda ws: ws.editor.delete_at(index))


@app.post(
    "/sessions/{session_id}/annotations/{index}/tags",
    response_model=SessionResponse,
    tags=["annotations"],
    summary="Add a sentiment or sound tag",
    description="Empty and duplicate tags are ignored without creating a history step.",
    responses=_EDIT_ERRORS,
)
async def add_tag(session_id: str, index: int, body: TagRequest) -> SessionResponse:
    return _edit(session_id, lambda ws: ws.editor.add_tag(index, body.tag_type, body.text))


@app.delete(
    "/sessions/{session_id}/annotations/{index}/tags/{tag_type}/{text:path}",
    response_model=SessionResponse,
    tags=["annotations"],
    summary="Remove a sentiment or sound tag",
    description="Removing a tag that is not present changes nothing.",
    responses=_EDIT_ERRORS,
)
async def remove_tag(session_id: str, index: int, tag_type: str, text: str) -> SessionResponse:
    return _edit(session_id, lambda ws: ws.editor.remove_tag(index, tag_type, text))


@app.get(
    "/sessions/{session_id}/annotations/{index}/position",
    tags=["annotations"],
    summary="Playback position (seconds) to seek to for an annotation",
    responses=_NOT_FOUND,
)
async def annotation_position(session_id: str, index: int) -> dict:
    session = _get_session_or_404(session_id)
    try:
        return {"seconds": session.workspace.seek_position(index)}
    except IndexOutOfRangeError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


# ---------------------------------------------------------------------------
# Endpoints: History
# ---------------------------------------------------------------------------


@app.post(
    "/sessions/{session_id}/undo",
    response_model=SessionResponse,
    tags=["history"],
    summary="Undo the last edit (no-op at the start of history)",
    responses=_EDIT_ERRORS,
)
async def undo(session_id: str) -> SessionResponse:
    return _edit(session_id, lambda ws: ws.editor.undo())


@app.post(
    "/sessions/{session_id}/redo",
    response_model=SessionResponse,
    tags=["history"],
    summary="Redo the last undone edit (no-op at the end of history)",
    responses=_EDIT_ERRORS,
)
async def redo(session_id: str) -> SessionResponse:
    return _edit(session_id, lambda ws: ws.editor.redo())


# ---------------------------------------------------------------------------
# Endpoints: Exports
# ---------------------------------------------------------------------------


@app.get(
    "/sessions/{session_id}/exports/{format_key}",
    tags=["exports"],
    summary="Download the current annotations in one format",
    description="The filename is derived from the uploaded audio's name.",
    responses={
        **_NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Unknown export format"},
    },
)
async def export_session(session_id: str, format_key: str) -> Response:
    session = _get_session_or_404(session_id)
    try:
        output = session.workspace.export(format_key)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return Response(
        content=output.as_bytes(),
        media_type=output.media_type,
        headers={"Content-Disposition": _content_disposition(output.filename)},
    )


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["exports"],
    summary="List available export formats",
)
async def list_formats() -> List[FormatInfo]:
    return [
        FormatInfo(key=fmt.key, name=fmt.name, suffix=fmt.suffix, media_type=fmt.media_type)
        for fmt in FORMATTERS.values()
    ]


@app.get(
    "/templates",
    response_model=List[TemplateInfo],
    tags=["sessions"],
    summary="List annotation templates",
)
async def list_templates() -> List[TemplateInfo]:
    return [
        TemplateInfo(name=template.value, description=TEMPLATE_DESCRIPTIONS[template])
        for template in Template
    ]


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Entry point for the audio-annotator-api console script."""
    import uvicorn
    uvicorn.run(app, host=host or "0.0.0.0", port=port or 8000)
