"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint has its own request and/or response model. Annotation
fields use the camelCase wire names that the JSON export also uses.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose internal implementation details
- Python 3.9+ compatible (Optional/List from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from audio_annotator.core.ir import Annotation


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class AnnotationModel(BaseModel):
    """One annotation in wire form."""

    startTime: str = Field(description="Start timecode as stored (HH:MM:SS.mmm).")
    endTime: str = Field(description="End timecode as stored (HH:MM:SS.mmm).")
    transcript: str = Field(default="", description="Segment transcript.")
    speaker: str = Field(default="", description="Speaker label, empty if unknown.")
    sentimentTags: List[str] = Field(default_factory=list, description="Tone/emotion tags.")
    soundTags: List[str] = Field(default_factory=list, description="Sound-event tags.")

    @classmethod
    def from_annotation(cls, annotation: Annotation) -> AnnotationModel:
        return cls(**annotation.to_dict())


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class FieldEdit(BaseModel):
    """Replace one text field of an annotation."""

    field: str = Field(description="One of startTime, endTime, transcript, speaker.")
    value: str = Field(description="New value for the field.")


class TagRequest(BaseModel):
    """Add a tag to an annotation."""

    tag_type: str = Field(description="'sentiment' or 'sound'.")
    text: str = Field(description="Tag text; surrounding whitespace is stripped.")


class InsertRequest(BaseModel):
    """Insert a new empty annotation at the front of the collection."""

    position_seconds: float = Field(
        default=0.0,
        description="Current playback position in seconds; used for start and end.",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SessionCreatedResponse(BaseModel):
    id: str = Field(description="Unique session identifier.")
    status: str = Field(description="Initial session status (always 'pending').")
    filename: str = Field(description="Uploaded audio filename.")
    template: str = Field(description="Template used for the AI pass.")


class SessionResponse(BaseModel):
    """Full session state: AI-pass status, history position and annotations."""

    id: str = Field(description="Unique session identifier.")
    status: str = Field(description="pending, generating, ready or failed.")
    filename: Optional[str] = Field(default=None, description="Loaded audio filename.")
    template: str = Field(description="Template used for the AI pass.")
    error: Optional[str] = Field(
        default=None, description="User-facing error message when the AI pass failed."
    )
    error_kind: Optional[str] = Field(
        default=None, description="auth, quota or unknown when the AI pass failed."
    )
    history_length: int = Field(description="Number of snapshots in the history.")
    history_cursor: int = Field(description="Index of the current snapshot.")
    can_undo: bool = Field(description="True when undo would change the collection.")
    can_redo: bool = Field(description="True when redo would change the collection.")
    annotations: List[AnnotationModel] = Field(description="The current collection.")


class FormatInfo(BaseModel):
    key: str = Field(description="Format identifier used in export URLs.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="Appended to the base filename, e.g. '.srt'.")
    media_type: str = Field(description="MIME type of the exported file.")


class TemplateInfo(BaseModel):
    name: str = Field(description="Template name used in requests.")
    description: str = Field(description="What kind of recording the template suits.")


class ErrorResponse(BaseModel):
    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
