"""Annotation templates, their instruction texts, and the reply schema.

WHY: The kind of recording (court hearing, consultation, lecture...)
changes what a useful annotation looks like: which speaker roles to name,
which sounds matter. The user picks a template before uploading and the
instruction text sent with the audio follows from it.

HOW: Template is a str enum so values serialize cleanly in the CLI and
HTTP API. TEMPLATE_INSTRUCTIONS maps each template to its prompt.
RESPONSE_SCHEMA is the structured-output schema sent to Gemini, and
RAW_ANNOTATIONS_JSON_SCHEMA is the equivalent JSON Schema used to
validate the reply locally.

RULES:
- Every template asks for HH:MM:SS.mmm timestamps
- startTime, endTime and transcript are required in every reply item
- Unknown template names fall back to General
"""

from __future__ import annotations

import enum
from typing import Any, Dict


class Template(str, enum.Enum):
    GENERAL = "General"
    LEGAL = "Legal"
    MEDICAL = "Medical"
    ACADEMIC = "Academic"
    ACCESSIBILITY = "Accessibility"

    @classmethod
    def parse(cls, value: "str | Template | None") -> "Template":
        """Case-insensitive lookup by value; falls back to GENERAL."""
        if isinstance(value, Template):
            return value
        wanted = (value or "").strip().lower()
        for template in cls:
            if template.value.lower() == wanted:
                return template
        return cls.GENERAL


TEMPLATE_DESCRIPTIONS: Dict[Template, str] = {
    Template.GENERAL: "Everyday conversations, interviews, or general audio.",
    Template.LEGAL: "Court hearings, depositions, or legal interviews.",
    Template.MEDICAL: "Doctor-patient consultations or medical lectures.",
    Template.ACADEMIC: "Research interviews or academic lectures.",
    Template.ACCESSIBILITY: (
        "Accessible content with detailed descriptions of non-speech sounds."
    ),
}

TEMPLATE_INSTRUCTIONS: Dict[Template, str] = {
    Template.GENERAL: (
        "Analyze this audio file and provide a detailed, time-stamped breakdown "
        "(using HH:MM:SS.mmm format). For each segment, provide the following:\n"
        "1. A precise transcript of any spoken words.\n"
        "2. Speaker diarization (label speakers as 'Speaker 1', 'Speaker 2', etc.).\n"
        "3. Sentiment/Emotion Tags: A list of tags for tone, mood, or intent "
        "(e.g., 'happy', 'urgent', 'positive').\n"
        "4. Sound Event Tags: A list of tags for background noises, music, or other "
        "sound classifications (e.g., 'music', 'applause', 'silence')."
    ),
    Template.LEGAL: (
        "Analyze this legal proceeding audio with a focus on legal-specific details. "
        "Provide a detailed, time-stamped (in HH:MM:SS.mmm format) breakdown. "
        "For each segment, provide the following:\n"
        "1. A precise transcript.\n"
        "2. Speaker diarization, attempting to identify roles like 'Judge', "
        "'Plaintiff', 'Defense', 'Witness' where possible.\n"
        "3. Sentiment/Emotion Tags: Tag for tones like 'argumentative', 'calm', "
        "'distressed'.\n"
        "4. Sound Event Tags: Specifically tag legal terms or actions like "
        "'objection', 'sustained', 'overruled', 'gavel sound'."
    ),
    Template.MEDICAL: (
        "Analyze this medical recording (e.g., dictation, consultation) with high "
        "accuracy for medical contexts. Provide a detailed, time-stamped (in "
        "HH:MM:SS.mmm format) breakdown. For each segment, provide:\n"
        "1. A highly accurate transcript, paying close attention to medical "
        "terminology.\n"
        "2. Speaker diarization, identifying speakers like 'Doctor', 'Patient', "
        "'Nurse'.\n"
        "3. Sentiment/Emotion Tags: Tag for patient sentiment (e.g., 'anxious', "
        "'pain', 'relieved').\n"
        "4. Sound Event Tags: Tag for clinical sounds (e.g., 'coughing', "
        "'breathing sounds', 'medical device beep')."
    ),
    Template.ACADEMIC: (
        "Analyze this academic audio content (lecture, research presentation) for "
        "educational purposes. Provide a detailed, time-stamped (in HH:MM:SS.mmm "
        "format) breakdown. For each segment, provide:\n"
        "1. A clear transcript of the speaker's content.\n"
        "2. Speaker diarization, differentiating between the 'Presenter' and "
        "'Audience' (for questions).\n"
        "3. Sentiment/Emotion Tags: This is less critical, can be omitted unless "
        "obvious.\n"
        "4. Sound Event Tags: Tag key academic events like 'question asked', "
        "'applause'. Also tag key concepts or terms mentioned."
    ),
    Template.ACCESSIBILITY: (
        "Analyze this audio file with a primary focus on accessibility (WCAG). "
        "Create a comprehensive and descriptive breakdown (using HH:MM:SS.mmm "
        "timestamps). For each segment, provide:\n"
        "1. A verbatim transcript of all speech.\n"
        "2. Speaker diarization to clarify who is speaking.\n"
        "3. Sentiment/Emotion Tags: Tag emotions to provide context for users who "
        "cannot infer it from tone.\n"
        "4. Sound Event Tags: Meticulously tag ALL non-speech sounds that are "
        "relevant to understanding the context (e.g., 'door opens', 'soft "
        "background music', 'phone ringing', 'footsteps approaching'). "
        "Be descriptive."
    ),
}


def instructions_for(template: "str | Template | None") -> str:
    return TEMPLATE_INSTRUCTIONS[Template.parse(template)]


# Gemini structured-output schema (OpenAPI subset, uppercase type names).
RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "startTime": {
                "type": "STRING",
                "description": "Start time of the segment in HH:MM:SS.mmm format.",
            },
            "endTime": {
                "type": "STRING",
                "description": "End time of the segment in HH:MM:SS.mmm format.",
            },
            "transcript": {
                "type": "STRING",
                "description": "The transcript for this segment.",
            },
            "speaker": {
                "type": "STRING",
                "description": "The identified speaker for this segment (e.g., 'Speaker 1').",
            },
            "sentimentTags": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
                "description": "Tags for emotion (e.g., 'happy') or sentiment ('positive').",
            },
            "soundTags": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
                "description": "Tags for sound classification ('music', 'applause', 'silence').",
            },
        },
        "required": ["startTime", "endTime", "transcript"],
    },
}

# The same contract as a standard JSON Schema, for local validation.
RAW_ANNOTATIONS_JSON_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "startTime": {"type": "string"},
            "endTime": {"type": "string"},
            "transcript": {"type": "string"},
            "speaker": {"type": ["string", "null"]},
            "sentimentTags": {
                "type": ["array", "null"],
                "items": {"type": "string"},
            },
            "soundTags": {
                "type": ["array", "null"],
                "items": {"type": "string"},
            },
        },
        "required": ["startTime", "endTime", "transcript"],
    },
}
