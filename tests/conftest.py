"""Shared test fixtures for the audio_annotator test suite.

WHY: Several test modules need the same annotation collections: a normal
two-speaker exchange, a segment typed with its times reversed, and the
raw record shape the AI collaborator returns.

HOW: Plain pytest fixtures returning fresh tuples/lists per test.

RULES:
- Collections are tuples of Annotation, like real history snapshots
- RAW_RECORDS mirror the collaborator contract (camelCase, optional keys missing)
"""

from typing import Any, Dict, List

import pytest

from audio_annotator.core.ir import Annotation


RAW_RECORDS: List[Dict[str, Any]] = [
    {
        "startTime": "00:00:00.500",
        "endTime": "00:00:03.200",
        "transcript": "Good morning, everyone.",
        "speaker": "Speaker 1",
        "sentimentTags": ["positive"],
        "soundTags": ["music"],
    },
    {
        "startTime": "00:00:03.400",
        "endTime": "00:00:06.000",
        "transcript": "Morning! Shall we start?",
    },
]


@pytest.fixture
def raw_records():
    """Collaborator-shaped records; the second one omits all optional keys."""
    return [dict(record) for record in RAW_RECORDS]


@pytest.fixture
def sample_annotations():
    """Two annotations in order, the second with an empty speaker."""
    return (
        Annotation(
            start_time="00:00:00.500",
            end_time="00:00:03.200",
            transcript="Good morning, everyone.",
            speaker="Speaker 1",
            sentiment_tags=("positive", "calm"),
            sound_tags=("music",),
        ),
        Annotation(
            start_time="00:00:03.400",
            end_time="00:00:06.000",
            transcript="Morning! Shall we start?",
        ),
    )


@pytest.fixture
def reversed_annotation():
    """A segment whose start was typed after its end."""
    return Annotation(start_time="00:00:10.000", end_time="00:00:05.000", transcript="x")


@pytest.fixture
def blank_annotation():
    return Annotation(start_time="00:00:07.000", end_time="00:00:08.000", transcript="   ")
