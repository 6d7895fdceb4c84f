"""Word document export: one labelled block per annotation.

WHY: Transcripts often end up in a report or a review round where people
comment in Word. Handing them a .docx saves a copy-paste step that loses
the time codes.

HOW: python-docx builds the document in memory. Each annotation becomes
a header paragraph (bold time range, then the speaker), a transcript
paragraph and an empty spacer paragraph.

RULES:
- Start/end are swapped when start is later than end
- Header: bold "[start - end]" then " speaker:", or just ":" with no speaker
- Empty transcripts are kept
- Output suffix: ".docx"
"""

from __future__ import annotations

import io
from typing import Sequence

from docx import Document

from audio_annotator.core.ir import Annotation
from audio_annotator.formatters.base import iter_ordered


def render_docx(annotations: Sequence[Annotation], base_name: str) -> bytes:
    document = Document()
    for start, end, annotation in iter_ordered(annotations):
        header = document.add_paragraph()
        header.add_run("[{} - {}]".format(start, end)).bold = True
        if annotation.speaker:
            header.add_run(" {}:".format(annotation.speaker))
        else:
            header.add_run(":")
        document.add_paragraph(annotation.transcript)
        document.add_paragraph("")

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()
