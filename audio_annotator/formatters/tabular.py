"""CSV and XML exports: raw, lossless dumps of the collection.

WHY: Spreadsheet users and downstream scripts want every field of every
annotation exactly as stored, including empty transcripts and times in
whatever order they were typed.

HOW: CSV goes through the standard csv writer (minimal quoting, "\\n"
line ends). XML is written line by line with two-space indentation so
the output is byte-stable, escaping the five XML special characters.

RULES:
- Times are NOT swapped; values are exported as stored
- Every annotation is included, whatever its transcript
- CSV header: startTime,endTime,speaker,transcript,sentimentTags,soundTags
- CSV tags are joined with ";"
- CSV fields containing a comma, quote or newline are quoted, with
  internal quotes doubled
- XML escapes < > & ' " as entities; tags are repeated <tag> elements
- XML output has no trailing newline
- Output suffixes: "_annotations.csv" and "_annotations.xml"
"""

from __future__ import annotations

import csv
import io
from typing import List, Sequence
from xml.sax.saxutils import escape

from audio_annotator.core.ir import Annotation

CSV_HEADER = ["startTime", "endTime", "speaker", "transcript", "sentimentTags", "soundTags"]

_XML_ENTITIES = {"'": "&apos;", '"': "&quot;"}


def render_csv(annotations: Sequence[Annotation], base_name: str) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for annotation in annotations:
        writer.writerow([
            annotation.start_time,
            annotation.end_time,
            annotation.speaker,
            annotation.transcript,
            ";".join(annotation.sentiment_tags),
            ";".join(annotation.sound_tags),
        ])
    return buffer.getvalue()


def _xml_text(value: str) -> str:
    return escape(value, _XML_ENTITIES)


def render_xml(annotations: Sequence[Annotation], base_name: str) -> str:
    lines: List[str] = ['<?xml version="1.0" encoding="UTF-8"?>', "<annotations>"]
    for annotation in annotations:
        lines.append("  <annotation>")
        lines.append("    <startTime>{}</startTime>".format(_xml_text(annotation.start_time)))
        lines.append("    <endTime>{}</endTime>".format(_xml_text(annotation.end_time)))
        lines.append("    <speaker>{}</speaker>".format(_xml_text(annotation.speaker)))
        lines.append("    <transcript>{}</transcript>".format(_xml_text(annotation.transcript)))
        for group, tags in (
            ("sentimentTags", annotation.sentiment_tags),
            ("soundTags", annotation.sound_tags),
        ):
            lines.append("    <{}>".format(group))
            for tag in tags:
                lines.append("      <tag>{}</tag>".format(_xml_text(tag)))
            lines.append("    </{}>".format(group))
        lines.append("  </annotation>")
    lines.append("</annotations>")
    return "\n".join(lines)
