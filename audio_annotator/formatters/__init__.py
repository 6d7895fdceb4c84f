"""Export format registry: one table entry per output format.

WHY: The CLI, the HTTP API and the workspace need a single lookup to find
an exporter by name. A central dict makes it trivial to add formats:
write the render function, add one line here.

HOW: FORMATTERS maps a string key to an ExportFormat (identity plus a pure
render function). export_annotations() renders a collection and names
the file after the source media.

RULES:
- Keys are short lowercase identifiers (used in CLI flags and URLs)
- Registry order is the order formats are listed and exported
- JSON, text, Markdown, SRT, VTT and DOCX put start/end in order; CSV, XML
  and PDF export times exactly as stored
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from audio_annotator.core.ir import Annotation
from audio_annotator.errors import InvalidInputError
from audio_annotator.formatters.base import ExportFormat, FormatterOutput, base_filename
from audio_annotator.formatters.docx_export import render_docx
from audio_annotator.formatters.json_export import render_json
from audio_annotator.formatters.pdf_table import render_pdf
from audio_annotator.formatters.plain_text import render_markdown, render_text
from audio_annotator.formatters.subtitles import render_srt, render_vtt
from audio_annotator.formatters.tabular import render_csv, render_xml

FORMATTERS: Dict[str, ExportFormat] = {
    fmt.key: fmt
    for fmt in (
        ExportFormat("json", "JSON", "_annotations.json", "application/json", render_json),
        ExportFormat("text", "Plain Text", ".txt", "text/plain", render_text),
        ExportFormat("markdown", "Markdown", ".md", "text/markdown", render_markdown),
        ExportFormat("csv", "CSV", "_annotations.csv", "text/csv", render_csv),
        ExportFormat("xml", "XML", "_annotations.xml", "application/xml", render_xml),
        ExportFormat("srt", "SRT Subtitles", ".srt", "application/x-subrip", render_srt),
        ExportFormat("vtt", "WebVTT Captions", ".vtt", "text/vtt", render_vtt),
        ExportFormat("pdf", "PDF Table", "_annotations.pdf", "application/pdf", render_pdf),
        ExportFormat(
            "docx",
            "Word Document",
            ".docx",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            render_docx,
        ),
    )
}


def get_format(key: str) -> ExportFormat:
    try:
        return FORMATTERS[key]
    except KeyError:
        raise InvalidInputError(
            "Unknown export format '{}'. Available: {}".format(key, ", ".join(FORMATTERS))
        ) from None


def export_annotations(
    key: str,
    annotations: Sequence[Annotation],
    source_filename: Optional[str] = None,
) -> FormatterOutput:
    """Render ``annotations`` in format ``key`` and name the file.

    Args:
        key: Registry key, e.g. ``"srt"``.
        annotations: The collection to export (normally history.current()).
        source_filename: Loaded media filename; None falls back to the
                         default base name.

    Returns:
        FormatterOutput with filename, payload and MIME type.
    """
    fmt = get_format(key)
    base = base_filename(source_filename)
    return FormatterOutput(
        filename=base + fmt.suffix,
        content=fmt.render(annotations, base),
        media_type=fmt.media_type,
    )


__all__ = [
    "FORMATTERS",
    "ExportFormat",
    "FormatterOutput",
    "base_filename",
    "export_annotations",
    "get_format",
]
