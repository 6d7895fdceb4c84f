"""PDF export: a titled table of all annotations.

WHY: Some reviewers (legal, medical) need a printable, fixed-layout
document they can file or sign off, not an editable text file.

HOW: fpdf2 lays out an A4 page with the title "Annotations for {base}"
and a four-column table (Start Time, End Time, Speaker, Transcript).
Long transcripts wrap inside their cell; rows break across pages
automatically.

RULES:
- Times are NOT swapped; values are exported as stored
- Every annotation gets a row; missing speaker prints as "N/A"
- 8pt body text, teal header row
- The built-in Helvetica font only covers Latin-1, so other characters
  are replaced with "?" rather than failing the export
- The creation date is pinned so identical input gives identical bytes
- Output suffix: "_annotations.pdf"
"""

from __future__ import annotations

import datetime
from typing import List, Sequence, Tuple

from fpdf import FPDF
from fpdf.fonts import FontFace

from audio_annotator.core.ir import Annotation

HEADINGS = ("Start Time", "End Time", "Speaker", "Transcript")
_COLUMN_WIDTHS = (22, 22, 26, 110)
_HEADER_FILL = (3, 218, 198)
_FIXED_CREATION_DATE = datetime.datetime(2000, 1, 1, tzinfo=datetime.timezone.utc)


def _latin1(text: str) -> str:
    return text.encode("latin-1", "replace").decode("latin-1")


def _table_rows(annotations: Sequence[Annotation]) -> List[Tuple[str, str, str, str]]:
    """One Latin-1 safe (start, end, speaker, transcript) row per annotation."""
    return [
        (
            _latin1(annotation.start_time),
            _latin1(annotation.end_time),
            _latin1(annotation.speaker or "N/A"),
            _latin1(annotation.transcript),
        )
        for annotation in annotations
    ]


def render_pdf(annotations: Sequence[Annotation], base_name: str) -> bytes:
    pdf = FPDF(orientation="portrait", unit="mm", format="A4")
    pdf.set_creation_date(_FIXED_CREATION_DATE)
    pdf.set_title(_latin1("Annotations for {}".format(base_name)))
    pdf.add_page()

    pdf.set_font("Helvetica", size=14)
    pdf.cell(text=_latin1("Annotations for {}".format(base_name)))
    pdf.ln(10)

    pdf.set_font("Helvetica", size=8)
    with pdf.table(
        col_widths=_COLUMN_WIDTHS,
        text_align="LEFT",
        headings_style=FontFace(emphasis="BOLD", fill_color=_HEADER_FILL),
    ) as table:
        heading = table.row()
        for title in HEADINGS:
            heading.cell(title)
        for values in _table_rows(annotations):
            row = table.row()
            for value in values:
                row.cell(value)

    return bytes(pdf.output())
