"""Unit tests for all export formatters and the registry.

WHY: Every export is a file someone opens in another tool: a subtitle
player, a spreadsheet, an XML pipeline. Byte-level layout, the swap rule
for reversed times, and blank-cue skipping must not drift.

HOW: Render the shared sample collection (plus reversed and blank
annotations) through each format and compare against exact expected text.

RULES:
- JSON, text, Markdown, SRT, VTT and DOCX put times in order; CSV, XML, PDF
  do not
- All tests use fixtures from conftest.py
"""

import csv
import io
import json

import docx
import jsonschema
import pytest

from audio_annotator.api.prompts import RAW_ANNOTATIONS_JSON_SCHEMA
from audio_annotator.core.ir import Annotation
from audio_annotator.errors import InvalidInputError
from audio_annotator.formatters import FORMATTERS, export_annotations, get_format
from audio_annotator.formatters.base import base_filename
from audio_annotator.formatters.docx_export import render_docx
from audio_annotator.formatters.json_export import render_json
from audio_annotator.formatters.pdf_table import _table_rows, render_pdf
from audio_annotator.formatters.plain_text import render_markdown, render_text
from audio_annotator.formatters.subtitles import render_srt, render_vtt
from audio_annotator.formatters.tabular import CSV_HEADER, render_csv, render_xml


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:

    def test_all_formats_registered_in_order(self):
        assert list(FORMATTERS) == [
            "json", "text", "markdown", "csv", "xml", "srt", "vtt", "pdf", "docx",
        ]

    def test_unknown_format(self):
        with pytest.raises(InvalidInputError, match="Unknown export format"):
            get_format("rtf")

    @pytest.mark.parametrize("key,filename", [
        ("json", "interview_annotations.json"),
        ("text", "interview.txt"),
        ("markdown", "interview.md"),
        ("csv", "interview_annotations.csv"),
        ("xml", "interview_annotations.xml"),
        ("srt", "interview.srt"),
        ("vtt", "interview.vtt"),
        ("pdf", "interview_annotations.pdf"),
        ("docx", "interview.docx"),
    ])
    def test_filenames(self, sample_annotations, key, filename):
        output = export_annotations(key, sample_annotations, "interview.mp3")
        assert output.filename == filename
        assert output.media_type == FORMATTERS[key].media_type

    def test_filename_fallback_without_source(self, sample_annotations):
        output = export_annotations("srt", sample_annotations, None)
        assert output.filename == "annotations.srt"

    def test_base_filename_strips_last_extension_only(self):
        assert base_filename("interview.final.mp3") == "interview.final"
        assert base_filename("") == "annotations"

    def test_as_bytes(self, sample_annotations):
        text = export_annotations("text", sample_annotations, "a.wav")
        assert text.as_bytes() == text.content.encode("utf-8")
        pdf = export_annotations("pdf", sample_annotations, "a.wav")
        assert pdf.as_bytes() is pdf.content

    def test_export_does_not_mutate(self, sample_annotations):
        snapshot = tuple(sample_annotations)
        for key in FORMATTERS:
            export_annotations(key, sample_annotations, "a.wav")
        assert sample_annotations == snapshot


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


class TestJSON:

    def test_records_and_key_order(self, sample_annotations):
        data = json.loads(render_json(sample_annotations, "x"))
        assert list(data[0]) == [
            "startTime", "endTime", "transcript", "speaker", "sentimentTags", "soundTags",
        ]
        assert data[0]["sentimentTags"] == ["positive", "calm"]
        assert data[1]["speaker"] == ""
        assert data[1]["soundTags"] == []

    def test_matches_reply_schema(self, sample_annotations):
        data = json.loads(render_json(sample_annotations, "x"))
        jsonschema.validate(instance=data, schema=RAW_ANNOTATIONS_JSON_SCHEMA)

    def test_swaps_reversed_times(self, reversed_annotation):
        data = json.loads(render_json([reversed_annotation], "x"))
        assert data[0]["startTime"] == "00:00:05.000"
        assert data[0]["endTime"] == "00:00:10.000"

    def test_non_ascii_kept(self):
        out = render_json([Annotation("0", "1", "café")], "x")
        assert "café" in out
        assert not out.endswith("\n")

    def test_empty_collection(self):
        assert render_json([], "x") == "[]"


# ---------------------------------------------------------------------------
# Plain text and Markdown
# ---------------------------------------------------------------------------


class TestPlainText:

    def test_blocks(self, sample_annotations):
        assert render_text(sample_annotations, "x") == (
            "[00:00:00.500 - 00:00:03.200] Speaker 1:\n"
            "Good morning, everyone.\n\n---\n\n"
            "[00:00:03.400 - 00:00:06.000] Unknown Speaker:\n"
            "Morning! Shall we start?\n\n---\n\n"
        )

    def test_swaps_reversed_times(self, reversed_annotation):
        assert render_text([reversed_annotation], "x").startswith(
            "[00:00:05.000 - 00:00:10.000]"
        )

    def test_blank_transcript_is_kept(self, blank_annotation):
        assert render_text([blank_annotation], "x") == (
            "[00:00:07.000 - 00:00:08.000] Unknown Speaker:\n   \n\n---\n\n"
        )

    def test_markdown(self, sample_annotations):
        assert render_markdown(sample_annotations[:1], "x") == (
            "**[00:00:00.500 - 00:00:03.200] Speaker 1:**\n\n"
            "> Good morning, everyone.\n\n---\n\n"
        )

    def test_markdown_swaps_reversed_times(self, reversed_annotation):
        assert render_markdown([reversed_annotation], "x").startswith(
            "**[00:00:05.000 - 00:00:10.000]"
        )

    def test_empty_collection(self):
        assert render_text([], "x") == ""
        assert render_markdown([], "x") == ""


# ---------------------------------------------------------------------------
# CSV and XML
# ---------------------------------------------------------------------------


class TestCSV:

    def test_header_and_rows(self, sample_annotations):
        out = render_csv(sample_annotations, "x")
        lines = out.split("\n")
        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[1] == (
            '00:00:00.500,00:00:03.200,Speaker 1,"Good morning, everyone.",'
            "positive;calm,music"
        )
        assert lines[2] == "00:00:03.400,00:00:06.000,,Morning! Shall we start?,,"
        assert out.endswith("\n")

    def test_quotes_are_doubled(self):
        out = render_csv([Annotation("0", "1", 'She said "hi"')], "x")
        assert '"She said ""hi"""' in out

    def test_multiline_transcript_reads_back(self):
        ann = Annotation("0", "1", "line one\nline two", "A")
        rows = list(csv.reader(io.StringIO(render_csv([ann], "x"))))
        assert rows[1][3] == "line one\nline two"

    def test_times_not_swapped(self, reversed_annotation):
        out = render_csv([reversed_annotation], "x")
        assert out.split("\n")[1].startswith("00:00:10.000,00:00:05.000,")

    def test_blank_rows_kept(self, blank_annotation):
        assert len(render_csv([blank_annotation], "x").splitlines()) == 2


class TestXML:

    def test_layout(self, sample_annotations):
        out = render_xml(sample_annotations[:1], "x")
        assert out == "\n".join([
            '<?xml version="1.0" encoding="UTF-8"?>',
            "<annotations>",
            "  <annotation>",
            "    <startTime>00:00:00.500</startTime>",
            "    <endTime>00:00:03.200</endTime>",
            "    <speaker>Speaker 1</speaker>",
            "    <transcript>Good morning, everyone.</transcript>",
            "    <sentimentTags>",
            "      <tag>positive</tag>",
            "      <tag>calm</tag>",
            "    </sentimentTags>",
            "    <soundTags>",
            "      <tag>music</tag>",
            "    </soundTags>",
            "  </annotation>",
            "</annotations>",
        ])

    def test_escapes_special_characters(self):
        out = render_xml([Annotation("0", "1", "a < b & \"c\" > 'd'")], "x")
        assert (
            "<transcript>a &lt; b &amp; &quot;c&quot; &gt; &apos;d&apos;</transcript>"
            in out
        )

    def test_times_not_swapped(self, reversed_annotation):
        out = render_xml([reversed_annotation], "x")
        assert "<startTime>00:00:10.000</startTime>" in out

    def test_blank_rows_kept(self, blank_annotation):
        out = render_xml([blank_annotation], "x")
        assert out.count("<annotation>") == 1
        assert "    <transcript>   </transcript>" in out

    def test_empty_collection(self):
        assert render_xml([], "x") == (
            '<?xml version="1.0" encoding="UTF-8"?>\n<annotations>\n</annotations>'
        )


# ---------------------------------------------------------------------------
# Subtitles
# ---------------------------------------------------------------------------


class TestSRT:

    def test_cues(self, sample_annotations):
        assert render_srt(sample_annotations, "x") == (
            "1\n00:00:00,500 --> 00:00:03,200\nGood morning, everyone.\n\n"
            "2\n00:00:03,400 --> 00:00:06,000\nMorning! Shall we start?\n\n"
        )

    def test_blank_skipped_and_numbering_contiguous(
        self, sample_annotations, blank_annotation
    ):
        collection = (sample_annotations[0], blank_annotation, sample_annotations[1])
        out = render_srt(collection, "x")
        assert "00:00:07,000" not in out
        assert out.count(" --> ") == 2
        assert "\n\n2\n00:00:03,400" in out

    def test_swaps_reversed_times(self, reversed_annotation):
        assert render_srt([reversed_annotation], "x") == (
            "1\n00:00:05,000 --> 00:00:10,000\nx\n\n"
        )

    def test_all_blank_is_empty(self, blank_annotation):
        assert render_srt([blank_annotation], "x") == ""


class TestVTT:

    def test_header_and_cues(self, sample_annotations):
        assert render_vtt(sample_annotations, "x") == (
            "WEBVTT\n\n"
            "00:00:00.500 --> 00:00:03.200\nGood morning, everyone.\n\n"
            "00:00:03.400 --> 00:00:06.000\nMorning! Shall we start?\n\n"
        )

    def test_blank_skipped(self, blank_annotation, reversed_annotation):
        assert render_vtt([blank_annotation, reversed_annotation], "x") == (
            "WEBVTT\n\n00:00:05.000 --> 00:00:10.000\nx\n\n"
        )

    def test_empty_collection_is_header_only(self):
        assert render_vtt([], "x") == "WEBVTT\n\n"


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------


class TestPDF:

    def test_is_pdf(self, sample_annotations):
        out = render_pdf(sample_annotations, "interview")
        assert isinstance(out, bytes)
        assert out.startswith(b"%PDF")

    def test_output_is_stable(self, sample_annotations):
        assert render_pdf(sample_annotations, "a") == render_pdf(sample_annotations, "a")

    def test_non_latin_text_does_not_fail(self):
        out = render_pdf([Annotation("0", "1", "会議 “quotes”", "話者")], "x")
        assert out.startswith(b"%PDF")

    def test_empty_collection(self):
        assert render_pdf([], "x").startswith(b"%PDF")

    def test_rows_keep_times_as_stored(self, reversed_annotation):
        assert _table_rows([reversed_annotation]) == [
            ("00:00:10.000", "00:00:05.000", "N/A", "x"),
        ]

    def test_missing_speaker_is_na(self, sample_annotations):
        rows = _table_rows(sample_annotations)
        assert rows[0][2] == "Speaker 1"
        assert rows[1] == ("00:00:03.400", "00:00:06.000", "N/A", "Morning! Shall we start?")


# ---------------------------------------------------------------------------
# DOCX
# ---------------------------------------------------------------------------


def _paragraphs(payload: bytes):
    return docx.Document(io.BytesIO(payload)).paragraphs


class TestDOCX:

    def test_blocks(self, sample_annotations):
        texts = [p.text for p in _paragraphs(render_docx(sample_annotations, "x"))]
        assert texts[-6:] == [
            "[00:00:00.500 - 00:00:03.200] Speaker 1:",
            "Good morning, everyone.",
            "",
            "[00:00:03.400 - 00:00:06.000]:",
            "Morning! Shall we start?",
            "",
        ]

    def test_time_range_is_bold(self, sample_annotations):
        header = _paragraphs(render_docx(sample_annotations[:1], "x"))[-3]
        runs = header.runs
        assert runs[0].text == "[00:00:00.500 - 00:00:03.200]"
        assert runs[0].bold is True
        assert runs[1].text == " Speaker 1:"
        assert not runs[1].bold

    def test_swaps_reversed_times(self, reversed_annotation):
        header = _paragraphs(render_docx([reversed_annotation], "x"))[-3]
        assert header.text == "[00:00:05.000 - 00:00:10.000]:"

    def test_non_ascii_kept(self):
        paragraphs = _paragraphs(render_docx([Annotation("0", "1", "café réunion", "Zoë")], "x"))
        assert paragraphs[-3].text.endswith(" Zoë:")
        assert paragraphs[-2].text == "café réunion"

    def test_is_zip_package(self, sample_annotations):
        assert render_docx(sample_annotations, "x").startswith(b"PK")
