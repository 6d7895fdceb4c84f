"""Tests for the command-line interface.

WHY: The CLI is the quickest way to turn a recording (or an earlier JSON
export) into every output format. Wrong output names or silent failures
would overwrite or lose users' files.

HOW: main() is called with an explicit argv list. JSON input needs no
network; the audio path patches GeminiClient in the cli module.
"""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from audio_annotator import cli


class _FakeClient:

    def __init__(self, records):
        self._records = records

    def __call__(self):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def annotate(self, audio, mime_type, instructions):
        return self._records


@pytest.fixture
def json_export(tmp_path, raw_records):
    path = tmp_path / "meeting_annotations.json"
    path.write_text(json.dumps(raw_records), encoding="utf-8")
    return path


class TestParser:

    def test_defaults(self):
        args = cli.build_parser().parse_args(["talk.mp3"])
        assert args.input_file == "talk.mp3"
        assert args.formats is None
        assert args.output_dir is None
        assert args.verbose is False

    def test_template_choices(self):
        args = cli.build_parser().parse_args(["talk.mp3", "--template", "Medical"])
        assert args.template == "Medical"
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["talk.mp3", "--template", "Poetry"])


class TestOutputPaths:

    def test_counter_on_conflict(self, tmp_path):
        (tmp_path / "a.srt").write_text("x")
        (tmp_path / "a-2.srt").write_text("x")
        assert cli._resolve_output_path("a.srt", tmp_path) == tmp_path / "a-3.srt"

    def test_unknown_format_listed(self):
        with pytest.raises(cli.AnnotatorError, match="formats\(s\): rtf\."):
            cli._parse_formats("srt, rtf")

    def test_all_formats_by_default(self):
        assert cli._parse_formats(None) == list(cli.FORMATTERS)


class TestJSONInput:

    def test_reexport_selected_formats(self, json_export, tmp_path, capsys):
        out_dir = tmp_path / "out"
        cli.main([str(json_export), "--formats", "srt,csv", "--output-dir", str(out_dir)])

        assert sorted(p.name for p in out_dir.iterdir()) == [
            "meeting.srt", "meeting_annotations.csv",
        ]
        srt = (out_dir / "meeting.srt").read_text(encoding="utf-8")
        assert srt.startswith("1\n00:00:00,500 --> 00:00:03,200\nGood morning, everyone.")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Saved 2 file(s)" in captured.err

    def test_all_formats_next_to_input(self, json_export, tmp_path):
        cli.main([str(json_export)])
        names = {p.name for p in tmp_path.iterdir()}
        assert "meeting.vtt" in names
        assert "meeting_annotations.pdf" in names
        assert "meeting.docx" in names
        # the input itself is not overwritten
        assert "meeting_annotations-2.json" in names

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            cli.main([str(path)])
        assert excinfo.value.code == 1


class TestAudioInput:

    def test_annotates_audio(self, tmp_path, raw_records):
        audio = tmp_path / "lecture.wav"
        audio.write_bytes(b"RIFF")
        with patch.object(cli, "GeminiClient", _FakeClient(raw_records)):
            cli.main([str(audio), "--formats", "text"])
        text = (tmp_path / "lecture.txt").read_text(encoding="utf-8")
        assert text.startswith("[00:00:00.500 - 00:00:03.200] Speaker 1:\n")

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([str(tmp_path / "nope.mp3")])
        assert excinfo.value.code == 1

    def test_unsupported_type(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("hi")
        with pytest.raises(SystemExit) as excinfo:
            cli.main([str(path)])
        assert excinfo.value.code == 1
        assert "unsupported file type" in capsys.readouterr().err

    def test_unknown_format_exits_1(self, json_export):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([str(json_export), "--formats", "rtf"])
        assert excinfo.value.code == 1
