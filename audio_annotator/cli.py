"""Command-line interface for the Audio Annotator.

WHY: Users need a simple way to annotate a recording, or re-export an
earlier JSON export, from the terminal without the HTTP API.

HOW: argparse accepts an input file, a template, the output formats and
an output directory. Audio input goes through a Workspace and the Gemini
client via asyncio.run(); a .json input is loaded straight into the
workspace with no AI call. Every selected format is rendered from the
workspace and saved next to the source (or to --output-dir).

RULES:
- Positional argument: audio file or .json annotation array
- Audio is validated against SUPPORTED_AUDIO_FORMATS before any API call
- --formats: comma-separated registry keys (default: all)
- Output naming: {base}{suffix}, numeric counter on conflict (name-2.srt)
- Status output goes to stderr (not stdout)
- Exit code 1 on any error, 130 on Ctrl-C
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from audio_annotator.api.client import GeminiClient
from audio_annotator.api.prompts import Template
from audio_annotator.config import DEFAULT_TEMPLATE, SUPPORTED_AUDIO_FORMATS
from audio_annotator.core.workspace import Workspace
from audio_annotator.errors import AnnotatorError, UpstreamError
from audio_annotator.formatters import FORMATTERS
from audio_annotator.formatters.base import FormatterOutput


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _resolve_output_path(filename: str, output_dir: Path) -> Path:
    """Resolve the output path, adding a numeric counter on conflict.

    RULES:
    - First attempt: {filename} (e.g. interview.srt)
    - Conflict: counter inserted before the extension (interview-2.srt)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / filename
    if not base_path.exists():
        return base_path

    dot_idx = filename.rfind(".")
    if dot_idx > 0:
        name, ext = filename[:dot_idx], filename[dot_idx:]
    else:
        name, ext = filename, ""

    counter = 2
    while True:
        candidate = output_dir / "{}-{}{}".format(name, counter, ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, output_dir: Path) -> Path:
    """Write one export to disk (text as UTF-8, PDF and DOCX as bytes)."""
    path = _resolve_output_path(output.filename, output_dir)
    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")
    return path


def _parse_formats(value: Optional[str]) -> List[str]:
    if not value:
        return list(FORMATTERS)
    keys = [key.strip() for key in value.split(",") if key.strip()]
    unknown = [key for key in keys if key not in FORMATTERS]
    if unknown:
        raise AnnotatorError(
            "Unknown output format(s): {}. Available: {}".format(
                ", ".join(unknown), ", ".join(FORMATTERS)
            )
        )
    return keys


def _load_json_annotations(workspace: Workspace, input_path: Path) -> None:
    """Load a JSON annotation array (e.g. an earlier JSON export)."""
    try:
        records = json.loads(input_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise AnnotatorError("{} is not valid JSON: {}".format(input_path.name, exc)) from exc
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise AnnotatorError("{} must contain a JSON array of annotation objects".format(
            input_path.name
        ))

    # Name exports after the recording the JSON was exported from.
    stem = input_path.stem
    if stem.endswith("_annotations"):
        stem = stem[: -len("_annotations")]
    workspace.source_filename = stem + ".json"
    workspace.on_batch_ready(records)


async def _annotate_audio(workspace: Workspace, input_path: Path) -> None:
    workspace.load_source(input_path.name)
    audio = input_path.read_bytes()
    _status("Annotating {} with the {} template...".format(
        input_path.name, workspace.template.value,
    ))
    async with GeminiClient() as client:
        await workspace.generate(client.annotate, audio)


async def _run_pipeline(args: argparse.Namespace) -> None:
    input_path = Path(args.input_file)
    if not input_path.is_file():
        _status("Error: file not found: {}".format(input_path))
        sys.exit(1)

    output_dir = Path(args.output_dir) if args.output_dir else input_path.parent
    workspace = Workspace(template=args.template)

    try:
        format_keys = _parse_formats(args.formats)
        output_dir.mkdir(parents=True, exist_ok=True)

        if input_path.suffix.lower() == ".json":
            _load_json_annotations(workspace, input_path)
        elif input_path.suffix.lower() in SUPPORTED_AUDIO_FORMATS:
            await _annotate_audio(workspace, input_path)
        else:
            _status("Error: unsupported file type '{}'. Supported: .json, {}".format(
                input_path.suffix, ", ".join(sorted(SUPPORTED_AUDIO_FORMATS)),
            ))
            sys.exit(1)

        _status("{} annotation(s) ready.".format(len(workspace.annotations)))

        saved: List[Path] = []
        for key in format_keys:
            saved.append(_save_output(workspace.export(key), output_dir))

        _status("")
        _status("Done! Saved {} file(s) to {}".format(len(saved), output_dir))
        for path in saved:
            _status("  {}".format(path.name))

    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except UpstreamError as e:
        _status("Error: {}".format(e.message))
        sys.exit(1)
    except (AnnotatorError, ValueError, OSError) as e:
        # Config errors (missing API key, audio too large), bad input, I/O
        _status("Error: {}".format(e))
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Positional: input_file (required)
    - Optional: --template, --formats (comma-separated), --output-dir, --verbose
    """
    parser = argparse.ArgumentParser(
        prog="audio_annotator",
        description="Annotate an audio file with AI-generated, time-coded segments "
                    "(or load a JSON annotation export) and export it to "
                    "JSON, text, Markdown, CSV, XML, SRT, VTT, PDF and Word.",
    )

    parser.add_argument(
        "input_file",
        help="Audio file to annotate, or a .json annotation array to re-export.",
    )

    parser.add_argument(
        "--template",
        default=DEFAULT_TEMPLATE,
        choices=[t.value for t in Template],
        help="Annotation template for the AI pass (default: %(default)s).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(FORMATTERS)),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output (history moves, API calls) to stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m audio_annotator`` and the console script.

    argv=None means use sys.argv; an explicit list is for testing.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    asyncio.run(_run_pipeline(args))


if __name__ == "__main__":
    main()
