"""SRT and WebVTT subtitle exports.

WHY: Video players and captioning tools load SRT/VTT directly, so these
two outputs are byte-level contracts. A cue with no text would show as an
empty caption, so blank annotations are left out.

HOW: Walk the collection in order, skip annotations whose transcript is
empty or whitespace-only, put start/end in order, and write one cue per
remaining annotation. SRT numbers cues 1, 2, 3... over the emitted cues
and uses a comma decimal separator; VTT keeps the stored dot separator.

RULES:
- Start/end are swapped when start is later than end
- Blank transcripts are skipped
- SRT cue: "n\\nstart,mmm --> end,mmm\\ntranscript\\n\\n"
- VTT: "WEBVTT\\n\\n" header, then "start --> end\\ntranscript\\n\\n" per cue
- Timecodes are written as stored (only the SRT separator changes)
- Output suffixes: ".srt" and ".vtt"
"""

from __future__ import annotations

from typing import List, Sequence

from audio_annotator.core.ir import Annotation
from audio_annotator.core.timecode import to_srt_timestamp
from audio_annotator.formatters.base import has_text, iter_ordered


def render_srt(annotations: Sequence[Annotation], base_name: str) -> str:
    cues: List[str] = []
    for start, end, annotation in iter_ordered(annotations):
        if not has_text(annotation):
            continue
        cues.append("{index}\n{start} --> {end}\n{text}\n\n".format(
            index=len(cues) + 1,
            start=to_srt_timestamp(start),
            end=to_srt_timestamp(end),
            text=annotation.transcript,
        ))
    return "".join(cues)


def render_vtt(annotations: Sequence[Annotation], base_name: str) -> str:
    cues: List[str] = ["WEBVTT\n\n"]
    for start, end, annotation in iter_ordered(annotations):
        if not has_text(annotation):
            continue
        cues.append("{} --> {}\n{}\n\n".format(start, end, annotation.transcript))
    return "".join(cues)
