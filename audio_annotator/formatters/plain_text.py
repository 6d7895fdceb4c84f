"""Plain text and Markdown exports with speaker-labeled blocks.

WHY: Reviewers want a readable transcript to skim, print or paste into an
email, without opening a spreadsheet or a subtitle editor. Markdown is
the same document with a little structure for wikis and notes apps.

HOW: One block per annotation, in collection order. Each block has a
header with the (ordered) time range and the speaker, then the
transcript, then a "---" separator. Nothing is escaped.

RULES:
- Start/end are swapped when start is later than end
- Missing speaker prints as "Unknown Speaker"
- Text block:     "[start - end] speaker:\\ntranscript\\n\\n---\\n\\n"
- Markdown block: "**[start - end] speaker:**\\n\\n> transcript\\n\\n---\\n\\n"
- Empty transcripts are kept
- Output suffixes: ".txt" and ".md"
"""

from __future__ import annotations

from typing import List, Sequence

from audio_annotator.core.ir import Annotation
from audio_annotator.formatters.base import UNKNOWN_SPEAKER, iter_ordered


def render_text(annotations: Sequence[Annotation], base_name: str) -> str:
    blocks: List[str] = []
    for start, end, annotation in iter_ordered(annotations):
        speaker = annotation.speaker or UNKNOWN_SPEAKER
        blocks.append("[{start} - {end}] {speaker}:\n".format(
            start=start, end=end, speaker=speaker,
        ))
        blocks.append("{}\n\n---\n\n".format(annotation.transcript))
    return "".join(blocks)


def render_markdown(annotations: Sequence[Annotation], base_name: str) -> str:
    blocks: List[str] = []
    for start, end, annotation in iter_ordered(annotations):
        speaker = annotation.speaker or UNKNOWN_SPEAKER
        blocks.append("**[{start} - {end}] {speaker}:**\n\n".format(
            start=start, end=end, speaker=speaker,
        ))
        blocks.append("> {}\n\n".format(annotation.transcript))
        blocks.append("---\n\n")
    return "".join(blocks)
