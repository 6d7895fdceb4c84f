"""JSON export: the full annotation records, times put in order.

RULES:
- Start/end are swapped when start is later than end
- Key order: startTime, endTime, transcript, speaker, sentimentTags, soundTags
- Two-space indentation, non-ASCII written as-is, no trailing newline
- Output suffix: "_annotations.json"
"""

from __future__ import annotations

import json
from typing import Sequence

from audio_annotator.core.ir import Annotation
from audio_annotator.formatters.base import iter_ordered


def render_json(annotations: Sequence[Annotation], base_name: str) -> str:
    items = []
    for start, end, annotation in iter_ordered(annotations):
        item = annotation.to_dict()
        item["startTime"] = start
        item["endTime"] = end
        items.append(item)
    return json.dumps(items, indent=2, ensure_ascii=False)
