"""Timecode parsing and formatting for annotation start/end times.

WHY: Annotation times are edited by hand and produced by the AI
collaborator as strings ("00:01:02.500", "1:02", "62"). Exporters and the
playback seek need seconds, and new annotations need a canonical string.
A malformed timestamp typed by a user must never crash anything, so the
parser degrades to zero instead of raising.

HOW: parse_timecode() splits off the milliseconds after the first ".",
then reads up to three ":"-separated fields (s, m:s, h:m:s). Each field is
read by its leading integer, and fields with no leading integer are
dropped before counting. format_timecode() truncates to whole
milliseconds and zero-pads every field.

RULES:
- parse_timecode() never raises; empty/invalid input returns 0.0
- Milliseconds are right-padded to 3 digits, then divided by 1000
- format_timecode() clamps negative, NaN, infinite and non-numeric input to 0
- Milliseconds are truncated, not rounded
- parse_timecode(format_timecode(x)) == x to the millisecond for x < 100h
"""

from __future__ import annotations

import math
import re
from typing import Tuple

ZERO_TIMECODE = "00:00:00.000"

# Leading integer of a field, the way an integer prefix parse reads it
# ("12abc" -> 12, " 7" -> 7, "abc" -> no value).
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    return int(match.group(1))


def parse_timecode(text: object) -> float:
    """Convert a timecode string to seconds.

    Accepts ``S``, ``M:S`` and ``H:M:S``, each optionally followed by
    ``.mmm``. Returns 0.0 for empty, non-string or unparseable input.

    Examples:
        >>> parse_timecode("01:02:03.450")
        3723.45
        >>> parse_timecode("5")
        5.0
        >>> parse_timecode("abc")
        0.0
    """
    if not text or not isinstance(text, str):
        return 0.0

    parts = text.split(".")
    whole = parts[0]
    ms_text = parts[1] if len(parts) > 1 else "0"

    millis = _leading_int(ms_text.ljust(3, "0"))
    if millis is None:
        return 0.0

    fields = [value for value in (_leading_int(p) for p in whole.split(":")) if value is not None]

    if len(fields) == 3:
        seconds = fields[0] * 3600 + fields[1] * 60 + fields[2]
    elif len(fields) == 2:
        seconds = fields[0] * 60 + fields[1]
    elif len(fields) == 1:
        seconds = fields[0]
    else:
        seconds = 0

    # Integer milliseconds divided once, so "3723.45" parses to the same
    # float as the literal 3723.45.
    return (seconds * 1000 + millis) / 1000


def format_timecode(seconds: object) -> str:
    """Format seconds as a zero-padded ``HH:MM:SS.mmm`` timecode.

    Examples:
        >>> format_timecode(3661.5)
        '01:01:01.500'
        >>> format_timecode(-5)
        '00:00:00.000'
    """
    try:
        value = float(seconds)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        value = 0.0
    if not math.isfinite(value) or value < 0:
        value = 0.0

    # Round away float noise below a nanosecond, then truncate to ms.
    total_ms = int(math.floor(round(value * 1000, 6)))

    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d}.{:03d}".format(hours, minutes, secs, millis)


def to_srt_timestamp(timecode: str) -> str:
    """Swap the first decimal point for the comma SRT requires."""
    return timecode.replace(".", ",", 1)


def ordered_times(start: str, end: str) -> Tuple[str, str]:
    """Return ``(start, end)``, swapped when start is later than end.

    Storage keeps times exactly as entered; exporters call this so a
    segment typed in the wrong order still reads forwards.
    """
    if parse_timecode(start) > parse_timecode(end):
        return end, start
    return start, end
