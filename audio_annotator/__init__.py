"""Audio Annotator: time-coded annotation of audio recordings.

WHY: A recording needs a transcript split into time-coded segments with
speaker labels, sentiment tags and sound-event tags, and the result has
to leave the tool as subtitles, documents or data files. An AI pass
produces a first draft; people fix it by hand.

HOW: Three stages. The AI collaborator (api/) returns a raw batch, the
core (core/) keeps every edit in a linear undo/redo history, and the
exporters (formatters/) serialize the current snapshot into nine
formats. The CLI and the HTTP API (server/) are thin front ends.

RULES:
- Every change, AI or manual, is one history snapshot
- Exporters only read the current snapshot
- Adding an output format = one render function + one registry entry
"""

__version__ = "0.1.0"
