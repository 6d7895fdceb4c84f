"""Annotation state engine: records, timecodes, history and edits.

WHY: The core package is the stable heart of the annotator. The data
model, the undo/redo history and the mutation API are shared by every
front end and by the exporters, and must stay free of I/O.

HOW: timecode.py converts between timecode strings and seconds, ir.py
defines the immutable Annotation record, history.py holds the snapshot
list and cursor, mutations.py computes and commits edits, and
workspace.py ties a loaded recording, its history and the AI
collaborator together.

RULES:
- Snapshots are tuples of frozen records; nothing is mutated in place
- Only AnnotationEditor commits to History
- No network or file access here (the AI call is injected)
"""
