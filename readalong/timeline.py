"""Timeline formatter: WordSegments to the persisted read-along record.

WHY: Playback and storage consume a nested sentence -> word timeline in
integer milliseconds. This is the only place where the internal float
seconds are converted, so rounding happens exactly once and consistently.

HOW: Each segment becomes one entry with its joined text, start and
duration, plus a nested word-level timeline. The finished record is
validated against timeline_schema.json before it is returned.

RULES:
- start = round(seconds * 1000).
- A word's duration is its rounded end minus its rounded start, so
  start + duration of a word equals its rounded end time.
- A segment's duration runs from its first word's rounded start to its
  last word's rounded end.
- Schema validation is mandatory; a violation is a programming defect and
  raises jsonschema.ValidationError.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import jsonschema

from .models import WordSegment

_SCHEMA_PATH = Path(__file__).resolve().parent / "timeline_schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    """Load and cache the timeline JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def to_ms(seconds: float) -> int:
    return int(round(seconds * 1000))


def _format_segment(segment: WordSegment) -> Dict[str, Any]:
    words = []  # type: List[Dict[str, Any]]
    for word in segment.words:
        start_ms = to_ms(word.start_time)
        words.append({
            "text": word.text,
            "start": start_ms,
            "duration": to_ms(word.end_time) - start_ms,
        })

    start_ms = to_ms(segment.start_time)
    return {
        "text": segment.text,
        "start": start_ms,
        "duration": to_ms(segment.end_time) - start_ms,
        "timeline": words,
    }


def format_timeline(segments: Sequence[WordSegment]) -> Dict[str, Any]:
    """Build the ``{"timeline": [...]}`` record for a list of segments.

    Raises:
        jsonschema.ValidationError: If the record does not conform to the
            timeline schema (e.g. a word ends before it starts).
    """
    output = {"timeline": [_format_segment(s) for s in segments]}
    jsonschema.validate(instance=output, schema=_get_schema())
    return output
