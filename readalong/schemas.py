"""Input parsing: aligner JSON to TimedWord lists.

WHY: Word timings arrive from different speech-recognition and TTS
alignment services, each with its own field names ("text" vs "word",
"startTime" vs "start" vs "s"). The segmenter only understands TimedWord,
so every shape is normalized here, at the edge, with field validation.

HOW: RawWordTiming is a pydantic model whose fields accept all known
aliases. parse_words() walks the supported container shapes and validates
each word object. load_words_json() decodes raw text, recovering inputs
truncated mid-array (copy-pasted snippets of larger files).

RULES:
- Accepted shapes: a flat list of word objects, {"words": [...]}, or a
  list of segments each carrying a nested "words" list.
- Non-object items and words with empty text are skipped.
- A missing end time defaults to the start time; an end before the start
  is rejected with pydantic.ValidationError.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterator, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .models import TimedWord

_TEXT_KEYS = ("text", "word", "t")


class RawWordTiming(BaseModel):
    """One word object as delivered by an aligner.

    RULES:
    - Times are in seconds
    - Unknown fields (confidence, speaker, ...) are ignored
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    text: str = Field(
        validation_alias=AliasChoices("text", "word", "t"),
        description="Word text, possibly with trailing punctuation.",
    )
    start_time: float = Field(
        ge=0,
        validation_alias=AliasChoices("startTime", "start_time", "start", "s"),
        description="Start time in seconds.",
    )
    end_time: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("endTime", "end_time", "end", "e"),
        description="End time in seconds. Defaults to the start time.",
    )

    @model_validator(mode="after")
    def _check_timing(self) -> "RawWordTiming":
        if self.end_time is None:
            self.end_time = self.start_time
        if self.end_time < self.start_time:
            raise ValueError(
                "end_time ({}) is before start_time ({}) for word '{}'".format(
                    self.end_time, self.start_time, self.text
                )
            )
        return self

    def to_timed_word(self) -> TimedWord:
        # _check_timing has filled end_time
        return TimedWord(text=self.text.strip(), start_time=self.start_time, end_time=self.end_time)


def _has_text(item: dict) -> bool:
    for key in _TEXT_KEYS:
        value = item.get(key)
        if isinstance(value, str) and value.strip():
            return True
    return False


def _iter_word_objects(data: Any) -> Iterator[dict]:
    if isinstance(data, dict):
        data = data.get("words", [])
    if not isinstance(data, list):
        return

    for item in data:
        if not isinstance(item, dict):
            continue
        nested = item.get("words")
        if isinstance(nested, list):
            # A segment with nested words
            for w in nested:
                if isinstance(w, dict):
                    yield w
        else:
            yield item


def parse_words(data: Any) -> List[TimedWord]:
    """Parse decoded JSON into TimedWords.

    Args:
        data: Decoded JSON in one of the supported shapes.

    Returns:
        TimedWords in input order.

    Raises:
        pydantic.ValidationError: If a word object has invalid timing.
    """
    words = []  # type: List[TimedWord]
    for item in _iter_word_objects(data):
        if not _has_text(item):
            continue
        words.append(RawWordTiming.model_validate(item).to_timed_word())
    return words


def load_words_json(raw: str) -> List[TimedWord]:
    """Decode raw JSON text and parse it into TimedWords.

    Input cut off mid-array is recovered by trying the usual closing
    bracket sequences.

    Raises:
        ValueError: If the text is not JSON, even after bracket recovery.
        pydantic.ValidationError: If a word object has invalid timing.
    """
    raw = raw.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not raw:
        raise ValueError("Input is empty")

    try:
        return parse_words(json.loads(raw))
    except json.JSONDecodeError:
        pass

    raw_clean = re.sub(r",\s*$", "", raw)
    for suffix in ("]", "}]", "}]}", "]}", "]}]", "}]}]"):
        try:
            data = json.loads(raw_clean + suffix)
        except json.JSONDecodeError:
            continue
        return parse_words(data)

    raise ValueError("Could not parse JSON input (even with attempted fixes)")
