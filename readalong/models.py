"""Data models for the read-along segmenter.

WHY: Every stage of the pipeline (normalization, enrichment, segmentation,
formatting) consumes or produces timed words. Keeping the word types in one
module gives all stages a single, well-typed contract.

HOW: Three frozen dataclasses form a hierarchy:
  TimedWord    — one spoken word with start/end timing (pipeline input)
  EnrichedWord — a TimedWord plus the per-word break metadata
  WordSegment  — a contiguous, non-empty run of EnrichedWords

RULES:
- Word text is sacred — never modified, paraphrased, or reordered.
- Timestamps are in seconds (float), not milliseconds. Only the timeline
  formatter converts to milliseconds.
- All models are immutable; derived values are computed, never stored back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

_STRIP_CHARS = "\"'“”‘’()[]{}«».,!?;:…。！？；：，、-—–"


@dataclass(frozen=True)
class TimedWord:
    """A single timestamped word from speech recognition or TTS alignment.

    Attributes:
        text: The word text as delivered by the aligner.
        start_time: Start time in seconds.
        end_time: End time in seconds.

    Raises:
        ValueError: If start_time is negative or end_time is before it.
    """

    text: str
    start_time: float
    end_time: float

    def __post_init__(self) -> None:
        if self.start_time < 0:
            raise ValueError(
                "start_time ({}) is negative for word '{}'".format(self.start_time, self.text)
            )
        if self.end_time < self.start_time:
            raise ValueError(
                "end_time ({}) is before start_time ({}) for word '{}'".format(
                    self.end_time, self.start_time, self.text
                )
            )


@dataclass(frozen=True)
class EnrichedWord(TimedWord):
    """A TimedWord with the metadata the break detector scores on.

    RULES:
    - gap_after is the silence to the next word in seconds, 0 for the last word
    - punctuation_after is the first trailing punctuation glyph, or None
    - punctuation_weight is 0 when there is no punctuation or the "." belongs
      to an abbreviation
    - is_sentence_end is never True for abbreviations
    - is_at_meaning_group_boundary implies is_in_meaning_group
    """

    gap_after: float = 0.0
    punctuation_after: Optional[str] = None
    punctuation_weight: int = 0
    is_sentence_end: bool = False
    is_abbreviation: bool = False
    is_number: bool = False
    is_in_meaning_group: bool = False
    is_at_meaning_group_boundary: bool = False

    @property
    def normalized(self) -> str:
        """Lowercased text with surrounding quotes and punctuation removed."""
        return self.text.strip().strip(_STRIP_CHARS).lower()

    @property
    def has_comma(self) -> bool:
        return self.punctuation_after in (",", "，", "、")

    @property
    def has_semicolon(self) -> bool:
        return self.punctuation_after in (";", "；")


@dataclass(frozen=True)
class WordSegment:
    """A contiguous run of words shown together during follow-along playback.

    HOW: Built by the segmenter from slices of a sentence. The words are
    stored as a tuple so segments are hashable and cannot be mutated after
    the segmenter hands them out.

    RULES:
    - words is never empty
    - start_time is the first word's start, end_time the last word's end
    """

    words: Tuple[EnrichedWord, ...]

    def __post_init__(self) -> None:
        if not self.words:
            raise ValueError("WordSegment requires at least one word")

    def __len__(self) -> int:
        return len(self.words)

    @property
    def text(self) -> str:
        return " ".join(w.text for w in self.words)

    @property
    def start_time(self) -> float:
        return self.words[0].start_time

    @property
    def end_time(self) -> float:
        return self.words[-1].end_time

    @property
    def last_word(self) -> EnrichedWord:
        return self.words[-1]
