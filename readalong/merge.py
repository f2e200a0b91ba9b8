"""Merge pass for very short adjacent segments.

WHY: The break detector is allowed to close tiny segments ("So", "Well,")
when a signal fires early. Read-along chunks of one or two words flash by
too quickly to follow, so neighbours that belong together are joined
again as long as no audible pause or clause punctuation separates them.

HOW: One left-to-right pass over adjacent pairs. A merged pair is emitted
as-is and not reconsidered, so a chunk grows by at most one neighbour.

RULES:
- Word order and membership never change; only boundaries are removed.
- A pause at the end of a segment always blocks merging.
- A segment ending in sentence or clause punctuation is merged only if it
  is a single word followed by near-continuous speech.
- No merged segment exceeds the hard cap (max + FORCE_BREAK_LOOKAHEAD).
"""

from __future__ import annotations

from typing import List, Sequence

from .lexicon import COMMON_ABBREVIATIONS
from .models import WordSegment
from .presets import SegmentationConfig

# Gap (s) below which a one-word sentence still runs straight into the next.
FAST_FOLLOW_GAP = 0.1

_CLAUSE_PUNCTUATION = frozenset({",", "，", ";", "；", ":", "："})


def _ends_with_split_abbreviation(segment: WordSegment) -> bool:
    """True for a segment ending in "Mr" "." where the aligner split the period.

    normalize_tokens() attaches a bare "." to the word before it, so this
    only fires for callers that run segment_words() on un-normalized
    enriched words.
    """
    if len(segment) < 2:
        return False
    last, previous = segment.words[-1], segment.words[-2]
    return last.text == "." and (previous.is_abbreviation or previous.normalized in COMMON_ABBREVIATIONS)


def _should_merge(current: WordSegment, following: WordSegment, config: SegmentationConfig) -> bool:
    if len(current) + len(following) > config.hard_max_words:
        return False

    if _ends_with_split_abbreviation(current):
        return True

    last = current.last_word
    if last.gap_after >= config.pause_threshold:
        return False

    if last.is_sentence_end or last.punctuation_after in _CLAUSE_PUNCTUATION:
        if len(current) > 1 or last.gap_after >= FAST_FOLLOW_GAP:
            return False

    return len(current) + len(following) <= config.preferred_words_per_segment


def merge_short_segments(segments: Sequence[WordSegment], config: SegmentationConfig) -> List[WordSegment]:
    """Join adjacent short segments that read as one unit."""
    if len(segments) <= 1:
        return list(segments)

    merged = []  # type: List[WordSegment]
    i = 0
    while i < len(segments):
        current = segments[i]
        if i + 1 < len(segments) and _should_merge(current, segments[i + 1], config):
            merged.append(WordSegment(current.words + segments[i + 1].words))
            i += 2
            continue
        merged.append(current)
        i += 1
    return merged
