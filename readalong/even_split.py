"""Even redistribution of pathologically long sentences.

WHY: For sentences longer than twice the soft cap, the incremental scan
tends to emit several short chunks followed by one huge tail. Learners are
better served by chunks of similar length whose edges are nudged onto
nearby natural boundaries.

HOW: Compute the ideal segment count (ceil(total / preferred)) and a
target length. For each boundary but the last, search a window around the
raw target index for the best-scoring real boundary (punctuation, meaning-
group end, pause, closeness to the target; function words and mid-group
positions are penalised). If nothing scores, fall back to the first
break signal near the target, or the target itself.

RULES:
- No word is dropped. The final chunk takes the remainder once it fits
  under the hard cap, so drift never produces a giant tail.
- A boundary never moves before the current chunk start.
- Middle chunks are at least 2 words long, and so is the final chunk: a
  boundary that would strand the last word alone is skipped.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from .breaks import BreakScore, ScoreFactor, has_pause, is_bad_break_word
from .models import EnrichedWord, WordSegment
from .presets import SegmentationConfig

logger = logging.getLogger(__name__)

TARGET_SEARCH_WINDOW = 4
FALLBACK_SEARCH_RADIUS = 2
EVEN_PUNCTUATION_MULTIPLIER = 3
EVEN_GROUP_BOUNDARY_BONUS = 5
EVEN_PAUSE_BONUS = 3
EVEN_BAD_BREAK_PENALTY = -5
EVEN_GROUP_INTERIOR_PENALTY = -3


def score_even_candidate(
    word: EnrichedWord,
    distance: int,
    window: int,
    config: SegmentationConfig,
) -> BreakScore:
    """Score a boundary candidate ``distance`` words away from the target."""
    score = BreakScore()

    if word.punctuation_weight > 0 and not word.is_abbreviation:
        score = score.plus(ScoreFactor.PUNCTUATION, word.punctuation_weight * EVEN_PUNCTUATION_MULTIPLIER)

    if word.is_at_meaning_group_boundary:
        score = score.plus(ScoreFactor.MEANING_GROUP_BOUNDARY, EVEN_GROUP_BOUNDARY_BONUS)

    if has_pause(word, config):
        score = score.plus(ScoreFactor.PAUSE, EVEN_PAUSE_BONUS)

    proximity = max(0, window - distance)
    if proximity:
        score = score.plus(ScoreFactor.TARGET_PROXIMITY, proximity)

    if is_bad_break_word(word) and not word.punctuation_weight and not has_pause(word, config):
        score = score.plus(ScoreFactor.BAD_BREAK_WORD, EVEN_BAD_BREAK_PENALTY)

    if word.is_in_meaning_group and not word.is_at_meaning_group_boundary:
        score = score.plus(ScoreFactor.MEANING_GROUP_INTERIOR, EVEN_GROUP_INTERIOR_PENALTY)

    return score


def find_best_break_near_target(
    words: Sequence[EnrichedWord],
    target_index: int,
    config: SegmentationConfig,
    window: int = TARGET_SEARCH_WINDOW,
) -> int:
    """Return the best boundary index within ``window`` of the target, or -1.

    A boundary that would leave exactly one word behind is never chosen.
    """
    start = max(0, target_index - window)
    end = min(len(words) - 1, target_index + window)

    best_index = -1
    best_total = 0
    for i in range(start, end + 1):
        if words[i].is_abbreviation or len(words) - (i + 1) == 1:
            continue
        total = score_even_candidate(words[i], abs(i - target_index), window, config).total
        if total > best_total:
            best_total = total
            best_index = i
    return best_index


def _has_break_signal(word: EnrichedWord, config: SegmentationConfig) -> bool:
    if word.is_abbreviation:
        return False
    return word.punctuation_weight > 0 or word.is_at_meaning_group_boundary or has_pause(word, config)


def segment_long_sentence_evenly(
    words: Sequence[EnrichedWord],
    config: SegmentationConfig,
) -> List[WordSegment]:
    """Split a very long sentence into near-equal chunks on nearby boundaries.

    Args:
        words: The words of one sentence, in order.
        config: Segmentation limits; preferred_words_per_segment sets the
            target chunk length.

    Returns:
        Contiguous WordSegments covering every word exactly once.
    """
    total_words = len(words)
    if total_words == 0:
        return []

    ideal_count = math.ceil(total_words / config.preferred_words_per_segment)
    words_per_segment = math.ceil(total_words / ideal_count)

    logger.debug(
        "Even split of %d-word sentence into %d segments of ~%d words",
        total_words, ideal_count, words_per_segment,
    )

    segments = []  # type: List[WordSegment]
    current = 0
    while current < total_words:
        remaining = total_words - current
        is_last = len(segments) >= ideal_count - 1
        if remaining <= words_per_segment or (is_last and remaining <= config.hard_max_words):
            segments.append(WordSegment(tuple(words[current:])))
            break

        target = current + words_per_segment - 1
        best = find_best_break_near_target(words, target, config)

        if best >= current:
            split = best
        else:
            split = min(target, total_words - 1)
            low = max(current + 1, split - FALLBACK_SEARCH_RADIUS)
            high = min(split + FALLBACK_SEARCH_RADIUS, total_words - 1)
            for i in range(low, high + 1):
                if _has_break_signal(words[i], config):
                    split = i
                    break

        if split - current + 1 < 2:
            # Too short for a middle chunk; extend it
            split = min(current + min(3, words_per_segment - 1), total_words - 1)

        if total_words - (split + 1) == 1 and split - current >= 2:
            # Never strand the last word on its own
            split -= 1

        segments.append(WordSegment(tuple(words[current:split + 1])))
        current = split + 1

    return segments
