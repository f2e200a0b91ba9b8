"""Sentence grouping and the per-sentence segmentation loop.

WHY: Read-along playback highlights one chunk at a time. Chunks must
never straddle two sentences, must respect the length limits of the
active preset, and must always make forward progress even when the text
offers no natural boundary at all.

HOW: The enriched stream is first cut into sentences. Each sentence is
scanned left to right: words accumulate into the current segment and
should_break() is consulted after every word. When the segment reaches
max_words_per_segment without a break, the overflow path runs:
  1. should_delay_force_break() — a sentence end or meaning-group end a
     few words ahead wins over splitting now (until the hard cap).
  2. find_best_break_point() — the strongest boundary inside the segment.
  3. find_fallback_break_point() — any break signal, or a mechanical split
     at the preferred length for clearly overlong segments.
  4. Otherwise the whole segment is closed as-is.
Sentences longer than twice the soft cap skip the scan and are split
evenly (see even_split).

RULES:
- Concatenating all segments reproduces the input word sequence exactly.
- Every segment holds at least one word.
- A segment only exceeds max_words_per_segment while waiting for a
  boundary within FORCE_BREAK_LOOKAHEAD words.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .breaks import find_best_break_point, has_pause, should_break
from .even_split import segment_long_sentence_evenly
from .models import EnrichedWord, WordSegment
from .presets import FORCE_BREAK_LOOKAHEAD, SegmentationConfig

logger = logging.getLogger(__name__)

# A mechanical split at the preferred length needs this much overflow.
MECHANICAL_SPLIT_MARGIN = 3


def group_sentences(words: Sequence[EnrichedWord]) -> List[List[EnrichedWord]]:
    """Split the enriched stream into sentences on is_sentence_end.

    Words after the last sentence end form a final, unterminated group.
    """
    sentences = []  # type: List[List[EnrichedWord]]
    current = []  # type: List[EnrichedWord]
    for word in words:
        current.append(word)
        if word.is_sentence_end:
            sentences.append(current)
            current = []
    if current:
        sentences.append(current)
    return sentences


def should_delay_force_break(
    words: Sequence[EnrichedWord],
    index: int,
    current_word_count: int,
    config: SegmentationConfig,
) -> bool:
    """True if a natural boundary lies just ahead and the hard cap allows waiting.

    Looks at up to FORCE_BREAK_LOOKAHEAD words after ``words[index]`` for a
    sentence end or meaning-group end, so "wasn't bad enough." is not torn
    apart merely because the soft cap was hit on "bad".
    """
    if current_word_count >= config.hard_max_words:
        return False

    end = min(len(words), index + 1 + FORCE_BREAK_LOOKAHEAD)
    for k in range(index + 1, end):
        if current_word_count + (k - index) > config.hard_max_words:
            break
        ahead = words[k]
        if ahead.is_sentence_end or ahead.is_at_meaning_group_boundary:
            return True
    return False


def find_fallback_break_point(segment: Sequence[EnrichedWord], config: SegmentationConfig) -> Optional[int]:
    """Last-resort split index for an overlong segment, or None.

    Scans backwards from the second-to-last word down to the preferred
    length for any break signal: a meaning-group end, punctuation or a
    pause. Without one, a segment comfortably past the preferred length is
    split mechanically right after the preferred word count.
    """
    preferred = config.preferred_words_per_segment
    for i in range(len(segment) - 2, preferred - 1, -1):
        word = segment[i]
        if word.is_abbreviation:
            continue
        if word.is_at_meaning_group_boundary or word.punctuation_weight > 0 or has_pause(word, config):
            return i

    if len(segment) >= preferred + MECHANICAL_SPLIT_MARGIN:
        return preferred - 1
    return None


def segment_sentence(
    sentence_words: Sequence[EnrichedWord],
    all_words: Sequence[EnrichedWord],
    sentence_offset: int,
    config: SegmentationConfig,
) -> List[WordSegment]:
    """Segment one sentence.

    Args:
        sentence_words: The words of this sentence.
        all_words: The full enriched stream; break decisions may look past
            the sentence end (clause starts, terminal guard).
        sentence_offset: Index of sentence_words[0] within all_words.
        config: Segmentation limits and thresholds.

    Returns:
        WordSegments covering sentence_words in order.
    """
    if not sentence_words:
        return []

    if len(sentence_words) > 2 * config.max_words_per_segment:
        logger.debug(
            "Sentence at word %d has %d words; using even split",
            sentence_offset, len(sentence_words),
        )
        return segment_long_sentence_evenly(sentence_words, config)

    segments = []  # type: List[WordSegment]
    current = []  # type: List[EnrichedWord]
    last_in_sentence = len(sentence_words) - 1

    for i, word in enumerate(sentence_words):
        current.append(word)
        global_index = sentence_offset + i

        if should_break(all_words, global_index, len(current), config):
            segments.append(WordSegment(tuple(current)))
            current = []
            continue

        if len(current) < config.max_words_per_segment or i == last_in_sentence:
            continue

        if should_delay_force_break(all_words, global_index, len(current), config):
            continue

        split = find_best_break_point(current, config)
        if 0 <= split < len(current) - 1:
            logger.debug("Forced break after word %d of %d", split + 1, len(current))
            segments.append(WordSegment(tuple(current[:split + 1])))
            current = current[split + 1:]
            continue

        fallback = find_fallback_break_point(current, config)
        if fallback is not None:
            logger.debug("Fallback break after word %d of %d", fallback + 1, len(current))
            segments.append(WordSegment(tuple(current[:fallback + 1])))
            current = current[fallback + 1:]
            continue

        logger.debug("No break point found; closing %d-word segment", len(current))
        segments.append(WordSegment(tuple(current)))
        current = []

    if current:
        segments.append(WordSegment(tuple(current)))

    return segments


def segment_words(words: Sequence[EnrichedWord], config: SegmentationConfig) -> List[WordSegment]:
    """Segment an enriched word stream sentence by sentence."""
    segments = []  # type: List[WordSegment]
    offset = 0
    for sentence in group_sentences(words):
        segments.extend(segment_sentence(sentence, words, offset, config))
        offset += len(sentence)

    logger.debug("Segmented %d words into %d segments", len(words), len(segments))
    return segments
