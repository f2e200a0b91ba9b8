"""Break detection: deciding whether a segment ends after a given word.

WHY: This is the scoring core of the segmenter. A good read-along chunk
ends where a speaker would breathe or a reader would pause: at sentence
ends, clause punctuation, real silences, and the ends of meaning groups —
never after "the", never inside "has been trying", and never leaving a
one-word tail.

HOW: Every factor that argues for or against a break is recorded as a
tagged contribution (ScoreFactor, weight) inside a BreakScore, so totals
are auditable and each factor can be tested on its own. should_break()
combines the score with a fixed sequence of rules:
  1. Terminal guard — the last word always breaks.
  2. Meaning-group protection — never break mid-group or after "Mr.".
  3. Short strong-terminator exception — "Why?" / "Yes!" may stand alone.
  4. Score computation — calculate_break_score().
  5. Minimum-length gate — short segments need a very strong score.
  6. Clause-start lookahead — break before "who"/"which" or ", he ...".
  7. Preferred-length zone — break readily, but avoid one-word remainders.
  8. Comma/semicolon heuristic.
  9. Otherwise, do not break.
find_best_break_point() scores split candidates inside a segment that hit
the length cap.

RULES:
- All functions take an explicit SegmentationConfig — no global state.
- Nothing here raises: missing metadata contributes zero, which biases
  towards "do not break".
- Abbreviations never contribute punctuation weight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

from .lexicon import (
    HEAVY_PUNCTUATION_WEIGHT,
    MAIN_CLAUSE_STARTERS,
    NO_BREAK_WORDS,
    QUESTION_WORDS,
    RELATIVE_PRONOUNS,
)
from .models import EnrichedWord
from .presets import SegmentationConfig

logger = logging.getLogger(__name__)


class ScoreFactor(Enum):
    """Named reasons a position is (or is not) a good break point."""

    PUNCTUATION = "punctuation"
    SENTENCE_END = "sentence_end"
    PAUSE = "pause"
    LONG_PAUSE = "long_pause"
    LENGTH_PRESSURE = "length_pressure"
    NEAR_MAX_LENGTH = "near_max_length"
    MEANING_GROUP_BOUNDARY = "meaning_group_boundary"
    MEANING_GROUP_INTERIOR = "meaning_group_interior"
    IDEAL_LENGTH = "ideal_length"
    TARGET_PROXIMITY = "target_proximity"
    ONE_WORD_TAIL = "one_word_tail"
    BAD_BREAK_WORD = "bad_break_word"


# calculate_break_score() weights
SENTENCE_END_BONUS = 12
MEDIUM_PAUSE_BONUS = 4
LONG_PAUSE_BONUS = 8
LENGTH_PRESSURE_BONUS = 3
NEAR_MAX_LENGTH_BONUS = 2
MEANING_GROUP_BOUNDARY_BONUS = 5
MEANING_GROUP_INTERIOR_PENALTY = -3

# should_break() thresholds
MIN_LENGTH_OVERRIDE_SCORE = 10
STRONG_SCORE = 8
PREFERRED_ZONE_SCORE = 5
NEAR_MAX_ZONE_SCORE = 3

# find_best_break_point() weights
FORCE_SENTENCE_END_BONUS = 15
FORCE_PUNCTUATION_MULTIPLIER = 2
FORCE_GROUP_BOUNDARY_BONUS = 8
FORCE_PAUSE_BONUS = 3
IDEAL_LENGTH_BONUS = 2
ONE_WORD_TAIL_PENALTY = -6
FORCE_BREAK_LOOKBACK = 12


@dataclass(frozen=True)
class BreakScore:
    """An auditable break score: the sum of tagged contributions."""

    contributions: Tuple[Tuple[ScoreFactor, int], ...] = ()

    @property
    def total(self) -> int:
        return sum(weight for _, weight in self.contributions)

    def has(self, factor: ScoreFactor) -> bool:
        return any(f is factor for f, _ in self.contributions)

    def weight_of(self, factor: ScoreFactor) -> int:
        return sum(weight for f, weight in self.contributions if f is factor)

    def plus(self, factor: ScoreFactor, weight: int) -> "BreakScore":
        return BreakScore(self.contributions + ((factor, weight),))


def is_bad_break_word(word: EnrichedWord) -> bool:
    """True for articles, short prepositions and abbreviations like "Mr."."""
    return word.is_abbreviation or word.normalized in NO_BREAK_WORDS


def has_pause(word: EnrichedWord, config: SegmentationConfig) -> bool:
    return word.gap_after >= config.pause_threshold


def calculate_break_score(
    word: EnrichedWord,
    current_word_count: int,
    config: SegmentationConfig,
) -> BreakScore:
    """Score the position after ``word`` as a break point.

    HOW: Sums tagged contributions:
      - punctuation weight (abbreviations excluded)
      - +12 for a true sentence end
      - +4 medium / +8 long pause; a pause after a function word only
        counts when it is long
      - +3 at or past the preferred length when any break signal exists,
        +2 more once within two words of the cap
      - +5 at a meaning-group boundary, -3 inside a group
    """
    score = BreakScore()

    if word.punctuation_weight > 0 and not word.is_abbreviation:
        score = score.plus(ScoreFactor.PUNCTUATION, word.punctuation_weight)

    if word.is_sentence_end:
        score = score.plus(ScoreFactor.SENTENCE_END, SENTENCE_END_BONUS)

    if has_pause(word, config):
        is_long = word.gap_after >= config.long_pause_threshold
        if is_long:
            score = score.plus(ScoreFactor.LONG_PAUSE, LONG_PAUSE_BONUS)
        elif not is_bad_break_word(word):
            score = score.plus(ScoreFactor.PAUSE, MEDIUM_PAUSE_BONUS)
        # A short pause after "the" / "of" is hesitation, not a boundary

    if current_word_count >= config.preferred_words_per_segment:
        has_signal = (
            word.punctuation_weight > 0
            or has_pause(word, config)
            or word.is_at_meaning_group_boundary
            or word.is_sentence_end
        )
        if has_signal:
            score = score.plus(ScoreFactor.LENGTH_PRESSURE, LENGTH_PRESSURE_BONUS)
        if current_word_count >= config.max_words_per_segment - 2:
            score = score.plus(ScoreFactor.NEAR_MAX_LENGTH, NEAR_MAX_LENGTH_BONUS)

    if word.is_at_meaning_group_boundary:
        score = score.plus(ScoreFactor.MEANING_GROUP_BOUNDARY, MEANING_GROUP_BOUNDARY_BONUS)
    elif word.is_in_meaning_group:
        score = score.plus(ScoreFactor.MEANING_GROUP_INTERIOR, MEANING_GROUP_INTERIOR_PENALTY)

    return score


def _words_left_in_sentence(words: Sequence[EnrichedWord], index: int, limit: int = 2) -> int:
    """Count words after ``index`` up to the sentence end, stopping at ``limit``."""
    if words[index].is_sentence_end:
        return 0
    count = 0
    for k in range(index + 1, len(words)):
        count += 1
        if count >= limit or words[k].is_sentence_end:
            break
    return count


def should_break_before_clause_start(
    words: Sequence[EnrichedWord],
    index: int,
    current_word_count: int,
    config: SegmentationConfig,
) -> bool:
    """Break when the next word opens a new clause.

    Relative pronouns always open one; question words do once the segment
    has a little content; subject pronouns and demonstratives do right
    after a comma (", he said").
    """
    if index >= len(words) - 1 or current_word_count < config.min_words_per_segment:
        return False

    next_word = words[index + 1].normalized

    if next_word in RELATIVE_PRONOUNS:
        return True

    if next_word in QUESTION_WORDS and current_word_count >= config.min_words_per_segment + 1:
        return True

    if next_word in MAIN_CLAUSE_STARTERS and words[index].has_comma:
        return True

    return False


def should_break_at_comma(
    words: Sequence[EnrichedWord],
    index: int,
    current_word_count: int,
    config: SegmentationConfig,
) -> bool:
    """Break at a comma or semicolon once the segment has enough words."""
    word = words[index]
    if not (word.has_comma or word.has_semicolon):
        return False

    if current_word_count < config.min_words_per_segment:
        return False

    if has_pause(word, config):
        return True

    if index < len(words) - 1 and words[index + 1].normalized in MAIN_CLAUSE_STARTERS:
        return True

    return current_word_count >= config.min_words_per_segment + 2


def should_break(
    words: Sequence[EnrichedWord],
    index: int,
    current_word_count: int,
    config: SegmentationConfig,
) -> bool:
    """Decide whether the current segment ends after ``words[index]``.

    Args:
        words: The full enriched word stream (lookahead may cross into the
            next sentence for clause-start detection).
        index: Position of the word just added to the segment.
        current_word_count: Words in the segment including words[index].
        config: Segmentation limits and thresholds.

    Returns:
        True if a new segment should start after this word.
    """
    # 1. Terminal guard
    if index >= len(words) - 1:
        return True

    word = words[index]

    # 2. Meaning-group protection: wait for the group to close
    if word.is_in_meaning_group and not word.is_sentence_end and not word.is_at_meaning_group_boundary:
        return False
    if word.is_abbreviation and not word.punctuation_weight:
        # "Mr." binds to the name that follows
        return False

    # 3. Short strong terminators: "Why?" / "Yes!"
    if word.is_sentence_end:
        if current_word_count == 1:
            return True
        if current_word_count <= 2 and has_pause(word, config):
            return True

    # 4. Score
    score = calculate_break_score(word, current_word_count, config)
    total = score.total

    # 5. Minimum-length gate
    if current_word_count < config.min_words_per_segment and total < MIN_LENGTH_OVERRIDE_SCORE:
        return False

    if word.is_at_meaning_group_boundary and current_word_count >= config.min_words_per_segment:
        return True

    # 6. Clause-start lookahead
    if should_break_before_clause_start(words, index, current_word_count, config):
        return True

    # 7. Preferred-length zone
    if current_word_count >= config.preferred_words_per_segment:
        valid_pause = has_pause(word, config) and (
            not is_bad_break_word(word) or word.gap_after >= config.long_pause_threshold
        )

        remaining = _words_left_in_sentence(words, index)
        if remaining < 2 and current_word_count < config.max_words_per_segment - 1:
            # Breaking here would strand a one-word remainder; only a very
            # strong signal justifies it.
            return word.is_sentence_end or (
                word.punctuation_weight >= HEAVY_PUNCTUATION_WEIGHT and not word.is_abbreviation
            )

        if word.punctuation_weight > 0 or valid_pause or total >= PREFERRED_ZONE_SCORE:
            return True

        if current_word_count >= config.max_words_per_segment - 3 and total >= NEAR_MAX_ZONE_SCORE:
            return True
    else:
        has_weak_signal = (
            word.punctuation_weight > 0
            or has_pause(word, config)
            or word.is_at_meaning_group_boundary
        )
        if not has_weak_signal and total < STRONG_SCORE:
            return False

    if total >= STRONG_SCORE:
        return True

    # 8. Comma / semicolon
    return should_break_at_comma(words, index, current_word_count, config)


def score_force_break_candidate(
    segment: Sequence[EnrichedWord],
    index: int,
    config: SegmentationConfig,
) -> BreakScore:
    """Score splitting an over-long segment after ``segment[index]``."""
    word = segment[index]
    score = BreakScore()

    if word.is_sentence_end:
        score = score.plus(ScoreFactor.SENTENCE_END, FORCE_SENTENCE_END_BONUS)
    elif word.punctuation_weight > 0:
        score = score.plus(ScoreFactor.PUNCTUATION, word.punctuation_weight * FORCE_PUNCTUATION_MULTIPLIER)

    if word.is_at_meaning_group_boundary:
        score = score.plus(ScoreFactor.MEANING_GROUP_BOUNDARY, FORCE_GROUP_BOUNDARY_BONUS)

    if has_pause(word, config):
        score = score.plus(ScoreFactor.PAUSE, FORCE_PAUSE_BONUS)

    words_before = index + 1
    if config.min_words_per_segment <= words_before <= config.preferred_words_per_segment:
        score = score.plus(ScoreFactor.IDEAL_LENGTH, IDEAL_LENGTH_BONUS)

    if len(segment) - words_before == 1:
        score = score.plus(ScoreFactor.ONE_WORD_TAIL, ONE_WORD_TAIL_PENALTY)

    return score


def find_best_break_point(segment: Sequence[EnrichedWord], config: SegmentationConfig) -> int:
    """Find the best split index inside a segment that reached the length cap.

    WHY: When the scan hits max_words_per_segment without a natural break,
    the segment must be split somewhere. The best split is the strongest
    boundary among the accumulated words, not simply the latest word.

    HOW: Scans up to FORCE_BREAK_LOOKBACK candidates backwards from the
    second-to-last word. Abbreviations, mid-group words and unpunctuated
    function words are skipped; the rest are scored with
    score_force_break_candidate(); on ties the latest candidate wins.

    RULES:
    - Never returns the last word: that would produce a one-word tail.
    - Returns -1 when no candidate scores above zero.
    """
    if len(segment) < 2:
        return -1

    last_candidate = len(segment) - 2
    lookback = min(FORCE_BREAK_LOOKBACK, last_candidate + 1)
    first_candidate = max(0, last_candidate - lookback + 1)

    best_index = -1
    best_total = 0
    for i in range(last_candidate, first_candidate - 1, -1):
        word = segment[i]

        if word.is_abbreviation:
            continue
        if is_bad_break_word(word) and not word.punctuation_weight:
            continue
        if word.is_in_meaning_group and not word.is_at_meaning_group_boundary:
            continue

        total = score_force_break_candidate(segment, i, config).total
        if total > best_total:
            best_total = total
            best_index = i

    if best_index >= 0:
        logger.debug("Best forced split after word %d (score %d)", best_index, best_total)
    return best_index
