"""Token normalization and per-word metadata enrichment.

WHY: Aligners deliver bare timed tokens. The break detector needs to know,
for every word, how strong its trailing punctuation is, how long the
silence after it lasts, whether it really ends a sentence (and is not
"Mr."), and whether it sits inside a meaning group. This module is the
bridge between the raw token list and the scored EnrichedWord stream.

HOW: Two passes.
  1. normalize_tokens() — attaches punctuation-only tokens and "-word"
     hyphen continuations to the preceding word, extending its end time.
  2. enrich_words() — a 1:1 map from TimedWord to EnrichedWord. Punctuation,
     abbreviation, number and sentence-end flags depend only on the word and
     its immediate neighbours; meaning groups come from a phrase chunker run
     once over the whole token list.

RULES:
- enrich_words() output length always equals input length, order preserved.
- gap_after is rounded to millisecond precision and never negative; the
  last word has gap_after == 0.
- A "." that belongs to an abbreviation neither weighs anything nor ends a
  sentence. Titles ("Mr.") are always abbreviations; other abbreviations
  only when the next word does not start with a capital letter.
- A number followed by "." does not end a sentence when the next word
  continues in lowercase or with a digit ("3." "14").
- Enrichment never looks at segmentation decisions.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from .lexicon import (
    PUNCTUATION_WEIGHTS,
    SENTENCE_TERMINATORS,
    abbreviations_for,
    titles_for,
)
from .meaning_groups import detect_meaning_groups
from .models import EnrichedWord, TimedWord

logger = logging.getLogger(__name__)

# Trailing punctuation run, optionally followed by closing quotes/brackets.
_TRAILING_PUNCT_RE = re.compile(r"([.,!?;:…。！？；：，、—–\-]+)[\"'“”‘’)\]»]*$")
_PUNCT_ONLY_RE = re.compile(r"^[.,!?;:…。！？；：，、—–\-\"'“”‘’)\]»]+$")
_HYPHEN_CONTINUATION_RE = re.compile(r"^-\w")
_NUMBER_RE = re.compile(r"^\d+([.,]\d+)*$")
_LEADING_QUOTES = "\"'“‘([«¿¡"


def normalize_tokens(words: Sequence[TimedWord]) -> List[TimedWord]:
    """Attach punctuation-only and hyphen-continuation tokens to the previous word.

    WHY: Some aligners emit "." or "?" as separate tokens, and split
    hyphenated compounds into "non", "-sleep", "-deep". Learners should see
    one word "non-sleep-deep" and "state." rather than a dangling ".".

    HOW: Walk the tokens once, keeping the output list. A punctuation-only
    or "-word" token is concatenated onto the last emitted word, whose end
    time is extended to cover it. Leading tokens with no predecessor are
    kept as they are.

    RULES:
    - Whitespace-only tokens are dropped; other text is only stripped.
    - The relative order of words never changes.
    """
    normalized = []  # type: List[TimedWord]
    for w in words:
        text = w.text.strip()
        if not text:
            continue
        attaches = bool(_PUNCT_ONLY_RE.match(text) or _HYPHEN_CONTINUATION_RE.match(text))
        if attaches and normalized:
            prev = normalized[-1]
            normalized[-1] = TimedWord(
                text=prev.text + text,
                start_time=prev.start_time,
                end_time=max(prev.end_time, w.end_time),
            )
            continue
        normalized.append(TimedWord(text=text, start_time=w.start_time, end_time=w.end_time))
    return normalized


def split_trailing_punctuation(text: str) -> tuple:
    """Split a word into (core, punctuation_run).

    >>> split_trailing_punctuation('end."')
    ('end', '.')
    """
    stripped = text.strip()
    match = _TRAILING_PUNCT_RE.search(stripped)
    if not match:
        return stripped, ""
    core = stripped[:match.start()]
    run = match.group(1)
    if not core:
        # Token is punctuation only ("—"): the glyph itself is the punctuation.
        return "", run
    return core, run


def _first_glyph(run: str) -> Optional[str]:
    """Reduce a punctuation run to the glyph that drives the break weight."""
    if not run:
        return None
    if run.startswith("...") or run.startswith("…"):
        return "…"
    return run[0]


def _core_key(core: str) -> str:
    return core.lstrip(_LEADING_QUOTES).lower().rstrip(".")


def _starts_new_sentence(next_word: Optional[TimedWord]) -> bool:
    """True if the next word opens with a capital letter (or there is none)."""
    if next_word is None:
        return True
    text = next_word.text.lstrip(_LEADING_QUOTES)
    return bool(text) and text[0].isupper()


def _is_abbreviation(
    core: str,
    run: str,
    next_word: Optional[TimedWord],
    titles: frozenset,
    abbreviations: frozenset,
) -> bool:
    if not core or not run.startswith("."):
        return False
    key = _core_key(core)
    if key in titles:
        return True
    # Initials: "J. Smith"
    if len(key) == 1 and key.isalpha() and key not in ("i", "a") and core.lstrip(_LEADING_QUOTES)[:1].isupper():
        return next_word is not None and _starts_new_sentence(next_word)
    if key in abbreviations:
        return not _starts_new_sentence(next_word)
    return False


def _is_number(core: str) -> bool:
    digits = re.sub(r"[^\d.,]", "", core)
    return (
        len(digits) > 0
        and bool(_NUMBER_RE.match(digits))
        and len(digits) >= len(core) * 0.5
    )


def _continues_in_lowercase(next_word: Optional[TimedWord]) -> bool:
    if next_word is None:
        return False
    text = next_word.text.lstrip(_LEADING_QUOTES)
    return bool(text) and (text[0].islower() or text[0].isdigit())


def enrich_words(words: Sequence[TimedWord], language: Optional[str] = None) -> List[EnrichedWord]:
    """Attach break-decision metadata to every word.

    WHY: The break detector scores each position on punctuation, pauses,
    sentence ends and meaning groups. Computing these once up front keeps
    the scoring code free of text parsing.

    HOW: Meaning groups are detected once over the full token list. Each
    word is then examined together with its successor: the silence to the
    next word, the trailing punctuation run, abbreviation and number
    detection, and finally the sentence-end decision.

    Args:
        words: Timed words in spoken order (ideally normalize_tokens() output).
        language: BCP-47 code selecting abbreviation lists and meaning-group
            detection. None means no language-specific heuristics.

    Returns:
        One EnrichedWord per input word, same order.
    """
    if not words:
        return []

    titles = titles_for(language)
    abbreviations = abbreviations_for(language)

    groups = detect_meaning_groups([w.text for w in words], language)
    in_group = [False] * len(words)
    group_end = [False] * len(words)
    for group in groups:
        for k in range(group.start, group.end):
            in_group[k] = True
        group_end[group.last_index] = True

    enriched = []  # type: List[EnrichedWord]
    for index, word in enumerate(words):
        next_word = words[index + 1] if index + 1 < len(words) else None

        gap_after = 0.0
        if next_word is not None:
            gap_after = max(0.0, round(next_word.start_time - word.end_time, 3))

        core, run = split_trailing_punctuation(word.text)
        is_abbreviation = _is_abbreviation(core, run, next_word, titles, abbreviations)
        if is_abbreviation:
            # "e.g.," — the period belongs to the abbreviation, the comma still counts
            run = run[1:]
        punctuation_after = _first_glyph(run)

        is_number = bool(core) and _is_number(core)

        is_sentence_end = False
        if punctuation_after in SENTENCE_TERMINATORS and not is_abbreviation:
            is_sentence_end = not (
                punctuation_after == "." and is_number and _continues_in_lowercase(next_word)
            )

        punctuation_weight = PUNCTUATION_WEIGHTS.get(punctuation_after, 0) if punctuation_after else 0
        if punctuation_after == "." and not is_sentence_end:
            # Decimal point or ordinal, not a full stop
            punctuation_weight = 0

        enriched.append(EnrichedWord(
            text=word.text,
            start_time=word.start_time,
            end_time=word.end_time,
            gap_after=gap_after,
            punctuation_after=punctuation_after,
            punctuation_weight=punctuation_weight,
            is_sentence_end=is_sentence_end,
            is_abbreviation=is_abbreviation,
            is_number=is_number,
            is_in_meaning_group=in_group[index],
            # "to Mr." must not close a group right before the name
            is_at_meaning_group_boundary=group_end[index] and not is_abbreviation,
        ))

    logger.debug(
        "Enriched %d words (%d meaning groups, %d sentence ends)",
        len(enriched), len(groups), sum(1 for w in enriched if w.is_sentence_end),
    )
    return enriched
