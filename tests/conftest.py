"""Shared test helpers and fixtures for the readalong test suite.

WHY: Almost every test needs a short run of timed words with predictable
timing. Building them by hand in each module would bury the interesting
part (the text and the pauses) under timing arithmetic.

HOW: make_words() lays words out back to back with a fixed duration and a
small gap; individual gaps can be overridden per index to create pauses.
enrich() runs normalization-free enrichment on the result.

RULES:
- Default gap (0.05 s) is well below every preset's pause threshold.
- Times are in seconds, like the library.
"""

from typing import Dict, List, Optional, Sequence

import pytest

from readalong.enricher import enrich_words
from readalong.models import EnrichedWord, TimedWord
from readalong.presets import PRESET_FOLLOW_ALONG, SegmentationConfig

WORD_DURATION = 0.3
DEFAULT_GAP = 0.05


def make_words(
    texts: Sequence[str],
    start: float = 0.0,
    duration: float = WORD_DURATION,
    gap: float = DEFAULT_GAP,
    gaps: Optional[Dict[int, float]] = None,
) -> List[TimedWord]:
    """Create TimedWords with sequential timing.

    ``gaps`` maps a word index to the silence after that word.
    """
    gaps = gaps or {}
    words = []  # type: List[TimedWord]
    t = start
    for i, text in enumerate(texts):
        end = round(t + duration, 3)
        words.append(TimedWord(text=text, start_time=round(t, 3), end_time=end))
        t = end + gaps.get(i, gap)
    return words


def enrich(texts: Sequence[str], language: str = "en", **kwargs) -> List[EnrichedWord]:
    return enrich_words(make_words(texts, **kwargs), language)


def filler(count: int, final: str = "word.") -> List[str]:
    """``count`` plain content words without boundaries, the last one punctuated."""
    return ["word"] * (count - 1) + [final]


@pytest.fixture
def follow_along() -> SegmentationConfig:
    return PRESET_FOLLOW_ALONG


@pytest.fixture
def sample_words() -> List[TimedWord]:
    """Two sentences with a comma clause and a real pause between them."""
    return make_words(
        ["When", "the", "rain", "finally", "stopped,", "he", "said", "goodbye", "to", "everyone.",
         "Nobody", "answered."],
        gaps={9: 0.8},
    )
