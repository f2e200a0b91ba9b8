"""Read-along transcript segmenter.

WHY: Language-learning playback highlights a transcript one short chunk
at a time while the audio plays. This package turns a flat list of
time-aligned words into those chunks, broken where a reader would
naturally pause, and emits the nested millisecond timeline that players
and storage consume.

HOW: The single public entry point is segment_transcript(words, ...). It
resolves the preset, then runs the pipeline:
normalize_tokens() -> enrich_words() -> segment_words()
-> merge_short_segments() -> format_timeline().

RULES:
- Preset names: "follow_along" (default), "long_form", "default" (alias
  for follow_along).
- If config is provided, it overrides the preset entirely.
- No global state: every call works on its own immutable config, so
  concurrent calls with different presets are safe.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .enricher import enrich_words, normalize_tokens
from .merge import merge_short_segments
from .models import EnrichedWord, TimedWord, WordSegment
from .presets import (
    DEFAULT_PRESET,
    PRESET_FOLLOW_ALONG,
    PRESET_LONG_FORM,
    PRESETS,
    SegmentationConfig,
    get_preset,
)
from .segmenter import segment_words
from .timeline import format_timeline

__version__ = "0.1.0"

__all__ = [
    "segment_transcript",
    "segment_words",
    "build_segments",
    "TimedWord",
    "EnrichedWord",
    "WordSegment",
    "SegmentationConfig",
    "PRESETS",
    "PRESET_FOLLOW_ALONG",
    "PRESET_LONG_FORM",
    "get_preset",
]


def build_segments(
    words: Sequence[TimedWord],
    language: Optional[str],
    config: SegmentationConfig,
) -> List[WordSegment]:
    """Run the pipeline up to (and including) the merge pass."""
    enriched = enrich_words(normalize_tokens(words), language)
    segments = segment_words(enriched, config)
    if config.merge_short_segments:
        segments = merge_short_segments(segments, config)
    return segments


def segment_transcript(
    words: Sequence[TimedWord],
    language: Optional[str] = "en",
    preset: str = DEFAULT_PRESET,
    config: Optional[SegmentationConfig] = None,
) -> Dict[str, Any]:
    """Segment timed words into the read-along timeline record.

    Args:
        words: TimedWords in spoken order (seconds).
        language: BCP-47 code selecting abbreviation and meaning-group
            heuristics. Default: "en".
        preset: Preset name. Ignored when config is given.
        config: Explicit SegmentationConfig.

    Returns:
        ``{"timeline": [...]}`` with millisecond timings; an empty timeline
        for empty input.

    Raises:
        ValueError: If the preset name is not recognized and no config is
            provided.
        RuntimeError: If ``language`` is English and the spaCy model is
            not installed.
    """
    cfg = config if config is not None else get_preset(preset)
    if not words:
        return {"timeline": []}
    return format_timeline(build_segments(words, language, cfg))
