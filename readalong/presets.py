"""Segmentation configuration and named presets.

WHY: Different playback targets want different chunk sizes — short chunks
for beginners following along word by word, longer ones for fluent
listeners. Centralizing the tunables as an immutable config object lets
callers pick a preset by name, and supports concurrent segmentation with
different presets (no global state).

HOW: SegmentationConfig is a frozen dataclass validated once in
__post_init__. PRESETS maps preset names to ready-made instances.
Derived configs are built with with_overrides(), which returns a new,
re-validated instance.

RULES:
- Presets are frozen constants — they cannot be mutated at runtime.
- Thresholds are in seconds.
- An invalid combination (e.g. min > max) raises ValueError at
  construction, never mid-algorithm.
- "default" is an alias for "follow_along".
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class SegmentationConfig:
    """Word-count limits and pause thresholds for one segmentation call.

    Attributes:
        min_words_per_segment: Below this, only a very strong signal breaks.
        preferred_words_per_segment: From here on, any break signal is taken.
        max_words_per_segment: Soft cap; the hard cap is this plus 4.
        pause_threshold: Minimum silence (s) treated as a breathing point.
        long_pause_threshold: Silence (s) strong enough to break even after
            a function word.
        merge_short_segments: Run the short-segment merge pass after
            segmentation.
    """

    min_words_per_segment: int = 1
    preferred_words_per_segment: int = 6
    max_words_per_segment: int = 12
    pause_threshold: float = 0.25
    long_pause_threshold: float = 0.5
    merge_short_segments: bool = True

    def __post_init__(self) -> None:
        if self.min_words_per_segment < 1:
            raise ValueError("min_words_per_segment must be at least 1")
        if self.min_words_per_segment > self.preferred_words_per_segment:
            raise ValueError(
                "min_words_per_segment ({}) must not exceed preferred_words_per_segment ({})".format(
                    self.min_words_per_segment, self.preferred_words_per_segment
                )
            )
        if self.preferred_words_per_segment > self.max_words_per_segment:
            raise ValueError(
                "preferred_words_per_segment ({}) must not exceed max_words_per_segment ({})".format(
                    self.preferred_words_per_segment, self.max_words_per_segment
                )
            )
        if self.pause_threshold < 0 or self.long_pause_threshold < 0:
            raise ValueError("pause thresholds must be non-negative")
        if self.long_pause_threshold < self.pause_threshold:
            raise ValueError(
                "long_pause_threshold ({}) must not be below pause_threshold ({})".format(
                    self.long_pause_threshold, self.pause_threshold
                )
            )

    @property
    def hard_max_words(self) -> int:
        """Absolute segment cap when overflowing to reach a nearby boundary."""
        return self.max_words_per_segment + FORCE_BREAK_LOOKAHEAD

    def with_overrides(self, **overrides: Any) -> "SegmentationConfig":
        """Return a validated copy with the given fields replaced.

        None values are ignored so CLI flags can be passed straight through.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)


# Words the segmenter may look (and overflow) past the soft cap.
FORCE_BREAK_LOOKAHEAD = 4

# Beginner follow-along: short chunks, sensitive to short pauses
PRESET_FOLLOW_ALONG = SegmentationConfig()

# Fluent listening: longer chunks, only clear pauses count
PRESET_LONG_FORM = SegmentationConfig(
    min_words_per_segment=3,
    preferred_words_per_segment=8,
    max_words_per_segment=15,
    pause_threshold=0.3,
    long_pause_threshold=0.6,
)

PRESETS: Dict[str, SegmentationConfig] = {
    "follow_along": PRESET_FOLLOW_ALONG,
    "long_form": PRESET_LONG_FORM,
    "default": PRESET_FOLLOW_ALONG,  # Alias
}

DEFAULT_PRESET = "follow_along"


def get_preset(name: str) -> SegmentationConfig:
    """Look up a preset by name.

    Raises:
        ValueError: If the preset name is not recognized.
    """
    try:
        return PRESETS[name.lower()]
    except KeyError:
        raise ValueError(
            "Unknown preset '{}'. Available: {}".format(name, ", ".join(PRESETS.keys()))
        ) from None
