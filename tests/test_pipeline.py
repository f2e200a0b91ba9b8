"""End-to-end tests for segment_transcript().

WHY: The pipeline stitches normalization, enrichment, segmentation, the
merge pass and formatting together. These tests pin down the properties a
player relies on: no lost or reordered words, bounded segment sizes,
deterministic output, and the classic hard cases.

RULES:
- Tests use the public segment_transcript() API unless a property is only
  observable on WordSegments.
- No global state: different presets back to back must not interfere.
"""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from readalong import (
    PRESET_FOLLOW_ALONG,
    PRESET_LONG_FORM,
    build_segments,
    segment_transcript,
)
from readalong.enricher import normalize_tokens
from readalong.models import TimedWord

from conftest import filler, make_words

CORPUS = (
    "When the rain finally stopped, he said goodbye to everyone. Nobody answered. "
    "I have been trying to figure out why the old bridge, which was built in 1923, "
    "never needed repairs. Dr. Jones said it was 3. 5 percent stronger than expected; "
    "the engineers, e.g., the team from the city, disagreed. Why? Because the numbers "
    "were wrong... or so they claimed. The movie wasn't bad enough. We walked along the "
    "river in the early morning light and talked about the summer, the people we had met "
    "and the places we would like to visit again some day when the children are older "
    "and the house is finally finished and paid for by the bank."
).split()


def _flatten(result):
    return [w["text"] for s in result["timeline"] for w in s["timeline"]]


def _corpus_words():
    gaps = {i: 0.6 for i, t in enumerate(CORPUS) if t.endswith((".", "?"))}
    gaps.update({i: 0.3 for i, t in enumerate(CORPUS) if t.endswith(",")})
    return make_words(CORPUS, gaps=gaps)


class TestScenarios:

    def test_single_word_question(self):
        words = [TimedWord("Why", 0.0, 0.3), TimedWord("?", 0.3, 0.32)]
        result = segment_transcript(words)
        assert len(result["timeline"]) == 1
        assert result["timeline"][0]["text"] == "Why?"

    def test_forty_words_without_boundaries(self):
        segments = build_segments(make_words(filler(40)), "en", PRESET_FOLLOW_ALONG)
        assert sum(len(s) for s in segments) == 40
        assert all(len(s) <= 16 for s in segments)

    def test_hundred_words_split_evenly(self):
        cfg = PRESET_FOLLOW_ALONG.with_overrides(preferred_words_per_segment=10)
        segments = build_segments(make_words(filler(100)), "en", cfg)
        assert 9 <= len(segments) <= 11
        assert all(abs(len(s) - 10) <= 3 for s in segments)

    def test_title_never_ends_a_segment(self):
        texts = ["word"] * 11 + ["Mr.", "Smith"] + ["word"] * 5 + ["end."]
        segments = build_segments(make_words(texts, gaps={11: 0.6}), "en", PRESET_FOLLOW_ALONG)
        assert all(s.last_word.text != "Mr." for s in segments)

    def test_breaks_at_comma_before_subject(self, sample_words):
        result = segment_transcript(sample_words)
        assert [s["text"] for s in result["timeline"]] == [
            "When the rain finally stopped,",
            "he said goodbye to everyone.",
            "Nobody answered.",
        ]

    def test_idiom_not_split_at_soft_cap(self):
        cfg = PRESET_FOLLOW_ALONG.with_overrides(preferred_words_per_segment=3, max_words_per_segment=4)
        result = segment_transcript(make_words(["The", "old", "movie", "wasn't", "bad", "enough."]), config=cfg)
        assert any("bad enough." in s["text"] for s in result["timeline"])

    @pytest.mark.parametrize("sentence, bound", [
        ("My grandmother said the soup was extremely hot and we waited.", ("extremely", "hot")),
        ("Honestly the old house is quite large and very cold in winter.", ("quite", "large")),
        ("Honestly the old house is quite large and very cold in winter.", ("very", "cold")),
    ])
    def test_adverb_phrase_not_split(self, sentence, bound):
        result = segment_transcript(make_words(sentence.split()))
        texts = [s["text"].split() for s in result["timeline"]]
        assert any(
            seg[k:k + 2] == list(bound) for seg in texts for k in range(len(seg) - 1)
        )

    def test_hyphenated_compound_joined(self):
        words = [
            TimedWord("A", 0.0, 0.1),
            TimedWord("non", 0.15, 0.3),
            TimedWord("-sleep", 0.3, 0.5),
            TimedWord("-deep", 0.5, 0.7),
            TimedWord("rest", 0.75, 1.0),
            TimedWord(".", 1.0, 1.01),
        ]
        result = segment_transcript(words)
        assert _flatten(result) == ["A", "non-sleep-deep", "rest."]


class TestTimeline:

    def test_sample_timings(self, sample_words):
        result = segment_transcript(sample_words)
        starts = [s["start"] for s in result["timeline"]]
        durations = [s["duration"] for s in result["timeline"]]
        assert starts == [0, 1750, 4250]
        assert durations == [1700, 1700, 650]
        assert result["timeline"][2]["timeline"] == [
            {"text": "Nobody", "start": 4250, "duration": 300},
            {"text": "answered.", "start": 4600, "duration": 300},
        ]

    def test_empty_input(self):
        assert segment_transcript([]) == {"timeline": []}

    def test_backwards_word_timing_rejected_up_front(self):
        with pytest.raises(ValueError, match="before start_time"):
            segment_transcript([TimedWord("Hello", 1.0, 0.5), TimedWord("world.", 1.2, 1.5)])

    def test_negative_start_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            segment_transcript([TimedWord("Hello", -0.2, 0.3)])

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            segment_transcript(make_words(["Hi."]), preset="karaoke")

    def test_config_overrides_preset(self, sample_words):
        cfg = PRESET_FOLLOW_ALONG.with_overrides(merge_short_segments=False)
        assert segment_transcript(sample_words, preset="karaoke", config=cfg)["timeline"]


class TestProperties:

    @pytest.mark.parametrize("cfg", [
        PRESET_FOLLOW_ALONG,
        PRESET_LONG_FORM,
        PRESET_FOLLOW_ALONG.with_overrides(merge_short_segments=False),
        PRESET_FOLLOW_ALONG.with_overrides(min_words_per_segment=2, preferred_words_per_segment=4,
                                           max_words_per_segment=6),
    ])
    def test_completeness_and_bounds(self, cfg):
        words = _corpus_words()
        segments = build_segments(words, "en", cfg)
        flat = [w.text for s in segments for w in s.words]
        assert flat == [w.text for w in normalize_tokens(words)]
        assert all(len(s) >= 1 for s in segments)
        assert all(len(s) <= cfg.hard_max_words for s in segments)

    def test_segments_never_span_sentences(self):
        segments = build_segments(_corpus_words(), "en", PRESET_FOLLOW_ALONG)
        for segment in segments:
            assert not any(w.is_sentence_end for w in segment.words[:-1])

    def test_deterministic(self):
        words = _corpus_words()
        first = json.dumps(segment_transcript(words))
        second = json.dumps(segment_transcript(words))
        assert first == second

    def test_concurrent_presets_independent(self):
        words = _corpus_words()
        expected = {
            "follow_along": segment_transcript(words, preset="follow_along"),
            "long_form": segment_transcript(words, preset="long_form"),
        }
        jobs = ["follow_along", "long_form"] * 4
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda p: (p, segment_transcript(words, preset=p)), jobs))
        for preset, result in results:
            assert result == expected[preset]

    def test_non_english_still_segments(self):
        words = make_words("Das ist z.B. gut. Wir gehen jetzt nach Hause, weil es spät ist.".split())
        result = segment_transcript(words, language="de")
        assert _flatten(result) == [w.text for w in words]
