"""Tests for even redistribution of very long sentences."""

from readalong.breaks import ScoreFactor
from readalong.even_split import (
    find_best_break_near_target,
    score_even_candidate,
    segment_long_sentence_evenly,
)
from readalong.presets import PRESET_FOLLOW_ALONG
from readalong.segmenter import segment_sentence

from conftest import enrich, filler

CFG = PRESET_FOLLOW_ALONG


class TestSegmentLongSentenceEvenly:

    def test_hundred_words_into_ten_even_chunks(self):
        cfg = CFG.with_overrides(preferred_words_per_segment=10)
        words = enrich(filler(100))
        segments = segment_sentence(words, words, 0, cfg)
        assert 9 <= len(segments) <= 11
        assert all(7 <= len(s) <= 13 for s in segments)
        assert [w for s in segments for w in s.words] == words

    def test_forty_words_with_follow_along(self):
        words = enrich(filler(40))
        segments = segment_long_sentence_evenly(words, CFG)
        # The full stop inside the last search window pulls the final boundary to the end
        assert [len(s) for s in segments] == [6, 6, 6, 6, 6, 10]

    def test_boundary_moves_to_nearby_comma(self):
        texts = ["word"] * 30
        texts[7] = "word,"
        segments = segment_long_sentence_evenly(enrich(texts), CFG)
        assert segments[0].last_word.text == "word,"
        assert [len(s) for s in segments] == [8, 6, 6, 6, 4]

    def test_avoids_function_word_at_target(self):
        texts = ["word"] * 30
        texts[5] = "the"
        segments = segment_long_sentence_evenly(enrich(texts), CFG)
        assert segments[0].last_word.text != "the"

    def test_every_word_kept(self):
        texts = ["word"] * 50
        texts[12] = "clause;"
        texts[30] = "pause"
        words = enrich(texts, gaps={30: 0.4})
        segments = segment_long_sentence_evenly(words, CFG)
        assert [w for s in segments for w in s.words] == words
        assert all(len(s) >= 2 for s in segments[:-1])
        assert all(len(s) <= CFG.hard_max_words for s in segments)

    def test_comma_before_last_word_does_not_strand_it(self):
        texts = ["word"] * 30
        for i in (9, 19, 28):
            texts[i] = "word,"
        segments = segment_long_sentence_evenly(enrich(texts), CFG)
        assert [len(s) for s in segments] == [10, 10, 6, 4]

    def test_empty(self):
        assert segment_long_sentence_evenly([], CFG) == []


class TestNearTargetScoring:

    def test_proximity(self):
        word = enrich(["word", "word"])[0]
        assert score_even_candidate(word, 0, 4, CFG).weight_of(ScoreFactor.TARGET_PROXIMITY) == 4
        assert not score_even_candidate(word, 4, 4, CFG).has(ScoreFactor.TARGET_PROXIMITY)

    def test_bad_break_word_penalty(self):
        the = enrich(["the", "word"])[0]
        assert score_even_candidate(the, 0, 4, CFG).weight_of(ScoreFactor.BAD_BREAK_WORD) == -5

    def test_punctuation_tripled(self):
        comma = enrich(["word,", "word"])[0]
        assert score_even_candidate(comma, 2, 4, CFG).weight_of(ScoreFactor.PUNCTUATION) == 15

    def test_target_wins_without_signals(self):
        words = enrich(["word"] * 20)
        assert find_best_break_near_target(words, 9, CFG) == 9

    def test_skips_boundary_leaving_one_word(self):
        texts = ["word"] * 12
        texts[10] = "word,"
        assert find_best_break_near_target(enrich(texts), 9, CFG) == 9
