"""Tests for the spaCy-backed English phrase chunker."""

import pytest

from readalong import meaning_groups
from readalong.meaning_groups import (
    MAX_GROUP_WORDS,
    MeaningGroup,
    _fuse_overlapping,
    detect_meaning_groups,
)


def _spans(tokens, language="en"):
    return [(g.start, g.end) for g in detect_meaning_groups(tokens, language)]


class TestMatchers:

    def test_verb_chain_and_infinitive(self):
        tokens = ["I", "have", "been", "trying", "to", "figure", "it", "out."]
        groups = detect_meaning_groups(tokens, "en")
        assert [(g.start, g.end, g.kind) for g in groups] == [
            (1, 4, "verb-chain"),
            (4, 6, "infinitive"),
        ]

    def test_idiom_wins_over_equal_prepositional_phrase(self):
        tokens = ["We", "did", "it", "at", "the", "same", "time."]
        groups = detect_meaning_groups(tokens, "en")
        assert [(g.start, g.end, g.kind) for g in groups] == [(3, 7, "idiom")]

    def test_prepositional_phrase(self):
        assert _spans(["He", "stayed", "in", "the", "house,", "then", "left."]) == [(2, 5)]

    def test_negated_contraction_fuses_with_idiom(self):
        # "wasn't bad" + "bad enough." become one unit
        assert _spans(["The", "movie", "wasn't", "bad", "enough."]) == [(2, 5)]

    def test_phrasal_verb(self):
        assert _spans(["Please", "pick", "up", "the", "phone."]) == [(1, 3)]

    def test_adverb_stays_inside_verb_chain(self):
        tokens = "The soup was extremely hot and we waited.".split()
        groups = detect_meaning_groups(tokens, "en")
        assert (2, 5, "verb-chain") in [(g.start, g.end, g.kind) for g in groups]

    def test_degree_adverb_binds_to_adjective(self):
        spans = _spans("The house is quite large and very cold in winter.".split())
        assert (2, 5) in spans
        assert (6, 8) in spans


class TestBoundaries:

    def test_group_never_extends_past_punctuation(self):
        spans = _spans(["I", "want", "to,", "figure", "things"])
        assert all(not (start <= 2 < end - 1) for start, end in spans)

    def test_title_period_does_not_stop_a_group(self):
        assert (2, 5) in _spans(["She", "spoke", "to", "Mr.", "Smith."])

    def test_groups_are_sorted_and_disjoint(self):
        tokens = ["She", "has", "been", "trying", "to", "pick", "up", "the", "pieces", "of", "the", "vase."]
        groups = detect_meaning_groups(tokens, "en")
        for a, b in zip(groups, groups[1:]):
            assert a.end <= b.start
        assert all(2 <= len(g) <= MAX_GROUP_WORDS for g in groups)

    def test_overlong_fusion_keeps_longer_span(self):
        fused = _fuse_overlapping([MeaningGroup(0, 4, "a"), MeaningGroup(3, 8, "b")])
        assert fused == [MeaningGroup(3, 8, "b")]

    def test_short_overlap_fuses(self):
        fused = _fuse_overlapping([MeaningGroup(0, 3, "a"), MeaningGroup(2, 5, "b")])
        assert fused == [MeaningGroup(0, 5, "a")]


class TestLanguages:

    def test_other_languages_have_no_groups(self):
        assert _spans(["ich", "habe", "es", "gemacht."], "de") == []

    def test_regional_english(self):
        assert _spans(["The", "movie", "wasn't", "bad", "enough."], "en-GB") == [(2, 5)]

    def test_empty_tokens(self):
        assert detect_meaning_groups([], "en") == []


class TestPipelineLoading:

    def test_missing_model_is_an_error(self, monkeypatch):
        monkeypatch.setattr(meaning_groups, "_pipeline", None)
        monkeypatch.setattr(meaning_groups, "_idiom_matcher", None)
        monkeypatch.setattr(meaning_groups, "SPACY_MODEL", "xx_readalong_missing_model")
        with pytest.raises(RuntimeError, match="xx_readalong_missing_model"):
            detect_meaning_groups(["It", "is", "fine."], "en")

    def test_other_languages_never_load_the_model(self, monkeypatch):
        monkeypatch.setattr(meaning_groups, "_pipeline", None)
        monkeypatch.setattr(meaning_groups, "_idiom_matcher", None)
        monkeypatch.setattr(meaning_groups, "SPACY_MODEL", "xx_readalong_missing_model")
        assert detect_meaning_groups(["Das", "ist", "gut."], "de") == []
