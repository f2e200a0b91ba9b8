"""Phrase chunking for English meaning groups.

WHY: Learners read in meaning groups — "to figure out", "has been trying",
"at the same time". Splitting a segment inside such a unit makes the
highlighted chunk read as nonsense. The break detector needs to know where
these units start and end so it can defer breaks until the unit closes.

HOW: The words are joined into one text and run through a spaCy English
pipeline once. Matchers read the part-of-speech tags, dependency labels
and noun chunks of the spaCy tokens and return token spans. Each span is
projected back onto word indices through character offsets (spaCy splits
"wasn't" and "stopped," into several tokens; a word owns every token that
starts inside it). Candidate spans are then sorted and overlapping spans
fused, or, if fusing would produce an overlong group, the longer one kept.

RULES:
- A group spans at least 2 words and at most MAX_GROUP_WORDS.
- A group never extends past a word that ends in a punctuation token; such
  a word may only be the LAST word of a group. Hence groups never cross a
  sentence end. The period of "Mr." or "e.g." belongs to its token and does
  not count.
- English only. Other languages get no groups; punctuation and pauses
  carry the segmentation on their own.
- The spaCy model is a hard requirement for English. A missing model is a
  RuntimeError at first use, never a silent downgrade.
- Output is sorted by start index and non-overlapping.
"""

from __future__ import annotations

import bisect
import logging
import re
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import spacy
from spacy.language import Language
from spacy.matcher import PhraseMatcher
from spacy.tokens import Doc

from .lexicon import is_english

logger = logging.getLogger(__name__)

MAX_GROUP_WORDS = 6
SPACY_MODEL = "en_core_web_sm"

_TRAILING_PUNCT_RE = re.compile(r"[.,!?;:…。！？；：，、—–]+[\"'“”‘’)\]]*$")

_NEGATIONS = frozenset({"not", "n't", "never"})
_CHAIN_HEADS = frozenset({"VERB", "ADJ"})

# Fixed multiword expressions, matched case-insensitively on spaCy tokens.
IDIOMS: Sequence[str] = (
    "as well as",
    "in order to",
    "a lot of",
    "lots of",
    "at the same time",
    "in front of",
    "on the other hand",
    "as soon as",
    "as long as",
    "as far as",
    "kind of",
    "sort of",
    "each other",
    "one another",
    "according to",
    "because of",
    "instead of",
    "in spite of",
    "rather than",
    "more than",
    "less than",
    "at least",
    "at all",
    "of course",
    "by the way",
    "even though",
    "even if",
    "so that",
    "no longer",
    "as if",
    "bad enough",
    "good enough",
    "right now",
    "in fact",
    "for example",
    "for instance",
    "at first",
    "at last",
    "after all",
    "all of a sudden",
    "as a result",
    "in the end",
    "first of all",
)


@dataclass(frozen=True)
class MeaningGroup:
    """A phrase unit covering word indices [start, end)."""

    start: int
    end: int
    kind: str

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def last_index(self) -> int:
        return self.end - 1


# ---------------------------------------------------------------------------
# spaCy pipeline
# ---------------------------------------------------------------------------

_pipeline = None  # type: Optional[Language]
_idiom_matcher = None  # type: Optional[PhraseMatcher]
_pipeline_lock = threading.Lock()


def _get_pipeline() -> Tuple[Language, PhraseMatcher]:
    """Load the English pipeline and idiom matcher once per process.

    Callers hold _pipeline_lock.

    Raises:
        RuntimeError: If the spaCy model is not installed.
    """
    global _pipeline, _idiom_matcher
    if _pipeline is None or _idiom_matcher is None:
        try:
            nlp = spacy.load(SPACY_MODEL, disable=["ner", "lemmatizer"])
        except OSError as e:
            raise RuntimeError(
                "Failed to load spaCy model '{}': {}".format(SPACY_MODEL, e)
            ) from e
        matcher = PhraseMatcher(nlp.vocab, attr="LOWER")
        matcher.add("IDIOM", [nlp.make_doc(phrase) for phrase in IDIOMS])
        logger.debug("Loaded spaCy model %s (%s)", SPACY_MODEL, ", ".join(nlp.pipe_names))
        _idiom_matcher = matcher
        _pipeline = nlp
    return _pipeline, _idiom_matcher


# ---------------------------------------------------------------------------
# Matchers over spaCy tokens; each returns (start, end) token spans
# ---------------------------------------------------------------------------

TokenSpan = Tuple[int, int]


def _match_verb_chains(doc: Doc) -> List[TokenSpan]:
    # aux (+ aux | negation | adverb)* + verb or predicate adjective
    spans = []  # type: List[TokenSpan]
    for tok in doc:
        if tok.pos_ != "AUX" or (tok.i > 0 and doc[tok.i - 1].pos_ == "AUX"):
            continue
        j = tok.i + 1
        while j < len(doc) and (
            doc[j].pos_ in ("AUX", "ADV") or doc[j].lower_ in _NEGATIONS
        ):
            j += 1
        if j < len(doc) and doc[j].pos_ in _CHAIN_HEADS:
            spans.append((tok.i, j + 1))
    return spans


def _match_modifiers(doc: Doc) -> List[TokenSpan]:
    # "very cold", "extremely hot"
    return [
        (tok.i, tok.i + 2)
        for tok in doc
        if tok.pos_ == "ADV" and tok.dep_ == "advmod"
        and tok.head.i == tok.i + 1 and tok.head.pos_ == "ADJ"
    ]


def _match_infinitives(doc: Doc) -> List[TokenSpan]:
    spans = []  # type: List[TokenSpan]
    for tok in doc:
        if tok.tag_ != "TO" or tok.i + 1 >= len(doc):
            continue
        verb = doc[tok.i + 1]
        if verb.pos_ != "VERB":
            continue
        end = verb.i + 1
        if end < len(doc) and doc[end].dep_ == "prt" and doc[end].head.i == verb.i:
            end += 1
        spans.append((tok.i, end))
    return spans


def _match_phrasal_verbs(doc: Doc) -> List[TokenSpan]:
    return [
        (tok.i, tok.i + 2)
        for tok in doc
        if tok.pos_ == "VERB" and tok.i + 1 < len(doc)
        and doc[tok.i + 1].dep_ == "prt" and doc[tok.i + 1].head.i == tok.i
    ]


def _match_prepositional(doc: Doc) -> List[TokenSpan]:
    chunk_ends = {chunk.start: chunk.end for chunk in doc.noun_chunks}  # type: Dict[int, int]
    return [
        (tok.i, chunk_ends[tok.i + 1])
        for tok in doc
        if tok.dep_ == "prep" and tok.i + 1 in chunk_ends
    ]


_MATCHERS = (
    ("verb-chain", _match_verb_chains),
    ("infinitive", _match_infinitives),
    ("phrasal-verb", _match_phrasal_verbs),
    ("modifier", _match_modifiers),
    ("prepositional", _match_prepositional),
)  # type: Sequence[Tuple[str, Callable[[Doc], List[TokenSpan]]]]

_KIND_ORDER = {kind: rank for rank, kind in enumerate(["idiom"] + [k for k, _ in _MATCHERS])}


def _tag_phrases(text: str) -> Tuple[Doc, List[Tuple[str, TokenSpan]]]:
    """Parse ``text`` and collect (kind, token span) candidates."""
    # spaCy pipelines are not guaranteed thread-safe
    with _pipeline_lock:
        nlp, idiom_matcher = _get_pipeline()
        doc = nlp(text)
        found = [("idiom", (start, end)) for _, start, end in idiom_matcher(doc)]
        for kind, matcher in _MATCHERS:
            found.extend((kind, span) for span in matcher(doc))
    return doc, found


def _fuse_overlapping(groups: List[MeaningGroup]) -> List[MeaningGroup]:
    """Fuse overlapping spans; keep the longer span if fusing would be too long."""
    if len(groups) <= 1:
        return groups

    fused = []  # type: List[MeaningGroup]
    current = groups[0]
    for nxt in groups[1:]:
        if nxt.start < current.end:
            union_end = max(current.end, nxt.end)
            if union_end - current.start <= MAX_GROUP_WORDS:
                current = MeaningGroup(current.start, union_end, current.kind)
            elif len(nxt) > len(current):
                current = nxt
        else:
            fused.append(current)
            current = nxt
    fused.append(current)
    return fused


def detect_meaning_groups(tokens: Sequence[str], language: Optional[str]) -> List[MeaningGroup]:
    """Detect meaning groups in a token sequence.

    Args:
        tokens: Word texts in spoken order, punctuation still attached.
        language: BCP-47 code; only English produces groups.

    Returns:
        Non-overlapping MeaningGroup spans sorted by start index.

    Raises:
        RuntimeError: If the English spaCy model is not installed.
    """
    if not tokens or not is_english(language):
        return []

    texts = [t.strip() for t in tokens]
    offsets = []  # type: List[int]
    position = 0
    for text in texts:
        offsets.append(position)
        position += len(text) + 1

    doc, found = _tag_phrases(" ".join(texts))

    def word_of(token_index: int) -> int:
        return bisect.bisect_right(offsets, doc[token_index].idx) - 1

    # A word stops a group when it ends in a punctuation token; "Mr." and
    # "e.g." are single non-punctuation tokens.
    ends_in_punct = [False] * len(texts)
    for tok in doc:
        if tok.is_space or tok.is_quote:
            continue
        ends_in_punct[word_of(tok.i)] = tok.is_punct
    stops = [
        bool(_TRAILING_PUNCT_RE.search(t)) and ends_in_punct[k]
        for k, t in enumerate(texts)
    ]

    def closes_cleanly(start: int, end: int) -> bool:
        # Only the last word of a span may carry punctuation.
        return not any(stops[k] for k in range(start, end - 1))

    candidates = []  # type: List[MeaningGroup]
    for kind, (token_start, token_end) in found:
        start = word_of(token_start)
        end = word_of(token_end - 1) + 1
        if end - start < 2 or end - start > MAX_GROUP_WORDS:
            continue
        if closes_cleanly(start, end):
            candidates.append(MeaningGroup(start, end, kind))

    candidates.sort(key=lambda g: (g.start, -len(g), _KIND_ORDER[g.kind]))
    groups = _fuse_overlapping(candidates)
    logger.debug("Detected %d meaning groups in %d words", len(groups), len(texts))
    return groups
