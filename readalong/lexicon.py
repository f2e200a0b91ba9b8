"""Closed word lists and punctuation tables used by the break heuristics.

WHY: Break decisions depend on a handful of linguistic facts — which
punctuation ends a sentence, which "words." are abbreviations, which
function words make poor break points. Keeping these as plain data (not
buried in logic) lets them be extended per language without touching the
scoring code.

HOW: Module-level frozensets and dicts. abbreviations_for() and titles_for()
union the common lists with the per-language extras for a BCP-47 code.

RULES:
- All entries are lowercase and stored without their trailing period.
- Titles ("Mr.", "Dr.") are always abbreviations. Other abbreviations
  ("etc.", "p.m.") only count when the next word does not start a new
  sentence (see enricher).
- PUNCTUATION_WEIGHTS ranks sentence terminators > semicolon > comma > colon
  > dashes; anything missing from the table weighs 0.
- The ellipsis is heavy punctuation but NOT a sentence terminator.
- Only English has clause-level word lists; other languages rely on
  punctuation and pauses.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional

# Honorifics that precede a name; a following capital letter is expected.
TITLE_ABBREVIATIONS: FrozenSet[str] = frozenset({
    "mr", "mrs", "ms", "dr", "prof", "sr", "jr", "st", "mt", "gen", "col", "capt", "rev",
})

# Abbreviations that end with a period but usually do not end a sentence.
COMMON_ABBREVIATIONS: FrozenSet[str] = TITLE_ABBREVIATIONS | frozenset({
    "esq",
    # Time and dates
    "am", "pm", "a.m", "p.m", "bc", "ad", "bce", "ce",
    # Locations
    "us", "usa", "uk", "u.s", "u.s.a", "u.k",
    # Common abbreviations
    "etc", "vs", "v", "e.g", "i.e", "ex", "inc", "ltd", "corp", "co",
    "ave", "blvd", "rd", "ct", "ln", "pl", "pkwy",
    # Academic
    "ph.d", "m.d", "b.a", "m.a", "b.s", "m.s",
    # Measurements
    "ft", "in", "lb", "oz", "kg", "g", "mg", "ml", "l",
    # Technical
    "ca", "approx", "max", "min",
})

LANGUAGE_TITLES: Dict[str, FrozenSet[str]] = {
    "de": frozenset({"hr", "fr", "dr", "prof"}),
    "fr": frozenset({"m", "mme", "mlle", "me"}),
    "es": frozenset({"sr", "sra", "srta", "dr", "dra"}),
    "nl": frozenset({"dhr", "mevr", "mr", "dr"}),
}

LANGUAGE_ABBREVIATIONS: Dict[str, FrozenSet[str]] = {
    "de": frozenset({"z.b", "usw", "bzw", "nr", "evtl", "ggf", "u.a", "d.h"}),
    "fr": frozenset({"p.ex", "cf", "env", "av", "apr", "j.-c"}),
    "es": frozenset({"ud", "uds", "p.ej", "pág", "aprox"}),
    "nl": frozenset({"bijv", "enz", "o.a", "d.w.z"}),
}

# Function words that bridge into the next word; a pause after them is
# usually hesitation, not a phrase boundary.
NO_BREAK_WORDS: FrozenSet[str] = frozenset({
    # Articles
    "a", "an", "the",
    # Short prepositions that attach to the following noun
    "of", "to", "in", "on", "at", "for", "by", "with", "from", "about",
    # Possessives
    "my", "your", "his", "her", "its", "our", "their",
    # Conjunctions linking close items
    "and", "or", "nor",
})

RELATIVE_PRONOUNS: FrozenSet[str] = frozenset({"who", "which", "that", "whom", "whose"})

QUESTION_WORDS: FrozenSet[str] = frozenset({"what", "how", "why", "when", "where"})

MAIN_CLAUSE_STARTERS: FrozenSet[str] = frozenset({
    "i", "you", "he", "she", "it", "we", "they",
    "this", "that", "these", "those",
})

PUNCTUATION_WEIGHTS: Dict[str, int] = {
    # Sentence endings
    ".": 10, "!": 10, "?": 10,
    "。": 10, "！": 10, "？": 10,
    "…": 10,
    # Clauses
    ";": 6, "；": 6,
    ",": 5, "，": 5, "、": 5,
    # Phrases
    ":": 4, "：": 4,
    "—": 3, "–": 3,
    "-": 2,
}

SENTENCE_TERMINATORS: FrozenSet[str] = frozenset({".", "!", "?", "。", "！", "？"})

# Weight at or above which punctuation counts as a heavy clause boundary.
HEAVY_PUNCTUATION_WEIGHT = 6


def primary_subtag(language: Optional[str]) -> str:
    """Return the lowercase primary subtag of a BCP-47 code ("en-US" -> "en")."""
    if not language:
        return ""
    return language.replace("_", "-").split("-", 1)[0].lower()


def is_english(language: Optional[str]) -> bool:
    return primary_subtag(language) == "en"


def titles_for(language: Optional[str]) -> FrozenSet[str]:
    """Return the honorific abbreviations for a language."""
    extras = LANGUAGE_TITLES.get(primary_subtag(language))
    if extras is None:
        return TITLE_ABBREVIATIONS
    return TITLE_ABBREVIATIONS | extras


def abbreviations_for(language: Optional[str]) -> FrozenSet[str]:
    """Return the full abbreviation set for a language.

    Every language gets COMMON_ABBREVIATIONS; known languages add their own
    titles and abbreviations on top.
    """
    code = primary_subtag(language)
    return (
        COMMON_ABBREVIATIONS
        | LANGUAGE_TITLES.get(code, frozenset())
        | LANGUAGE_ABBREVIATIONS.get(code, frozenset())
    )
