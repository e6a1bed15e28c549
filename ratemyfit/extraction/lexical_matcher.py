"""
Lexical matcher: pulls candidate clothing phrases out of free text.

Patterns run in a fixed order and each one scans the text left to right,
so the output order is pattern order, then position in the text. Bare
garment nouns are only reported when no earlier candidate already covers
them.
"""

import re

from ratemyfit.vocabulary import COLORS, FITS, GARMENT_NOUNS, MATERIALS, normalize_phrase

# Leading words a descriptor slot can capture that are not descriptors
DESCRIPTOR_STOPWORDS = frozenset(
    {
        "also",
        "another",
        "more",
        "some",
        "new",
        "your",
        "my",
        "this",
        "that",
        "these",
        "those",
        "other",
        "nice",
        "good",
        "great",
        "wearing",
        "adding",
        "different",
        "simple",
        "pair",
        "few",
    }
)


def _alternation(words) -> str:
    # Longest first so "sweatshirt" wins over "shirt"
    return "|".join(re.escape(w) for w in sorted(words, key=lambda w: (-len(w), w)))


_NOUN = rf"(?:{_alternation(GARMENT_NOUNS)})(?:e?s)?"
_DESCRIPTOR = r"(?:[a-z][a-z'-]*\s+)?"
_ARTICLE = r"(?:(?:a|an|the|some|your|a\s+pair\s+of|some\s+new)\s+)?"
_PREFIX = _alternation(COLORS | MATERIALS | FITS)


# =============================================================================
# PATTERN TABLE
# =============================================================================

CANDIDATE_PATTERNS: list[tuple[str, re.Pattern]] = [
    (
        "verb_phrase",
        re.compile(
            rf"\b(?:try|add|wear|consider|opt\s+for|choose|go\s+with|switch\s+to|"
            rf"swap\s+in|layer)\s+{_ARTICLE}({_DESCRIPTOR}{_NOUN})\b"
        ),
    ),
    (
        "pair_with",
        re.compile(
            rf"\bpair(?:ed|ing)?\s+(?:(?:it|them|this|that|these|the\s+look)\s+)?"
            rf"with\s+{_ARTICLE}({_DESCRIPTOR}{_NOUN})\b"
        ),
    ),
    (
        "descriptor_noun",
        re.compile(rf"\b((?:{_PREFIX})\s+{_NOUN})\b"),
    ),
    (
        "bare_noun",
        re.compile(rf"\b({_NOUN})\b"),
    ),
]


def _clean_candidate(phrase: str) -> str:
    words = normalize_phrase(phrase).split()
    if len(words) > 1 and words[0] in DESCRIPTOR_STOPWORDS:
        words = words[1:]
    return " ".join(words)


def extract_candidates(text: str) -> list[str]:
    """
    Extract candidate clothing phrases from text.

    Args:
        text: Free text (feedback plus suggestions)

    Returns:
        Ordered, de-duplicated list of lowercase candidate phrases.
        Empty or unmatched input gives an empty list.
    """
    if not text or not text.strip():
        return []

    lowered = normalize_phrase(text)
    candidates: list[str] = []
    covered_words: set[str] = set()

    for name, pattern in CANDIDATE_PATTERNS:
        for match in pattern.finditer(lowered):
            candidate = _clean_candidate(match.group(1))
            if not candidate or candidate in candidates:
                continue
            if name == "bare_noun" and candidate in covered_words:
                continue
            candidates.append(candidate)
            covered_words.update(candidate.split())

    return candidates
