"""
Tag grammar rules.

A final tag is a short noun phrase: at most ``max_words`` words, none of them
forbidden filler, and at least one a recognized garment noun. Tags that break
a rule get one repair attempt (drop filler words, keep the words closest to
the garment noun); tags that still fail are discarded.

Everything here is pure and total: any input string produces a TagValidation,
and enforcing a tag twice gives the same result as enforcing it once.
"""

from dataclasses import dataclass, field
from typing import Optional

from ratemyfit.vocabulary import FORBIDDEN_TAG_WORDS, is_clothing_word, normalize_phrase


@dataclass(frozen=True)
class TagStructureRules:
    """Static rule set every accepted tag must satisfy."""

    max_words: int = 2
    forbidden_words: frozenset = FORBIDDEN_TAG_WORDS
    require_clothing_item: bool = True


DEFAULT_TAG_RULES = TagStructureRules()


@dataclass
class TagValidation:
    """Result of checking one tag."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    corrected_tag: Optional[str] = None


def _tokens(tag: str) -> list[str]:
    return [w.strip(".,;:!?\"'()") for w in normalize_phrase(tag).split() if w.strip(".,;:!?\"'()")]


def _check(words: list[str], rules: TagStructureRules) -> list[str]:
    errors = []
    if not words:
        return ["Tag is empty"]
    if len(words) > rules.max_words:
        errors.append(f"Tag has {len(words)} words (max {rules.max_words})")
    forbidden = [w for w in words if w in rules.forbidden_words]
    if forbidden:
        errors.append(f"Tag contains forbidden words: {', '.join(forbidden)}")
    if rules.require_clothing_item and not any(is_clothing_word(w) for w in words):
        errors.append("Tag does not contain a recognized clothing item")
    return errors


def _repair(words: list[str], rules: TagStructureRules) -> list[str]:
    """Drop forbidden words, then keep the window ending at the garment noun."""
    kept = [w for w in words if w not in rules.forbidden_words]
    if len(kept) <= rules.max_words:
        return kept

    noun_index = None
    for i in range(len(kept) - 1, -1, -1):
        if is_clothing_word(kept[i]):
            noun_index = i
            break

    if noun_index is None:
        return kept[: rules.max_words]
    start = max(0, noun_index - rules.max_words + 1)
    return kept[start : noun_index + 1]


def _title(words: list[str]) -> str:
    return " ".join(w.capitalize() for w in words)


def validate_tag_structure(
    tag: str, rules: Optional[TagStructureRules] = None
) -> TagValidation:
    """
    Validate a tag against the structure rules.

    Args:
        tag: Candidate tag text
        rules: Rule set (defaults to 2 words, standard forbidden words)

    Returns:
        TagValidation. When the tag is invalid but repairable,
        ``corrected_tag`` holds the repaired, title-cased tag.
    """
    rules = rules or DEFAULT_TAG_RULES
    if not isinstance(tag, str):
        return TagValidation(is_valid=False, errors=["Tag is not a string"])

    words = _tokens(tag)
    errors = _check(words, rules)
    if not errors:
        return TagValidation(is_valid=True)

    repaired = _repair(words, rules)
    if repaired and not _check(repaired, rules):
        return TagValidation(is_valid=False, errors=errors, corrected_tag=_title(repaired))
    return TagValidation(is_valid=False, errors=errors)


def enforce_tag_grammar(
    tag: str, rules: Optional[TagStructureRules] = None
) -> Optional[str]:
    """
    Return the canonical form of a tag, or None if it cannot be made valid.

    Canonical form is title-cased with single spaces ("White Cardigan").
    """
    result = validate_tag_structure(tag, rules)
    if result.is_valid:
        return _title(_tokens(tag))
    return result.corrected_tag


def format_tag_name(descriptor: Optional[str], item: str) -> str:
    """
    Build a tag from one descriptor and a garment noun.

    Only the last word of each part is used: ("Light Blue", "Slim Jeans")
    gives "Blue Jeans". A descriptor repeating the noun is ignored.
    """
    item_words = _tokens(item)
    descriptor_words = _tokens(descriptor or "")
    if not item_words:
        return _title(descriptor_words)
    if descriptor_words and descriptor_words[-1] not in item_words:
        return _title([descriptor_words[-1], item_words[-1]])
    return _title(item_words[-1:])
