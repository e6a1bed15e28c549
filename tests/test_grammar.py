"""Tests for tag structure validation and repair."""

import pytest

from ratemyfit.extraction.grammar import (
    TagStructureRules,
    enforce_tag_grammar,
    format_tag_name,
    validate_tag_structure,
)
from ratemyfit.vocabulary import is_clothing_word

SAMPLE_TAGS = [
    "white cardigan",
    "Black Leather Jacket",
    "pairing of jeans",
    "nice outfit",
    "the choice",
    "  dark   JEANS ",
    "a pair of boots with laces",
    "",
    "jacket, coat and scarf",
    "contrast tones",
]


def test_valid_tag_is_title_cased() -> None:
    result = validate_tag_structure("white cardigan")
    assert result.is_valid
    assert result.errors == []
    assert enforce_tag_grammar("white cardigan") == "White Cardigan"


def test_long_tag_is_repaired_to_words_ending_at_noun() -> None:
    result = validate_tag_structure("Black Leather Jacket")
    assert not result.is_valid
    assert result.corrected_tag == "Leather Jacket"


def test_forbidden_words_are_stripped() -> None:
    assert enforce_tag_grammar("pairing of jeans") == "Jeans"


def test_tag_without_garment_is_discarded() -> None:
    result = validate_tag_structure("nice outfit")
    assert not result.is_valid
    assert result.corrected_tag is None
    assert enforce_tag_grammar("nice outfit") is None
    assert enforce_tag_grammar("harvest festival") is None
    assert enforce_tag_grammar("address book") is None


def test_non_string_input_does_not_raise() -> None:
    result = validate_tag_structure(None)
    assert not result.is_valid


@pytest.mark.parametrize("tag", SAMPLE_TAGS)
def test_enforced_tags_satisfy_rules_and_are_idempotent(tag) -> None:
    once = enforce_tag_grammar(tag)
    if once is None:
        return
    words = once.split()
    assert len(words) <= 2
    assert any(is_clothing_word(w) for w in words)
    assert enforce_tag_grammar(once) == once


def test_custom_rules_allow_longer_tags() -> None:
    rules = TagStructureRules(max_words=3)
    assert enforce_tag_grammar("black leather jacket", rules) == "Black Leather Jacket"


def test_format_tag_name_uses_last_words() -> None:
    assert format_tag_name("Light Blue", "Slim Jeans") == "Blue Jeans"
    assert format_tag_name(None, "coat") == "Coat"
    assert format_tag_name("jacket", "jacket") == "Jacket"
