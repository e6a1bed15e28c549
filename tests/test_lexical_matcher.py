"""Tests for candidate phrase extraction."""

from ratemyfit.extraction.lexical_matcher import extract_candidates

from conftest import SCENARIO_TEXT


def test_scenario_sentence_yields_cardigan_and_jeans() -> None:
    """Verb and pair-with patterns capture the descriptor with the noun."""

    assert extract_candidates(SCENARIO_TEXT) == ["white cardigan", "dark jeans"]


def test_empty_or_unmatched_text_gives_no_candidates() -> None:
    assert extract_candidates("") == []
    assert extract_candidates("   ") == []
    assert extract_candidates("Great energy and confident posture overall.") == []


def test_output_is_deterministic_and_deduplicated() -> None:
    text = "Wear a navy blazer. A navy blazer would also suit loafers."
    first = extract_candidates(text)
    assert first == extract_candidates(text)
    assert first.count("navy blazer") == 1
    assert "loafers" in first


def test_bare_noun_skipped_when_already_covered() -> None:
    """'jeans' alone is not reported once 'dark jeans' was found."""

    candidates = extract_candidates("Consider dark jeans; the jeans you have are too light.")
    assert candidates == ["dark jeans"]


def test_descriptor_stopwords_are_trimmed() -> None:
    candidates = extract_candidates("Try some new sneakers with this look.")
    assert candidates[0] == "sneakers"
