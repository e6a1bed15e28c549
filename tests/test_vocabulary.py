"""Tests for the garment vocabulary lookups."""

from ratemyfit.vocabulary import (
    categorize_clothing_item,
    coerce_category,
    descriptive_words,
    find_garment_noun,
    is_clothing_word,
    normalize_phrase,
)


def test_layering_pieces_are_outerwear_not_tops() -> None:
    """Cardigans, hoodies and vests are checked before tops."""

    assert categorize_clothing_item("white cardigan") == "outerwear"
    assert categorize_clothing_item("grey hoodie") == "outerwear"
    assert categorize_clothing_item("knit vest") == "outerwear"
    assert categorize_clothing_item("striped shirt") == "tops"
    assert categorize_clothing_item("dark jeans") == "bottoms"


def test_unknown_phrase_is_other() -> None:
    assert categorize_clothing_item("confidence") == "other"
    assert categorize_clothing_item("") == "other"


def test_short_nouns_do_not_match_inside_words() -> None:
    """'that' must not be read as 'hat', nor 'investment' as 'vest'."""

    assert not is_clothing_word("that")
    assert not is_clothing_word("investment")
    assert not is_clothing_word("stop")
    assert is_clothing_word("hats")
    assert is_clothing_word("dresses")
    assert is_clothing_word("sweatshirt")


def test_words_ending_in_a_garment_noun_are_not_garments() -> None:
    for word in ("harvest", "invest", "address", "wheels", "outskirts", "turncoat"):
        assert not is_clothing_word(word), word
    assert categorize_clothing_item("harvest festival") == "other"
    assert is_clothing_word("raincoat")
    assert is_clothing_word("sundresses")
    assert categorize_clothing_item("puffer vest") == "outerwear"


def test_find_garment_noun_returns_head_noun() -> None:
    assert find_garment_noun("denim shirt jacket") == "jacket"
    assert find_garment_noun("bold choice") is None


def test_coerce_category_accepts_aliases_and_falls_back() -> None:
    assert coerce_category("Tops") == "tops"
    assert coerce_category("shoes") == "footwear"
    assert coerce_category("mystery", "leather boots") == "footwear"
    assert coerce_category(None, "wool scarf") == "accessories"


def test_descriptive_words_and_normalize() -> None:
    assert normalize_phrase("  Light   BLUE  ") == "light blue"
    assert descriptive_words("Slim black leather jacket") == ["slim", "black", "leather"]
