"""Tests for item and analysis models."""

import pytest
from pydantic import ValidationError

from ratemyfit.models import (
    AIItem,
    CatalogMatchItem,
    ColorPalette,
    HybridItem,
    WhitelistEntry,
    dump_extracted_items,
    parse_extracted_items,
)


def test_parse_extracted_items_defaults_and_drops() -> None:
    """Legacy rows without a source are read as AI items; bad rows are dropped."""

    items = parse_extracted_items(
        [
            {"name": "Navy Blazer", "confidence": 0.9},
            {"name": "Blue Jeans", "source": "catalog", "confidence": 0.95, "brand": "Levi's"},
            {"name": "  ", "confidence": 0.9},
            {"name": "Coat", "confidence": 1.4},
            {"name": "Coat", "source": "telepathy", "confidence": 0.5},
            "Scarf",
            None,
        ]
    )

    assert [type(item) for item in items] == [AIItem, CatalogMatchItem]
    assert items[0].category == "outerwear"
    assert items[1].brand == "Levi's"
    assert parse_extracted_items(None) == []


def test_items_round_trip_through_storage() -> None:
    items = [
        HybridItem(name="White Cardigan", confidence=0.85, sources=["whitelist", "ai"]),
        AIItem(name="Dark  Jeans", descriptors="dark, ", confidence=0.95),
    ]

    dumped = dump_extracted_items(items)

    assert dumped[0]["sources"] == ["whitelist", "ai"]
    assert dumped[1]["name"] == "Dark Jeans"
    assert dumped[1]["descriptors"] == ["dark"]
    assert parse_extracted_items(dumped) == items


def test_unknown_category_falls_back_to_name() -> None:
    assert AIItem(name="Red Scarf", category="Stuff", confidence=0.5).category == "accessories"
    assert AIItem(name="Gizmo", confidence=0.5).category == "other"
    assert WhitelistEntry(item_name="Sneakers").category == "footwear"


def test_palette_must_be_eight_by_six_hex() -> None:
    row = ["#aabbcc"] * 6
    ColorPalette(colors=[row] * 8, explanation="ok")

    with pytest.raises(ValidationError):
        ColorPalette(colors=[row] * 7, explanation="short")
    with pytest.raises(ValidationError):
        ColorPalette(colors=[row[:5]] * 8, explanation="narrow")
    with pytest.raises(ValidationError):
        ColorPalette(colors=[["#abc"] * 6] * 8, explanation="bad hex")
