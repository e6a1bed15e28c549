"""Tests for the AI clothing extraction adapter (no network)."""

import asyncio

import pytest

from ratemyfit.ai.clothing_extractor import (
    ClothingExtractor,
    build_extraction_prompt,
    parse_phrase_array,
    validate_ai_phrase,
)
from ratemyfit.errors import MalformedResponseError

from conftest import SCENARIO_TEXT, FakeAIClient


def test_valid_phrases_become_ai_items(garment_whitelist) -> None:
    client = FakeAIClient(
        '```json\n["White Cardigan", "Dark Jeans", "pairing of jeans", "Blue Denim Jacket", "Sunglasses"]\n```'
    )

    async def run():
        async with ClothingExtractor(ai_client=client) as extractor:
            return await extractor.extract(SCENARIO_TEXT, ["Add loafers."], garment_whitelist)

    response = asyncio.run(run())

    assert response.success
    assert [item.name for item in response.items] == ["White Cardigan", "Dark Jeans"]
    assert all(item.source == "ai" and item.confidence == 0.95 for item in response.items)
    assert response.items[0].category == "outerwear"
    assert response.items[0].descriptors == ["white"]
    assert "Add loafers." in client.calls[0]["prompt"]
    assert client.calls[0]["temperature"] == 0.1
    assert not client.closed


@pytest.mark.parametrize(
    "reply",
    ["", "I found a cardigan and some jeans.", "[not json", '{"items": []}', "[]"],
)
def test_bad_replies_are_reported_not_raised(reply, garment_whitelist) -> None:
    extractor = ClothingExtractor(ai_client=FakeAIClient(reply))

    response = asyncio.run(extractor.extract(SCENARIO_TEXT, [], garment_whitelist))

    assert response.success is False
    assert response.error


def test_missing_api_key_is_reported(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    response = asyncio.run(ClothingExtractor().extract(SCENARIO_TEXT))

    assert response.success is False
    assert "OPENAI_API_KEY" in response.error


def test_empty_text_short_circuits() -> None:
    client = FakeAIClient('["Jeans"]')
    response = asyncio.run(ClothingExtractor(ai_client=client).extract("   ", []))
    assert response.success is False
    assert client.calls == []


def test_validate_ai_phrase_rules(garment_whitelist) -> None:
    assert validate_ai_phrase("black leather jacket", garment_whitelist) is None
    assert validate_ai_phrase("jeans with holes", garment_whitelist) is None
    assert validate_ai_phrase("red scarf", garment_whitelist) is None
    assert validate_ai_phrase("red scarf", []).category == "accessories"
    assert validate_ai_phrase("bold look", []) is None


def test_parse_phrase_array() -> None:
    assert parse_phrase_array('Sure: ["Jeans", "Coat"] done') == ["Jeans", "Coat"]
    with pytest.raises(MalformedResponseError):
        parse_phrase_array("no array here")


def test_prompt_inlines_whitelist(garment_whitelist) -> None:
    prompt = build_extraction_prompt("nice jeans", garment_whitelist, max_items=4)
    assert '"name": "cardigan"' in prompt
    assert "at most 4 items" in prompt
    assert build_extraction_prompt("nice jeans", []).count("No whitelist is available") == 1
