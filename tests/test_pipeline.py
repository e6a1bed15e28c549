"""End-to-end tests for the extraction pipeline against in-memory sources."""

import asyncio

import pytest

from ratemyfit.models import AIItem, CatalogItem, ExtractionResponse, HybridItem, WardrobeEntry
from ratemyfit.pipeline import ClothingExtractionPipeline, print_result

from conftest import SCENARIO_TEXT, FakeExtractor, FakeStore


def _run(pipeline: ClothingExtractionPipeline, **kwargs):
    async def run():
        async with pipeline:
            return await pipeline.extract_from_text(SCENARIO_TEXT, **kwargs)

    return asyncio.run(run())


def _entries(*ids: str) -> dict:
    return {i: WardrobeEntry(id=i, feedback=SCENARIO_TEXT, suggestions=[]) for i in ids}


def test_basic_strategy_scenario(fake_store) -> None:
    """Lexical candidates validated against the whitelist."""

    result = _run(ClothingExtractionPipeline(fake_store), strategy="basic")

    assert [item.name for item in result.items] == ["White Cardigan", "Dark Jeans"]
    assert [item.category for item in result.items] == ["outerwear", "bottoms"]
    assert all(item.source == "whitelist" for item in result.items)
    assert all(item.confidence == pytest.approx(0.8) for item in result.items)
    assert result.candidates == ["white cardigan", "dark jeans"]
    assert result.source_counts == {"whitelist": 2}
    assert result.failed_sources == []
    assert fake_store.searches == []


def test_hybrid_merges_ai_duplicate(garment_whitelist) -> None:
    store = FakeStore(whitelist=garment_whitelist)
    extractor = FakeExtractor(
        ExtractionResponse(
            success=True,
            items=[AIItem(name="White Cardigan", confidence=0.95, category="outerwear")],
        )
    )

    result = _run(ClothingExtractionPipeline(store, extractor=extractor), strategy="hybrid")

    first = result.items[0]
    assert isinstance(first, HybridItem)
    assert first.name == "White Cardigan"
    assert first.confidence == pytest.approx(0.85)
    assert [s.value for s in first.sources] == ["whitelist", "ai"]
    assert result.items[1].name == "Dark Jeans"
    assert result.ai_success
    assert result.source_counts == {"whitelist": 2, "ai": 1}
    assert extractor.calls[0][0] == SCENARIO_TEXT


def test_enhanced_adds_catalog_match(garment_whitelist) -> None:
    store = FakeStore(
        whitelist=garment_whitelist,
        catalog={
            "jeans": [
                CatalogItem(product_name="Slim Fit Dark Jeans", color="Dark Blue", rating=4.5)
            ]
        },
    )

    result = _run(ClothingExtractionPipeline(store), strategy="enhanced")

    assert [item.name for item in result.items] == ["Blue Jeans", "White Cardigan", "Dark Jeans"]
    top = result.items[0]
    assert top.source == "catalog"
    assert top.category == "bottoms"
    assert top.confidence == pytest.approx(0.95)
    assert [term for term, _, _ in store.searches] == ["cardigan", "jeans"]


def test_without_whitelist_items_get_basic_confidence() -> None:
    result = _run(ClothingExtractionPipeline(FakeStore()), strategy="basic")

    assert [item.name for item in result.items] == ["White Cardigan", "Dark Jeans"]
    assert all(item.source == "regex" for item in result.items)
    assert all(item.confidence == pytest.approx(0.7) for item in result.items)


def test_no_store_runs_on_builtin_vocabulary() -> None:
    result = _run(ClothingExtractionPipeline(), strategy="basic")
    assert len(result.items) == 2
    assert result.failed_sources == []


@pytest.mark.parametrize(
    "fail, strategy",
    [(("whitelist",), "basic"), (("catalog",), "enhanced")],
)
def test_failing_source_is_reported_not_raised(garment_whitelist, fail, strategy) -> None:
    store = FakeStore(whitelist=garment_whitelist, fail=fail)

    result = _run(ClothingExtractionPipeline(store), strategy=strategy)

    assert result.failed_sources == list(fail)
    assert [item.name for item in result.items] == ["White Cardigan", "Dark Jeans"]


def test_bracketed_error_text_is_printed_literally(garment_whitelist, capsys) -> None:
    store = FakeStore(whitelist=garment_whitelist, fail=("whitelist",), fail_message="[/red] 502")

    result = _run(ClothingExtractionPipeline(store), strategy="basic")

    assert result.failed_sources == ["whitelist"]
    assert "[/red] 502" in capsys.readouterr().out


def test_ai_failure_is_reported(fake_store) -> None:
    extractor = FakeExtractor(ExtractionResponse(success=False, error="Request timed out"))

    result = _run(ClothingExtractionPipeline(fake_store, extractor=extractor), strategy="hybrid")

    assert result.failed_sources == ["ai"]
    assert not result.ai_success
    assert len(result.items) == 2


def test_ai_finding_nothing_is_not_a_failure(fake_store) -> None:
    result = _run(ClothingExtractionPipeline(fake_store, extractor=FakeExtractor()), strategy="hybrid")
    assert result.failed_sources == []


def test_max_items_truncates(fake_store) -> None:
    result = _run(ClothingExtractionPipeline(fake_store), strategy="basic", max_items=1)
    assert [item.name for item in result.items] == ["White Cardigan"]


def test_empty_text_gives_empty_result(fake_store) -> None:
    pipeline = ClothingExtractionPipeline(fake_store)
    result = asyncio.run(pipeline.extract_from_text("  ", [], strategy="basic"))
    assert result.items == []
    assert result.candidates == []


def test_unknown_strategy_raises(fake_store) -> None:
    with pytest.raises(ValueError):
        _run(ClothingExtractionPipeline(fake_store), strategy="turbo")


def test_extract_for_entry_writes_back(garment_whitelist) -> None:
    store = FakeStore(whitelist=garment_whitelist, entries=_entries("entry-1"))
    pipeline = ClothingExtractionPipeline(store)

    result = asyncio.run(pipeline.extract_for_entry("entry-1", write_back=True, strategy="basic"))

    assert result.persisted
    entry_id, items = store.writes[0]
    assert entry_id == "entry-1"
    assert [item.name for item in items] == ["White Cardigan", "Dark Jeans"]
    stored = store.entries["entry-1"].extracted_clothing_items
    assert [item.name for item in stored] == ["White Cardigan", "Dark Jeans"]


def test_extract_for_entry_write_failure(garment_whitelist) -> None:
    store = FakeStore(whitelist=garment_whitelist, entries=_entries("entry-1"), fail=("write",))

    result = asyncio.run(
        ClothingExtractionPipeline(store).extract_for_entry("entry-1", write_back=True, strategy="basic")
    )

    assert result is not None
    assert not result.persisted
    assert len(result.items) == 2


def test_extract_for_entry_missing_or_unreadable(fake_store) -> None:
    pipeline = ClothingExtractionPipeline(fake_store)
    assert asyncio.run(pipeline.extract_for_entry("nope", strategy="basic")) is None

    broken = ClothingExtractionPipeline(FakeStore(entries=_entries("a"), fail=("wardrobe",)))
    assert asyncio.run(broken.extract_for_entry("a", strategy="basic")) is None


def test_extract_for_entry_without_write_back(garment_whitelist) -> None:
    store = FakeStore(whitelist=garment_whitelist, entries=_entries("entry-1"))
    result = asyncio.run(
        ClothingExtractionPipeline(store).extract_for_entry("entry-1", write_back=False, strategy="basic")
    )
    assert not result.persisted
    assert store.writes == []


def test_backfill_summary(garment_whitelist) -> None:
    store = FakeStore(whitelist=garment_whitelist, entries=_entries("a", "b", "c"))

    summary = asyncio.run(ClothingExtractionPipeline(store).backfill(limit=2, strategy="basic"))

    assert summary == {"success": True, "processed": 2, "saved": 2, "failed": 0}
    assert [entry_id for entry_id, _ in store.writes] == ["a", "b"]


def test_backfill_counts_failed_writes(garment_whitelist) -> None:
    store = FakeStore(whitelist=garment_whitelist, entries=_entries("a", "b"), fail=("write",))

    summary = asyncio.run(ClothingExtractionPipeline(store).backfill(strategy="basic"))

    assert summary["saved"] == 0
    assert summary["failed"] == 2


def test_backfill_without_store() -> None:
    summary = asyncio.run(ClothingExtractionPipeline().backfill())
    assert summary["success"] is False


def test_print_result_renders(fake_store) -> None:
    result = _run(ClothingExtractionPipeline(fake_store), strategy="basic")
    print_result(result)
