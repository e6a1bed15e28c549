"""Shared in-memory fakes for the Supabase store and the OpenAI client."""

import copy
from types import SimpleNamespace
from typing import Optional

import pytest

from ratemyfit.errors import SourceUnavailableError
from ratemyfit.models import (
    CatalogItem,
    ExtractionResponse,
    WardrobeEntry,
    WhitelistEntry,
    dump_extracted_items,
)


class FakeQuery:
    """Chainable stand-in for a supabase-py query builder."""

    def __init__(self, client: "FakeSupabaseClient", table: str):
        self.client = client
        self.table = table
        self.calls: list[tuple] = []

    def __getattr__(self, name):
        if name == "not_":
            self.calls.append(("not_",))
            return self

        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    def execute(self):
        if self.client.error:
            raise RuntimeError(self.client.error)
        return SimpleNamespace(data=self.client.rows.get(self.table, []))


class FakeSupabaseClient:
    def __init__(self, rows: Optional[dict] = None, error: Optional[str] = None):
        self.rows = rows or {}
        self.error = error
        self.queries: list[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query


class FakeStore:
    """In-memory SupabaseStore with per-source failure switches."""

    def __init__(
        self,
        whitelist: Optional[list[WhitelistEntry]] = None,
        catalog: Optional[dict[str, list[CatalogItem]]] = None,
        entries: Optional[dict[str, WardrobeEntry]] = None,
        taxonomy: Optional[list[dict]] = None,
        fail: tuple = (),
        raw_items: Optional[dict[str, list]] = None,
        fail_message: str = "connection refused",
    ):
        self.whitelist = whitelist or []
        self.catalog = catalog or {}
        self.entries = entries or {}
        self.taxonomy = taxonomy or []
        self.fail = set(fail)
        self.fail_message = fail_message
        self.raw_items = raw_items or {}
        self.searches: list[tuple] = []
        self.writes: list[tuple] = []
        self.row_writes: list[tuple] = []
        self.upserted: list[dict] = []

    def _check(self, source: str) -> None:
        if source in self.fail:
            raise SourceUnavailableError(source, self.fail_message)

    def fetch_whitelist(self):
        self._check("whitelist")
        return list(self.whitelist)

    def fetch_primary_taxonomy(self, limit: int = 1000):
        self._check("taxonomy")
        return list(self.taxonomy)

    def upsert_whitelist(self, rows):
        self._check("upsert")
        self.upserted.extend(rows)
        return len(rows)

    def search_catalog(self, term, gender=None, limit=20):
        self._check("catalog")
        self.searches.append((term, gender, limit))
        return list(self.catalog.get(term, []))[:limit]

    def fetch_wardrobe_entry(self, entry_id):
        self._check("wardrobe")
        return self.entries.get(entry_id)

    def list_wardrobe_entries(self, limit=None):
        self._check("wardrobe")
        entries = list(self.entries.values())
        return entries[:limit] if limit else entries

    def update_extracted_items(self, entry_id, items):
        self._check("write")
        self.writes.append((entry_id, list(items)))
        if entry_id in self.raw_items:
            self.raw_items[entry_id] = dump_extracted_items(items)
        if entry_id in self.entries:
            self.entries[entry_id] = self.entries[entry_id].model_copy(
                update={"extracted_clothing_items": list(items)}
            )

    def fetch_raw_extracted_items(self, entry_id):
        self._check("wardrobe")
        if entry_id in self.raw_items:
            return copy.deepcopy(self.raw_items[entry_id])
        if entry_id in self.entries:
            return dump_extracted_items(self.entries[entry_id].extracted_clothing_items)
        return None

    def write_extracted_rows(self, entry_id, rows):
        self._check("write")
        self.row_writes.append((entry_id, copy.deepcopy(rows)))
        self.raw_items[entry_id] = copy.deepcopy(rows)


class FakeAIClient:
    """Returns canned text from generate / generate_with_image."""

    def __init__(self, text: str = ""):
        self.text = text
        self.calls: list[dict] = []
        self.closed = False

    async def generate(self, prompt, model=None, system=None, temperature=None, max_tokens=None):
        self.calls.append({"prompt": prompt, "temperature": temperature, "max_tokens": max_tokens})
        return self.text

    async def generate_with_image(
        self, prompt, image, model=None, system=None, temperature=None, max_tokens=None
    ):
        self.calls.append(
            {
                "prompt": prompt,
                "image": image,
                "system": system,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        return self.text

    async def close(self):
        self.closed = True


class FakeExtractor:
    """AI extraction adapter returning a fixed response."""

    def __init__(self, response: Optional[ExtractionResponse] = None):
        self.response = response or ExtractionResponse(success=False, error="No valid items found")
        self.calls: list[tuple] = []

    async def extract(self, feedback, suggestions=None, whitelist=None):
        self.calls.append((feedback, suggestions, whitelist))
        return self.response

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


SCENARIO_TEXT = "You should try a white cardigan and pair it with dark jeans."


@pytest.fixture
def garment_whitelist() -> list[WhitelistEntry]:
    return [
        WhitelistEntry(item_name="cardigan", category="outerwear", style_descriptors=["chunky"]),
        WhitelistEntry(item_name="jeans", category="bottoms", common_materials=["denim"]),
        WhitelistEntry(item_name="jacket", category="outerwear"),
        WhitelistEntry(item_name="denim jacket", category="outerwear"),
    ]


@pytest.fixture
def fake_store(garment_whitelist) -> FakeStore:
    return FakeStore(whitelist=garment_whitelist)
