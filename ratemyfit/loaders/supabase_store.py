"""
Supabase store for reference data and extraction results.

Reads the curated whitelist, the primary taxonomy, the product catalog and
wardrobe entries; writes extracted tags back to wardrobe entries and synced
rows to the whitelist. Every query failure is raised as
SourceUnavailableError naming the table, so callers can treat that source as
empty and carry on.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from supabase import Client, create_client

from config.settings import SupabaseConfig
from ratemyfit.errors import SourceUnavailableError
from ratemyfit.models import CatalogItem, WardrobeEntry, WhitelistEntry, dump_extracted_items

console = Console()

WARDROBE_COLUMNS = (
    "id, feedback, suggestions, gender, feedback_mode, occasion_context, "
    "rating_score, extracted_clothing_items"
)

# PostgREST filter values cannot contain these characters unquoted
_FILTER_UNSAFE = str.maketrans({c: " " for c in ",(){}%*\"\\"})


def _filter_term(term: str) -> str:
    return " ".join(term.translate(_FILTER_UNSAFE).split())


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabaseStore:
    """
    Reference data store backed by Supabase.

    - fashion_whitelist -> curated garment names (validator, AI vocabulary)
    - catalog_items -> external product catalog (catalog matcher)
    - primary_fashion_taxonomy -> source rows for the whitelist sync
    - wardrobe_items -> saved outfits and their extracted tags
    """

    def __init__(
        self,
        config: Optional[SupabaseConfig] = None,
        client: Optional[Client] = None,
    ):
        """
        Initialize the store.

        Args:
            config: Connection details and table names
            client: Pre-built Supabase client (tests pass a fake)

        Raises:
            ValueError: if no client is given and credentials are missing
        """
        self.config = config or SupabaseConfig()
        if client is None:
            url, key = self.config.require_credentials()
            client = create_client(url, key)
        self.client = client

    # =========================================================================
    # WHITELIST / TAXONOMY
    # =========================================================================

    def fetch_whitelist(self) -> list[WhitelistEntry]:
        """All whitelist entries, ordered by category then item_name."""
        table = self.config.whitelist_table
        try:
            result = (
                self.client.table(table)
                .select("item_name, category, style_descriptors, common_materials")
                .order("category")
                .order("item_name")
                .execute()
            )
        except Exception as e:
            raise SourceUnavailableError(table, str(e)) from e

        entries = []
        for row in result.data or []:
            try:
                entries.append(WhitelistEntry.model_validate(row))
            except ValidationError:
                console.print(f"[dim]Skipping invalid whitelist row: {escape(repr(row.get('item_name')))}[/dim]")
        return entries

    def fetch_primary_taxonomy(self, limit: int = 1000) -> list[dict]:
        """Active taxonomy rows ordered by priority_rank then item_name."""
        table = self.config.taxonomy_table
        try:
            result = (
                self.client.table(table)
                .select("*")
                .eq("is_active", True)
                .order("priority_rank")
                .order("item_name")
                .limit(limit)
                .execute()
            )
        except Exception as e:
            raise SourceUnavailableError(table, str(e)) from e
        return result.data or []

    def upsert_whitelist(self, rows: list[dict]) -> int:
        """Upsert whitelist rows keyed by item_name; returns rows written."""
        if not rows:
            return 0
        table = self.config.whitelist_table
        try:
            self.client.table(table).upsert(rows, on_conflict="item_name").execute()
        except Exception as e:
            raise SourceUnavailableError(table, str(e)) from e
        return len(rows)

    # =========================================================================
    # CATALOG
    # =========================================================================

    def search_catalog(
        self, term: str, gender: Optional[str] = None, limit: int = 20
    ) -> list[CatalogItem]:
        """
        Search catalog products by name, tags or description.

        Args:
            term: Garment noun or phrase
            gender: "male" / "female"; rows with no gender always match
            limit: Maximum rows returned

        Returns:
            Matching products (may be empty)
        """
        term = _filter_term(term)
        if not term:
            return []
        table = self.config.catalog_table
        try:
            query = (
                self.client.table(table)
                .select("*")
                .or_(
                    f"normalized_name.ilike.%{term}%,"
                    f'tags.cs.{{"{term}"}},'
                    f"product_name.ilike.%{term}%,"
                    f"description.ilike.%{term}%"
                )
            )
            if gender:
                query = query.or_(f"gender.ilike.%{_filter_term(gender)}%,gender.is.null")
            result = query.limit(limit).execute()
        except Exception as e:
            raise SourceUnavailableError(table, str(e)) from e

        products = []
        for row in result.data or []:
            try:
                products.append(CatalogItem.model_validate(row))
            except ValidationError:
                continue
        return products

    # =========================================================================
    # WARDROBE
    # =========================================================================

    def fetch_wardrobe_entry(self, entry_id: str) -> Optional[WardrobeEntry]:
        """A single wardrobe entry, or None if it does not exist."""
        table = self.config.wardrobe_table
        try:
            result = (
                self.client.table(table)
                .select(WARDROBE_COLUMNS)
                .eq("id", entry_id)
                .execute()
            )
        except Exception as e:
            raise SourceUnavailableError(table, str(e)) from e
        if not result.data:
            return None
        return WardrobeEntry.model_validate(result.data[0])

    def list_wardrobe_entries(self, limit: Optional[int] = None) -> list[WardrobeEntry]:
        """Wardrobe entries that have feedback, newest first."""
        table = self.config.wardrobe_table
        try:
            query = (
                self.client.table(table)
                .select(WARDROBE_COLUMNS)
                .not_.is_("feedback", "null")
                .order("created_at", desc=True)
            )
            if limit:
                query = query.limit(limit)
            result = query.execute()
        except Exception as e:
            raise SourceUnavailableError(table, str(e)) from e
        return [WardrobeEntry.model_validate(row) for row in result.data or []]

    def fetch_raw_extracted_items(self, entry_id: str) -> Optional[list]:
        """
        An entry's extracted_clothing_items exactly as stored.

        Rows are not validated, so positions match what the user sees and
        keys this package does not model survive a rewrite.

        Returns:
            The stored array ([] if empty or not an array), or None if the
            entry does not exist
        """
        table = self.config.wardrobe_table
        try:
            result = (
                self.client.table(table)
                .select("id, extracted_clothing_items")
                .eq("id", entry_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SourceUnavailableError(table, str(e)) from e
        if not result.data:
            return None
        raw = result.data[0].get("extracted_clothing_items")
        return list(raw) if isinstance(raw, list) else []

    def update_extracted_items(self, entry_id: str, items: list) -> None:
        """Replace an entry's extracted_clothing_items (last write wins)."""
        self.write_extracted_rows(entry_id, dump_extracted_items(items))

    def write_extracted_rows(self, entry_id: str, rows: list) -> None:
        """Replace an entry's extracted_clothing_items with raw JSON rows."""
        table = self.config.wardrobe_table
        try:
            (
                self.client.table(table)
                .update(
                    {
                        "extracted_clothing_items": rows,
                        "updated_at": _utc_now(),
                    }
                )
                .eq("id", entry_id)
                .execute()
            )
        except Exception as e:
            raise SourceUnavailableError(table, str(e)) from e
