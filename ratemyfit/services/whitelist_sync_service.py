"""
Whitelist sync: refresh the fashion whitelist from the primary taxonomy.

Taxonomy rows are normalized (lowercase item names, categories coerced into
the fixed set, array fields split and lowercased). Rows that normalize to
the same item_name, or that already exist in the whitelist, have their
descriptor and material arrays merged rather than replaced.
"""

from typing import Any, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ratemyfit.errors import SourceUnavailableError
from ratemyfit.models import WhitelistEntry

console = Console()


def _merge_lists(*lists: list[str]) -> list[str]:
    """Union preserving first-seen order."""
    merged: list[str] = []
    for values in lists:
        for value in values:
            if value not in merged:
                merged.append(value)
    return merged


def taxonomy_row_to_entry(row: dict[str, Any]) -> Optional[WhitelistEntry]:
    """Normalize one taxonomy row; None if it has no usable item name."""
    try:
        return WhitelistEntry.model_validate(
            {
                "item_name": row.get("item_name") or "",
                "category": row.get("category"),
                "style_descriptors": row.get("style_descriptors"),
                "common_materials": row.get("common_materials"),
            }
        )
    except ValidationError:
        return None


def build_whitelist_rows(
    taxonomy_rows: list[dict[str, Any]],
    existing: Optional[list[WhitelistEntry]] = None,
) -> tuple[list[dict[str, Any]], int]:
    """
    Turn taxonomy rows into whitelist upsert rows.

    Args:
        taxonomy_rows: Active rows in priority order
        existing: Current whitelist, whose arrays are merged into the result

    Returns:
        (rows to upsert, number of taxonomy rows skipped)
    """
    current = {entry.item_name: entry for entry in existing or []}
    merged: dict[str, WhitelistEntry] = {}
    skipped = 0

    for row in taxonomy_rows:
        entry = taxonomy_row_to_entry(row)
        if entry is None:
            skipped += 1
            continue
        previous = merged.get(entry.item_name) or current.get(entry.item_name)
        if previous is not None:
            entry = previous.model_copy(
                update={
                    "style_descriptors": _merge_lists(
                        previous.style_descriptors, entry.style_descriptors
                    ),
                    "common_materials": _merge_lists(
                        previous.common_materials, entry.common_materials
                    ),
                }
            )
        merged[entry.item_name] = entry

    return [entry.model_dump() for entry in merged.values()], skipped


def sync_whitelist_with_primary_taxonomy(store) -> dict[str, Any]:
    """
    Refresh the whitelist table from the primary taxonomy.

    Args:
        store: SupabaseStore (or any object with fetch_primary_taxonomy,
            fetch_whitelist and upsert_whitelist)

    Returns:
        {"success": bool, "synced": int, "skipped": int, "error": str | None}
    """
    console.print("[cyan]Syncing whitelist with primary taxonomy...[/cyan]")
    try:
        taxonomy = store.fetch_primary_taxonomy()
        if not taxonomy:
            console.print("[yellow]Primary taxonomy is empty, nothing to sync[/yellow]")
            return {"success": False, "synced": 0, "skipped": 0, "error": "No taxonomy rows found"}

        rows, skipped = build_whitelist_rows(taxonomy, store.fetch_whitelist())
        synced = store.upsert_whitelist(rows)
    except SourceUnavailableError as e:
        console.print(f"[red]Whitelist sync failed: {escape(str(e))}[/red]")
        return {"success": False, "synced": 0, "skipped": 0, "error": str(e)}

    console.print(f"[green]✓ Synced {synced} whitelist entries ({skipped} skipped)[/green]")
    return {"success": True, "synced": synced, "skipped": skipped, "error": None}
