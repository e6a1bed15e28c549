"""
Wardrobe service: user edits to the tags extracted for a saved outfit.

Edits work on the entry's extracted_clothing_items array exactly as stored:
the index addresses the raw array, rows that would not validate are kept in
place, and keys this package does not model (such as renderImageUrl) are
written back untouched. Only the edited row is validated. The whole array is
written back (last write wins). Unlike the extraction pipeline these are
user-facing operations, so problems are raised to the caller:

- IndexError for an index outside the array
- LookupError for an unknown entry id
- ValueError for an edit that leaves an invalid tag
- SourceUnavailableError when the store read or write fails
"""

from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from ratemyfit.extraction.grammar import TagStructureRules, enforce_tag_grammar
from ratemyfit.models import dump_extracted_items, parse_extracted_items

console = Console()

EDITABLE_FIELDS = ("name", "descriptors", "category", "confidence")


def _row_name(row: Any) -> str:
    if isinstance(row, dict) and row.get("name"):
        return str(row["name"])
    return "item"


class WardrobeService:
    """Edit and delete extracted items on wardrobe entries."""

    def __init__(self, store, rules: Optional[TagStructureRules] = None):
        """
        Args:
            store: SupabaseStore (or anything with fetch_raw_extracted_items
                and write_extracted_rows)
            rules: Tag grammar applied to edited names
        """
        self.store = store
        self.rules = rules

    def _load_rows(self, entry_id: str) -> list:
        rows = self.store.fetch_raw_extracted_items(entry_id)
        if rows is None:
            raise LookupError(f"Wardrobe entry not found: {entry_id}")
        return list(rows)

    @staticmethod
    def _check_index(rows: list, index: int) -> None:
        if not 0 <= index < len(rows):
            raise IndexError(
                f"Item index {index} out of range (entry has {len(rows)} items)"
            )

    def update_item(self, entry_id: str, index: int, changes: dict[str, Any]):
        """
        Change fields of one extracted item.

        Args:
            entry_id: Wardrobe entry id
            index: Position in the stored extracted_clothing_items array
            changes: Any of name, descriptors, category, confidence

        Returns:
            The updated item
        """
        rows = self._load_rows(entry_id)
        self._check_index(rows, index)

        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        row = rows[index]
        if not isinstance(row, dict):
            raise ValueError(f"Stored item {index} is not an object and cannot be edited")

        data = dict(row)
        data.update(changes)
        if "name" in changes:
            name = enforce_tag_grammar(str(changes["name"]), self.rules)
            if name is None:
                raise ValueError(f"Invalid tag name: {changes['name']!r}")
            data["name"] = name
            if "category" not in changes:
                # Recategorize from the new name
                data["category"] = None

        parsed = parse_extracted_items([data])
        if not parsed:
            raise ValueError(f"Edited item is not valid: {changes}")
        item = parsed[0]
        rows[index] = {**data, **dump_extracted_items([item])[0]}

        self.store.write_extracted_rows(entry_id, rows)
        console.print(f"[green]✓ Updated item {index} on {escape(entry_id)}: {escape(item.name)}[/green]")
        return item

    def delete_item(self, entry_id: str, index: int) -> list:
        """
        Remove one extracted item.

        Returns:
            The remaining rows, as stored
        """
        rows = self._load_rows(entry_id)
        self._check_index(rows, index)
        removed = rows.pop(index)

        self.store.write_extracted_rows(entry_id, rows)
        console.print(f"[green]✓ Removed '{escape(_row_name(removed))}' from {escape(entry_id)}[/green]")
        return rows
