"""
Clothing extraction pipeline.

Turns outfit feedback into a short, ranked list of clothing tags:

    lexical matcher -> whitelist validator -> catalog matcher + AI adapter
    (concurrently) -> grammar enforcer -> aggregator -> wardrobe write-back

The strategy decides which sources run:
- basic: lexical + whitelist
- enhanced: basic + catalog
- hybrid: enhanced + AI

A failing source contributes nothing and is listed in
``ExtractionResult.failed_sources``; the run itself never raises.
"""

import asyncio
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from config.settings import AppConfig, config as default_config
from ratemyfit.ai.clothing_extractor import ClothingExtractor, ClothingExtractorConfig
from ratemyfit.errors import SourceUnavailableError
from ratemyfit.extraction import (
    aggregate_items,
    enforce_item_grammar,
    extract_candidates,
    match_catalog,
    validate_candidates,
)
from ratemyfit.models import ExtractionResult, WhitelistEntry

console = Console()

STRATEGIES = ("basic", "enhanced", "hybrid")


class ClothingExtractionPipeline:
    """
    Strategy-driven clothing tag extraction.

    Usage:
        async with ClothingExtractionPipeline(store) as pipeline:
            result = await pipeline.extract_from_text(feedback, suggestions)
            result = await pipeline.extract_for_entry(entry_id)
    """

    def __init__(
        self,
        store=None,
        extractor: Optional[ClothingExtractor] = None,
        app_config: Optional[AppConfig] = None,
    ):
        """
        Args:
            store: SupabaseStore, or None to run on built-in vocabulary only
            extractor: AI extraction adapter (created on demand for hybrid runs)
            app_config: Settings (defaults to the module-level config)
        """
        self.config = app_config or default_config
        self.store = store
        self.extractor = extractor
        self._owns_extractor = extractor is None

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_extractor and self.extractor:
            await self.extractor.__aexit__(exc_type, exc_val, exc_tb)

    # =========================================================================
    # SOURCES
    # =========================================================================

    def _load_whitelist(self, failed: list[str]) -> list[WhitelistEntry]:
        if self.store is None:
            return []
        try:
            return self.store.fetch_whitelist()
        except SourceUnavailableError as e:
            console.print(f"[yellow]Whitelist unavailable, continuing without it: {escape(str(e))}[/yellow]")
            failed.append("whitelist")
            return []

    def _catalog_items(
        self, candidates: list[str], gender: Optional[str], text: str, failed: list[str]
    ) -> list:
        if self.store is None or not candidates:
            return []
        try:
            return match_catalog(candidates, self.store, gender, text, self.config.extraction)
        except SourceUnavailableError as e:
            console.print(f"[yellow]Catalog unavailable, continuing without it: {escape(str(e))}[/yellow]")
            failed.append("catalog")
            return []

    async def _ai_items(
        self,
        feedback: str,
        suggestions: list[str],
        whitelist: list[WhitelistEntry],
        failed: list[str],
        max_items: int,
    ) -> tuple[list, bool]:
        if self.extractor is None:
            self.extractor = ClothingExtractor(ClothingExtractorConfig(max_items=max_items))
        response = await self.extractor.extract(feedback, suggestions, whitelist)
        if not response.success:
            if response.error and response.error != "No valid items found":
                failed.append("ai")
            return [], False
        return list(response.items or []), True

    # =========================================================================
    # RUNS
    # =========================================================================

    async def extract_from_text(
        self,
        feedback: str,
        suggestions: Optional[list[str]] = None,
        gender: Optional[str] = None,
        strategy: Optional[str] = None,
        max_items: Optional[int] = None,
    ) -> ExtractionResult:
        """
        Extract clothing tags from feedback text.

        Args:
            feedback: Outfit feedback
            suggestions: Improvement suggestions
            gender: Catalog gender filter ("neutral" or None means any)
            strategy: "basic", "enhanced" or "hybrid" (defaults to config)
            max_items: Result cap (defaults to config)

        Returns:
            ExtractionResult with at most max_items items, highest confidence first
        """
        extraction = self.config.extraction
        strategy = strategy or extraction.strategy
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown extraction strategy: {strategy}")
        limit = extraction.max_items if max_items is None else max_items
        suggestions = [s for s in suggestions or [] if s]

        text = " ".join([feedback or "", *suggestions]).strip()
        result = ExtractionResult(strategy=strategy)
        if not text:
            return result

        failed: list[str] = []
        candidates = extract_candidates(text)
        result.candidates = candidates
        console.print(f"[cyan]Extracting tags ({strategy}): {len(candidates)} candidate(s)[/cyan]")

        whitelist = self._load_whitelist(failed)
        validated = validate_candidates(candidates, whitelist, extraction)

        catalog_items: list = []
        ai_items: list = []
        if strategy == "hybrid":
            catalog_items, (ai_items, result.ai_success) = await asyncio.gather(
                asyncio.to_thread(self._catalog_items, candidates, gender, text, failed),
                self._ai_items(feedback or "", suggestions, whitelist, failed, limit),
            )
        elif strategy == "enhanced":
            catalog_items = self._catalog_items(candidates, gender, text, failed)

        sources = []
        dropped_total = 0
        for items in (validated, catalog_items, ai_items):
            kept, dropped = enforce_item_grammar(items)
            dropped_total += dropped
            sources.append(kept)
            for item in kept:
                result.source_counts[item.source] = result.source_counts.get(item.source, 0) + 1

        if dropped_total:
            console.print(f"[yellow]Dropped {dropped_total} tag(s) failing grammar rules[/yellow]")

        result.items = aggregate_items(sources, extraction, limit)
        result.dropped_count = dropped_total
        result.failed_sources = failed
        console.print(f"[green]✓ Extracted {len(result.items)} tag(s)[/green]")
        return result

    async def extract_for_entry(
        self,
        entry_id: str,
        write_back: Optional[bool] = None,
        strategy: Optional[str] = None,
        max_items: Optional[int] = None,
    ) -> Optional[ExtractionResult]:
        """
        Extract tags for a stored wardrobe entry and optionally save them.

        Returns:
            ExtractionResult, or None when the entry cannot be read
        """
        if self.store is None:
            console.print("[red]No store configured for wardrobe extraction[/red]")
            return None
        write_back = self.config.extraction.write_back if write_back is None else write_back

        try:
            entry = self.store.fetch_wardrobe_entry(entry_id)
        except SourceUnavailableError as e:
            console.print(f"[red]Could not read wardrobe entry {escape(entry_id)}: {escape(str(e))}[/red]")
            return None
        if entry is None:
            console.print(f"[yellow]Wardrobe entry not found: {escape(entry_id)}[/yellow]")
            return None

        result = await self.extract_from_text(
            entry.feedback or "",
            entry.suggestions,
            entry.gender,
            strategy=strategy,
            max_items=max_items,
        )
        if write_back:
            result.persisted = self.persist(entry.id, result)
        return result

    def persist(self, entry_id: str, result: ExtractionResult) -> bool:
        """Write result items to the wardrobe entry; False on failure."""
        try:
            self.store.update_extracted_items(entry_id, result.items)
        except SourceUnavailableError as e:
            console.print(f"[red]Failed to save tags for {escape(entry_id)}: {escape(str(e))}[/red]")
            return False
        console.print(f"[dim]Saved {len(result.items)} tag(s) to {escape(entry_id)}[/dim]")
        return True

    async def backfill(
        self,
        limit: Optional[int] = None,
        write_back: bool = True,
        strategy: Optional[str] = None,
    ) -> dict:
        """
        Re-extract tags for every wardrobe entry with feedback.

        Returns:
            Summary dict with processed / saved / failed counts
        """
        if self.store is None:
            return {"success": False, "error": "No store configured"}
        try:
            entries = self.store.list_wardrobe_entries(limit)
        except SourceUnavailableError as e:
            console.print(f"[red]Could not list wardrobe entries: {escape(str(e))}[/red]")
            return {"success": False, "error": str(e)}

        console.print(f"[cyan]Re-extracting tags for {len(entries)} wardrobe entries[/cyan]")
        saved = 0
        failed = 0
        for i, entry in enumerate(entries, 1):
            console.print(f"[dim][{i}/{len(entries)}] {escape(entry.id)}[/dim]")
            result = await self.extract_from_text(
                entry.feedback or "", entry.suggestions, entry.gender, strategy=strategy
            )
            if not write_back:
                continue
            if self.persist(entry.id, result):
                saved += 1
            else:
                failed += 1

        return {
            "success": True,
            "processed": len(entries),
            "saved": saved,
            "failed": failed,
        }


def print_result(
    result: ExtractionResult, title: str = "Extracted Clothing Tags", verbose: bool = False
) -> None:
    """Print a run result as a rich table (plus candidates and source counts when verbose)."""
    table = Table(title=title, show_header=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Tag", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Source", style="yellow")
    table.add_column("Confidence", style="green", justify="right")
    table.add_column("Descriptors", style="dim")

    for i, item in enumerate(result.items, 1):
        source = item.source
        if getattr(item, "sources", None):
            source = f"{source} ({', '.join(s.value for s in item.sources)})"
        table.add_row(
            str(i),
            escape(item.name),
            escape(item.category),
            source,
            f"{item.confidence:.2f}",
            escape(", ".join(item.descriptors)),
        )

    console.print(table)
    details = f"[dim]Strategy: {result.strategy} | Candidates: {len(result.candidates)} | Dropped: {result.dropped_count}"
    if result.failed_sources:
        details += f" | Unavailable: {', '.join(result.failed_sources)}"
    console.print(details + "[/dim]")

    if verbose:
        console.print(f"[dim]Candidates: {escape(', '.join(result.candidates)) or '-'}[/dim]")
        counts = ", ".join(f"{source}={n}" for source, n in sorted(result.source_counts.items()))
        console.print(f"[dim]Source counts: {counts or '-'} | AI success: {result.ai_success}[/dim]")
