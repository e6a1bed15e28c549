#!/usr/bin/env python3
"""
Re-extract clothing tags for saved wardrobe entries.

Run after the whitelist or catalog changes so older entries pick up the new
vocabulary. Entries are processed newest first.

Usage:
    python scripts/reextract_wardrobe.py                 # All entries, hybrid
    python scripts/reextract_wardrobe.py 100 basic       # 100 newest, no catalog/AI

Requires: SUPABASE_URL and SUPABASE_KEY in .env (OPENAI_API_KEY for hybrid).
"""

import asyncio
import sys
from pathlib import Path

# Project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from rich.console import Console
from rich.markup import escape

from config.settings import config
from ratemyfit.loaders import SupabaseStore
from ratemyfit.pipeline import ClothingExtractionPipeline

console = Console()


async def run(limit, strategy) -> int:
    try:
        store = SupabaseStore(config.supabase)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    async with ClothingExtractionPipeline(store) as pipeline:
        summary = await pipeline.backfill(limit=limit, strategy=strategy)

    if not summary.get("success"):
        console.print(f"[red]Backfill failed: {escape(str(summary.get('error')))}[/red]")
        return 1
    console.print(
        f"[green]✓ Processed {summary['processed']} entries "
        f"({summary['saved']} saved, {summary['failed']} failed)[/green]"
    )
    return 0 if summary["failed"] == 0 else 1


def main() -> int:
    limit = int(sys.argv[1]) if len(sys.argv) > 1 else None
    strategy = sys.argv[2] if len(sys.argv) > 2 else None
    return asyncio.run(run(limit, strategy))


if __name__ == "__main__":
    sys.exit(main())
