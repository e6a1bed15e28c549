#!/usr/bin/env python3
"""
Refresh fashion_whitelist from the active rows of primary_fashion_taxonomy.

Item names are normalized, categories coerced into the fixed set, and
descriptor/material arrays merged with what the whitelist already holds.

Usage:
    python scripts/sync_whitelist.py

Requires: SUPABASE_URL and SUPABASE_KEY in .env.
"""

import sys
from pathlib import Path

# Project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from rich.console import Console
from rich.markup import escape

from config.settings import config
from ratemyfit.loaders import SupabaseStore
from ratemyfit.services import sync_whitelist_with_primary_taxonomy

console = Console()


def main() -> int:
    try:
        store = SupabaseStore(config.supabase)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    result = sync_whitelist_with_primary_taxonomy(store)
    if not result["success"]:
        return 1
    console.print(f"[dim]synced={result['synced']} skipped={result['skipped']}[/dim]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
