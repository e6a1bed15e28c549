"""
Data loaders.

- SupabaseStore: whitelist, taxonomy, catalog and wardrobe tables
"""

from .supabase_store import SupabaseStore

__all__ = ["SupabaseStore"]
