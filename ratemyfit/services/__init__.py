"""
Maintenance and user-edit services.

- sync_whitelist_with_primary_taxonomy: refresh fashion_whitelist
- WardrobeService: edit / delete extracted items on a wardrobe entry
"""

from .wardrobe_service import WardrobeService
from .whitelist_sync_service import build_whitelist_rows, sync_whitelist_with_primary_taxonomy

__all__ = [
    "WardrobeService",
    "build_whitelist_rows",
    "sync_whitelist_with_primary_taxonomy",
]
