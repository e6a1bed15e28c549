"""
Configuration settings for the RateMyFit extraction and analysis pipeline.

Credentials are read from the environment (or a .env file at the project
root). Nothing secret lives in source.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")


@dataclass
class SupabaseConfig:
    """Connection details and table names for the reference data store."""

    url: Optional[str] = field(default_factory=lambda: os.getenv("SUPABASE_URL"))
    key: Optional[str] = field(
        default_factory=lambda: os.getenv("SUPABASE_KEY")
        or os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    )

    # ===========================================
    # TABLES
    # ===========================================
    whitelist_table: str = "fashion_whitelist"
    catalog_table: str = "catalog_items"
    taxonomy_table: str = "primary_fashion_taxonomy"
    wardrobe_table: str = "wardrobe_items"

    def require_credentials(self) -> tuple[str, str]:
        """Return (url, key) or raise if either is missing."""
        if not self.url or not self.key:
            raise ValueError(
                "Supabase credentials not found. "
                "Set SUPABASE_URL and SUPABASE_KEY environment variables."
            )
        return self.url, self.key


@dataclass
class ExtractionConfig:
    """Knobs for the clothing-tag extraction pipeline."""

    # "basic" | "enhanced" | "hybrid"
    strategy: str = "hybrid"
    max_items: int = 6

    # Catalog matcher
    catalog_limit: int = 3  # Top N catalog matches kept per run
    catalog_search_limit: int = 20  # Rows fetched per search term

    # Whitelist validator: "first" keeps the first containment hit in table
    # order, "longest" prefers the longest matching item_name.
    whitelist_match: str = "first"
    whitelist_confidence: float = 0.8
    unmatched_confidence: float = 0.6
    no_whitelist_confidence: float = 0.7

    # Aggregator
    duplicate_boost: float = 0.05
    confidence_cap: float = 0.98

    # Write results back to the wardrobe entry after a run
    write_back: bool = True


@dataclass
class RecoveryConfig:
    """Bounds used when recovering an outfit analysis from model output."""

    min_feedback_length: int = 20
    min_suggestion_length: int = 10
    max_suggestions: int = 3
    normal_default_score: int = 7
    roast_default_score: int = 3
    roast_score_cap: int = 6


@dataclass
class LoggingConfig:
    """Console output settings."""

    verbose: bool = field(
        default_factory=lambda: os.getenv("RATEMYFIT_VERBOSE", "").lower()
        in ("1", "true", "yes")
    )


@dataclass
class AppConfig:
    """Main configuration combining all settings."""

    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    recovery: RecoveryConfig = field(default_factory=RecoveryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Validate enumerated settings."""
        if self.extraction.strategy not in ("basic", "enhanced", "hybrid"):
            raise ValueError(f"Unknown extraction strategy: {self.extraction.strategy}")
        if self.extraction.whitelist_match not in ("first", "longest"):
            raise ValueError(
                f"Unknown whitelist match policy: {self.extraction.whitelist_match}"
            )


# Default configuration instance
config = AppConfig()
