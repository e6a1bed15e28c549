"""
Clothing tag extraction.

Stages, in pipeline order:
- lexical_matcher: candidate phrases from free text
- whitelist_validator: candidates checked against curated garment names
- catalog_matcher: candidates matched to external catalog products
- grammar: tag structure rules and repair
- aggregator: merge, dedupe, rank and truncate
"""

from ratemyfit.vocabulary import (
    CLOTHING_CATEGORIES,
    categorize_clothing_item,
    find_garment_noun,
    is_clothing_word,
)
from .lexical_matcher import extract_candidates
from .grammar import (
    DEFAULT_TAG_RULES,
    TagStructureRules,
    TagValidation,
    enforce_tag_grammar,
    format_tag_name,
    validate_tag_structure,
)
from .whitelist_validator import find_whitelist_match, validate_candidate, validate_candidates
from .catalog_matcher import catalog_confidence, match_catalog
from .aggregator import aggregate_items, enforce_item_grammar

__all__ = [
    # Vocabulary
    "CLOTHING_CATEGORIES",
    "categorize_clothing_item",
    "find_garment_noun",
    "is_clothing_word",
    # Stages
    "extract_candidates",
    "find_whitelist_match",
    "validate_candidate",
    "validate_candidates",
    "catalog_confidence",
    "match_catalog",
    "aggregate_items",
    "enforce_item_grammar",
    # Grammar
    "DEFAULT_TAG_RULES",
    "TagStructureRules",
    "TagValidation",
    "enforce_tag_grammar",
    "format_tag_name",
    "validate_tag_structure",
]
