"""
Whitelist validator: cross-references candidate phrases with curated garments.

A candidate matches an entry when either string contains the other. The
default policy keeps the first matching entry in whitelist order (the store
returns entries ordered by category, then item_name), so a short entry such
as "jacket" can shadow "denim jacket". The "longest" policy picks the longest
matching item_name instead.
"""

from typing import Optional

from config.settings import ExtractionConfig

from ratemyfit.models import RegexItem, WhitelistEntry, WhitelistItem
from ratemyfit.vocabulary import categorize_clothing_item, descriptive_words, normalize_phrase


def find_whitelist_match(
    candidate: str,
    whitelist: list[WhitelistEntry],
    policy: str = "first",
) -> Optional[WhitelistEntry]:
    """Return the whitelist entry matching a candidate, or None."""
    lower = normalize_phrase(candidate)
    if not lower:
        return None

    best: Optional[WhitelistEntry] = None
    for entry in whitelist:
        name = entry.item_name
        if not name or not (name in lower or lower in name):
            continue
        if policy == "first":
            return entry
        if best is None or len(name) > len(best.item_name):
            best = entry
    return best


def _preceding_words(candidate: str, item_name: str) -> list[str]:
    """Words of candidate that come before item_name."""
    lower = normalize_phrase(candidate)
    index = lower.find(item_name)
    if index <= 0:
        return []
    return lower[:index].split()


def validate_candidate(
    candidate: str,
    whitelist: Optional[list[WhitelistEntry]],
    config: Optional[ExtractionConfig] = None,
):
    """
    Turn one candidate phrase into an extracted item.

    Args:
        candidate: Phrase from the lexical matcher
        whitelist: Curated entries; None or empty means the whitelist is
            unavailable
        config: Confidence constants and match policy

    Returns:
        WhitelistItem on a match, otherwise a basic-categorized RegexItem.
    """
    config = config or ExtractionConfig()
    name = normalize_phrase(candidate)

    if not whitelist:
        return RegexItem(
            name=name,
            descriptors=descriptive_words(name),
            category=categorize_clothing_item(name),
            confidence=config.no_whitelist_confidence,
        )

    entry = find_whitelist_match(name, whitelist, config.whitelist_match)
    if entry is None:
        return RegexItem(
            name=name,
            descriptors=descriptive_words(name),
            category=categorize_clothing_item(name),
            confidence=config.unmatched_confidence,
        )

    return WhitelistItem(
        name=name,
        descriptors=_preceding_words(name, entry.item_name),
        category=entry.category,
        confidence=config.whitelist_confidence,
        matched_entry=entry.item_name,
    )


def validate_candidates(
    candidates: list[str],
    whitelist: Optional[list[WhitelistEntry]],
    config: Optional[ExtractionConfig] = None,
) -> list:
    """Validate every candidate, preserving order."""
    return [validate_candidate(c, whitelist, config) for c in candidates if c.strip()]
