"""
Merge extracted items from several sources into one ranked tag list.

Sources are merged in the order given (whitelist, catalog, AI). The first
item seen for a name wins; later items with the same name only boost its
confidence. Names are compared exactly after lowercasing and collapsing
whitespace, so "Blue Jeans" and "Jeans" stay separate tags.
"""

from typing import Optional

from config.settings import ExtractionConfig
from ratemyfit.models import HybridItem, ItemSource

from .grammar import TagStructureRules, enforce_tag_grammar


def _merge_duplicate(existing, duplicate, boost: float, cap: float):
    confidence = max(existing.confidence, min(cap, existing.confidence + boost))
    if duplicate.source == existing.source:
        return existing.model_copy(update={"confidence": confidence})

    if isinstance(existing, HybridItem):
        sources = list(existing.sources)
    else:
        sources = [ItemSource(existing.source)]
    if ItemSource(duplicate.source) not in sources:
        sources.append(ItemSource(duplicate.source))
    return HybridItem(
        name=existing.name,
        descriptors=existing.descriptors,
        category=existing.category,
        confidence=confidence,
        sources=sources,
    )


def aggregate_items(
    sources: list[list],
    config: Optional[ExtractionConfig] = None,
    max_items: Optional[int] = None,
) -> list:
    """
    Deduplicate, rank and truncate items from several sources.

    Args:
        sources: Item lists in priority order
        config: Boost and cap constants
        max_items: Override for config.max_items

    Returns:
        At most max_items items, highest confidence first. Ties keep merge
        order. Running this again on its own output returns the same list.
    """
    config = config or ExtractionConfig()
    limit = config.max_items if max_items is None else max_items

    merged: list = []
    index_by_key: dict[str, int] = {}
    for items in sources:
        for item in items or []:
            key = item.key
            if key in index_by_key:
                i = index_by_key[key]
                merged[i] = _merge_duplicate(
                    merged[i], item, config.duplicate_boost, config.confidence_cap
                )
            else:
                index_by_key[key] = len(merged)
                merged.append(item)

    ranked = sorted(merged, key=lambda item: item.confidence, reverse=True)
    return ranked[:limit]


def enforce_item_grammar(
    items: list, rules: Optional[TagStructureRules] = None
) -> tuple[list, int]:
    """
    Apply the tag grammar to each item name.

    Returns:
        (kept items with canonical names, number of items dropped)
    """
    kept = []
    dropped = 0
    for item in items:
        name = enforce_tag_grammar(item.name, rules)
        if name is None:
            dropped += 1
            continue
        kept.append(item.model_copy(update={"name": name}))
    return kept, dropped
