"""
External catalog matcher.

Searches the product catalog once per candidate phrase and scores each hit by
word overlap with the phrase and the product rating:

    confidence = 0.85 + 0.1 * overlap_fraction + (0.05 if rating > 4.0)

clamped to [0.1, 0.98]. Each hit becomes a two-word tag built from the
product color and its garment noun; the product name is kept alongside.
"""

from typing import Optional, Protocol

from rich.console import Console

from config.settings import ExtractionConfig
from ratemyfit.models import CatalogItem, CatalogMatchItem
from ratemyfit.vocabulary import coerce_category, find_garment_noun, normalize_phrase

from .grammar import format_tag_name

console = Console()

BASE_CONFIDENCE = 0.85
OVERLAP_WEIGHT = 0.1
RATING_BONUS = 0.05
RATING_THRESHOLD = 4.0
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.98


class CatalogSearcher(Protocol):
    def search_catalog(
        self, term: str, gender: Optional[str] = None, limit: int = 20
    ) -> list[CatalogItem]: ...


def _words(text: str) -> set[str]:
    return {w.strip(".,;:!?\"'()") for w in normalize_phrase(text).split()} - {""}


def catalog_confidence(
    candidate: str, product_name: str, rating: Optional[float] = None
) -> float:
    """
    Score a catalog product against a candidate phrase.

    Overlap is the share of the product's name words that also appear in the
    candidate. An empty product name scores zero overlap.
    """
    product_words = _words(product_name)
    candidate_words = _words(candidate)
    overlap = 0.0
    if product_words:
        overlap = len(product_words & candidate_words) / len(product_words)

    confidence = BASE_CONFIDENCE + min(overlap, 1.0) * OVERLAP_WEIGHT
    if rating is not None and rating > RATING_THRESHOLD:
        confidence += RATING_BONUS
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))


def catalog_item_to_match(
    product: CatalogItem, candidate: str, text: str = ""
) -> Optional[CatalogMatchItem]:
    """Build a tag from a catalog product, or None if it names no garment."""
    noun = (
        find_garment_noun(product.product_name)
        or find_garment_noun(product.sub_category or "")
        or find_garment_noun(candidate)
    )
    if not noun:
        return None

    color = normalize_phrase(product.color or "")
    name = format_tag_name(color.split()[-1] if color else None, noun)

    mentioned = normalize_phrase(text or candidate)
    descriptors = []
    if color:
        descriptors.append(color)
    if product.material:
        descriptors.append(normalize_phrase(product.material))
    if product.brand and normalize_phrase(product.brand) in mentioned:
        descriptors.append(normalize_phrase(product.brand))

    return CatalogMatchItem(
        name=name,
        descriptors=descriptors,
        category=coerce_category(product.category, product.product_name),
        confidence=catalog_confidence(candidate, product.product_name, product.rating),
        product_name=product.product_name,
        brand=product.brand,
        rating=product.rating,
    )


def match_catalog(
    candidates: list[str],
    store: CatalogSearcher,
    gender: Optional[str] = None,
    text: str = "",
    config: Optional[ExtractionConfig] = None,
) -> list[CatalogMatchItem]:
    """
    Find the best catalog matches for a set of candidate phrases.

    Args:
        candidates: Phrases from the lexical matcher
        store: Anything with a ``search_catalog`` method
        gender: Optional gender filter ("male", "female"; "neutral" means none)
        text: Full source text, used to spot brand mentions
        config: Result limits

    Returns:
        Up to ``config.catalog_limit`` matches, highest confidence first.

    Raises:
        SourceUnavailableError: if the catalog query fails
    """
    config = config or ExtractionConfig()
    if gender == "neutral":
        gender = None

    seen_products: set[str] = set()
    matches: list[CatalogMatchItem] = []
    for candidate in candidates:
        noun = find_garment_noun(candidate)
        term = noun or candidate
        for product in store.search_catalog(term, gender, config.catalog_search_limit):
            key = normalize_phrase(product.product_name)
            if key in seen_products:
                continue
            seen_products.add(key)
            match = catalog_item_to_match(product, candidate, text)
            if match is not None:
                matches.append(match)

    matches.sort(key=lambda m: m.confidence, reverse=True)
    if matches:
        console.print(
            f"[dim]Catalog: {len(matches)} product matches, keeping {min(len(matches), config.catalog_limit)}[/dim]"
        )
    return matches[: config.catalog_limit]
