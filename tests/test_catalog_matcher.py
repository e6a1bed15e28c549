"""Tests for catalog confidence scoring and matching."""

import pytest

from config.settings import ExtractionConfig
from ratemyfit.errors import SourceUnavailableError
from ratemyfit.extraction.catalog_matcher import catalog_confidence, match_catalog
from ratemyfit.models import CatalogItem

from conftest import FakeStore


@pytest.mark.parametrize(
    "candidate, product_name, rating",
    [
        ("", "", None),
        ("dark jeans", "", 5.0),
        ("dark jeans", "Dark Jeans", 5.0),
        ("x " * 500, "x", 1000.0),
        ("slim dark jeans", "Slim Fit Dark Wash Jeans", -3.0),
    ],
)
def test_confidence_always_within_bounds(candidate, product_name, rating) -> None:
    confidence = catalog_confidence(candidate, product_name, rating)
    assert 0.1 <= confidence <= 0.98


def test_confidence_formula() -> None:
    """Half the product words overlap: 0.85 + 0.05, plus 0.05 for rating > 4."""

    assert catalog_confidence("dark jeans", "Slim Fit Dark Jeans") == pytest.approx(0.9)
    assert catalog_confidence("dark jeans", "Slim Fit Dark Jeans", 4.5) == pytest.approx(0.95)
    assert catalog_confidence("dark jeans", "Slim Fit Dark Jeans", 4.0) == pytest.approx(0.9)
    assert catalog_confidence("dark jeans", "Dark Jeans", 4.8) == pytest.approx(0.98)


def test_match_catalog_builds_color_noun_tags() -> None:
    store = FakeStore(
        catalog={
            "jeans": [
                CatalogItem(
                    product_name="Slim Fit Dark Jeans",
                    category="bottoms",
                    color="Dark Blue",
                    material="Denim",
                    brand="Levi's",
                    rating=4.5,
                )
            ]
        }
    )

    matches = match_catalog(["dark jeans"], store, gender="male")

    assert len(matches) == 1
    match = matches[0]
    assert match.name == "Blue Jeans"
    assert match.source == "catalog"
    assert match.category == "bottoms"
    assert match.product_name == "Slim Fit Dark Jeans"
    assert match.descriptors == ["dark blue", "denim"]
    assert store.searches == [("jeans", "male", 20)]


def test_match_catalog_limits_and_ranks() -> None:
    products = [
        CatalogItem(product_name=f"Wool Coat {i}", color="Camel", rating=rating)
        for i, rating in enumerate([3.0, 4.9, 4.1, 2.0, 5.0])
    ]
    store = FakeStore(catalog={"coat": products})

    matches = match_catalog(["camel coat"], store, config=ExtractionConfig(catalog_limit=3))

    assert len(matches) == 3
    confidences = [m.confidence for m in matches]
    assert confidences == sorted(confidences, reverse=True)


def test_neutral_gender_means_no_filter() -> None:
    store = FakeStore()
    match_catalog(["white sneakers"], store, gender="neutral")
    assert store.searches[0][1] is None


def test_store_failure_propagates_to_caller() -> None:
    store = FakeStore(fail=("catalog",))
    with pytest.raises(SourceUnavailableError):
        match_catalog(["dark jeans"], store)
