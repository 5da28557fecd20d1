import pytest

from utils.product_name import (
    canonicalize_product_key_from_label,
    canonicalize_product_label,
    derive_product_identity,
    pick_likely_product_segment,
    sanitize_product_source,
    split_candidate_segments,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("NEW BOOKING: New Year's Eve Crawl with open bar", "NYE Pub Crawl"),
        ("Krawl Through Krakow", "Krawl Through Krakow Pub Crawl"),
        ("Tour name: Krawl Through Kazimierz Created by Partner", "Krawl Through Kazimierz"),
        ("Tour name: Sunset Kayak Created by Anna", "Sunset Kayak"),
        ("Gift voucher | Sunset sailing experience", "Sunset sailing experience"),
        ("Vodka Tasting", "Vodka Tasting"),
    ],
)
def test_canonicalize_product_label(raw, expected):
    assert canonicalize_product_label(raw) == expected


def test_missing_label_is_none():
    assert canonicalize_product_label(None) is None
    assert canonicalize_product_label("   ") is None
    assert canonicalize_product_label("####") is None


def test_sanitize_product_source():
    assert sanitize_product_source("Rebooked: Krawl Through Krakow &amp; Shots") == (
        "Krawl Through Krakow & Shots"
    )


def test_key_is_sorted_unique_tokens_without_stopwords():
    assert canonicalize_product_key_from_label("Krawl Through Krakow Pub Crawl") == (
        "crawl-krakow-krawl-pub-through"
    )
    assert canonicalize_product_key_from_label("The Food Tour") == "food-tour"
    assert canonicalize_product_key_from_label("New booking") is None


def test_segments_prefer_experience_keywords():
    segments = split_candidate_segments("Gift voucher | Sunset sailing experience")

    assert segments == ["Gift voucher", "Sunset sailing experience"]
    assert pick_likely_product_segment(segments) == "Sunset sailing experience"
    assert pick_likely_product_segment([]) is None


def test_identity_from_label():
    key, label = derive_product_identity(["Krawl Through Krakow"], raw_product_id=555)

    assert key == "crawl-krakow-krawl-pub-through"
    assert label == "Krawl Through Krakow Pub Crawl"


def test_identity_falls_back_to_raw_product_id():
    key, label = derive_product_identity([None, ""], raw_product_id=42)

    assert key == "42"
    assert label is None


def test_identity_falls_back_to_platform_and_reference():
    key, label = derive_product_identity([], platform="viator", booking_ref="BR-3")

    assert key == "viator-BR-3"
    assert label is None


def test_later_sources_are_tried_in_order():
    key, label = derive_product_identity([None, "Food Tour Krakow"])

    assert label == "Food Tour"
    assert key == "food-tour"
