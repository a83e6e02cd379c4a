#!/usr/bin/env python3
"""
Extraction pipeline tests over static HTML: selector cascades, the listing
locator, URL normalization, record validation and page collection.
"""
import random
from dataclasses import replace

import pytest
from bs4 import BeautifulSoup

from propscraper.cascade import resolve_text, resolve_attribute, resolve_attributes
from propscraper.collector import collect
from propscraper.config import DEFAULT_CONFIG, MISSING_FIELD_REJECT
from propscraper.extractor import (
    extract, extract_raw_fields, normalize_image_url, normalize_property_url
)
from propscraper.locator import locate, listing_nodes
from propscraper.models import ParsedFields, RawFields
from propscraper.validator import (
    finalize, price_range, property_type, synthesize_address, choose_address
)

CARD = """
<div class="listing-card">
  <a href="/home-listings/oh/columbus/123-main-st">
    <div class="listing-image"><img src="//cdn.site.com/a.jpg" alt="front"></div>
  </a>
  <div class="listing-price">$325,000</div>
  <div class="listing-address">123 Main St Columbus, OH 43215</div>
  <ul class="listing-details"><li>3 beds</li><li>2.5 baths</li><li>1,850 sqft</li></ul>
</div>
"""


def soup(html):
    return BeautifulSoup(html, "lxml")


def first_card(html, selector=".listing-card"):
    return soup(html).select_one(selector)


# Selector cascades

def test_resolve_text_first_non_empty():
    """Empty matches are skipped in favour of later selectors."""
    scope = soup('<div><span class="price"> </span><div class="amount">$1</div></div>')
    assert resolve_text(scope, [".missing", ".price", ".amount"]) == "$1"
    assert resolve_text(scope, [".missing"]) == ""


def test_resolve_text_survives_invalid_selector():
    scope = soup('<div><span class="price">$250,000</span></div>')
    assert resolve_text(scope, ["[[bad", ".price"]) == "$250,000"


def test_resolve_attribute():
    scope = soup('<div><a class="x">no href</a><a class="y" href="/listing/9">go</a></div>')
    assert resolve_attribute(scope, ["a.x", "a.y"], "href") == "/listing/9"
    assert resolve_attribute(scope, ["a.x"], "href") == ""


def test_resolve_attributes_lazy_image():
    scope = soup('<div><img class="lazy" data-src="/img/1.jpg"></div>')
    assert resolve_attributes(scope, ["img"], ["src", "data-src"]) == "/img/1.jpg"


# Listing locator

def test_locate_primary_selector():
    page = soup(CARD * 3)
    result = locate(page)
    assert result.found
    assert result.selector == ".listing-card"
    assert result.count == 3
    assert len(listing_nodes(page, result)) == 3


def test_locate_follows_fallback_priority():
    """Fallback order decides, not candidate probing order."""
    page = soup('<div class="search-result-item">$300,000</div>' * 2)
    result = locate(page)
    assert ".search-result-item" in result.counts
    assert result.selector == "div[class*='result']"
    assert result.count == 2


def test_locate_candidate_outside_fallback_list_is_never_chosen():
    page = soup('<section data-testid="listing-card">$300,000</section>')
    result = locate(page)
    assert result.counts.get("[data-testid='listing-card']") == 1
    assert not result.found
    assert result.selector is None


def test_locate_empty_page():
    result = locate(soup("<html><body><p>Nothing here</p></body></html>"))
    assert not result.found
    assert result.count == 0
    assert listing_nodes(soup(""), result) == []


# URL normalization

@pytest.mark.parametrize("url", [
    "mailto:agent@example.com",
    "tel:+15555550100",
    "javascript:void(0)",
    "#top",
    "/agents/jane-doe",
    "https://www.realty.com/contact-us",
    "",
])
def test_property_url_denied(url):
    assert normalize_property_url(url) == ""


def test_property_url_made_absolute():
    assert normalize_property_url("/listing/42") == "https://www.realty.com/listing/42"
    assert normalize_property_url("home/7") == "https://www.realty.com/home/7"
    assert normalize_property_url("https://other.example/listing/1") == "https://other.example/listing/1"


def test_image_url_normalization():
    origin = DEFAULT_CONFIG.site_origin
    assert normalize_image_url("//cdn.site.com/a.jpg", origin) == "https://cdn.site.com/a.jpg"
    assert normalize_image_url("/img/a.jpg", origin) == "https://www.realty.com/img/a.jpg"
    assert normalize_image_url("data:image/png;base64,xx", origin) == "data:image/png;base64,xx"
    assert normalize_image_url("", origin) == ""


# Record extraction

def test_extract_raw_fields():
    raw = extract_raw_fields(first_card(CARD))
    assert raw.price_text == "$325,000"
    assert raw.address_text == "123 Main St Columbus, OH 43215"
    assert raw.image_url == "https://cdn.site.com/a.jpg"
    assert raw.property_url == "https://www.realty.com/home-listings/oh/columbus/123-main-st"
    assert "1,850 sqft" in raw.full_text


def test_extract_full_record():
    record = extract(first_card(CARD), "Columbus", "OH", 0)
    assert record is not None
    assert record.price == "$325,000"
    assert record.address == "123 Main St, Columbus, OH"
    assert not record.address_is_synthesized
    assert (record.beds, record.baths, record.sqft) == (3, 2.5, 1850)
    assert record.price_range == "$200K - $400K"
    assert record.property_type == "Single Family Home"
    assert record.city == "Columbus" and record.state == "OH"
    assert record.object_id.startswith("property_")
    assert "3 bed, 2.5 bath" in record.description


def test_extract_price_from_full_text_only():
    card = first_card('<div class="listing-card"><p>Great home $325,000</p><p>2 bd</p></div>')
    record = extract(card, "Columbus", "OH", 1)
    assert record is not None
    assert record.price == "$325,000"
    assert record.price_range == "$200K - $400K"
    assert record.beds == 2
    assert record.property_type == "Townhouse/Condo"


def test_extract_rejects_listing_without_price():
    card = first_card('<div class="listing-card">2 bed, 1 bath, 1000 sqft</div>')
    assert extract(card, "Columbus", "OH", 0) is None


def test_extract_rejects_call_for_price():
    card = first_card('<div class="listing-card"><span class="price">Call for price</span>'
                      '<p>Also listed $300,000</p></div>')
    assert extract(card, "Columbus", "OH", 0) is None


# Validation

def test_price_range_buckets():
    assert price_range(150_000) == "Under $200K"
    assert price_range(200_000) == "$200K - $400K"
    assert price_range(450_000) == "$400K - $600K"
    assert price_range(600_000) == "Over $600K"
    assert price_range(None) == "Unknown"
    assert price_range(0) == "Unknown"


def test_property_type_by_beds():
    assert property_type(1) == "Condo/Apartment"
    assert property_type(2) == "Townhouse/Condo"
    assert property_type(4) == "Single Family Home"


def test_finalize_is_idempotent():
    """Same inputs give the same record apart from id and timestamp."""
    raw = RawFields(price_text="$275,000", full_text="$275,000 3 bd 2 ba cozy")
    parsed = ParsedFields(price="$275,000", beds=3, baths=2.0, sqft=1500)
    first = finalize(raw, parsed, "Columbus", "OH", 4).to_dict()
    second = finalize(raw, parsed, "Columbus", "OH", 4).to_dict()
    for key in ("object_id", "collected_at"):
        first.pop(key)
        second.pop(key)
    assert first == second
    assert first["address_is_synthesized"] is True


def test_synthesized_addresses_are_plausible():
    parsed = ParsedFields(price="$275,000", beds=3, baths=2.0, sqft=1500)
    for index in range(50):
        raw = RawFields(full_text=f"listing {index} $275,000")
        record = finalize(raw, parsed, "Columbus", "OH", index)
        assert record.address_is_synthesized
        assert record.address.endswith(", Columbus, OH")
        assert any(ch.isdigit() for ch in record.address)
        assert 10 <= len(record.address) <= 60


def test_synthesize_address_uses_configured_names():
    address = synthesize_address("Austin", "TX", random.Random(7))
    number, name, suffix = address.split(",")[0].split(" ")
    assert 1 <= int(number) <= 9999
    assert name in DEFAULT_CONFIG.street_names
    assert suffix in DEFAULT_CONFIG.street_types


def test_structural_address_gets_city_appended():
    raw = RawFields(address_text="456 Oak Avenue")
    address, synthesized = choose_address(raw, ParsedFields(), "Columbus", "OH", 0)
    assert address == "456 Oak Avenue, Columbus, OH"
    assert not synthesized


@pytest.mark.parametrize("text, expected", [
    ("456 Oak Avenue, Columbus", "456 Oak Avenue, Columbus, OH"),
    ("123 Columbus Ave", "123 Columbus Ave, Columbus, OH"),
    ("789 Elm St Columbus, OH 43215", "789 Elm St, Columbus, OH"),
    ("88 Pine Rd, columbus oh", "88 Pine Rd, Columbus, OH"),
])
def test_structural_address_always_ends_with_city_and_state(text, expected):
    """Any trailing city/state/zip is replaced by the target city and state."""
    address, synthesized = choose_address(RawFields(address_text=text), ParsedFields(), "Columbus", "OH", 0)
    assert address == expected
    assert address.endswith(", Columbus, OH")
    assert not synthesized


def test_overlong_structural_street_is_replaced():
    text = "1 " + "Very Long Winding Country Road Past The Old Mill " * 2
    address, synthesized = choose_address(RawFields(address_text=text), ParsedFields(), "Columbus", "OH", 0)
    assert synthesized
    assert address.endswith(", Columbus, OH")


def test_agent_text_is_not_an_address():
    raw = RawFields(address_text="Listing Agent 555-1234")
    address, synthesized = choose_address(raw, ParsedFields(), "Columbus", "OH", 0)
    assert synthesized
    assert "Agent" not in address


def test_finalize_rejects_missing_numeric_fields():
    raw = RawFields(full_text="$275,000")
    parsed = ParsedFields(price="$275,000", beds=None, baths=2.0, sqft=1500)
    assert finalize(raw, parsed, "Columbus", "OH", 0) is None


def test_collect_reject_policy_drops_incomplete_listing():
    config = replace(DEFAULT_CONFIG, missing_field_policy=MISSING_FIELD_REJECT)
    html = '<div class="listing-card"><span class="price">$275,000</span> 3 beds</div>'
    assert collect(html, "Columbus", "OH", 5, config) == []
    assert len(collect(html, "Columbus", "OH", 5)) == 1


# Page collection

def test_collect_respects_max_count_in_document_order():
    html = "".join(
        f'<div class="listing-card"><span class="price">${100 + i},000</span> 3 bd 2 ba</div>'
        for i in range(20)
    )
    records = collect(html, "Columbus", "OH", max_count=5)
    assert [r.price for r in records] == [f"${100 + i},000" for i in range(5)]


def test_collect_skips_unusable_listings():
    html = (
        '<div class="listing-card"><span class="price">$250,000</span></div>'
        '<div class="listing-card"><span class="price">Sold</span></div>'
        '<div class="listing-card"><span class="price">$5,000</span></div>'
        '<div class="listing-card"><span class="price">$450,000</span></div>'
    )
    records = collect(html, "Columbus", "OH", max_count=10)
    assert [r.price for r in records] == ["$250,000", "$450,000"]
    assert len({r.object_id for r in records}) == 2


def test_collect_empty_page():
    assert collect("<html><body></body></html>", "Columbus", "OH") == []
    assert collect("", "Columbus", "OH") == []


def test_collect_accepts_parsed_document():
    assert len(collect(soup(CARD), "Columbus", "OH")) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
