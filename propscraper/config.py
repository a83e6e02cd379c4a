"""
Extraction configuration: every tunable of the listing pipeline in one place.
"""
from dataclasses import dataclass
from typing import Tuple
from urllib.parse import quote


MISSING_FIELD_DEFAULT = "default"
MISSING_FIELD_REJECT = "reject"


@dataclass(frozen=True)
class ExtractionConfig:
    """Selectors, bounds, defaults and deny-lists used by the pipeline."""

    # Site
    site_origin: str = "https://www.realty.com"
    search_url_template: str = "https://www.realty.com/search/{state}/{city}"

    # Listing containers, specific first
    container_selectors: Tuple[str, ...] = (
        ".listing-card",
        "[data-testid='property-card']",
        "[data-testid='listing-card']",
        ".property-card",
        ".search-result-item",
        "[class*='listing']",
        "[class*='property']",
        "[class*='card']",
        "div[class*='result']",
    )
    primary_container_selector: str = ".listing-card"
    fallback_container_selectors: Tuple[str, ...] = (
        "[class*='card']",
        "div[class*='result']",
        "[class*='listing']",
        "[class*='property']",
    )

    # Per-field cascades
    price_selectors: Tuple[str, ...] = (
        ".listing-price",
        ".price",
        "[class*='price']",
        ".listing-card-price",
        ".property-price",
        "[data-testid*='price']",
        "span[class*='price']",
        "div[class*='price']",
    )
    address_selectors: Tuple[str, ...] = (
        ".listing-address",
        ".address",
        ".listing-card-address",
        ".property-address",
        "h3",
        "h4",
        "h2",
        "[class*='address']",
        "[data-testid*='address']",
    )
    image_selectors: Tuple[str, ...] = (
        ".listing-image img",
        ".property-image img",
        ".listing-card img",
        "img[src*='listing']",
        "img[src*='property']",
        "img[src*='realty']",
        "img[alt*='property']",
        "img[alt*='listing']",
        "img",
    )
    image_attributes: Tuple[str, ...] = ("src", "data-src", "data-lazy-src", "data-original")
    link_selectors: Tuple[str, ...] = (
        "a[href*='/home-listings/']",
        "a[href*='/property/']",
        "a[href*='/listing/']",
        "a[href*='/realty/']",
        "a[href*='/home/']",
        "a",
    )

    # Property URLs containing any of these are not listing pages
    url_deny_markers: Tuple[str, ...] = ("mailto:", "tel:", "javascript:", "#", "agent", "contact")

    # Price
    no_price_phrases: Tuple[str, ...] = (
        "price available",
        "price not available",
        "call for price",
        "contact for price",
        "price upon request",
        "tbd",
        "n/a",
        "coming soon",
        "off market",
        "sold",
    )
    min_price: int = 10_000  # exclusive
    max_price: int = 10_000_000  # exclusive

    # Numeric ranges (inclusive) and fallback defaults
    min_beds: int = 1
    max_beds: int = 10
    default_beds: int = 3
    min_baths: float = 1
    max_baths: float = 10
    default_baths: float = 2
    min_sqft: int = 500
    max_sqft: int = 10_000
    default_sqft: int = 1500
    missing_field_policy: str = MISSING_FIELD_DEFAULT

    # Address
    min_address_span: int = 5  # exclusive, regex-captured street part
    max_address_span: int = 50  # exclusive
    min_address_length: int = 10
    max_address_length: int = 100
    # Street part of a structurally extracted address (city, state, zip stripped)
    min_street_length: int = 10
    max_street_length: int = 50
    address_deny_markers: Tuple[str, ...] = ("Agent",)
    street_names: Tuple[str, ...] = (
        "Main", "Oak", "Maple", "Cedar", "Pine", "Elm", "Park", "North", "South", "East", "West",
    )
    street_types: Tuple[str, ...] = ("St", "Ave", "Rd", "Dr", "Ln", "Blvd", "Ct", "Pl")

    # Price buckets: (exclusive upper bound, label), ascending
    price_buckets: Tuple[Tuple[int, str], ...] = (
        (200_000, "Under $200K"),
        (400_000, "$200K - $400K"),
        (600_000, "$400K - $600K"),
    )
    top_price_bucket: str = "Over $600K"
    unknown_price_bucket: str = "Unknown"

    def __post_init__(self):
        if self.missing_field_policy not in (MISSING_FIELD_DEFAULT, MISSING_FIELD_REJECT):
            raise ValueError(f"Unknown missing_field_policy: {self.missing_field_policy!r}")
        if self.min_price >= self.max_price:
            raise ValueError("min_price must be below max_price")

    def search_url(self, city: str, state: str) -> str:
        return self.search_url_template.format(city=quote(city.strip()), state=quote(state.strip()))

    def numeric_default(self, default_value):
        """Fallback for an unparseable numeric field under the active policy."""
        if self.missing_field_policy == MISSING_FIELD_REJECT:
            return None
        return default_value


DEFAULT_CONFIG = ExtractionConfig()
