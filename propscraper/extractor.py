"""
Record extractor: raw strings for one listing node, then parse and validate.
"""
from typing import Optional
from urllib.parse import urljoin

from bs4 import Tag

from .cascade import node_text, resolve_attribute, resolve_attributes, resolve_text
from .config import ExtractionConfig, DEFAULT_CONFIG
from .models import PropertyRecord, RawFields
from .parsers import parse_fields
from .validator import finalize


def normalize_image_url(url: str, origin: str) -> str:
    """Make an image URL absolute; data URIs and absolute URLs pass through."""
    url = (url or "").strip()
    if not url or url.startswith(("http://", "https://", "data:")):
        return url
    if url.startswith("//"):
        return "https:" + url
    return urljoin(origin.rstrip("/") + "/", url)


def is_denied_url(url: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in config.url_deny_markers)


def normalize_property_url(url: str, config: ExtractionConfig = DEFAULT_CONFIG) -> str:
    """
    Make a listing link absolute against the site origin, or return "" when it
    points somewhere that is not a listing (mail/tel/script links, in-page
    anchors, agent or contact pages).
    """
    url = (url or "").strip()
    if not url:
        return ""
    if is_denied_url(url, config):
        return ""
    if url.startswith("//"):
        url = "https:" + url
    elif not url.startswith(("http://", "https://")):
        url = urljoin(config.site_origin.rstrip("/") + "/", url.lstrip("/"))
    if is_denied_url(url, config):
        return ""
    return url


def extract_raw_fields(listing: Tag, config: ExtractionConfig = DEFAULT_CONFIG) -> RawFields:
    """Run the selector cascades over one listing node."""
    image_url = resolve_attributes(listing, config.image_selectors, config.image_attributes)
    property_url = resolve_attribute(listing, config.link_selectors, "href")
    return RawFields(
        price_text=resolve_text(listing, config.price_selectors),
        address_text=resolve_text(listing, config.address_selectors),
        image_url=normalize_image_url(image_url, config.site_origin),
        property_url=normalize_property_url(property_url, config),
        full_text=node_text(listing),
    )


def extract(
    listing: Tag,
    city: str,
    state: str,
    index: int,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Optional[PropertyRecord]:
    """Raw fields -> parsed fields -> validated record (None when unusable)."""
    raw = extract_raw_fields(listing, config)
    parsed = parse_fields(raw, city, state, config)
    return finalize(raw, parsed, city, state, index, config)
