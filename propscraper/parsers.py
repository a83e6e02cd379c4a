"""
Field parsers: turn listing text into typed values.

Every parser receives the text found by the structured selectors plus the
full text of the listing node as a fallback corpus, and tries an ordered
cascade of patterns, most specific first. A match whose value falls outside
the plausible range is ignored and the search continues; a parser never
raises for missing or implausible data.
"""
import re
from typing import Callable, Iterable, List, Optional, Pattern

from .config import ExtractionConfig, DEFAULT_CONFIG
from .models import ParsedFields, RawFields
from .utils import clean_text, price_to_int, to_int, to_float


PRICE_PATTERNS: List[Pattern] = [
    re.compile(r"\$[\d,]+"),
    re.compile(r"\$\s*[\d,]+"),
    re.compile(r"[\d,]+\s*\$"),
]

BEDS_PATTERNS: List[Pattern] = [
    re.compile(r"(?<![\d.,])(\d+)\s*(?:bedrooms?|beds?|bds|br)\b", re.I),
    re.compile(r"(?<![\d.,])(\d+)\s*bd\b", re.I),
    re.compile(r"(?<![\d.,])(\d+)\s*b(?:\s|$)", re.I),
]

BATHS_PATTERNS: List[Pattern] = [
    re.compile(r"(?<![\d.,])(\d+(?:\.\d+)?)\s*(?:bathrooms?|baths?|ba)\b", re.I),
    re.compile(r"(?<![\d.,])(\d+(?:\.\d+)?)\s*ba", re.I),
]

SQFT_PATTERNS: List[Pattern] = [
    re.compile(r"(?<![\d,])(\d{1,3}(?:,\d{3})+|\d+)\s*(?:sq\.?\s*ft|sqft|square\s*feet)", re.I),
    re.compile(r"(?<![\d,])(\d{1,3}(?:,\d{3})+|\d+)\s*sf\b", re.I),
]

STREET_SUFFIXES = (
    "Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Lane|Ln|Boulevard|Blvd|"
    "Circle|Cir|Court|Ct|Place|Pl|Way"
)


def _corpus(text: Optional[str], full_text: Optional[str]) -> str:
    return clean_text(f"{text or ''} {full_text or ''}")


def _first_in_range(
    patterns: Iterable[Pattern],
    corpus: str,
    convert: Callable[[str], Optional[float]],
    low: float,
    high: float,
):
    """Return the first converted match within [low, high] across the cascade."""
    for pattern in patterns:
        for m in pattern.finditer(corpus):
            value = convert(m.group(1))
            if value is not None and low <= value <= high:
                return value
    return None


def has_no_price_phrase(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    lowered = (text or "").lower()
    return any(phrase in lowered for phrase in config.no_price_phrases)


def parse_price(
    text: Optional[str],
    full_text: Optional[str] = "",
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Optional[str]:
    """
    Find a plausible listing price and return it as matched, e.g. "$325,000".

    Returns None when the text carries a "no real price" phrase ("call for
    price", "sold", ...) or when no currency match lies strictly between
    ``config.min_price`` and ``config.max_price``.
    """
    corpus = _corpus(text, full_text)
    if has_no_price_phrase(corpus, config):
        return None

    for pattern in PRICE_PATTERNS:
        for m in pattern.finditer(corpus):
            candidate = re.sub(r"\s", "", m.group(0)).strip(",")
            value = price_to_int(candidate)
            if value is not None and config.min_price < value < config.max_price:
                return candidate
    return None


def address_patterns(city: str) -> List[Pattern]:
    """Address cascade for one target city, most specific first."""
    c = re.escape(clean_text(city))
    return [
        re.compile(rf"(\d+\s+[A-Za-z\s]+(?:{STREET_SUFFIXES}))[\s,]+(?:{c})\b", re.I),
        re.compile(rf"(\d+\s+[A-Za-z\s]+?)[\s,]+(?:{c})\b", re.I),
        re.compile(rf"(\d{{1,5}}\s+[A-Za-z\s]{{3,30}}?)[\s,]+(?:{c})\b", re.I),
    ]


def parse_address(
    text: Optional[str],
    full_text: Optional[str],
    city: str,
    state: str,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Optional[str]:
    """Extract "<number> <street>, <city>, <state>" or None."""
    if not clean_text(city):
        return None
    corpus = _corpus(text, full_text)
    for pattern in address_patterns(city):
        for m in pattern.finditer(corpus):
            street = m.group(1).strip()
            if (
                config.min_address_span < len(street) < config.max_address_span
                and re.search(r"\d", street)
            ):
                return f"{street}, {city}, {state}"
    return None


def parse_beds(
    text: Optional[str],
    full_text: Optional[str] = "",
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Optional[int]:
    value = _first_in_range(BEDS_PATTERNS, _corpus(text, full_text), to_int,
                            config.min_beds, config.max_beds)
    if value is None:
        return config.numeric_default(config.default_beds)
    return value


def parse_baths(
    text: Optional[str],
    full_text: Optional[str] = "",
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Optional[float]:
    value = _first_in_range(BATHS_PATTERNS, _corpus(text, full_text), to_float,
                            config.min_baths, config.max_baths)
    if value is None:
        default = config.numeric_default(config.default_baths)
        return float(default) if default is not None else None
    return round(value, 1)


def parse_sqft(
    text: Optional[str],
    full_text: Optional[str] = "",
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Optional[int]:
    value = _first_in_range(SQFT_PATTERNS, _corpus(text, full_text), to_int,
                            config.min_sqft, config.max_sqft)
    if value is None:
        return config.numeric_default(config.default_sqft)
    return value


def parse_fields(
    raw: RawFields,
    city: str,
    state: str,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> ParsedFields:
    """Run every field parser over one listing's raw strings."""
    return ParsedFields(
        price=parse_price(raw.price_text, raw.full_text, config),
        address=parse_address(raw.address_text, raw.full_text, city, state, config),
        beds=parse_beds("", raw.full_text, config),
        baths=parse_baths("", raw.full_text, config),
        sqft=parse_sqft("", raw.full_text, config),
    )
