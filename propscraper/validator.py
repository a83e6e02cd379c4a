"""
Record validation and normalization.

Turns raw strings plus parsed values into an immutable PropertyRecord, or
rejects the listing. A listing without a plausible price is never emitted.
Derived attributes (price bucket, property type, description) are computed
here, and a placeholder street address is synthesized when extraction found
nothing presentable. Such records carry ``address_is_synthesized=True``.
"""
import hashlib
import logging
import random
import re
import time
import uuid
from typing import Optional, Tuple

from .config import ExtractionConfig, DEFAULT_CONFIG
from .models import ParsedFields, PropertyRecord, RawFields
from .utils import clean_text, format_number, now_iso, price_to_int

logger = logging.getLogger(__name__)


def price_range(price_value: Optional[int], config: ExtractionConfig = DEFAULT_CONFIG) -> str:
    """Coarse price bucket used for faceted filtering."""
    if not price_value or price_value <= 0:
        return config.unknown_price_bucket
    for upper, label in config.price_buckets:
        if price_value < upper:
            return label
    return config.top_price_bucket


def property_type(beds: int) -> str:
    # Bed count is the only signal available on a search card
    if beds == 1:
        return "Condo/Apartment"
    if beds == 2:
        return "Townhouse/Condo"
    return "Single Family Home"


def build_description(
    beds: int,
    baths: float,
    sqft: int,
    ptype: str,
    city: str,
    state: str,
    price: str,
    bucket: str,
) -> str:
    b = format_number(baths)
    return (
        f"Beautiful {beds} bed, {b} bath {ptype.lower()} in {city}, {state}. "
        f"Features modern amenities and great location. {bucket} price range. "
        f"{beds} bedroom {b} bathroom home with {sqft} square feet. "
        f"Property type: {ptype}. Located in {city} {state}. "
        f"{price} house home property real estate."
    )


def _seed(raw: RawFields, city: str, state: str, index: int) -> int:
    key = f"{city}|{state}|{index}|{raw.full_text}".encode("utf-8")
    return int(hashlib.sha1(key).hexdigest()[:16], 16)


def synthesize_address(
    city: str,
    state: str,
    rng: random.Random,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> str:
    """Plausible but fictitious street address in the real target city."""
    number = rng.randint(1, 9999)
    name = rng.choice(config.street_names)
    suffix = rng.choice(config.street_types)
    return f"{number} {name} {suffix}, {city}, {state}"


def _has_street_number(text: str, config: ExtractionConfig) -> bool:
    if not re.search(r"\d", text):
        return False
    return not any(marker in text for marker in config.address_deny_markers)


def is_presentable_address(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    if not (config.min_address_length <= len(text) <= config.max_address_length):
        return False
    return _has_street_number(text, config)


def street_part(text: str, city: str, state: str) -> str:
    """
    Strip a trailing zip code, state and city from a card's address text,
    e.g. "123 Main St Columbus, OH 43215" -> "123 Main St". A city name
    inside the street ("123 Columbus Ave") is left alone.
    """
    street = clean_text(text)
    street = re.sub(r"[\s,]+\d{5}(?:-\d{4})?$", "", street)
    if state.strip():
        street = re.sub(rf"[\s,]+{re.escape(state.strip())}$", "", street, flags=re.I)
    if city.strip():
        street = re.sub(rf"[\s,]+{re.escape(city.strip())}$", "", street, flags=re.I)
    return street.strip(" ,")


def is_presentable_street(street: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    if not (config.min_street_length <= len(street) <= config.max_street_length):
        return False
    return _has_street_number(street, config)


def choose_address(
    raw: RawFields,
    parsed: ParsedFields,
    city: str,
    state: str,
    index: int,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Tuple[str, bool]:
    """Return (address, is_synthesized)."""
    if parsed.address and is_presentable_address(parsed.address, config):
        return parsed.address, False

    street = street_part(raw.address_text, city, state)
    if is_presentable_street(street, config):
        return f"{street}, {city}, {state}", False

    rng = random.Random(_seed(raw, city, state, index))
    return synthesize_address(city, state, rng, config), True


def make_object_id(index: int) -> str:
    return f"property_{int(time.time() * 1000)}_{index}_{uuid.uuid4().hex[:8]}"


def finalize(
    raw: RawFields,
    parsed: ParsedFields,
    city: str,
    state: str,
    index: int,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> Optional[PropertyRecord]:
    """Accept or reject one listing; build the record when accepted."""
    if not parsed.price:
        logger.debug(f">>> Skipping listing #{index} with invalid price: {raw.price_text or 'No price found'}")
        return None

    if parsed.beds is None or parsed.baths is None or parsed.sqft is None:
        logger.debug(f">>> Skipping listing #{index}: beds/baths/sqft not found")
        return None

    address, synthesized = choose_address(raw, parsed, city, state, index, config)
    if synthesized:
        logger.debug(f">>> Listing #{index}: no usable address, using placeholder {address!r}")

    bucket = price_range(price_to_int(parsed.price), config)
    ptype = property_type(parsed.beds)

    return PropertyRecord(
        object_id=make_object_id(index),
        address=address,
        price=parsed.price,
        beds=parsed.beds,
        baths=parsed.baths,
        sqft=parsed.sqft,
        description=build_description(
            parsed.beds, parsed.baths, parsed.sqft, ptype, city, state, parsed.price, bucket
        ),
        city=city,
        state=state,
        price_range=bucket,
        property_type=ptype,
        collected_at=now_iso(),
        image_url=raw.image_url,
        property_url=raw.property_url,
        address_is_synthesized=synthesized,
    )
