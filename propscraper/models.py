"""
Data models for the listing extraction pipeline.
"""
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class RawFields:
    """Strings pulled from one listing node before any parsing."""

    price_text: str = ""
    address_text: str = ""
    image_url: str = ""
    property_url: str = ""
    # Complete text of the listing node, fallback corpus for the parsers
    full_text: str = ""


@dataclass(frozen=True)
class ParsedFields:
    """Typed values produced by the field parsers. None means absent."""

    price: Optional[str] = None
    address: Optional[str] = None
    beds: Optional[int] = None
    baths: Optional[float] = None
    sqft: Optional[int] = None


@dataclass(frozen=True)
class PropertyRecord:
    """A validated, normalized property listing ready for indexing."""

    object_id: str
    address: str
    price: str
    beds: int
    baths: float
    sqft: int
    description: str
    city: str
    state: str
    price_range: str
    property_type: str
    collected_at: str
    image_url: str = ""
    property_url: str = ""
    address_is_synthesized: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
