"""
Pydantic models for API request/response serialization.
"""
from typing import Optional, List, Dict
from pydantic import BaseModel, Field


class PropertyOut(BaseModel):
    """Output model for a stored property."""
    object_id: str
    address: str
    price: str
    price_value: Optional[int] = None
    beds: int
    baths: float
    sqft: int
    description: str = ""
    image_url: str = ""
    property_url: str = ""
    city: str = ""
    state: str = ""
    price_range: str = ""
    property_type: str = ""
    address_is_synthesized: bool = False
    collected_at: Optional[str] = None


class SearchResponse(BaseModel):
    """Response model for paginated search results."""
    total: int
    limit: int
    offset: int
    items: List[PropertyOut]


class CollectRequest(BaseModel):
    """Collection request: either city + state or a combined location string."""
    city: Optional[str] = None
    state: Optional[str] = None
    location: Optional[str] = None
    max_count: int = Field(20, ge=1)
    require_image: bool = False


class CollectResponse(BaseModel):
    """Outcome of a collection run."""
    success: bool
    collected: int
    existing: int
    total: int
    message: str
    task_id: Optional[str] = None


class StatsOut(BaseModel):
    """Model for index statistics."""
    total_properties: int
    unique_cities: int
    average_price: int
    price_ranges: Dict[str, int]
    property_types: Dict[str, int]
