"""
API route handlers for property collection and search.
"""
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Query, HTTPException, Depends

from propscraper.core import run_collection
from propscraper.database import SqliteSink
from propscraper.errors import PageLoadError, SinkError
from propscraper.utils import parse_location

from ..models import PropertyOut, SearchResponse, CollectRequest, CollectResponse
from ..database import count_properties, search_properties, get_property_by_id
from ..config import config

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["properties"])

def get_search_filters(
    q: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    price_range: Optional[str] = None,
    property_type: Optional[str] = None,
    beds: Optional[int] = None,
    min_price: Optional[int] = None,
    max_price: Optional[int] = None,
) -> dict:
    """Dependency to extract search filters."""
    return {
        'q': q,
        'city': city,
        'state': state,
        'price_range': price_range,
        'property_type': property_type,
        'beds': beds,
        'min_price': min_price,
        'max_price': max_price
    }

def resolve_location(req: CollectRequest):
    """City and state from the request, splitting ``location`` when needed."""
    city, state = (req.city or "").strip(), (req.state or "").strip()
    if req.location and not city and not state:
        try:
            city, state = parse_location(req.location)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if not city or not state:
        raise HTTPException(status_code=400, detail="City and state are required")
    return city, state

@router.post("/properties/collect", response_model=CollectResponse)
async def collect_properties(req: CollectRequest):
    """Collect listings for a location and add them to the index."""
    city, state = resolve_location(req)
    max_count = min(req.max_count, config.MAX_COLLECT_COUNT)

    sink = SqliteSink(config.DB_PATH)
    try:
        loop = asyncio.get_running_loop()
        existing = await loop.run_in_executor(None, sink.count_location, city, state)
        logger.info(f"Collecting up to {max_count} properties for {city}, {state} ({existing} existing)")
        summary = await run_collection(
            city, state, max_count,
            sink=sink,
            require_image=req.require_image,
            headless=config.HEADLESS,
        )
    except PageLoadError as e:
        logger.error(f"Page load failed for {city}, {state}: {e}")
        raise HTTPException(status_code=502, detail=f"Could not load listings page: {e.message}")
    except SinkError as e:
        logger.error(f"Index rejected batch for {city}, {state}: {e}")
        raise HTTPException(status_code=503, detail=f"Property index unavailable: {e.message}")
    finally:
        sink.close()

    if summary.indexed == 0:
        message = (
            f"No new properties found. {existing} existing properties available."
            if existing > 0 else "No properties found for this location."
        )
    else:
        message = f"Successfully collected {summary.indexed} new properties for {city}, {state}"

    return CollectResponse(
        success=True,
        collected=summary.indexed,
        existing=existing,
        total=existing + summary.indexed,
        message=message,
        task_id=summary.task_id,
    )

@router.get("/properties/search", response_model=SearchResponse)
async def search_api_properties(
    filters: dict = Depends(get_search_filters),
    sort: str = 'collected_desc',
    limit: int = Query(config.DEFAULT_API_LIMIT, ge=1, le=config.MAX_API_LIMIT),
    offset: int = Query(0, ge=0)
):
    """Search properties with filtering, sorting and pagination."""
    try:
        total = count_properties(filters)
        items = [PropertyOut(**item) for item in search_properties(filters, sort, limit, offset)]
        return SearchResponse(total=total, limit=limit, offset=offset, items=items)

    except Exception as e:
        logger.error(f"Error searching properties: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/properties/{object_id}", response_model=PropertyOut)
async def get_api_property(object_id: str):
    """Get a specific property by ID."""
    try:
        property_data = get_property_by_id(object_id)
        if not property_data:
            raise HTTPException(status_code=404, detail="Property not found")

        return PropertyOut(**property_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching property {object_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
