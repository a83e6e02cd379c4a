"""
One collection run: render the search page, extract records, hand them to a sink.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from .browser import PageRenderer
from .collector import collect
from .config import ExtractionConfig, DEFAULT_CONFIG
from .models import PropertyRecord

logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    """Anything that accepts a batch of records and acknowledges it with a task id."""

    def save_records(self, records: List[PropertyRecord]) -> str:
        ...


@dataclass
class CollectionSummary:
    """Counts reported back to the caller after a run."""

    city: str
    state: str
    collected: int = 0
    indexed: int = 0
    with_images: int = 0
    with_urls: int = 0
    synthesized_addresses: int = 0
    task_id: Optional[str] = None
    records: List[PropertyRecord] = field(default_factory=list)


def summarize(
    city: str,
    state: str,
    records: List[PropertyRecord],
    indexed: List[PropertyRecord],
    task_id: Optional[str],
) -> CollectionSummary:
    return CollectionSummary(
        city=city,
        state=state,
        collected=len(records),
        indexed=len(indexed),
        with_images=sum(1 for r in records if r.image_url),
        with_urls=sum(1 for r in records if r.property_url),
        synthesized_addresses=sum(1 for r in records if r.address_is_synthesized),
        task_id=task_id,
        records=indexed,
    )


async def run_collection(
    city: str,
    state: str,
    max_count: int = 20,
    sink: Optional[RecordSink] = None,
    renderer: Optional[PageRenderer] = None,
    config: ExtractionConfig = DEFAULT_CONFIG,
    require_image: bool = False,
    headless: bool = True,
) -> CollectionSummary:
    """
    Collect up to ``max_count`` properties for ``city``/``state``.

    When no renderer is given one is created for this run and closed after.
    PageLoadError and SinkError propagate to the caller; an empty page is a
    summary with ``collected=0``.
    """
    url = config.search_url(city, state)
    logger.info(f">>> Collecting properties for {city}, {state} from {url}")

    if renderer is None:
        async with PageRenderer(headless=headless) as own_renderer:
            html = await own_renderer.render(url)
    else:
        html = await renderer.render(url)

    loop = asyncio.get_running_loop()
    # collect() and the sink are synchronous
    records = await loop.run_in_executor(None, collect, html, city, state, max_count, config)

    to_index = [r for r in records if r.image_url] if require_image else records
    task_id = None
    if sink is not None and to_index:
        task_id = await loop.run_in_executor(None, sink.save_records, to_index)
    elif not to_index:
        logger.info(">>> No properties to index")

    return summarize(city, state, records, to_index, task_id)
