"""
Collection orchestrator: one page in, ordered property records out.
"""
import logging
from typing import List, Union

from bs4 import BeautifulSoup, Tag

from .config import ExtractionConfig, DEFAULT_CONFIG
from .extractor import extract
from .locator import listing_nodes, locate
from .models import PropertyRecord

logger = logging.getLogger(__name__)


def as_document(page: Union[str, bytes, Tag]) -> Tag:
    """Accept rendered HTML or an already parsed document."""
    if isinstance(page, Tag):
        return page
    return BeautifulSoup(page or "", "lxml")


def collect(
    page: Union[str, bytes, Tag],
    city: str,
    state: str,
    max_count: int = 20,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> List[PropertyRecord]:
    """
    Extract validated property records from a rendered search page.

    At most the first ``max_count`` located listing nodes are examined, in
    document order. Unusable listings are skipped silently; a page with no
    listings yields an empty list.
    """
    doc = as_document(page)
    located = locate(
        doc,
        config.container_selectors,
        config.primary_container_selector,
        config.fallback_container_selectors,
    )
    if not located.found:
        return []

    nodes = listing_nodes(doc, located)[:max(0, max_count)]
    logger.info(f">>> Extracting {len(nodes)} of {located.count} listings for {city}, {state}")

    records: List[PropertyRecord] = []
    for index, node in enumerate(nodes):
        record = extract(node, city, state, index, config)
        if record is not None:
            records.append(record)

    logger.info(f">>> Collected {len(records)} properties ({len(nodes) - len(records)} skipped)")
    return records
