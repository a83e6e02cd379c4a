"""
Listing locator: decide which selector identifies the listing cards on a page.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from bs4 import Tag

from .cascade import select_all
from .config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)


@dataclass
class LocatorResult:
    """Outcome of probing the candidate container selectors."""

    selector: Optional[str]
    count: int
    counts: Dict[str, int] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.selector is not None and self.count > 0


def probe_selectors(page: Tag, candidate_selectors: Iterable[str]) -> Dict[str, int]:
    """Count matches per candidate; only selectors with hits are kept, in order."""
    counts: Dict[str, int] = {}
    for selector in candidate_selectors:
        n = len(select_all(page, selector))
        if n > 0:
            counts[selector] = n
            logger.debug(f">>> {selector}: {n} elements")
    return counts


def locate(
    page: Tag,
    candidate_selectors: Optional[Iterable[str]] = None,
    primary_selector: Optional[str] = None,
    fallback_selectors: Optional[Iterable[str]] = None,
) -> LocatorResult:
    """
    Pick the listing container selector for ``page``.

    The primary selector wins whenever it matches anything. Otherwise the
    fallback-priority list is walked and the first selector with a non-zero
    count among the probed candidates is used. When nothing matches the
    result has ``selector=None`` and ``count=0``; that is a legitimate empty
    page, not an error.
    """
    if candidate_selectors is None:
        candidate_selectors = DEFAULT_CONFIG.container_selectors
    if primary_selector is None:
        primary_selector = DEFAULT_CONFIG.primary_container_selector
    if fallback_selectors is None:
        fallback_selectors = DEFAULT_CONFIG.fallback_container_selectors

    counts = probe_selectors(page, candidate_selectors)

    if counts.get(primary_selector, 0) > 0:
        logger.info(f">>> Using selector: {primary_selector} with {counts[primary_selector]} elements")
        return LocatorResult(primary_selector, counts[primary_selector], counts)

    for selector in fallback_selectors:
        if counts.get(selector, 0) > 0:
            logger.info(f">>> Using fallback selector: {selector} with {counts[selector]} elements")
            return LocatorResult(selector, counts[selector], counts)

    logger.info(">>> No property listings found")
    return LocatorResult(None, 0, counts)


def listing_nodes(page: Tag, result: LocatorResult) -> List[Tag]:
    """The located listing nodes in document order."""
    if not result.found:
        return []
    return select_all(page, result.selector)
