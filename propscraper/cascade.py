"""
Selector cascades: try each selector in order, keep the first non-empty value.
"""
import logging
from typing import Iterable, Optional

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from .utils import clean_text

logger = logging.getLogger(__name__)


def select_first(scope: Tag, selector: str) -> Optional[Tag]:
    """First descendant of ``scope`` matching ``selector``, or None."""
    try:
        return scope.select_one(selector)
    except SelectorSyntaxError as e:
        logger.warning(f"Invalid selector {selector!r}: {e}")
        return None


def select_all(scope: Tag, selector: str) -> list:
    try:
        return scope.select(selector)
    except SelectorSyntaxError as e:
        logger.warning(f"Invalid selector {selector!r}: {e}")
        return []


def node_text(node: Optional[Tag]) -> str:
    """Whitespace-normalized text content of a node."""
    if node is None:
        return ""
    return clean_text(node.get_text(" ", strip=True))


def resolve_text(scope: Tag, cascade: Iterable[str]) -> str:
    """Text of the first cascade match with non-empty content, else ""."""
    for selector in cascade:
        text = node_text(select_first(scope, selector))
        if text:
            return text
    return ""


def resolve_attribute(scope: Tag, cascade: Iterable[str], attr_name: str) -> str:
    """Named attribute of the first cascade match where it is non-empty, else ""."""
    for selector in cascade:
        el = select_first(scope, selector)
        if el is None:
            continue
        value = el.get(attr_name)
        if isinstance(value, list):
            value = " ".join(value)
        value = (value or "").strip()
        if value:
            return value
    return ""


def resolve_attributes(scope: Tag, cascade: Iterable[str], attr_names: Iterable[str]) -> str:
    """
    Try each attribute name over the whole cascade before the next one, so
    a ``src`` anywhere wins over a ``data-src`` on a more specific selector.
    """
    cascade = list(cascade)
    for attr_name in attr_names:
        value = resolve_attribute(scope, cascade, attr_name)
        if value:
            return value
    return ""
