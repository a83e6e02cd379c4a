"""
Real-estate listing collector: page -> listing nodes -> validated property records.
"""
from .models import RawFields, ParsedFields, PropertyRecord
from .config import ExtractionConfig, DEFAULT_CONFIG
from .cascade import resolve_text, resolve_attribute
from .locator import locate, LocatorResult
from .extractor import extract, extract_raw_fields
from .validator import finalize
from .collector import collect
from .errors import CollectionError, PageLoadError, SinkError
from .utils import init_logger, now_iso

__version__ = "1.0.0"

__all__ = [
    "RawFields",
    "ParsedFields",
    "PropertyRecord",
    "ExtractionConfig",
    "DEFAULT_CONFIG",
    "resolve_text",
    "resolve_attribute",
    "locate",
    "LocatorResult",
    "extract",
    "extract_raw_fields",
    "finalize",
    "collect",
    "CollectionError",
    "PageLoadError",
    "SinkError",
    "init_logger",
    "now_iso"
]
