"""
Utility functions for text processing, number parsing, and logging.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Optional, Tuple


def init_logger(
    name: str = "propscraper",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_file: Optional[str] = "propscraper.log"
) -> logging.Logger:
    """Initialize logger with console and optional file handlers."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    console_level_num = getattr(logging, console_level.upper(), logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(console_level_num)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:  # Create file handler only if log_file is provided
        file_level_num = getattr(logging, file_level.upper(), logging.DEBUG)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level_num)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def now_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def clean_text(s: Optional[str]) -> str:
    """Clean and normalize text by removing extra whitespace."""
    if not s:
        return ""
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def price_to_int(price_text: Optional[str]) -> Optional[int]:
    """
    Convert a currency string such as "$325,000" to an integer.

    Only currency symbols, grouping commas and whitespace are stripped; any
    other residue makes the text unparseable.
    """
    if not price_text:
        return None
    digits = re.sub(r"[\s$,]", "", price_text)
    if not digits.isdigit():
        return None
    return int(digits)


def to_int(text: str) -> Optional[int]:
    """Safely convert text (grouping commas allowed) to int."""
    if not text:
        return None
    try:
        return int(text.replace(",", ""))
    except ValueError:
        return None


def to_float(text: str) -> Optional[float]:
    """Safely convert text to float."""
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def format_number(value: float) -> str:
    """Render 2.0 as "2" and 2.5 as "2.5"."""
    return f"{value:g}"


def parse_location(location: str) -> Tuple[str, str]:
    """
    Split a free-text location like "Parma, OH" or "Miamisburg OH" into
    (city, state). The last token is the state, everything before it the city.
    """
    parts = [p for p in re.split(r"[,\s]+", location or "") if p]
    if len(parts) < 2:
        raise ValueError(
            f"Location must include both city and state (e.g. 'Parma, OH'), got: {location!r}"
        )
    return " ".join(parts[:-1]), parts[-1]
