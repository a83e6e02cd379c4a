"""
Exceptions raised across the collection boundary.

Missing or implausible listing data is never an error; only failures of the
page-rendering and record-sink collaborators are.
"""


class CollectionError(Exception):
    """Base exception for collection failures.

    Attributes:
        source: Name of the collaborator that failed (e.g. "browser", "sqlite")
        message: Error description
    """

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"[{source}] {message}")


class PageLoadError(CollectionError):
    """Raised when the search page could not be rendered after all attempts."""

    def __init__(self, url: str, attempts: int, reason: str = ""):
        self.url = url
        self.attempts = attempts
        message = f"Failed to load {url} after {attempts} attempt(s)"
        if reason:
            message += f": {reason}"
        super().__init__("browser", message)


class SinkError(CollectionError):
    """Raised when the record sink rejects a batch."""
