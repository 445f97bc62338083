"""
Custom exceptions for the Bot API schema parser.

Error severity:
  - ScrapeError → FAIL HARD: the page does not look like the Bot API docs.
  - FetchError  → FAIL HARD: the page (or a companion resource) could not be downloaded.

The description parser and type resolver never raise. A description that
matches no pattern only produces a less specific field (a bare string in the
worst case), so nothing in that layer is worth stopping the pipeline for.
"""

from typing import Optional


class SchemaParserError(Exception):
    """Base exception for all schema parser errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- FAIL HARD: stops the pipeline ---

class ScrapeError(SchemaParserError):
    """
    Raised when the documentation page cannot be scraped.

    Typical causes are a changed page layout (version header moved) or a
    release-date anchor that is not in month-day-year form.
    """
    pass


class FetchError(SchemaParserError):
    """Raised when downloading the documentation page fails."""

    def __init__(
        self,
        message: str,
        url: str,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.url = url

    def to_response(self) -> dict:
        """Convert to an error payload for CLI output."""
        return {
            "error": "FetchError",
            "message": self.message,
            "url": self.url,
            "details": self.details
        }
