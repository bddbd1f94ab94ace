# apps/api/src/core/errors.py

from typing import Optional


class ScrapeError(Exception):
    """
    Base for hard failures of a scrape request.

    Soft conditions (no listings, unparseable price/date, listings wait
    timeout) are NOT exceptions and never reach this hierarchy.
    """

    status_code: int = 500
    error: str = "Falha no scraping"

    def __init__(self, detail: str, *, example: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.example = example

    def to_response(self) -> dict:
        body = {
            "success": False,
            "error": self.error,
            "detail": self.detail,
        }
        if self.example:
            body["example"] = self.example
        return body


class ValidationError(ScrapeError):
    """Missing or malformed request parameter."""

    status_code = 400
    error = "Parâmetro inválido"


class NavigationError(ScrapeError):
    """Target page unreachable or not loaded within the timeout."""


class ResourceAcquisitionError(ScrapeError):
    """Browser/page could not be created."""
