from __future__ import annotations

from typing import Optional


class HomeownerLookupError(Exception):
    """Base class for lookup failures surfaced to callers."""


class InvalidRequest(HomeownerLookupError):
    pass


class ServiceNotConfigured(HomeownerLookupError):
    pass


class ProviderError(HomeownerLookupError):
    """The skip-trace provider answered non-2xx or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def details(self) -> str:
        if self.status_code is None:
            return "API request failed"
        return f"API returned {self.status_code}"
