"""Package initializer for `homeowner_lookup`."""

from .config import Settings
from .service import HomeownerLookupService

__all__ = ["HomeownerLookupService", "Settings"]
