from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Dict, Optional

from homeowner_lookup.config import Settings
from homeowner_lookup.errors import InvalidRequest
from homeowner_lookup.models import CachedLookup, LookupOutcome, LookupRequest
from homeowner_lookup.normalize import address_hash
from homeowner_lookup.parser import parse_response
from homeowner_lookup.storage import HomeownerLookupSQLite, utc_now_iso


logger = logging.getLogger("hl.lookup")

FOUND_MESSAGE = "Homeowner information found"
NOT_FOUND_MESSAGE = "No homeowner information found for this address"

_LISTING_FIELDS = {
    "street": ("addressStreet", "addressstreet", "address_street"),
    "city": ("addressCity", "addresscity", "address_city"),
    "state": ("addressState", "addressstate", "address_state"),
    "zip": ("addressZipcode", "addresszipcode", "address_zipcode", "addressZip"),
}


@dataclass(frozen=True)
class PersistResult:
    ok: bool
    error: Optional[Exception] = None


def _first_present(listing: Dict[str, Any], keys) -> str:
    for key in keys:
        value = listing.get(key)
        if value:
            return str(value).strip()
    return ""


class HomeownerLookupService:
    """Cache-or-fetch homeowner lookup.

    Validate, derive the address key, check the cache, call the provider on a
    miss, parse, persist best-effort, respond. Failed lookups are stored but
    never served from cache, so the next request for the address retries.
    """

    def __init__(self, settings: Settings, store: HomeownerLookupSQLite, client) -> None:
        self.settings = settings
        self.store = store
        self.client = client

    @staticmethod
    def validate(request: LookupRequest) -> None:
        missing = [
            name
            for name in ("street", "city", "state", "zip")
            if not (getattr(request, name) or "").strip()
        ]
        if missing:
            raise InvalidRequest(
                "Missing required address fields: street, city, state, zip"
            )

    def _cached(self, key: str, property_id: Optional[str]) -> Optional[CachedLookup]:
        try:
            return self.store.find(key, property_id)
        except sqlite3.Error as exc:
            logger.warning("persistence warning: cache read failed for %s: %s", key, exc)
            return None

    def _persist(self, record: CachedLookup) -> PersistResult:
        try:
            self.store.upsert(record)
        except sqlite3.Error as exc:
            return PersistResult(ok=False, error=exc)
        return PersistResult(ok=True)

    def lookup(self, request: LookupRequest) -> LookupOutcome:
        self.validate(request)
        logger.info(
            "Homeowner lookup request for: %s, %s, %s %s",
            request.street,
            request.city,
            request.state,
            request.zip,
        )
        key = address_hash(request.street, request.city, request.state, request.zip)

        cached = self._cached(key, request.property_id)
        if cached is not None and cached.lookup_successful:
            logger.info("Cache hit for %s", key)
            return LookupOutcome(
                record=cached.homeowner,
                success=True,
                from_cache=True,
                cached_at=cached.created_at,
            )

        logger.info("Cache miss for %s; calling provider", key)
        raw = self.client.skip_trace(request.street, request.city, request.state, request.zip)
        parsed = parse_response(raw)

        now = utc_now_iso()
        result = self._persist(
            CachedLookup(
                address_hash=key,
                property_id=request.property_id,
                street=request.street,
                city=request.city,
                state=request.state,
                zip=request.zip,
                homeowner=parsed.record,
                lookup_successful=parsed.success,
                raw_response=raw,
                created_at=now,
                updated_at=now,
            )
        )
        if not result.ok:
            logger.warning("persistence warning: failed to cache lookup %s: %s", key, result.error)

        return LookupOutcome(
            record=parsed.record,
            success=parsed.success,
            from_cache=False,
            message=FOUND_MESSAGE if parsed.success else NOT_FOUND_MESSAGE,
        )

    def lookup_from_listing(self, listing: Optional[Dict[str, Any]]) -> LookupOutcome:
        if not listing:
            raise InvalidRequest("No listing provided")
        fields = {
            name: _first_present(listing, keys) for name, keys in _LISTING_FIELDS.items()
        }
        if not all(fields.values()):
            raise InvalidRequest("Listing is missing required address fields")
        property_id = listing.get("zpid") or listing.get("id")
        return self.lookup(
            LookupRequest(
                property_id=str(property_id) if property_id else None,
                **fields,
            )
        )

    def check_cache(self, property_id: str) -> Optional[LookupOutcome]:
        if not property_id:
            return None
        try:
            cached = self.store.get_by_property_id(property_id)
        except sqlite3.Error as exc:
            logger.warning("persistence warning: cache read failed for %s: %s", property_id, exc)
            return None
        if cached is None or not cached.lookup_successful:
            return None
        return LookupOutcome(
            record=cached.homeowner,
            success=True,
            from_cache=True,
            cached_at=cached.created_at,
        )
