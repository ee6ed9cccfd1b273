import logging
import sqlite3

import pytest

from homeowner_lookup.errors import InvalidRequest, ProviderError
from homeowner_lookup.models import CachedLookup, HomeownerRecord, LookupRequest
from homeowner_lookup.normalize import address_hash
from homeowner_lookup.service import HomeownerLookupService


SPRINGFIELD = LookupRequest(street="123 Main St", city="Springfield", state="IL", zip="62704")

FOUND = {
    "meta": {"matchCount": 1},
    "results": {
        "persons": [
            {
                "name": {"first": "Homer", "last": "Simpson"},
                "phoneNumbers": [{"number": "555-7334", "score": "70"}],
            }
        ]
    },
}


def _seed(store, successful, first_name="Cached", property_id=None):
    store.upsert(
        CachedLookup(
            address_hash=address_hash("123 Main St", "Springfield", "IL", "62704"),
            property_id=property_id,
            street="123 Main St",
            city="Springfield",
            state="IL",
            zip="62704",
            homeowner=HomeownerRecord(first_name=first_name),
            lookup_successful=successful,
        )
    )


class BrokenStore:
    def find(self, address_hash, property_id=None):
        raise sqlite3.OperationalError("database is locked")

    def upsert(self, record):
        raise sqlite3.OperationalError("database is locked")


def test_cache_hit_skips_provider(settings, store, fake_client):
    _seed(store, successful=True)
    service = HomeownerLookupService(settings, store, fake_client)

    outcome = service.lookup(
        LookupRequest(street="123 MAIN ST", city="springfield", state="il", zip="62704")
    )

    assert fake_client.calls == []
    assert outcome.from_cache is True
    assert outcome.success is True
    assert outcome.record.first_name == "Cached"
    assert outcome.cached_at is not None


def test_prior_failure_is_retried(settings, store, fake_client):
    _seed(store, successful=False)
    fake_client.response = FOUND
    service = HomeownerLookupService(settings, store, fake_client)

    outcome = service.lookup(SPRINGFIELD)

    assert len(fake_client.calls) == 1
    assert outcome.from_cache is False
    assert outcome.success is True
    assert outcome.record.first_name == "Homer"
    assert store.count() == 1
    assert store.get(address_hash("123 Main St", "Springfield", "IL", "62704")).lookup_successful is True


def test_miss_persists_and_second_call_hits_cache(settings, store, fake_client):
    fake_client.response = FOUND
    service = HomeownerLookupService(settings, store, fake_client)

    first = service.lookup(SPRINGFIELD)
    second = service.lookup(SPRINGFIELD)

    assert first.from_cache is False
    assert first.message == "Homeowner information found"
    assert second.from_cache is True
    assert second.record.phone_numbers[0].number == "555-7334"
    assert len(fake_client.calls) == 1


def test_not_found_is_stored_but_not_served(settings, store, fake_client):
    fake_client.response = {"meta": {"matchCount": 0}, "results": {"persons": []}}
    service = HomeownerLookupService(settings, store, fake_client)

    first = service.lookup(SPRINGFIELD)
    second = service.lookup(SPRINGFIELD)

    assert first.success is False
    assert first.message == "No homeowner information found for this address"
    assert second.from_cache is False
    assert len(fake_client.calls) == 2
    assert store.count() == 1


def test_property_id_used_for_cache_check(settings, store, fake_client):
    _seed(store, successful=True, property_id="zpid-9")
    service = HomeownerLookupService(settings, store, fake_client)

    other_address = LookupRequest(
        street="9 Other Rd", city="Springfield", state="IL", zip="62704", property_id="zpid-9"
    )
    outcome = service.lookup(other_address)

    assert outcome.from_cache is True
    assert fake_client.calls == []


def test_new_property_id_does_not_overwrite_cached_address(settings, store, fake_client):
    _seed(store, successful=True)
    fake_client.response = {"meta": {"matchCount": 0}, "results": {"persons": []}}
    service = HomeownerLookupService(settings, store, fake_client)

    outcome = service.lookup(
        LookupRequest(
            street="123 Main St", city="Springfield", state="IL", zip="62704", property_id="zpid-7"
        )
    )

    assert fake_client.calls == []
    assert outcome.from_cache is True
    assert outcome.record.first_name == "Cached"
    cached = store.get(address_hash("123 Main St", "Springfield", "IL", "62704"))
    assert cached.lookup_successful is True
    assert cached.homeowner.first_name == "Cached"


@pytest.mark.parametrize("field", ["street", "city", "state", "zip"])
def test_missing_field_rejected(settings, store, fake_client, field):
    values = {"street": "1 Elm St", "city": "Metropolis", "state": "NY", "zip": "10001"}
    values[field] = "  "
    service = HomeownerLookupService(settings, store, fake_client)

    with pytest.raises(InvalidRequest):
        service.lookup(LookupRequest(**values))
    assert fake_client.calls == []
    assert store.count() == 0


def test_provider_error_propagates_and_nothing_cached(settings, store, fake_client):
    fake_client.error = ProviderError("boom", status_code=503)
    service = HomeownerLookupService(settings, store, fake_client)

    with pytest.raises(ProviderError) as excinfo:
        service.lookup(SPRINGFIELD)

    assert excinfo.value.status_code == 503
    assert excinfo.value.details == "API returned 503"
    assert store.count() == 0


def test_store_failures_do_not_fail_lookup(settings, fake_client, caplog):
    fake_client.response = FOUND
    service = HomeownerLookupService(settings, BrokenStore(), fake_client)

    with caplog.at_level(logging.WARNING, logger="hl.lookup"):
        outcome = service.lookup(SPRINGFIELD)

    assert outcome.success is True
    assert outcome.record.first_name == "Homer"
    assert len(fake_client.calls) == 1
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert any("cache read failed" in w for w in warnings)
    assert any("failed to cache lookup" in w for w in warnings)


def test_lookup_from_listing_accepts_field_variants(settings, store, fake_client):
    fake_client.response = FOUND
    service = HomeownerLookupService(settings, store, fake_client)

    outcome = service.lookup_from_listing(
        {
            "addressstreet": "123 Main St",
            "address_city": "Springfield",
            "addressState": "IL",
            "addressZip": "62704",
            "zpid": 12345,
        }
    )

    assert outcome.success is True
    assert fake_client.calls == [("123 Main St", "Springfield", "IL", "62704")]
    assert store.get_by_property_id("12345") is not None


def test_lookup_from_listing_rejects_incomplete(settings, store, fake_client):
    service = HomeownerLookupService(settings, store, fake_client)
    with pytest.raises(InvalidRequest):
        service.lookup_from_listing(None)
    with pytest.raises(InvalidRequest):
        service.lookup_from_listing({"addressStreet": "1 Elm St"})


def test_check_cache(settings, store, fake_client):
    service = HomeownerLookupService(settings, store, fake_client)
    assert service.check_cache("zpid-1") is None
    assert service.check_cache("") is None

    _seed(store, successful=False, property_id="zpid-1")
    assert service.check_cache("zpid-1") is None

    _seed(store, successful=True, property_id="zpid-1")
    outcome = service.check_cache("zpid-1")
    assert outcome.from_cache is True
    assert outcome.record.first_name == "Cached"
    assert fake_client.calls == []
