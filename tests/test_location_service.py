"""Tests for location reporting through the shared store."""

import asyncio

import pytest

from location_share.domain.errors import StoreWriteFailed
from location_share.domain.locations import AddressDetails, LocationReport, PositionFix
from location_share.services.store import location_key


def _fix(timestamp: int = 1_700_000_000_000, **overrides: float) -> PositionFix:
    values = {"latitude": -23.55, "longitude": -46.63, "accuracy": 10.0}
    values.update(overrides)
    return PositionFix(timestamp=timestamp, **values)


def test_reported_fix_reads_back_unchanged(location_service) -> None:
    outcome = asyncio.run(location_service.report_fix("s1", _fix()))

    assert outcome.stored
    assert location_service.latest("s1") == outcome.report
    assert outcome.report.address == AddressDetails(
        street="Avenida Paulista",
        number="1000",
        neighborhood="Bela Vista",
        city="São Paulo",
        state="São Paulo",
        postcode="01310-100",
        display_name="Avenida Paulista, 1000, Bela Vista, São Paulo, SP, 01310-100",
    )


def test_stored_record_uses_wire_field_names(
    location_service, store, geocoding_client
) -> None:
    geocoding_client.available = False

    asyncio.run(location_service.report_fix("s1", _fix()))

    raw = store.get(location_key("s1"))
    assert '"sessionId":"s1"' in raw
    assert '"address":{}' in raw


def test_geocoding_failure_still_stores_report(
    location_service, geocoding_client
) -> None:
    geocoding_client.available = False

    outcome = asyncio.run(location_service.report_fix("s1", _fix()))

    assert outcome.stored
    stored = location_service.latest("s1")
    assert stored is not None
    assert stored.address.is_empty()


def test_each_write_replaces_previous_report(location_service) -> None:
    asyncio.run(location_service.report_fix("s1", _fix(timestamp=1000)))
    newer = _fix(timestamp=2000, latitude=-23.56)
    asyncio.run(location_service.report_fix("s1", newer))

    latest = location_service.latest("s1")

    assert latest.timestamp == 2000
    assert latest.latitude == -23.56


def test_stale_fix_does_not_overwrite_newer_report(location_service) -> None:
    asyncio.run(location_service.report_fix("s1", _fix(timestamp=2000)))

    outcome = asyncio.run(
        location_service.report_fix("s1", _fix(timestamp=1000, latitude=10.0))
    )

    assert not outcome.stored
    assert location_service.latest("s1").timestamp == 2000


def test_latest_is_none_before_any_fix(location_service) -> None:
    assert location_service.latest("s1") is None


def test_unreadable_record_is_treated_as_absent(location_service, store) -> None:
    store.set(location_key("s1"), "garbage")

    assert location_service.latest("s1") is None


def test_write_failure_propagates(location_service, store) -> None:
    store.fail_writes = True

    with pytest.raises(StoreWriteFailed):
        asyncio.run(location_service.report_fix("s1", _fix()))


def test_report_accepts_wire_payload() -> None:
    report = LocationReport.model_validate_json(
        '{"sessionId": "s1", "latitude": 1.5, "longitude": 2.5, '
        '"accuracy": 3, "timestamp": 42, "address": {"city": "Recife"}}'
    )

    assert report.session_id == "s1"
    assert report.address.city == "Recife"
    assert report.address.street is None
