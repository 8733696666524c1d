"""Location reports exchanged through the shared store."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from location_share.domain.locations import AddressDetails, LocationReport, PositionFix
from location_share.services.geocoding import GeocodingService
from location_share.services.store import KeyValueStore, location_key

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportOutcome:
    """Result of submitting a fix."""

    report: LocationReport
    stored: bool


@dataclass
class LocationService:
    """Write and read the latest location report for a session."""

    store: KeyValueStore
    geocoding_service: GeocodingService

    async def report_fix(self, session_id: str, fix: PositionFix) -> ReportOutcome:
        """Geocode a fix and store it unless a newer fix is already stored.

        Geocoding failures degrade to an empty address. Store failures
        propagate as ``StoreReadFailed`` or ``StoreWriteFailed``.
        """
        address = await self.geocoding_service.reverse(fix.latitude, fix.longitude)
        report = LocationReport(
            session_id=session_id,
            latitude=fix.latitude,
            longitude=fix.longitude,
            accuracy=fix.accuracy,
            timestamp=fix.timestamp,
            address=address or AddressDetails(),
        )

        current = self.latest(session_id)
        if current is not None and current.timestamp > report.timestamp:
            _logger.info(
                "Dropping stale fix for session %s (%s < %s)",
                session_id,
                report.timestamp,
                current.timestamp,
            )
            return ReportOutcome(report=report, stored=False)

        self.store.set(location_key(session_id), report.to_json())
        _logger.info("Stored location for session %s", session_id)
        return ReportOutcome(report=report, stored=True)

    def latest(self, session_id: str) -> LocationReport | None:
        """Return the stored report; absence just means no fix has arrived."""
        raw = self.store.get(location_key(session_id))
        if raw is None:
            return None
        try:
            return LocationReport.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Ignoring unreadable location for session %s", session_id)
            return None
