"""Submitter side: consent, location subscription and reporting."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from location_share.domain.errors import StoreError
from location_share.domain.locations import PositionError, PositionFix
from location_share.services.formatting import format_submitter_detail
from location_share.services.locations import LocationService

_logger = logging.getLogger(__name__)


class SubmitterState(StrEnum):
    """States of the submitter flow."""

    AWAITING_USER_CONSENT = "AWAITING_USER_CONSENT"
    AWAITING_BROWSER_PERMISSION = "AWAITING_BROWSER_PERMISSION"
    TRACKING = "TRACKING"
    REPORTING_FAILURE = "REPORTING_FAILURE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMED_OUT = "TIMED_OUT"
    UNSUPPORTED = "UNSUPPORTED"


_ERROR_STATES: dict[PositionError, tuple[SubmitterState, str]] = {
    PositionError.PERMISSION_DENIED: (
        SubmitterState.PERMISSION_DENIED,
        "Location permission denied. Reload the page and accept the permission.",
    ),
    PositionError.POSITION_UNAVAILABLE: (
        SubmitterState.POSITION_UNAVAILABLE,
        "Location information is unavailable.",
    ),
    PositionError.TIMEOUT: (
        SubmitterState.TIMED_OUT,
        "The request to get the location timed out.",
    ),
}


@dataclass(frozen=True)
class WatchOptions:
    """Options for a continuous location subscription."""

    high_accuracy: bool = True
    timeout_ms: int = 10000
    maximum_age_ms: int = 5000


PositionCallback = Callable[[PositionFix], Awaitable[None]]
ErrorCallback = Callable[[PositionError], None]


class PositionSource(Protocol):
    """Platform location API."""

    def watch(
        self,
        on_position: PositionCallback,
        on_error: ErrorCallback,
        options: WatchOptions,
    ) -> int:
        """Start a continuous subscription and return its handle."""

    def cancel(self, handle: int) -> None:
        """Cancel a subscription."""


@dataclass
class SubmitterFlow:
    """Shares the device location for a session after explicit consent."""

    session_id: str
    location_service: LocationService
    position_source: PositionSource | None
    options: WatchOptions = field(default_factory=WatchOptions)
    timezone: str = "UTC"
    state: SubmitterState = SubmitterState.AWAITING_USER_CONSENT
    status: str = "Click to continue."
    detail: str = ""
    _watch_id: int | None = field(default=None, init=False, repr=False)

    @property
    def watching(self) -> bool:
        return self._watch_id is not None

    def confirm(self) -> None:
        """Handle the user gesture that starts location sharing."""
        if self.state != SubmitterState.AWAITING_USER_CONSENT:
            return
        if self.position_source is None:
            self.state = SubmitterState.UNSUPPORTED
            self.status = "Geolocation is not supported on this device."
            self.detail = "Your device does not support geolocation."
            _logger.warning("No location source for session %s", self.session_id)
            return
        self.state = SubmitterState.AWAITING_BROWSER_PERMISSION
        self.status = "Waiting for your browser permission response..."
        self._watch_id = self.position_source.watch(
            self.handle_position, self.handle_error, self.options
        )
        _logger.info("Location watch started for session %s", self.session_id)

    async def handle_position(self, fix: PositionFix) -> None:
        """Report one fix; store failures keep the subscription alive."""
        if not self.watching:
            return
        self.state = SubmitterState.TRACKING
        self.status = "Getting address..."
        try:
            outcome = await self.location_service.report_fix(self.session_id, fix)
        except StoreError:
            _logger.exception("Failed to send location for session %s", self.session_id)
            self.state = SubmitterState.REPORTING_FAILURE
            self.status = "Error sending location."
            self.detail = "Failed to send location. Will retry on the next update."
            return
        self.status = "Sharing location in real time."
        self.detail = format_submitter_detail(outcome.report, self.timezone)

    def handle_error(self, error: PositionError) -> None:
        """Show a platform location error; denial ends the subscription."""
        state, message = _ERROR_STATES.get(
            error, (SubmitterState.POSITION_UNAVAILABLE, "An unknown error occurred.")
        )
        _logger.warning(
            "Geolocation error for session %s: %s", self.session_id, error.name
        )
        self.state = state
        self.status = "Error getting location."
        self.detail = f"ERROR: {message}"
        if error == PositionError.PERMISSION_DENIED:
            self.close()

    def close(self) -> None:
        """Cancel the location subscription, e.g. when the page unloads."""
        watch_id, self._watch_id = self._watch_id, None
        if watch_id is not None:
            self.position_source.cancel(watch_id)
            _logger.info("Location watch cancelled for session %s", self.session_id)
