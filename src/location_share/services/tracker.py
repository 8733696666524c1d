"""Tracker side: link generation and the location poll loop."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from location_share.domain.errors import StoreReadFailed
from location_share.domain.locations import LocationReport
from location_share.domain.sessions import Session
from location_share.services.formatting import format_popup, format_tracker_status
from location_share.services.locations import LocationService
from location_share.services.sessions import SessionService

_logger = logging.getLogger(__name__)


class MapRenderer(Protocol):
    """Interface for the map widget showing the tracked device."""

    def show(self, latitude: float, longitude: float, popup: str) -> None:
        """Move the marker, recenter the view and refresh the popup."""

    def release(self) -> None:
        """Release rendering resources."""


@dataclass
class TrackingSession:
    """Owns the map, the session id and the poll task for one link."""

    session: Session
    link: str
    location_service: LocationService
    renderer: MapRenderer
    poll_interval_seconds: float = 5.0
    timezone: str = "UTC"
    status: str = ""
    last_report: LocationReport | None = None
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _stopped: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.status:
            self.status = (
                f"Session {self.session.id} started. "
                "Waiting for data from the target device..."
            )

    @property
    def session_id(self) -> str:
        return self.session.id

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the poll loop on the running event loop."""
        if self._stopped:
            raise RuntimeError("Tracking session already stopped")
        if self.active:
            return
        _logger.info("Watching session %s", self.session_id)
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the poll loop and release the map."""
        if self._stopped:
            return
        self._stopped = True
        task, self._task = self._task, None
        try:
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                except Exception:
                    _logger.exception("Poll loop for session %s died", self.session_id)
        finally:
            self.renderer.release()
            _logger.info("Stopped watching session %s", self.session_id)

    def poll_once(self) -> LocationReport | None:
        """Read the latest report and render it when it changed."""
        if self._stopped:
            return None
        try:
            report = self.location_service.latest(self.session_id)
        except StoreReadFailed:
            _logger.warning("Polling session %s failed", self.session_id)
            self.status = "Could not reach the location service. Retrying..."
            return None
        if report is None or report == self.last_report:
            return report

        self.renderer.show(
            report.latitude, report.longitude, format_popup(report, self.timezone)
        )
        self.status = format_tracker_status(report, self.timezone)
        self.last_report = report
        return report

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval_seconds)
            try:
                self.poll_once()
            except Exception:
                _logger.exception("Polling session %s failed", self.session_id)
                self.status = "Could not show the latest location. Retrying..."


@dataclass
class TrackerService:
    """Keeps exactly one tracking session active at a time."""

    session_service: SessionService
    location_service: LocationService
    renderer_factory: Callable[[], MapRenderer]
    poll_interval_seconds: float = 5.0
    timezone: str = "UTC"
    current: TrackingSession | None = None

    async def generate_link(self) -> TrackingSession:
        """Tear down the active session, then create and start a new one."""
        await self.shutdown()
        session, link = self.session_service.create_session()
        tracking = TrackingSession(
            session=session,
            link=link,
            location_service=self.location_service,
            renderer=self.renderer_factory(),
            poll_interval_seconds=self.poll_interval_seconds,
            timezone=self.timezone,
        )
        self.current = tracking
        tracking.start()
        return tracking

    async def shutdown(self) -> None:
        """Stop the active tracking session, if any."""
        if self.current is not None:
            await self.current.stop()
            self.current = None
