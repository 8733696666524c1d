"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from location_share.config import Settings
from location_share.containers import AppContainer
from location_share.domain.errors import (
    GeocodingUnavailable,
    StoreReadFailed,
    StoreWriteFailed,
)
from location_share.services.geocoding import GeocodingClient, GeocodingService
from location_share.services.locations import LocationService
from location_share.services.sessions import SessionService
from location_share.services.store import InMemoryKeyValueStore
from location_share.services.submitter import (
    ErrorCallback,
    PositionCallback,
    PositionSource,
    WatchOptions,
)
from location_share.services.tracker import MapRenderer, TrackerService

NOMINATIM_PAYLOAD: dict[str, object] = {
    "display_name": "Avenida Paulista, 1000, Bela Vista, São Paulo, SP, 01310-100",
    "address": {
        "road": "Avenida Paulista",
        "house_number": "1000",
        "suburb": "Bela Vista",
        "city": "São Paulo",
        "state": "São Paulo",
        "postcode": "01310-100",
    },
}


@dataclass
class VirtualClock:
    """Controllable clock returning aware UTC datetimes."""

    now: datetime = field(default_factory=lambda: datetime(2024, 5, 1, 12, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store that can be told to fail reads or writes."""

    def __init__(self, clock: VirtualClock) -> None:
        super().__init__(clock=clock)
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StoreReadFailed(key)
        return super().get(key)

    def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        if self.fail_writes:
            raise StoreWriteFailed(key)
        super().set(key, value, ttl_seconds)

    def delete(self, key: str) -> None:
        if self.fail_writes:
            raise StoreWriteFailed(key)
        super().delete(key)


@dataclass
class FakeGeocodingClient(GeocodingClient):
    """Geocoding client returning a fixed payload or failing."""

    payload: dict[str, object] = field(default_factory=lambda: dict(NOMINATIM_PAYLOAD))
    available: bool = True
    calls: list[tuple[float, float]] = field(default_factory=list)

    async def reverse(self, latitude: float, longitude: float) -> dict[str, object]:
        self.calls.append((latitude, longitude))
        if not self.available:
            raise GeocodingUnavailable("service down")
        return self.payload


@dataclass
class RecordingMapRenderer(MapRenderer):
    """Map renderer that records every marker update."""

    shown: list[tuple[float, float, str]] = field(default_factory=list)
    released: bool = False

    def show(self, latitude: float, longitude: float, popup: str) -> None:
        self.shown.append((latitude, longitude, popup))

    def release(self) -> None:
        self.released = True


@dataclass
class FakePositionSource(PositionSource):
    """Position source that records subscriptions without emitting fixes."""

    watches: list[tuple[PositionCallback, ErrorCallback, WatchOptions]] = field(
        default_factory=list
    )
    cancelled: list[int] = field(default_factory=list)

    def watch(
        self,
        on_position: PositionCallback,
        on_error: ErrorCallback,
        options: WatchOptions,
    ) -> int:
        self.watches.append((on_position, on_error, options))
        return len(self.watches)

    def cancel(self, handle: int) -> None:
        self.cancelled.append(handle)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        public_base_url="https://share.example.com/",
        poll_interval_seconds=0.01,
    )


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def store(clock: VirtualClock) -> FlakyStore:
    return FlakyStore(clock)


@pytest.fixture
def geocoding_client() -> FakeGeocodingClient:
    return FakeGeocodingClient()


@pytest.fixture
def geocoding_service(
    geocoding_client: FakeGeocodingClient, clock: VirtualClock
) -> GeocodingService:
    return GeocodingService(
        client=geocoding_client, cache=InMemoryKeyValueStore(clock=clock)
    )


@pytest.fixture
def session_service(
    store: FlakyStore, settings: Settings, clock: VirtualClock
) -> SessionService:
    return SessionService(
        store=store, public_base_url=settings.public_base_url, clock=clock
    )


@pytest.fixture
def location_service(
    store: FlakyStore, geocoding_service: GeocodingService
) -> LocationService:
    return LocationService(store=store, geocoding_service=geocoding_service)


@pytest.fixture
def container(
    settings: Settings,
    store: FlakyStore,
    session_service: SessionService,
    geocoding_service: GeocodingService,
    location_service: LocationService,
) -> AppContainer:
    tracker_service = TrackerService(
        session_service=session_service,
        location_service=location_service,
        renderer_factory=RecordingMapRenderer,
        poll_interval_seconds=settings.poll_interval_seconds,
    )

    async def close_resources() -> None:
        await tracker_service.shutdown()

    return AppContainer(
        settings=settings,
        store=store,
        session_service=session_service,
        geocoding_service=geocoding_service,
        location_service=location_service,
        tracker_service=tracker_service,
        close_resources=close_resources,
    )
