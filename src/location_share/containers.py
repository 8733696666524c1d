"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from location_share.adapters.map_renderer import LoggingMapRenderer
from location_share.adapters.nominatim_client import HttpxNominatimClient
from location_share.adapters.supabase_kv_store import SupabaseKeyValueStore
from location_share.config import Settings
from location_share.services.geocoding import GeocodingService
from location_share.services.locations import LocationService
from location_share.services.sessions import SessionService
from location_share.services.store import InMemoryKeyValueStore, KeyValueStore
from location_share.services.tracker import TrackerService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    session_service: SessionService
    geocoding_service: GeocodingService
    location_service: LocationService
    tracker_service: TrackerService
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueStore:
    """Return the shared store: Supabase when configured, else in-process."""
    if settings.uses_supabase:
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client)
    _logger.warning("Supabase is not configured; using an in-memory store")
    return InMemoryKeyValueStore()


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    session_service = SessionService(
        store=store,
        public_base_url=resolved_settings.public_base_url,
        ttl=timedelta(hours=resolved_settings.session_ttl_hours),
    )
    nominatim_client = HttpxNominatimClient.create(
        user_agent=resolved_settings.nominatim_user_agent,
        base_url=resolved_settings.nominatim_url,
        timeout_seconds=resolved_settings.geocode_timeout_seconds,
    )
    geocoding_service = GeocodingService(
        client=nominatim_client,
        cache=InMemoryKeyValueStore(),
        cache_ttl_seconds=resolved_settings.geocode_cache_ttl_seconds,
    )
    location_service = LocationService(
        store=store, geocoding_service=geocoding_service
    )
    tracker_service = TrackerService(
        session_service=session_service,
        location_service=location_service,
        renderer_factory=LoggingMapRenderer,
        poll_interval_seconds=resolved_settings.poll_interval_seconds,
        timezone=resolved_settings.display_timezone,
    )

    async def close_resources() -> None:
        await tracker_service.shutdown()
        await nominatim_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        session_service=session_service,
        geocoding_service=geocoding_service,
        location_service=location_service,
        tracker_service=tracker_service,
        close_resources=close_resources,
    )
