"""Best-effort reverse geocoding with caching."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from location_share.domain.errors import GeocodingUnavailable
from location_share.domain.locations import AddressDetails
from location_share.services.store import KeyValueStore

_FIELD_SOURCES: dict[str, tuple[str, ...]] = {
    "street": ("road", "pedestrian", "street"),
    "number": ("house_number",),
    "neighborhood": ("suburb", "quarter", "village", "city_district"),
    "city": ("city", "town", "village", "municipality"),
    "state": ("state",),
    "postcode": ("postcode",),
}

_logger = logging.getLogger(__name__)


class GeocodingClient(Protocol):
    """Interface for reverse geocoding providers."""

    async def reverse(self, latitude: float, longitude: float) -> dict[str, object]:
        """Return the raw provider payload for a coordinate pair."""


@dataclass
class GeocodingService:
    """Resolve coordinates to an address without ever failing the caller."""

    client: GeocodingClient
    cache: KeyValueStore
    cache_ttl_seconds: int = 86400

    async def reverse(self, latitude: float, longitude: float) -> AddressDetails | None:
        """Return address details, or None when nothing could be resolved."""
        cache_key = f"geocode:{latitude:.5f}:{longitude:.5f}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            try:
                return AddressDetails.model_validate_json(cached)
            except ValidationError:
                self.cache.delete(cache_key)

        try:
            payload = await self.client.reverse(latitude, longitude)
        except GeocodingUnavailable as exc:
            _logger.warning(
                "Reverse geocoding unavailable for %s,%s: %s", latitude, longitude, exc
            )
            return None

        address = parse_address(payload)
        if address is not None:
            self.cache.set(
                cache_key,
                address.model_dump_json(exclude_none=True),
                ttl_seconds=self.cache_ttl_seconds,
            )
        return address


def parse_address(payload: dict[str, object]) -> AddressDetails | None:
    """Map a Nominatim payload to address details, dropping empty fields."""
    raw = payload.get("address") if isinstance(payload, dict) else None
    if not isinstance(raw, dict):
        return None

    values: dict[str, str] = {}
    for name, sources in _FIELD_SOURCES.items():
        for source in sources:
            value = raw.get(source)
            if value:
                values[name] = str(value)
                break
    display_name = payload.get("display_name")
    if display_name:
        values["display_name"] = str(display_name)
    return AddressDetails(**values)
