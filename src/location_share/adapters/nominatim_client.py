"""OpenStreetMap Nominatim reverse geocoding client."""

from dataclasses import dataclass

import httpx

from location_share.domain.errors import GeocodingUnavailable
from location_share.services.geocoding import GeocodingClient

DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"


@dataclass
class HttpxNominatimClient(GeocodingClient):
    """HTTPX-backed Nominatim client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10

    @classmethod
    def create(
        cls,
        user_agent: str,
        base_url: str = DEFAULT_NOMINATIM_URL,
        timeout_seconds: float = 10,
    ) -> "HttpxNominatimClient":
        """Create a Nominatim client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            timeout_seconds=timeout_seconds,
        )

    async def reverse(self, latitude: float, longitude: float) -> dict[str, object]:
        """Return the raw reverse geocoding payload for a coordinate pair."""
        try:
            response = await self.http_client.get(
                self.base_url,
                params={
                    "format": "json",
                    "lat": latitude,
                    "lon": longitude,
                    "addressdetails": 1,
                    "zoom": 18,
                },
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise GeocodingUnavailable(str(exc)) from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
