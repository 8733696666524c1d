"""Map renderer that reports marker movements to the log."""

import logging
from dataclasses import dataclass

from location_share.services.tracker import MapRenderer

DEFAULT_CENTER = (-23.5505, -46.6333)
DEFAULT_ZOOM = 13
TRACKING_ZOOM = 15

_logger = logging.getLogger(__name__)


@dataclass
class LoggingMapRenderer(MapRenderer):
    """Console stand-in for a map widget."""

    latitude: float = DEFAULT_CENTER[0]
    longitude: float = DEFAULT_CENTER[1]
    zoom: int = DEFAULT_ZOOM
    popup: str = "Waiting for location..."
    released: bool = False

    def show(self, latitude: float, longitude: float, popup: str) -> None:
        """Move the marker and zoom in to at least street level."""
        if self.released:
            return
        self.latitude = latitude
        self.longitude = longitude
        self.zoom = max(self.zoom, TRACKING_ZOOM)
        self.popup = popup
        _logger.info(
            "Marker at %.6f,%.6f (zoom %s)\n%s", latitude, longitude, self.zoom, popup
        )

    def release(self) -> None:
        self.released = True
