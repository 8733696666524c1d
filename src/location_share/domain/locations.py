"""Models for location fixes and reports."""

from dataclasses import dataclass
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field


class AddressDetails(BaseModel):
    """Best-effort address resolved from coordinates."""

    street: str | None = None
    number: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    postcode: str | None = None
    display_name: str | None = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class LocationReport(BaseModel):
    """Latest location submitted for a session."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    latitude: float
    longitude: float
    accuracy: float
    timestamp: int
    address: AddressDetails = Field(default_factory=AddressDetails)

    def to_json(self) -> str:
        """Serialize with the wire field names and without empty address parts."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class PositionFix:
    """A single geolocation reading; ``timestamp`` is epoch milliseconds."""

    latitude: float
    longitude: float
    accuracy: float
    timestamp: int


class PositionError(IntEnum):
    """Location errors reported by the platform, numbered as in the W3C API."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3
