"""Pydantic models for the HTTP API."""

from pydantic import BaseModel, Field

from location_share.domain.sessions import MAX_EPOCH_MS


class FixPayload(BaseModel):
    """A position fix sent by a submitter."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: float = Field(ge=0)
    timestamp: int | None = Field(
        default=None,
        ge=0,
        le=MAX_EPOCH_MS,
        description="Capture time in epoch milliseconds.",
    )
