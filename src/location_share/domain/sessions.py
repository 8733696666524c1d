"""Domain models for tracking sessions."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

# 9999-12-31T23:59:59.999Z, the last instant a datetime can hold.
MAX_EPOCH_MS = 253402300799999


class InvalidReason(StrEnum):
    """Why a session link cannot be used."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MALFORMED_METADATA = "malformed_metadata"


_INVALID_MESSAGES = {
    InvalidReason.NOT_FOUND: "Tracking session not found.",
    InvalidReason.EXPIRED: "The tracking link has expired.",
    InvalidReason.MALFORMED_METADATA: "Could not read the session data.",
}


class SessionMetadata(BaseModel):
    """Stored session metadata, instants as epoch milliseconds."""

    created: int = Field(ge=0, le=MAX_EPOCH_MS)
    expires: int = Field(ge=0, le=MAX_EPOCH_MS)


@dataclass(frozen=True)
class Session:
    """A time-boxed sharing agreement between a tracker and a submitter."""

    id: str
    created: datetime
    expires: datetime

    def is_expired(self, now: datetime) -> bool:
        """Return True once ``now`` is past the expiry instant."""
        return self.expires < now

    def to_metadata(self) -> SessionMetadata:
        return SessionMetadata(
            created=to_epoch_ms(self.created), expires=to_epoch_ms(self.expires)
        )

    @classmethod
    def from_metadata(cls, session_id: str, metadata: SessionMetadata) -> "Session":
        return cls(
            id=session_id,
            created=from_epoch_ms(metadata.created),
            expires=from_epoch_ms(metadata.expires),
        )


@dataclass(frozen=True)
class SessionValidity:
    """Outcome of a session validity check."""

    valid: bool
    reason: InvalidReason | None = None
    session: Session | None = None

    @classmethod
    def ok(cls, session: Session) -> "SessionValidity":
        return cls(valid=True, session=session)

    @classmethod
    def invalid(cls, reason: InvalidReason) -> "SessionValidity":
        return cls(valid=False, reason=reason)

    @property
    def message(self) -> str | None:
        """User-facing explanation for an invalid link."""
        if self.reason is None:
            return None
        return _INVALID_MESSAGES[self.reason]


def to_epoch_ms(value: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=UTC)
