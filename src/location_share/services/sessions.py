"""Session lifecycle: link generation and validity checks."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import uuid4

import httpx
from pydantic import ValidationError

from location_share.domain.errors import (
    MalformedMetadata,
    SessionExpired,
    SessionNotFound,
)
from location_share.domain.sessions import (
    InvalidReason,
    Session,
    SessionMetadata,
    SessionValidity,
)
from location_share.services.store import (
    KeyValueStore,
    location_key,
    session_metadata_key,
    utc_now,
)

DEFAULT_SESSION_TTL = timedelta(hours=3)

_logger = logging.getLogger(__name__)

_REASON_ERRORS = {
    InvalidReason.NOT_FOUND: SessionNotFound,
    InvalidReason.EXPIRED: SessionExpired,
    InvalidReason.MALFORMED_METADATA: MalformedMetadata,
}


@dataclass
class SessionService:
    """Creates sessions and decides whether a session link is still usable."""

    store: KeyValueStore
    public_base_url: str
    ttl: timedelta = DEFAULT_SESSION_TTL
    clock: Callable[[], datetime] = field(default=utc_now)

    def create_session(self) -> tuple[Session, str]:
        """Persist a fresh session and return it with its shareable link."""
        now = self.clock()
        session = Session(id=str(uuid4()), created=now, expires=now + self.ttl)
        self.store.set(
            session_metadata_key(session.id), session.to_metadata().model_dump_json()
        )
        _logger.info("Created session %s (expires %s)", session.id, session.expires)
        return session, self.build_link(session.id)

    def build_link(self, session_id: str) -> str:
        """Return ``<public_base_url>?session=<id>``."""
        return str(httpx.URL(self.public_base_url, params={"session": session_id}))

    def check_validity(self, session_id: str) -> SessionValidity:
        """Classify a session; expired sessions are deleted on detection."""
        raw = self.store.get(session_metadata_key(session_id))
        if raw is None:
            return SessionValidity.invalid(InvalidReason.NOT_FOUND)

        try:
            metadata = SessionMetadata.model_validate_json(raw)
        except ValidationError:
            _logger.warning("Malformed metadata for session %s", session_id)
            return SessionValidity.invalid(InvalidReason.MALFORMED_METADATA)

        try:
            session = Session.from_metadata(session_id, metadata)
        except (OverflowError, OSError, ValueError):
            _logger.warning("Unusable instants for session %s", session_id)
            return SessionValidity.invalid(InvalidReason.MALFORMED_METADATA)
        if session.is_expired(self.clock()):
            self.delete_session(session_id)
            _logger.info("Session %s expired; removed stored data", session_id)
            return SessionValidity.invalid(InvalidReason.EXPIRED)
        return SessionValidity.ok(session)

    def require_valid(self, session_id: str) -> Session:
        """Return the session or raise the error matching its invalid reason."""
        validity = self.check_validity(session_id)
        if validity.session is None:
            raise _REASON_ERRORS[validity.reason](session_id)
        return validity.session

    def delete_session(self, session_id: str) -> None:
        """Remove session metadata together with its location report."""
        self.store.delete(session_metadata_key(session_id))
        self.store.delete(location_key(session_id))
