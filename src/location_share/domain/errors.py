"""Error taxonomy for location sharing."""

from location_share.domain.sessions import InvalidReason


class LocationShareError(Exception):
    """Base class for location sharing failures."""

    error_code = "LOCATION_SHARE_ERROR"


class SessionError(LocationShareError):
    """Raised when a session link cannot be used."""

    error_code = "SESSION_ERROR"
    reason: InvalidReason

    def __init__(self, session_id: str) -> None:
        super().__init__(f"{self.error_code}: {session_id}")
        self.session_id = session_id


class SessionNotFound(SessionError):
    error_code = "SESSION_NOT_FOUND"
    reason = InvalidReason.NOT_FOUND


class SessionExpired(SessionError):
    error_code = "SESSION_EXPIRED"
    reason = InvalidReason.EXPIRED


class MalformedMetadata(SessionError):
    error_code = "MALFORMED_METADATA"
    reason = InvalidReason.MALFORMED_METADATA


class GeocodingUnavailable(LocationShareError):
    """Raised by geocoding clients; never surfaces past the geocoding service."""

    error_code = "GEOCODING_UNAVAILABLE"


class StoreError(LocationShareError):
    """Raised when the shared key-value store cannot be reached."""

    error_code = "STORE_ERROR"


class StoreReadFailed(StoreError):
    error_code = "STORE_READ_FAILED"


class StoreWriteFailed(StoreError):
    error_code = "STORE_WRITE_FAILED"
