"""Shared key-value store abstractions."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

SESSION_METADATA_PREFIX = "session_metadata_"
LOCATION_PREFIX = "location_session_"


class KeyValueStore(Protocol):
    """String key-value store shared by trackers and submitters."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when absent."""

    def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store a value, replacing any previous one."""

    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""


def session_metadata_key(session_id: str) -> str:
    return f"{SESSION_METADATA_PREFIX}{session_id}"


def location_key(session_id: str) -> str:
    return f"{LOCATION_PREFIX}{session_id}"


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _StoreEntry:
    value: str
    expires_at: datetime | None


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store with optional per-key expiry."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._entries: dict[str, _StoreEntry] = {}
        self._clock = clock

    def get(self, key: str) -> str | None:
        """Return a value unless it is missing or past its TTL."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        expires_at = None
        if ttl_seconds is not None:
            expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        self._entries[key] = _StoreEntry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def keys(self) -> list[str]:
        """Return the keys currently held, including expired ones."""
        return list(self._entries)
