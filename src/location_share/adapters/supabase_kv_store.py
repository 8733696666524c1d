"""Supabase-backed shared key-value store."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from supabase import Client

from location_share.domain.errors import StoreReadFailed, StoreWriteFailed
from location_share.services.store import KeyValueStore, utc_now

_TABLE = "kv_store"


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Supabase implementation of the shared store.

    Expects a table ``kv_store(key text primary key, value text not null,
    expires_at timestamptz null)``.
    """

    client: Client
    clock: Callable[[], datetime] = field(default=utc_now)

    def get(self, key: str) -> str | None:
        """Return the stored value, dropping it when past ``expires_at``."""
        try:
            response = (
                self.client.table(_TABLE)
                .select("value, expires_at")
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise StoreReadFailed(f"Failed to read {key}") from exc
        if not response.data:
            return None
        row = response.data[0]
        expires_at = row.get("expires_at")
        if expires_at and datetime.fromisoformat(expires_at) <= self.clock():
            self.delete(key)
            return None
        return row["value"]

    def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Upsert a value."""
        expires_at = None
        if ttl_seconds is not None:
            expires_at = (self.clock() + timedelta(seconds=ttl_seconds)).isoformat()
        try:
            self.client.table(_TABLE).upsert(
                {"key": key, "value": value, "expires_at": expires_at}
            ).execute()
        except Exception as exc:
            raise StoreWriteFailed(f"Failed to write {key}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.table(_TABLE).delete().eq("key", key).execute()
        except Exception as exc:
            raise StoreWriteFailed(f"Failed to delete {key}") from exc
