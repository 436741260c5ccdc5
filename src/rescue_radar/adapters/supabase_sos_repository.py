"""Supabase-backed SOS record store."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
from supabase import Client, PostgrestAPIError

from rescue_radar.domain.errors import (
    NotFoundError,
    StatusTransitionError,
    StoreError,
    ValidationError,
)
from rescue_radar.domain.sos import (
    RESOLVED,
    STATUSES,
    SosRecord,
    allowed_prior_statuses,
    current_millis,
)
from rescue_radar.services.records import RecordStore

DEFAULT_TABLE = "sos_requests"


@dataclass
class SupabaseSosRepository(RecordStore):
    """Supabase implementation of the record store.

    Postgres has no native row expiry, so every read filters on ``ttl`` and
    ``purge_expired`` removes stale rows.
    """

    client: Client
    table_name: str = DEFAULT_TABLE
    clock: Callable[[], int] = current_millis

    def put(self, record: SosRecord) -> None:
        """Insert a record row."""
        response = _execute(self._table().insert(record.to_dict()))
        if not response.data:
            raise StoreError("Failed to create SOS record in Supabase")

    def get(self, record_id: str) -> SosRecord | None:
        """Return a live record by id, if present."""
        response = _execute(
            self._table()
            .select("*")
            .eq("id", record_id)
            .gt("ttl", self._now_seconds())
            .limit(1)
        )
        if not response.data:
            return None
        return SosRecord.from_dict(response.data[0])

    def update_status(
        self, record_id: str, status: str, updated_at: int
    ) -> SosRecord:
        """Conditionally update status so transitions stay monotonic."""
        if status not in STATUSES:
            raise ValidationError(f"Unknown status: {status}")
        prior = allowed_prior_statuses(status)
        if prior:
            response = _execute(
                self._table()
                .update({"status": status, "updatedAt": updated_at})
                .eq("id", record_id)
                .in_("status", list(prior))
                .gt("ttl", self._now_seconds())
            )
            if response.data:
                return SosRecord.from_dict(response.data[0])
        current = self.get(record_id)
        if current is None:
            raise NotFoundError(record_id)
        if current.status == status:
            return current
        raise StatusTransitionError(
            f"Cannot change SOS {record_id} from {current.status} to {status}"
        )

    def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> list[SosRecord]:
        """Scan the table for live records matching the filters."""
        query = self._table().select("*")
        if status is None:
            query = query.neq("status", RESOLVED)
        else:
            query = query.eq("status", status)
        if type_filter:
            query = query.eq("type", type_filter)
        response = _execute(query.gt("ttl", self._now_seconds()))
        return [SosRecord.from_dict(row) for row in response.data or []]

    def delete(self, record_id: str) -> None:
        """Delete a record row."""
        response = _execute(self._table().delete().eq("id", record_id))
        if not response.data:
            raise NotFoundError(record_id)

    def purge_expired(self) -> int:
        """Delete rows whose ttl has passed."""
        response = _execute(self._table().delete().lte("ttl", self._now_seconds()))
        return len(response.data or [])

    def _table(self) -> Any:
        return self.client.table(self.table_name)

    def _now_seconds(self) -> int:
        return self.clock() // 1000


def _execute(query: Any) -> Any:
    try:
        return query.execute()
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        raise StoreError("Supabase request failed") from exc
