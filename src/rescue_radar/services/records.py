"""Persistence interface for SOS records."""

from typing import Protocol

from rescue_radar.domain.sos import SosRecord


class RecordStore(Protocol):
    """Table of SOS records keyed by id.

    Records whose ttl has passed are treated as absent by every read and
    update. Listing returns rows in no particular order.
    """

    def put(self, record: SosRecord) -> None:
        """Insert a new record."""

    def get(self, record_id: str) -> SosRecord | None:
        """Return a live record by id, if present."""

    def update_status(
        self, record_id: str, status: str, updated_at: int
    ) -> SosRecord:
        """Atomically set status and updatedAt and return the stored record."""

    def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> list[SosRecord]:
        """Return live records; ``status=None`` selects every non-resolved row."""

    def delete(self, record_id: str) -> None:
        """Remove a record."""

    def purge_expired(self) -> int:
        """Delete expired records and return how many were removed."""
