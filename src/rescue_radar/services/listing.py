"""Listing of open SOS requests."""

from dataclasses import dataclass

from rescue_radar.domain.sos import SosRecord, normalize_type_filter
from rescue_radar.services.records import RecordStore


@dataclass
class ListingService:
    """Returns SOS records newest first."""

    store: RecordStore

    def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> list[SosRecord]:
        """Return non-resolved records (or those with ``status``), newest first."""
        records = self.store.list(normalize_type_filter(type_filter), status)
        return sorted(records, key=lambda record: record.timestamp, reverse=True)
