"""Resolution of SOS requests."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from rescue_radar.domain.errors import ValidationError
from rescue_radar.domain.sos import RESOLVED, SosRecord, current_millis
from rescue_radar.services.records import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class ResolutionService:
    """Marks SOS records as resolved."""

    store: RecordStore
    clock: Callable[[], int] = current_millis

    def resolve(self, record_id: str | None) -> SosRecord:
        """Resolve a record by id and return the stored result.

        Resolving a record that is already resolved returns it unchanged.
        """
        if record_id is None or not record_id.strip():
            raise ValidationError("Missing SOS ID")
        record = self.store.update_status(record_id.strip(), RESOLVED, self.clock())
        logger.info("SOS resolved", extra={"sos_id": record.id})
        return record

    def delete(self, record_id: str | None) -> None:
        """Remove a record outright."""
        if record_id is None or not record_id.strip():
            raise ValidationError("Missing SOS ID")
        self.store.delete(record_id.strip())
        logger.info("SOS deleted", extra={"sos_id": record_id})

    def purge_expired(self) -> int:
        """Run the store's expiry sweep."""
        purged = self.store.purge_expired()
        logger.info("Expired SOS records purged", extra={"purged": purged})
        return purged
