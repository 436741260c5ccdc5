"""Client-facing SOS gateway with a local fallback implementation.

Clients talk to one ``SosGateway``. When a remote API is configured the
gateway is an HTTP adapter; otherwise ``LocalSosGateway`` runs the same
services over an on-device store. Both report outcomes as ``GatewayResult``
values with the same error kinds, so callers never branch on the backing.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from rescue_radar.domain.errors import NotFoundError, SosError, StoreError
from rescue_radar.domain.sos import (
    ACTIVE,
    RESOLVED,
    SECONDS_PER_DAY,
    Location,
    SosRecord,
    current_millis,
)
from rescue_radar.services.listing import ListingService
from rescue_radar.services.records import RecordStore
from rescue_radar.services.resolution import ResolutionService
from rescue_radar.services.submission import DEFAULT_TTL_DAYS, SubmissionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayResult:
    """Outcome of a gateway call.

    ``error`` is one of ``validation``, ``not_found``, ``conflict`` or
    ``unavailable`` when ``ok`` is false.
    """

    ok: bool
    data: object = None
    message: str = ""
    error: str | None = None

    @property
    def count(self) -> int | None:
        """Number of rows for list results."""
        if isinstance(self.data, list):
            return len(self.data)
        return None


class SosGateway(Protocol):
    """Unified client interface for SOS operations."""

    async def submit(self, payload: Mapping[str, object]) -> GatewayResult:
        """Submit a new SOS request."""

    async def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> GatewayResult:
        """List SOS requests, newest first."""

    async def resolve(self, record_id: str | None) -> GatewayResult:
        """Mark an SOS request as resolved."""

    async def close(self) -> None:
        """Release any underlying resources."""


@dataclass
class LocalSosGateway(SosGateway):
    """Gateway backed by the services and an on-device store."""

    submission_service: SubmissionService
    listing_service: ListingService
    resolution_service: ResolutionService

    async def submit(self, payload: Mapping[str, object]) -> GatewayResult:
        """Validate and store a new request locally."""
        try:
            record = self.submission_service.submit(payload)
        except SosError as exc:
            return _failure(exc)
        return GatewayResult(
            ok=True, data=record.to_dict(), message="SOS submitted successfully"
        )

    async def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> GatewayResult:
        """List local requests, optionally by exact status."""
        try:
            records = self.listing_service.list(type_filter, status)
        except SosError as exc:
            return _failure(exc)
        return GatewayResult(ok=True, data=[record.to_dict() for record in records])

    async def resolve(self, record_id: str | None) -> GatewayResult:
        """Resolve a local request."""
        try:
            record = self.resolution_service.resolve(record_id)
        except SosError as exc:
            return _failure(exc)
        return GatewayResult(
            ok=True, data=record.to_dict(), message="SOS resolved successfully"
        )

    async def delete(self, record_id: str | None) -> GatewayResult:
        """Delete a local request."""
        try:
            self.resolution_service.delete(record_id)
        except SosError as exc:
            return _failure(exc)
        return GatewayResult(ok=True, message="SOS submission deleted successfully")

    async def close(self) -> None:
        """Release the local store."""
        close = getattr(self.resolution_service.store, "close", None)
        if close is not None:
            close()


def _failure(exc: SosError) -> GatewayResult:
    if isinstance(exc, StoreError):
        logger.error("Local SOS store failed", exc_info=exc)
        return GatewayResult(ok=False, message="Local storage failed", error=exc.kind)
    if isinstance(exc, NotFoundError):
        return GatewayResult(
            ok=False, message="SOS submission not found", error=exc.kind
        )
    return GatewayResult(ok=False, message=str(exc), error=exc.kind)


_DEMO_REQUESTS = (
    ("medical", 14.5995, 120.9842, "Elderly person needs urgent medical attention", 60),
    ("food", 14.6091, 121.0223, "Family of 5 needs food supplies", 120),
    ("shelter", 14.5547, 121.0244, "House destroyed, need temporary shelter", 180),
    ("rescue", 14.6507, 121.0494, "People trapped on rooftop due to flooding", 30),
    ("water", 14.5764, 120.9772, "Clean drinking water urgently needed", 90),
)


def seed_demo_records(
    store: RecordStore,
    clock: Callable[[], int] = current_millis,
    ttl_days: int = DEFAULT_TTL_DAYS,
) -> list[SosRecord]:
    """Populate an empty store with sample requests around Manila."""
    if store.list() or store.list(status=RESOLVED):
        return []
    now = clock()
    seeded = []
    for emergency_type, lat, lng, notes, minutes_ago in _DEMO_REQUESTS:
        timestamp = now - minutes_ago * 60_000
        record = SosRecord(
            id=str(uuid4()),
            type=emergency_type,
            location=Location(lat=lat, lng=lng),
            notes=notes,
            timestamp=timestamp,
            status=ACTIVE,
            ttl=timestamp // 1000 + ttl_days * SECONDS_PER_DAY,
        )
        store.put(record)
        seeded.append(record)
    logger.info("Seeded %d demo SOS records", len(seeded))
    return seeded
