"""Validation and creation of new SOS requests."""

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from uuid import uuid4

from rescue_radar.domain.errors import ValidationError
from rescue_radar.domain.sos import (
    ACTIVE,
    EMERGENCY_TYPES,
    SECONDS_PER_DAY,
    Location,
    SosRecord,
    current_millis,
)
from rescue_radar.services.records import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 7


@dataclass
class SubmissionService:
    """Creates SOS records from client payloads."""

    store: RecordStore
    ttl_days: int = DEFAULT_TTL_DAYS
    clock: Callable[[], int] = current_millis

    def submit(self, payload: Mapping[str, object]) -> SosRecord:
        """Validate a payload, persist a new active record and return it."""
        emergency_type, location, notes = _validate(payload)
        timestamp = self.clock()
        record = SosRecord(
            id=str(uuid4()),
            type=emergency_type,
            location=location,
            notes=notes,
            timestamp=timestamp,
            status=ACTIVE,
            ttl=timestamp // 1000 + self.ttl_days * SECONDS_PER_DAY,
        )
        self.store.put(record)
        logger.info(
            "SOS submitted", extra={"sos_id": record.id, "sos_type": record.type}
        )
        return record


def _validate(payload: Mapping[str, object]) -> tuple[str, Location, str]:
    emergency_type = payload.get("type")
    if not isinstance(emergency_type, str) or not emergency_type.strip():
        raise ValidationError("Missing required field: type")
    emergency_type = emergency_type.strip()
    if emergency_type not in EMERGENCY_TYPES:
        allowed = ", ".join(EMERGENCY_TYPES)
        raise ValidationError(
            f"Invalid type '{emergency_type}', expected one of: {allowed}"
        )

    raw_location = payload.get("location")
    if not isinstance(raw_location, Mapping):
        raise ValidationError("Missing required field: location (lat, lng)")
    lat = _coordinate(raw_location, "lat", 90.0)
    lng = _coordinate(raw_location, "lng", 180.0)
    # (0, 0) is what an unset GPS fix reports.
    if lat == 0 and lng == 0:
        raise ValidationError("Missing required field: location (lat, lng)")

    notes = payload.get("notes")
    if notes is None:
        notes = ""
    if not isinstance(notes, str):
        raise ValidationError("Field notes must be a string")
    return emergency_type, Location(lat=lat, lng=lng), notes


def _coordinate(location: Mapping[str, object], name: str, limit: float) -> float:
    value = location.get(name)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(f"Missing required field: location.{name}")
    number = float(value)
    if not math.isfinite(number) or abs(number) > limit:
        raise ValidationError(f"Field location.{name} is out of range")
    return number
