"""Domain models for SOS requests."""

import time
from dataclasses import dataclass
from typing import Any

ACTIVE = "active"
RESOLVED = "resolved"
STATUSES = (ACTIVE, RESOLVED)

EMERGENCY_TYPES = ("medical", "food", "shelter", "rescue", "water", "other")

ALL_TYPES = "all"
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class Location:
    """Geographic point in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True)
class SosRecord:
    """A single emergency request."""

    id: str
    type: str
    location: Location
    notes: str
    timestamp: int
    status: str
    ttl: int
    updated_at: int | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to the persisted key/value layout."""
        data: dict[str, object] = {
            "id": self.id,
            "type": self.type,
            "location": {"lat": self.location.lat, "lng": self.location.lng},
            "notes": self.notes,
            "timestamp": self.timestamp,
            "status": self.status,
            "ttl": self.ttl,
        }
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "SosRecord":
        """Build a record from a stored row."""
        location = row.get("location") or {}
        updated_at = row.get("updatedAt")
        return cls(
            id=str(row["id"]),
            type=str(row["type"]),
            location=Location(lat=float(location["lat"]), lng=float(location["lng"])),
            notes=str(row.get("notes") or ""),
            timestamp=int(row["timestamp"]),
            status=str(row["status"]),
            ttl=int(row["ttl"]),
            updated_at=int(updated_at) if updated_at is not None else None,
        )


@dataclass(frozen=True)
class EmergencyTypeInfo:
    """Display metadata for an emergency type."""

    value: str
    label: str
    color: str
    icon: str


EMERGENCY_TYPE_INFO = (
    EmergencyTypeInfo("medical", "Medical Emergency", "#ef4444", "\U0001f3e5"),
    EmergencyTypeInfo("food", "Food & Supplies", "#f59e0b", "\U0001f37d\ufe0f"),
    EmergencyTypeInfo("shelter", "Shelter Needed", "#8b5cf6", "\U0001f3e0"),
    EmergencyTypeInfo("rescue", "Rescue Required", "#ec4899", "\U0001f681"),
    EmergencyTypeInfo("water", "Water Needed", "#06b6d4", "\U0001f4a7"),
    EmergencyTypeInfo("other", "Other", "#6b7280", "\U0001f4e2"),
)


def get_emergency_type_info(value: str) -> EmergencyTypeInfo:
    """Return metadata for a type, falling back to ``other``."""
    for info in EMERGENCY_TYPE_INFO:
        if info.value == value:
            return info
    return EMERGENCY_TYPE_INFO[-1]


def current_millis() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def normalize_type_filter(type_filter: str | None) -> str | None:
    """Collapse empty and ``all`` filters to no filter."""
    if type_filter is None:
        return None
    cleaned = type_filter.strip()
    if cleaned in {"", ALL_TYPES}:
        return None
    return cleaned


def allowed_prior_statuses(new_status: str) -> tuple[str, ...]:
    """Statuses a record may hold for a transition into ``new_status``."""
    if new_status == RESOLVED:
        return (ACTIVE,)
    return ()
