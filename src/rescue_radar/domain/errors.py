"""Error types shared by services, stores and gateways."""


class SosError(Exception):
    """Base error for SOS operations."""

    kind = "error"


class ValidationError(SosError):
    """A required field is missing or invalid."""

    kind = "validation"


class NotFoundError(SosError):
    """The referenced record does not exist or has expired."""

    kind = "not_found"

    def __init__(self, record_id: str) -> None:
        super().__init__(f"SOS submission not found: {record_id}")
        self.record_id = record_id


class StatusTransitionError(SosError):
    """The requested status change would move a record backwards."""

    kind = "conflict"


class StoreError(SosError):
    """The backing store is unavailable or the operation failed."""

    kind = "unavailable"
