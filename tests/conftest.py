"""Shared test fixtures."""

from dataclasses import dataclass, field, replace

import pytest
from fastapi.testclient import TestClient

from rescue_radar.api.app import create_app
from rescue_radar.config import Settings
from rescue_radar.containers import AppContainer, build_services
from rescue_radar.domain.errors import NotFoundError, StatusTransitionError
from rescue_radar.domain.sos import (
    RESOLVED,
    SosRecord,
    allowed_prior_statuses,
)
from rescue_radar.services.records import RecordStore

START_MS = 1_700_000_000_000


@dataclass
class FakeClock:
    """Manually advanced clock returning epoch milliseconds."""

    now_ms: int = START_MS

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@dataclass
class InMemoryRecordStore(RecordStore):
    """In-memory record store for tests."""

    clock: FakeClock = field(default_factory=FakeClock)
    records: dict[str, SosRecord] = field(default_factory=dict)
    puts: int = 0

    def put(self, record: SosRecord) -> None:
        self.records[record.id] = record
        self.puts += 1

    def get(self, record_id: str) -> SosRecord | None:
        record = self.records.get(record_id)
        if record is None or self._expired(record):
            return None
        return record

    def update_status(
        self, record_id: str, status: str, updated_at: int
    ) -> SosRecord:
        current = self.get(record_id)
        if current is None:
            raise NotFoundError(record_id)
        if current.status in allowed_prior_statuses(status):
            updated = replace(current, status=status, updated_at=updated_at)
            self.records[record_id] = updated
            return updated
        if current.status == status:
            return current
        raise StatusTransitionError(f"{current.status} -> {status}")

    def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> list[SosRecord]:
        rows = [record for record in self.records.values() if not self._expired(record)]
        if status is None:
            rows = [record for record in rows if record.status != RESOLVED]
        else:
            rows = [record for record in rows if record.status == status]
        if type_filter:
            rows = [record for record in rows if record.type == type_filter]
        return rows

    def delete(self, record_id: str) -> None:
        if self.records.pop(record_id, None) is None:
            raise NotFoundError(record_id)

    def purge_expired(self) -> int:
        expired = [rid for rid, rec in self.records.items() if self._expired(rec)]
        for record_id in expired:
            del self.records[record_id]
        return len(expired)

    def _expired(self, record: SosRecord) -> bool:
        return self.clock() // 1000 >= record.ttl


@dataclass
class FailingRecordStore(InMemoryRecordStore):
    """Store whose listing blows up with the given exception."""

    error: Exception = field(default_factory=lambda: RuntimeError("boom"))

    def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> list[SosRecord]:
        raise self.error


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        admin_token="admin-token",
        database_url=f"sqlite:///{tmp_path / 'sos.db'}",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def record_store(clock: FakeClock) -> InMemoryRecordStore:
    return InMemoryRecordStore(clock=clock)


def make_container(
    settings: Settings, store: RecordStore, clock: FakeClock | None = None
) -> AppContainer:
    submission_service, listing_service, resolution_service = build_services(
        store, settings
    )
    if clock is not None:
        submission_service.clock = clock
        resolution_service.clock = clock

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        record_store=store,
        submission_service=submission_service,
        listing_service=listing_service,
        resolution_service=resolution_service,
        close_resources=close_resources,
    )


@pytest.fixture
def container(
    settings: Settings, record_store: InMemoryRecordStore, clock: FakeClock
) -> AppContainer:
    return make_container(settings, record_store, clock)


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def failing_client(settings: Settings) -> TestClient:
    return TestClient(create_app(make_container(settings, FailingRecordStore())))
