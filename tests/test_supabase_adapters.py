"""Tests for the Supabase record store."""

from dataclasses import dataclass, field

import httpx
import pytest

from rescue_radar.adapters.supabase_sos_repository import SupabaseSosRepository
from rescue_radar.domain.errors import NotFoundError, StatusTransitionError, StoreError
from rescue_radar.domain.sos import Location, SosRecord


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    filters: list[tuple[str, str, object]] = field(default_factory=list)
    error: Exception | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        return self._start("select")

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_payload = payload
        return self._start("insert")

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_payload = payload
        return self._start("update")

    def delete(self) -> "FakeTable":
        return self._start("delete")

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        return self._filter("eq", column, value)

    def neq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        return self._filter("neq", column, value)

    def in_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        return self._filter("in", column, value)

    def gt(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        return self._filter("gt", column, value)

    def lte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        return self._filter("lte", column, value)

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        queue = self.response_queue.get(self._action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)

    def _start(self, action: str) -> "FakeTable":
        self._action = action
        self.filters = []
        return self

    def _filter(  # type: ignore[no-untyped-def]
        self, op: str, column: str, value
    ) -> "FakeTable":
        self.filters.append((op, column, value))
        return self


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _row(status: str = "active", **extra) -> dict[str, object]:  # type: ignore
    row: dict[str, object] = {
        "id": "sos-1",
        "type": "rescue",
        "location": {"lat": 14.6507, "lng": 121.0494},
        "notes": "People trapped on rooftop",
        "timestamp": 1_700_000_000_000,
        "status": status,
        "ttl": 1_700_604_800,
    }
    row.update(extra)
    return row


@pytest.fixture
def supabase_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def repository(supabase_client, clock) -> SupabaseSosRepository:  # type: ignore
    return SupabaseSosRepository(supabase_client, clock=clock)


def test_put_inserts_record_layout(supabase_client, repository) -> None:
    table = supabase_client.table("sos_requests")
    table.queue("insert", [_row()])
    record = SosRecord.from_dict(_row())

    repository.put(record)

    assert table.last_payload == _row()


def test_put_without_returned_row_raises(supabase_client, repository) -> None:
    with pytest.raises(StoreError):
        repository.put(SosRecord.from_dict(_row()))


def test_list_filters_live_unresolved_rows(supabase_client, repository, clock) -> None:
    table = supabase_client.table("sos_requests")
    table.queue("select", [_row(), _row(id="sos-2")])

    records = repository.list("rescue")

    assert [record.id for record in records] == ["sos-1", "sos-2"]
    assert ("neq", "status", "resolved") in table.filters
    assert ("eq", "type", "rescue") in table.filters
    assert ("gt", "ttl", clock.now_ms // 1000) in table.filters


def test_list_by_status(supabase_client, repository) -> None:
    table = supabase_client.table("sos_requests")
    table.queue("select", [_row(status="resolved")])

    records = repository.list(status="resolved")

    assert records[0].status == "resolved"
    assert ("eq", "status", "resolved") in table.filters


def test_update_status_returns_updated_row(supabase_client, repository) -> None:
    table = supabase_client.table("sos_requests")
    table.queue("update", [_row(status="resolved", updatedAt=42)])

    record = repository.update_status("sos-1", "resolved", 42)

    assert record.status == "resolved"
    assert record.updated_at == 42
    assert table.last_payload == {"status": "resolved", "updatedAt": 42}
    assert ("in", "status", ["active"]) in table.filters


def test_update_status_already_resolved_is_noop(supabase_client, repository) -> None:
    table = supabase_client.table("sos_requests")
    table.queue("select", [_row(status="resolved", updatedAt=7)])

    record = repository.update_status("sos-1", "resolved", 42)

    assert record.updated_at == 7


def test_update_status_missing_raises_not_found(repository) -> None:
    with pytest.raises(NotFoundError):
        repository.update_status("missing", "resolved", 42)


def test_update_status_refuses_reactivation(supabase_client, repository) -> None:
    table = supabase_client.table("sos_requests")
    table.queue("select", [_row(status="resolved")])

    with pytest.raises(StatusTransitionError):
        repository.update_status("sos-1", "active", 42)


def test_delete_and_purge(supabase_client, repository) -> None:
    table = supabase_client.table("sos_requests")
    table.queue("delete", [_row()])
    table.queue("delete", [_row(id="a"), _row(id="b")])

    repository.delete("sos-1")
    purged = repository.purge_expired()

    assert purged == 2
    with pytest.raises(NotFoundError):
        repository.delete("sos-1")


def test_transport_failure_becomes_store_error(supabase_client, repository) -> None:
    supabase_client.table("sos_requests").error = httpx.ConnectError("down")

    with pytest.raises(StoreError):
        repository.list()


def test_record_layout_round_trip() -> None:
    record = SosRecord.from_dict(_row(updatedAt=99))

    assert record.location == Location(lat=14.6507, lng=121.0494)
    assert record.to_dict()["updatedAt"] == 99
    assert "updatedAt" not in SosRecord.from_dict(_row()).to_dict()
