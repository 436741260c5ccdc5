"""Embedded SQL record store used when no remote backend is configured."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import JSON, BigInteger, Column, String, Text, create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from rescue_radar.domain.errors import (
    NotFoundError,
    StatusTransitionError,
    StoreError,
    ValidationError,
)
from rescue_radar.domain.sos import (
    RESOLVED,
    STATUSES,
    Location,
    SosRecord,
    allowed_prior_statuses,
    current_millis,
)
from rescue_radar.services.records import RecordStore

Base = declarative_base()


class SosRow(Base):
    __tablename__ = "sos_requests"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    location = Column(JSON, nullable=False)  # {"lat": float, "lng": float}
    notes = Column(Text, nullable=False, default="")
    timestamp = Column(BigInteger, nullable=False)  # epoch ms
    status = Column(String, nullable=False)
    ttl = Column(BigInteger, nullable=False)  # epoch seconds
    updated_at = Column("updatedAt", BigInteger, nullable=True)


def _engine_connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


@dataclass
class SqlAlchemySosRepository(RecordStore):
    """SQLAlchemy implementation of the record store.

    Status changes run as a single conditional UPDATE inside a transaction,
    so concurrent writers sharing the database file cannot interleave a
    read-modify-write.
    """

    session_factory: sessionmaker
    clock: Callable[[], int] = current_millis

    @classmethod
    def create(
        cls, database_url: str, clock: Callable[[], int] = current_millis
    ) -> "SqlAlchemySosRepository":
        """Create a repository and its schema for a database URL."""
        engine = create_engine(
            database_url, connect_args=_engine_connect_args(database_url)
        )
        Base.metadata.create_all(bind=engine)
        return cls(
            session_factory=sessionmaker(
                bind=engine, autoflush=False, expire_on_commit=False
            ),
            clock=clock,
        )

    def put(self, record: SosRecord) -> None:
        """Insert a record row."""
        with self._transaction() as db:
            db.add(
                SosRow(
                    id=record.id,
                    type=record.type,
                    location={"lat": record.location.lat, "lng": record.location.lng},
                    notes=record.notes,
                    timestamp=record.timestamp,
                    status=record.status,
                    ttl=record.ttl,
                    updated_at=record.updated_at,
                )
            )

    def get(self, record_id: str) -> SosRecord | None:
        """Return a live record by id, if present."""
        with self._transaction() as db:
            row = self._live(db).filter(SosRow.id == record_id).first()
            return _to_record(row) if row else None

    def update_status(
        self, record_id: str, status: str, updated_at: int
    ) -> SosRecord:
        """Conditionally update status so transitions stay monotonic."""
        if status not in STATUSES:
            raise ValidationError(f"Unknown status: {status}")
        prior = allowed_prior_statuses(status)
        with self._transaction() as db:
            if prior:
                updated = (
                    self._live(db)
                    .filter(SosRow.id == record_id, SosRow.status.in_(prior))
                    .update(
                        {SosRow.status: status, SosRow.updated_at: updated_at},
                        synchronize_session=False,
                    )
                )
                if updated:
                    row = self._live(db).filter(SosRow.id == record_id).one()
                    return _to_record(row)
            row = self._live(db).filter(SosRow.id == record_id).first()
            if row is None:
                raise NotFoundError(record_id)
            if row.status == status:
                return _to_record(row)
            raise StatusTransitionError(
                f"Cannot change SOS {record_id} from {row.status} to {status}"
            )

    def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> list[SosRecord]:
        """Scan for live records matching the filters."""
        with self._transaction() as db:
            query = self._live(db)
            if status is None:
                query = query.filter(SosRow.status != RESOLVED)
            else:
                query = query.filter(SosRow.status == status)
            if type_filter:
                query = query.filter(SosRow.type == type_filter)
            return [_to_record(row) for row in query.all()]

    def delete(self, record_id: str) -> None:
        """Delete a record row."""
        with self._transaction() as db:
            deleted = (
                db.query(SosRow)
                .filter(SosRow.id == record_id)
                .delete(synchronize_session=False)
            )
            if not deleted:
                raise NotFoundError(record_id)

    def purge_expired(self) -> int:
        """Delete rows whose ttl has passed."""
        with self._transaction() as db:
            return (
                db.query(SosRow)
                .filter(SosRow.ttl <= self._now_seconds())
                .delete(synchronize_session=False)
            )

    def close(self) -> None:
        """Release pooled database connections."""
        self.session_factory.kw["bind"].dispose()

    def _live(self, db: Session):  # type: ignore[no-untyped-def]
        return db.query(SosRow).filter(SosRow.ttl > self._now_seconds())

    def _now_seconds(self) -> int:
        return self.clock() // 1000

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise StoreError("SOS record already exists") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreError("Local SOS store failed") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def _to_record(row: SosRow) -> SosRecord:
    location = row.location or {}
    return SosRecord(
        id=row.id,
        type=row.type,
        location=Location(lat=float(location["lat"]), lng=float(location["lng"])),
        notes=row.notes or "",
        timestamp=int(row.timestamp),
        status=row.status,
        ttl=int(row.ttl),
        updated_at=int(row.updated_at) if row.updated_at is not None else None,
    )
