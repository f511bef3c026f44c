"""
Structured store abstraction: a SQLAlchemy-backed database and an in-memory
test implementation.
"""

from __future__ import annotations

import contextlib
import uuid
from dataclasses import replace
from datetime import timezone
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy import Column, DateTime, String, Text, create_engine, delete, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from timetable.records import Collection, Record, Schedule, ServerLink, newest_first, utc_now

# SQLSTATE for "undefined table" on Postgres.
UNDEFINED_TABLE = "42P01"


class StoreError(Exception):
    """A structured or local store operation failed."""


class MissingCollectionError(StoreError):
    """The store is reachable but the collection's table does not exist."""

    def __init__(self, collection: Collection):
        super().__init__(f"table {collection.table_name!r} does not exist")
        self.collection = collection


class StructuredStore(Protocol):
    """Interface for the hosted structured store."""

    def probe(self, collection: Collection) -> None:
        ...

    def fetch_all(self, collection: Collection) -> list[Record]:
        ...

    def insert(self, collection: Collection, record: Record) -> Record:
        ...

    def delete(self, collection: Collection, record_id: str) -> None:
        ...


class InMemoryStructuredStore:
    """Simple in-memory structured store for development and tests."""

    def __init__(self, missing: Optional[set] = None):
        self.rows: Dict[Collection, Dict[str, Record]] = {c: {} for c in Collection}
        self.missing: set = set(missing or ())
        self.fail_reads = False
        self.fail_writes = False

    def _check(self, collection: Collection) -> None:
        if collection in self.missing:
            raise MissingCollectionError(collection)

    def probe(self, collection: Collection) -> None:
        self._check(collection)
        if self.fail_reads:
            raise StoreError("probe failed")

    def fetch_all(self, collection: Collection) -> list[Record]:
        self._check(collection)
        if self.fail_reads:
            raise StoreError("read failed")
        return newest_first(replace(r) for r in self.rows[collection].values())

    def insert(self, collection: Collection, record: Record) -> Record:
        self._check(collection)
        if self.fail_writes:
            raise StoreError("insert failed")
        stored = replace(record, id=uuid.uuid4().hex, created_at=record.created_at or utc_now())
        self.rows[collection][stored.id] = stored
        return replace(stored)

    def delete(self, collection: Collection, record_id: str) -> None:
        self._check(collection)
        if self.fail_writes:
            raise StoreError("delete failed")
        self.rows[collection].pop(record_id, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        for rows in self.rows.values():
            rows.clear()


def _is_missing_table(exc: DBAPIError) -> bool:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == UNDEFINED_TABLE:
        return True
    message = str(orig).lower()
    return "no such table" in message or (
        "relation" in message and "does not exist" in message
    )


class SqlStructuredStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres
    or SQLite for tests). The access key is used as the password of networked
    URLs that do not carry one.

    Tables are never created implicitly; see ``create_schema``.
    """

    def __init__(self, database_url: str, access_key: Optional[str] = None):
        if not database_url:
            raise ValueError("database_url is required for SqlStructuredStore")
        try:
            url = make_url(database_url)
            if access_key and url.host and url.password is None:
                url = url.set(password=access_key)
            self.engine = create_engine(
                url,
                future=True,
                pool_pre_ping=True,
                pool_recycle=1800,
            )
        except (SQLAlchemyError, ImportError) as exc:
            raise StoreError(f"cannot configure structured store: {exc}") from exc
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )

    @contextlib.contextmanager
    def _translate_errors(self, collection: Collection) -> Iterator[None]:
        try:
            yield
        except DBAPIError as exc:
            if _is_missing_table(exc):
                raise MissingCollectionError(collection) from exc
            raise StoreError(str(exc)) from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def probe(self, collection: Collection) -> None:
        row_type = _ROW_TYPES[collection]
        with self._translate_errors(collection), self.Session() as session:
            session.execute(select(row_type.id).limit(1)).first()

    def fetch_all(self, collection: Collection) -> list[Record]:
        row_type = _ROW_TYPES[collection]
        with self._translate_errors(collection), self.Session() as session:
            rows = session.execute(
                select(row_type).order_by(row_type.created_at.desc())
            ).scalars()
            return [_to_record(collection, row) for row in rows]

    def insert(self, collection: Collection, record: Record) -> Record:
        with self._translate_errors(collection), self.Session() as session:
            row = _to_row(collection, record)
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_record(collection, row)

    def delete(self, collection: Collection, record_id: str) -> None:
        row_type = _ROW_TYPES[collection]
        with self._translate_errors(collection), self.Session() as session:
            session.execute(delete(row_type).where(row_type.id == record_id))
            session.commit()


Base = declarative_base()


def _new_row_id() -> str:
    return uuid.uuid4().hex


class ScheduleRow(Base):
    __tablename__ = Collection.SCHEDULES.table_name

    id = Column(String, primary_key=True, default=_new_row_id)
    train_number = Column(String, nullable=False)
    route = Column(String, nullable=False)
    departure = Column(String, nullable=False)
    arrival = Column(String, nullable=False)
    stations = Column(Text, nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    pdf_file = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)


class ServerLinkRow(Base):
    __tablename__ = Collection.SERVER_LINKS.table_name

    id = Column(String, primary_key=True, default=_new_row_id)
    name = Column(String, nullable=False)
    url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)


_ROW_TYPES = {
    Collection.SCHEDULES: ScheduleRow,
    Collection.SERVER_LINKS: ServerLinkRow,
}


def _aware(value):
    # SQLite hands back naive datetimes.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_row(collection: Collection, record: Record):
    # The store assigns identifiers; the record's own id is never written.
    if collection is Collection.SCHEDULES:
        return ScheduleRow(
            train_number=record.train_number,
            route=record.route,
            departure=record.departure,
            arrival=record.arrival,
            stations=record.stations or "",
            notes=record.notes or "",
            pdf_file=record.pdf_file or None,
            created_at=record.created_at or utc_now(),
        )
    return ServerLinkRow(
        name=record.name,
        url=record.url,
        created_at=record.created_at or utc_now(),
    )


def _to_record(collection: Collection, row) -> Record:
    if collection is Collection.SCHEDULES:
        return Schedule(
            id=row.id,
            train_number=row.train_number,
            route=row.route,
            departure=row.departure,
            arrival=row.arrival,
            stations=row.stations or "",
            notes=row.notes or "",
            pdf_file=row.pdf_file,
            created_at=_aware(row.created_at),
        )
    return ServerLink(
        id=row.id,
        name=row.name,
        url=row.url,
        created_at=_aware(row.created_at),
    )
