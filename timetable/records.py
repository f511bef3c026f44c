"""
Record types for the two collections and the helpers that stamp them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Iterable, Optional, Union


class MissingFieldsError(ValueError):
    """Raised when a record is missing one or more required fields."""

    def __init__(self, fields: list[str]):
        super().__init__(f"missing required fields: {', '.join(fields)}")
        self.fields = fields


class Collection(str, Enum):
    SCHEDULES = "schedules"
    SERVER_LINKS = "server_links"

    @property
    def table_name(self) -> str:
        return _TABLE_NAMES[self]

    @property
    def storage_key(self) -> str:
        return _STORAGE_KEYS[self]

    @property
    def record_type(self) -> type:
        return Schedule if self is Collection.SCHEDULES else ServerLink


_TABLE_NAMES = {
    Collection.SCHEDULES: "train_schedules",
    Collection.SERVER_LINKS: "server_links",
}

_STORAGE_KEYS = {
    Collection.SCHEDULES: "trainSchedules",
    Collection.SERVER_LINKS: "serverLinks",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_iso(value: datetime) -> str:
    """Millisecond ISO-8601 in UTC with a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_local_id(taken: Iterable[str], now: Optional[datetime] = None) -> str:
    """
    Millisecond-epoch identifier, bumped past any identifier already taken.
    """
    now = now or utc_now()
    candidate = int(now.timestamp() * 1000)
    existing = set(taken)
    while str(candidate) in existing:
        candidate += 1
    return str(candidate)


@dataclass
class Schedule:
    train_number: str
    route: str
    departure: str
    arrival: str
    stations: str = ""
    notes: str = ""
    pdf_file: Optional[str] = None
    id: str = ""
    created_at: Optional[datetime] = None

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "train_number",
        "route",
        "departure",
        "arrival",
    )

    def missing_fields(self) -> list[str]:
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name)]

    def as_dict(self) -> dict:
        payload = {
            "id": self.id,
            "train_number": self.train_number,
            "route": self.route,
            "departure": self.departure,
            "arrival": self.arrival,
            "stations": self.stations,
            "notes": self.notes,
            "created_at": format_iso(self.created_at) if self.created_at else "",
        }
        if self.pdf_file:
            payload["pdf_file"] = self.pdf_file
        return payload

    @classmethod
    def from_dict(cls, data: dict) -> "Schedule":
        created_at = data.get("created_at")
        return cls(
            id=str(data.get("id") or ""),
            train_number=data.get("train_number") or "",
            route=data.get("route") or "",
            departure=data.get("departure") or "",
            arrival=data.get("arrival") or "",
            stations=data.get("stations") or "",
            notes=data.get("notes") or "",
            pdf_file=data.get("pdf_file") or None,
            created_at=parse_iso(created_at) if created_at else None,
        )


@dataclass
class ServerLink:
    name: str
    url: str
    id: str = ""
    created_at: Optional[datetime] = field(default=None)

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("name", "url")

    def missing_fields(self) -> list[str]:
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name)]

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "created_at": format_iso(self.created_at) if self.created_at else "",
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ServerLink":
        created_at = data.get("created_at")
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            url=data.get("url") or "",
            created_at=parse_iso(created_at) if created_at else None,
        )


Record = Union[Schedule, ServerLink]


def require_fields(record: Record) -> None:
    missing = record.missing_fields()
    if missing:
        raise MissingFieldsError(missing)


def newest_first(records: Iterable[Record]) -> list[Record]:
    """Sort by creation time, most recent first; ties keep their order."""
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(records, key=lambda r: r.created_at or epoch, reverse=True)
