"""
Presentation helpers: status banner text, card view models, timestamp
formatting and embedded documents.

Nothing here touches storage; the page and the API feed it records from the
application context.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, Optional
from urllib.parse import unquote_to_bytes

import pytz

from timetable.records import Schedule, ServerLink
from timetable.selector import BackendMode

PDF_MIME = "application/pdf"

# The list animation starts after a one-shot delay and each card is offset by
# its position in the list.
ANIMATION_START_MS = 100
STAGGER_MS = 100

EMPTY_SCHEDULES_TEXT = (
    "Nie dodano jeszcze żadnych rozkładów jazdy. "
    "Kliknij przycisk powyżej aby dodać pierwszy."
)
EMPTY_SERVERS_TEXT = "Brak dodanych serverów"

# Backslash-escapable punctuation that Streamlit markdown would otherwise
# interpret, including the colon and brackets of `:color[...]` directives.
_MARKDOWN_SPECIAL = re.compile(r"([\\`*_{}\[\]()#+\-.!|~<>$:])")

_MONTHS_GENITIVE = (
    "stycznia",
    "lutego",
    "marca",
    "kwietnia",
    "maja",
    "czerwca",
    "lipca",
    "sierpnia",
    "września",
    "października",
    "listopada",
    "grudnia",
)


@dataclass(frozen=True)
class StatusBanner:
    kind: str  # "success" | "warning" | "info"
    title: str
    message: str


_BANNERS = {
    BackendMode.REMOTE_READY: StatusBanner(
        kind="success",
        title="Baza danych połączona",
        message="Wszyscy użytkownicy widzą te same rozkłady. Dane są zapisywane we wspólnej bazie danych.",
    ),
    BackendMode.REMOTE_MISSING_SCHEMA: StatusBanner(
        kind="warning",
        title="Baza danych wymaga konfiguracji",
        message=(
            "Baza danych jest połączona, ale tabele nie zostały utworzone. "
            "Uruchom skrypt scripts/create_tables.py aby włączyć synchronizację."
        ),
    ),
    BackendMode.LOCAL: StatusBanner(
        kind="info",
        title="Tryb lokalny",
        message=(
            "Dane są zapisywane tylko w lokalnym pliku na tym serwerze. "
            "Skonfiguruj bazę danych aby udostępnić rozkłady innym użytkownikom."
        ),
    ),
}


def status_banner(mode: Optional[BackendMode]) -> Optional[StatusBanner]:
    if mode is None:
        return None
    return _BANNERS[mode]


def markdown_text(value: Optional[str]) -> str:
    """Escape free text so markdown shows it verbatim; line breaks are kept."""
    escaped = _MARKDOWN_SPECIAL.sub(r"\\\1", value or "")
    return escaped.replace("\n", "  \n")


def format_timestamp(value: Optional[datetime], timezone_name: str) -> str:
    """Polish long-month date with hour and minute, e.g. '5 maja 2025 14:05'."""
    if value is None:
        return ""
    local = value.astimezone(pytz.timezone(timezone_name))
    return f"{local.day} {_MONTHS_GENITIVE[local.month - 1]} {local.year} {local:%H:%M}"


def encode_document(data: bytes, mime: str = PDF_MIME) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_document(payload: str) -> bytes:
    """Accepts a data URL or bare base64 text."""
    try:
        if payload.startswith("data:"):
            header, _, body = payload.partition(",")
            if header.endswith(";base64"):
                return base64.b64decode(body, validate=True)
            return unquote_to_bytes(body)
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("embedded document is not valid base64") from exc


def accept_document(filename: str, mime: Optional[str], data: bytes) -> Optional[str]:
    """Encode an uploaded file, or return None if it is not a PDF."""
    if mime != PDF_MIME and not (filename or "").lower().endswith(".pdf"):
        return None
    return encode_document(data, PDF_MIME)


def document_filename(train_number: str) -> str:
    return f"rozkład-{train_number}.pdf"


@dataclass(frozen=True)
class ScheduleCard:
    id: str
    train_number: str
    route: str
    departure: str
    arrival: str
    stations: Optional[str]
    notes: Optional[str]
    document: Optional[str]
    added_label: str
    created_label: str
    delay_ms: int

    @property
    def has_document(self) -> bool:
        return bool(self.document)

    @property
    def document_name(self) -> str:
        return document_filename(self.train_number)

    def document_bytes(self) -> bytes:
        return decode_document(self.document or "")


def schedule_card(schedule: Schedule, position: int, timezone_name: str) -> ScheduleCard:
    stamp = format_timestamp(schedule.created_at, timezone_name)
    return ScheduleCard(
        id=schedule.id,
        train_number=schedule.train_number,
        route=schedule.route,
        departure=schedule.departure,
        arrival=schedule.arrival,
        stations=schedule.stations or None,
        notes=schedule.notes or None,
        document=schedule.pdf_file or None,
        added_label=f"Dodano: {stamp}",
        created_label=f"Utworzono: {stamp}",
        delay_ms=ANIMATION_START_MS + position * STAGGER_MS,
    )


class CardSequence:
    """
    Lazy, restartable sequence of schedule cards in list order. Each call to
    ``iter`` starts again from the first card.
    """

    def __init__(self, schedules: Iterable[Schedule], timezone_name: str):
        self._schedules = list(schedules)
        self._timezone_name = timezone_name

    def __len__(self) -> int:
        return len(self._schedules)

    def __iter__(self) -> Iterator[ScheduleCard]:
        for position, schedule in enumerate(self._schedules):
            yield schedule_card(schedule, position, self._timezone_name)


@dataclass(frozen=True)
class ServerLinkItem:
    id: str
    name: str
    url: str
    created_label: str


def server_link_items(
    links: Iterable[ServerLink], timezone_name: str
) -> Iterator[ServerLinkItem]:
    for link in links:
        yield ServerLinkItem(
            id=link.id,
            name=link.name,
            url=link.url,
            created_label=format_timestamp(link.created_at, timezone_name),
        )
