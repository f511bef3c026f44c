"""
Dialog controllers for the page: the passphrase gate, the two creation
dialogs and the schedule deletion confirmation.

The controllers hold only transient input state. They call into an
``AppContext`` for persistence and expose the text the page must show.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from timetable.context import AppContext, StoreWriteError
from timetable.records import Collection, Schedule, ServerLink

AUTH_ERROR = "Hasło niepoprawne!"
SCHEDULE_FIELDS_ALERT = "Proszę wypełnić wszystkie wymagane pola!"
SERVER_FIELDS_ALERT = "Proszę wypełnić wszystkie pola!"
SCHEDULE_CREATE_FAILED = "Błąd podczas dodawania rozkładu!"
SERVER_CREATE_FAILED = "Błąd podczas dodawania servera!"
SCHEDULE_DELETE_FAILED = "Błąd podczas usuwania rozkładu!"
SERVER_DELETE_FAILED = "Błąd podczas usuwania servera!"


class DialogStep(Enum):
    CLOSED = "closed"
    PASSPHRASE = "passphrase"
    FORM = "form"
    CONFIRM = "confirm"


class PassphraseGate:
    """Possession of the shared secret string; not an identity."""

    def __init__(self, passphrase: str):
        self._passphrase = passphrase
        self.authenticated = False
        self.error = ""

    def submit(self, attempt: Optional[str]) -> bool:
        """Return whether this attempt matched; a miss never relocks an open gate."""
        matched = hmac.compare_digest(
            (attempt or "").encode("utf-8"), self._passphrase.encode("utf-8")
        )
        if matched:
            self.authenticated = True
            self.error = ""
        else:
            self.error = AUTH_ERROR
        return matched

    def reset(self) -> None:
        self.authenticated = False
        self.error = ""


@dataclass
class ScheduleForm:
    train_number: str = ""
    route: str = ""
    departure: str = ""
    arrival: str = ""
    stations: str = ""
    notes: str = ""
    pdf_file: str = ""

    def to_record(self) -> Schedule:
        return Schedule(
            train_number=self.train_number,
            route=self.route,
            departure=self.departure,
            arrival=self.arrival,
            stations=self.stations,
            notes=self.notes,
            pdf_file=self.pdf_file or None,
        )


@dataclass
class ServerForm:
    name: str = ""
    url: str = ""

    def to_record(self) -> ServerLink:
        return ServerLink(name=self.name, url=self.url)


class CreateScheduleDialog:
    """
    closed -> passphrase -> form -> closed.

    The dialog asks for the passphrase every time it opens. Unlocking it also
    unlocks the page gate; cancelling relocks the page, a successful
    submission leaves the page unlocked.
    """

    def __init__(self, gate: PassphraseGate):
        self.gate = gate
        self.authenticated = False
        self.is_open = False
        self.form = ScheduleForm()
        self.busy = False
        self.alert = ""

    @property
    def step(self) -> DialogStep:
        if not self.is_open:
            return DialogStep.CLOSED
        if not self.authenticated:
            return DialogStep.PASSPHRASE
        return DialogStep.FORM

    def open(self) -> None:
        self.is_open = True
        self.authenticated = False
        self.gate.error = ""
        self.alert = ""

    def authenticate(self, attempt: str) -> bool:
        self.authenticated = self.gate.submit(attempt)
        return self.authenticated

    def cancel(self) -> None:
        self.is_open = False
        self.authenticated = False
        self.gate.reset()
        self.alert = ""

    def submit(self, context: AppContext) -> bool:
        if self.step is not DialogStep.FORM:
            return False
        record = self.form.to_record()
        if record.missing_fields():
            self.alert = SCHEDULE_FIELDS_ALERT
            return False
        self.busy = True
        try:
            context.create(Collection.SCHEDULES, record)
        except StoreWriteError:
            self.alert = SCHEDULE_CREATE_FAILED
            return False
        finally:
            self.busy = False
        self.form = ScheduleForm()
        self.alert = ""
        self.is_open = False
        self.authenticated = False
        return True


class CreateServerDialog:
    """closed -> form -> closed, reachable only while the page is unlocked."""

    def __init__(self, gate: PassphraseGate):
        self.gate = gate
        self.is_open = False
        self.form = ServerForm()
        self.busy = False
        self.alert = ""

    @property
    def step(self) -> DialogStep:
        if self.is_open and self.gate.authenticated:
            return DialogStep.FORM
        return DialogStep.CLOSED

    def open(self) -> bool:
        if not self.gate.authenticated:
            return False
        self.is_open = True
        self.alert = ""
        return True

    def cancel(self) -> None:
        self.is_open = False
        self.alert = ""

    def submit(self, context: AppContext) -> bool:
        if self.step is not DialogStep.FORM:
            return False
        record = self.form.to_record()
        if record.missing_fields():
            self.alert = SERVER_FIELDS_ALERT
            return False
        self.busy = True
        try:
            context.create(Collection.SERVER_LINKS, record)
        except StoreWriteError:
            self.alert = SERVER_CREATE_FAILED
            return False
        finally:
            self.busy = False
        self.form = ServerForm()
        self.alert = ""
        self.is_open = False
        return True


class DeleteScheduleDialog:
    """closed -> passphrase -> confirm -> closed, with its own gate."""

    def __init__(self, passphrase: str):
        self.gate = PassphraseGate(passphrase)
        self.is_open = False
        self.target_id: Optional[str] = None
        self.busy = False
        self.alert = ""

    @property
    def step(self) -> DialogStep:
        if not self.is_open:
            return DialogStep.CLOSED
        if not self.gate.authenticated:
            return DialogStep.PASSPHRASE
        return DialogStep.CONFIRM

    def open(self, schedule_id: str) -> None:
        self.target_id = schedule_id
        self.is_open = True
        self.gate.reset()
        self.alert = ""

    def authenticate(self, attempt: str) -> bool:
        return self.gate.submit(attempt)

    def cancel(self) -> None:
        self.is_open = False
        self.target_id = None
        self.gate.reset()
        self.alert = ""

    def confirm(self, context: AppContext) -> bool:
        if self.step is not DialogStep.CONFIRM or not self.target_id:
            return False
        self.busy = True
        try:
            context.delete(Collection.SCHEDULES, self.target_id)
        except StoreWriteError:
            self.alert = SCHEDULE_DELETE_FAILED
            return False
        finally:
            self.busy = False
        self.cancel()
        return True


def remove_server_link(context: AppContext, gate: PassphraseGate, link_id: str) -> str:
    """Delete a server link while the page is unlocked; returns an alert or ''."""
    if not gate.authenticated:
        return ""
    try:
        context.delete(Collection.SERVER_LINKS, link_id)
    except StoreWriteError:
        return SERVER_DELETE_FAILED
    return ""


@dataclass
class PageDialogs:
    """Everything transient one page session needs."""

    gate: PassphraseGate
    create_schedule: CreateScheduleDialog
    create_server: CreateServerDialog
    delete_schedule: DeleteScheduleDialog
    alert: str = field(default="")

    @classmethod
    def for_passphrase(cls, passphrase: str) -> "PageDialogs":
        gate = PassphraseGate(passphrase)
        return cls(
            gate=gate,
            create_schedule=CreateScheduleDialog(gate),
            create_server=CreateServerDialog(gate),
            delete_schedule=DeleteScheduleDialog(passphrase),
        )
