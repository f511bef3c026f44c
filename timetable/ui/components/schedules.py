"""Schedule creation dialog, schedule list and the deletion confirmation."""

import html
import logging

import streamlit as st

from timetable.dialogs import DialogStep, ScheduleForm
from timetable.rendering import (
    EMPTY_SCHEDULES_TEXT,
    PDF_MIME,
    CardSequence,
    ScheduleCard,
    accept_document,
    markdown_text,
)
from timetable.ui.state import PageSession

logger = logging.getLogger(__name__)

FORM_KEYS = {
    "train_number": "schedule_train_number",
    "route": "schedule_route",
    "departure": "schedule_departure",
    "arrival": "schedule_arrival",
    "stations": "schedule_stations",
    "notes": "schedule_notes",
}
UPLOAD_NONCE_KEY = "schedule_upload_nonce"


def _upload_key() -> str:
    return f"schedule_pdf_file_{st.session_state.get(UPLOAD_NONCE_KEY, 0)}"


# -------- callbacks --------
def _login(page: PageSession) -> None:
    dialog = page.dialogs.create_schedule
    if dialog.authenticate(st.session_state.get("create_passphrase", "")):
        st.session_state["create_passphrase"] = ""


def _submit(page: PageSession) -> None:
    dialog = page.dialogs.create_schedule
    form = ScheduleForm(
        **{field: st.session_state.get(key, "") for field, key in FORM_KEYS.items()}
    )
    uploaded = st.session_state.get(_upload_key())
    if uploaded is not None:
        form.pdf_file = accept_document(uploaded.name, uploaded.type, uploaded.getvalue()) or ""
    dialog.form = form
    if dialog.submit(page.context):
        for key in FORM_KEYS.values():
            st.session_state[key] = ""
        st.session_state[UPLOAD_NONCE_KEY] = st.session_state.get(UPLOAD_NONCE_KEY, 0) + 1


def _delete_login(page: PageSession) -> None:
    dialog = page.dialogs.delete_schedule
    if dialog.authenticate(st.session_state.get("delete_passphrase", "")):
        st.session_state["delete_passphrase"] = ""


def _delete_confirm(page: PageSession) -> None:
    page.dialogs.delete_schedule.confirm(page.context)


# -------- creation dialog --------
def create_schedule_ui(page: PageSession) -> None:
    dialog = page.dialogs.create_schedule
    st.button(
        "➕ Dodaj Nowy Rozkład",
        key="open_create_schedule",
        on_click=dialog.open,
        type="primary",
    )

    step = dialog.step
    if step is DialogStep.CLOSED:
        return

    with st.container(border=True):
        st.subheader("Dodaj Nowy Rozkład Jazdy")
        st.caption("Wypełnij formularz aby dodać nowy rozkład jazdy pociągu.")

        if step is DialogStep.PASSPHRASE:
            st.text_input(
                "Kod administratora",
                key="create_passphrase",
                type="password",
                placeholder="Wprowadź kod administratora",
            )
            if dialog.gate.error:
                st.error(dialog.gate.error)
            col1, col2 = st.columns(2)
            with col1:
                st.button("Zaloguj się", key="create_login", on_click=_login, args=(page,))
            with col2:
                st.button("Anuluj", key="create_cancel_gate", on_click=dialog.cancel)
            return

        col1, col2 = st.columns(2)
        with col1:
            st.text_input("Numer pociągu *", key=FORM_KEYS["train_number"], placeholder="np. IC 5103")
            st.text_input("Odjazd *", key=FORM_KEYS["departure"], placeholder="np. 08:30")
        with col2:
            st.text_input("Trasa *", key=FORM_KEYS["route"], placeholder="np. Warszawa - Kraków")
            st.text_input("Przyjazd *", key=FORM_KEYS["arrival"], placeholder="np. 11:45")
        st.text_area(
            "Stacje pośrednie",
            key=FORM_KEYS["stations"],
            placeholder="np. Radom (09:15), Kielce (10:20), Miechów (11:10)",
        )
        st.text_area(
            "Uwagi dodatkowe",
            key=FORM_KEYS["notes"],
            placeholder="np. Kursuje codziennie oprócz niedziel",
        )
        st.file_uploader("Rozkład jazdy PDF (opcjonalnie)", type=["pdf"], key=_upload_key())

        if dialog.alert:
            st.error(dialog.alert)

        col1, col2 = st.columns(2)
        with col1:
            st.button(
                "Dodawanie..." if dialog.busy else "Dodaj Rozkład",
                key="create_submit",
                on_click=_submit,
                args=(page,),
                disabled=dialog.busy,
                type="primary",
            )
        with col2:
            st.button("Anuluj", key="create_cancel", on_click=dialog.cancel, disabled=dialog.busy)


# -------- list --------
def _card_header_html(card: ScheduleCard) -> str:
    return (
        f'<div class="timetable-card" style="animation-delay: {card.delay_ms}ms">'
        f"<h3>🚆 {html.escape(card.train_number)}</h3>"
        f'<div class="route">{html.escape(card.route)}</div>'
        f'<div class="stamp">🕒 {html.escape(card.created_label)}</div>'
        "</div>"
    )


def _delete_dialog_ui(page: PageSession) -> None:
    dialog = page.dialogs.delete_schedule
    st.markdown("**Usuń Rozkład Jazdy**")
    if dialog.step is DialogStep.PASSPHRASE:
        st.text_input(
            "Kod administratora",
            key="delete_passphrase",
            type="password",
            placeholder="Wprowadź kod administratora",
        )
        if dialog.gate.error:
            st.error(dialog.gate.error)
        col1, col2 = st.columns(2)
        with col1:
            st.button("Potwierdź", key="delete_login", on_click=_delete_login, args=(page,))
        with col2:
            st.button("Anuluj", key="delete_cancel_gate", on_click=dialog.cancel)
        return

    st.warning("Uwaga! Usunięcie rozkładu jest nieodwracalne.")
    if dialog.alert:
        st.error(dialog.alert)
    col1, col2 = st.columns(2)
    with col1:
        st.button(
            "Usuń Rozkład",
            key="delete_confirm",
            on_click=_delete_confirm,
            args=(page,),
            disabled=dialog.busy,
            type="primary",
        )
    with col2:
        st.button("Anuluj", key="delete_cancel", on_click=dialog.cancel, disabled=dialog.busy)


def _card_ui(page: PageSession, card: ScheduleCard) -> None:
    delete_dialog = page.dialogs.delete_schedule
    with st.container(border=True):
        head, actions = st.columns([4, 1])
        with head:
            st.markdown(_card_header_html(card), unsafe_allow_html=True)
        with actions:
            st.caption(f"📅 {card.added_label}")
            st.button(
                "🗑️",
                key=f"delete_schedule_{card.id}",
                on_click=delete_dialog.open,
                args=(card.id,),
                help="Usuń rozkład",
            )

        col1, col2 = st.columns(2)
        with col1:
            st.markdown(f"**Odjazd:** :green[**{markdown_text(card.departure)}**]")
        with col2:
            st.markdown(f"**Przyjazd:** :red[**{markdown_text(card.arrival)}**]")

        if card.stations:
            st.markdown("📍 **Stacje pośrednie:**")
            st.text(card.stations)
        if card.notes:
            st.write("---")
            st.markdown(f"**Uwagi:** {markdown_text(card.notes)}")
        if card.has_document:
            st.write("---")
            try:
                data = card.document_bytes()
            except ValueError:
                logger.warning("Schedule %s carries an undecodable document", card.id)
            else:
                st.download_button(
                    "📄 Rozkład PDF: Pobierz",
                    data=data,
                    file_name=card.document_name,
                    mime=PDF_MIME,
                    key=f"download_{card.id}",
                )

        if delete_dialog.is_open and delete_dialog.target_id == card.id:
            _delete_dialog_ui(page)


def schedule_list_ui(page: PageSession) -> None:
    cards = CardSequence(page.context.schedules, page.settings.display_timezone)
    if not len(cards):
        with st.container(border=True):
            st.write(EMPTY_SCHEDULES_TEXT)
        return
    for card in cards:
        _card_ui(page, card)
