"""Server links sidebar column and the player profile card."""

import streamlit as st

from timetable.dialogs import DialogStep, ServerForm, remove_server_link
from timetable.rendering import EMPTY_SERVERS_TEXT, markdown_text, server_link_items
from timetable.ui.state import PageSession


def _submit(page: PageSession) -> None:
    dialog = page.dialogs.create_server
    dialog.form = ServerForm(
        name=st.session_state.get("server_name", ""),
        url=st.session_state.get("server_url", ""),
    )
    if dialog.submit(page.context):
        st.session_state["server_name"] = ""
        st.session_state["server_url"] = ""


def _remove(page: PageSession, link_id: str) -> None:
    page.dialogs.alert = remove_server_link(page.context, page.dialogs.gate, link_id)


def _create_server_ui(page: PageSession) -> None:
    dialog = page.dialogs.create_server
    if dialog.step is DialogStep.CLOSED:
        return

    with st.container(border=True):
        st.markdown("**Dodaj Nowy Server**")
        st.text_input("Nazwa servera", key="server_name", placeholder="np. Server #1")
        st.text_input(
            "Link do servera",
            key="server_url",
            placeholder="https://www.roblox.com/games/...",
        )
        if dialog.alert:
            st.error(dialog.alert)
        col1, col2 = st.columns(2)
        with col1:
            st.button(
                "Dodawanie..." if dialog.busy else "Dodaj",
                key="server_submit",
                on_click=_submit,
                args=(page,),
                disabled=dialog.busy,
                type="primary",
            )
        with col2:
            st.button("Anuluj", key="server_cancel", on_click=dialog.cancel, disabled=dialog.busy)


def server_links_ui(page: PageSession) -> None:
    gate = page.dialogs.gate
    with st.container(border=True):
        st.subheader("🖥️ Przydzielone składy do servera")
        st.caption("Linki do serverów Roblox")

        if gate.authenticated:
            st.button("➕ Dodaj Server", key="open_create_server", on_click=page.dialogs.create_server.open)
        _create_server_ui(page)

        if page.dialogs.alert:
            st.error(page.dialogs.alert)

        items = list(
            server_link_items(page.context.server_links, page.settings.display_timezone)
        )
        if not items:
            st.caption(EMPTY_SERVERS_TEXT)
        for item in items:
            if gate.authenticated:
                link_col, delete_col = st.columns([4, 1])
                with link_col:
                    st.link_button(markdown_text(item.name), item.url, use_container_width=True)
                with delete_col:
                    st.button(
                        "🗑️",
                        key=f"delete_server_{item.id}",
                        on_click=_remove,
                        args=(page, item.id),
                        help="Usuń server",
                    )
            else:
                st.link_button(markdown_text(item.name), item.url, use_container_width=True)
            if item.created_label:
                st.caption(item.created_label)


def profile_ui(page: PageSession) -> None:
    with st.container(border=True):
        st.subheader("👤 Profil gracza")
        st.link_button("Rysiekbomba - Roblox", page.settings.profile_url, use_container_width=True)
