"""Per-session page state."""

from __future__ import annotations

from dataclasses import dataclass

import streamlit as st

from timetable.config import Settings
from timetable.context import AppContext
from timetable.dialogs import PageDialogs

SESSION_KEY = "timetable_page"


@dataclass
class PageSession:
    settings: Settings
    context: AppContext
    dialogs: PageDialogs


def get_page_session(settings: Settings) -> PageSession:
    """Create the session's context on first access; backend selection runs here once."""
    if SESSION_KEY not in st.session_state:
        context = AppContext(settings)
        context.initialize()
        st.session_state[SESSION_KEY] = PageSession(
            settings=settings,
            context=context,
            dialogs=PageDialogs.for_passphrase(settings.admin_passphrase),
        )
    return st.session_state[SESSION_KEY]
