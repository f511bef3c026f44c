"""
Streamlit page for the timetable board.
Run by `streamlit run timetable/ui/streamlit_app.py`.
"""

import streamlit as st

from timetable.config import configure_logging, get_settings
from timetable.ui.components.header import CARD_CSS, footer_ui, header_ui
from timetable.ui.components.schedules import create_schedule_ui, schedule_list_ui
from timetable.ui.components.servers import profile_ui, server_links_ui
from timetable.ui.state import get_page_session


def main():
    """Main application entry point."""
    st.set_page_config(page_title="Rozkłady Jazdy", page_icon="🚆", layout="wide")
    st.markdown(CARD_CSS, unsafe_allow_html=True)

    settings = get_settings()
    configure_logging(settings)
    page = get_page_session(settings)

    header_ui(page)

    main_col, side_col = st.columns([3, 1])
    with main_col:
        create_schedule_ui(page)
        schedule_list_ui(page)
    with side_col:
        server_links_ui(page)
        profile_ui(page)

    footer_ui()


if __name__ == "__main__":
    main()
