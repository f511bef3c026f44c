"""Header image, title and the storage status banner."""

import streamlit as st

from timetable.rendering import status_banner
from timetable.ui.state import PageSession

TITLE = "Rozkłady Jazdy przez rysiekbomba"
SUBTITLE = (
    "Oficjalna strona z rozkładami jazdy pociągów. "
    "Wszystkie informacje są aktualizowane regularnie."
)
FOOTER = "© 2025 Rozkłady Jazdy przez rysiekbomba. Wszystkie prawa zastrzeżone."

# Cards fade and slide in; each card sets its own animation-delay.
CARD_CSS = """
<style>
    @keyframes timetable-card-in {
        from { opacity: 0; transform: translateY(1rem); }
        to { opacity: 1; transform: translateY(0); }
    }
    .timetable-card {
        animation: timetable-card-in 0.5s ease-out both;
    }
    .timetable-card .route {
        font-size: 1.1rem;
        color: #374151;
    }
    .timetable-card .stamp {
        font-size: 0.75rem;
        color: #6b7280;
    }
</style>
"""


def header_ui(page: PageSession) -> None:
    """Render the header image and the banner for the session's mode."""
    if page.settings.header_image:
        st.image(page.settings.header_image, caption="Stacja kolejowa Kostrzyn z pociągiem EP07-361")

    st.title(f"🚆 {TITLE}")
    st.write(SUBTITLE)

    banner = status_banner(page.context.mode)
    if banner is None:
        return
    show = {"success": st.success, "warning": st.warning, "info": st.info}[banner.kind]
    show(f"**{banner.title}**\n\n{banner.message}")


def footer_ui() -> None:
    st.write("---")
    st.caption(FOOTER)
