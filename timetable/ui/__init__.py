"""Streamlit page for the timetable board."""
