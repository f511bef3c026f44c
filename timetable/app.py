"""
FastAPI application entry point for the timetable JSON API.
"""

from __future__ import annotations

from fastapi import FastAPI

from timetable.config import configure_logging, get_settings
from timetable.routes import router


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    app = FastAPI(title="Timetable Board", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
