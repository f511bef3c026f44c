"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException

from timetable.config import Settings, get_settings
from timetable.context import AppContext
from timetable.dialogs import AUTH_ERROR, PassphraseGate

_app_context: AppContext | None = None


def get_app_context() -> AppContext:
    """
    Return a singleton context so backend selection runs once per process.
    """
    global _app_context
    if _app_context:
        return _app_context

    context = AppContext(get_settings())
    context.initialize()
    _app_context = context
    return _app_context


def require_passphrase(
    x_admin_passphrase: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    gate = PassphraseGate(settings.admin_passphrase)
    if not gate.submit(x_admin_passphrase or ""):
        raise HTTPException(status_code=401, detail=AUTH_ERROR)
