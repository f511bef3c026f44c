"""
Pydantic schemas for the JSON API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class StatusBannerPayload(BaseModel):
    kind: Literal["success", "warning", "info"]
    title: str
    message: str


class StatusResponse(BaseModel):
    mode: Literal["local", "ready", "missing"]
    banner: Optional[StatusBannerPayload] = None


class ScheduleCreate(BaseModel):
    train_number: str = Field(..., min_length=1)
    route: str = Field(..., min_length=1)
    departure: str = Field(..., min_length=1)
    arrival: str = Field(..., min_length=1)
    stations: str = ""
    notes: str = ""
    # data:application/pdf;base64,... or bare base64
    pdf_file: Optional[str] = None


class ScheduleOut(BaseModel):
    id: str
    train_number: str
    route: str
    departure: str
    arrival: str
    stations: str
    notes: str
    has_document: bool
    created_at: Optional[datetime] = None


class ScheduleListResponse(BaseModel):
    schedules: list[ScheduleOut]


class ServerLinkCreate(BaseModel):
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class ServerLinkOut(BaseModel):
    id: str
    name: str
    url: str
    created_at: Optional[datetime] = None


class ServerLinkListResponse(BaseModel):
    server_links: list[ServerLinkOut]
