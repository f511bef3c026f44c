"""
HTTP routes for the timetable JSON API.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response

from timetable.context import AppContext, StoreWriteError
from timetable.dependencies import get_app_context, require_passphrase
from timetable.dialogs import (
    SCHEDULE_CREATE_FAILED,
    SCHEDULE_DELETE_FAILED,
    SERVER_CREATE_FAILED,
    SERVER_DELETE_FAILED,
)
from timetable.records import Collection, Schedule, ServerLink
from timetable.rendering import PDF_MIME, decode_document, document_filename, status_banner
from timetable.schemas import (
    ScheduleCreate,
    ScheduleListResponse,
    ScheduleOut,
    ServerLinkCreate,
    ServerLinkListResponse,
    ServerLinkOut,
    StatusBannerPayload,
    StatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _schedule_out(schedule: Schedule) -> ScheduleOut:
    return ScheduleOut(
        id=schedule.id,
        train_number=schedule.train_number,
        route=schedule.route,
        departure=schedule.departure,
        arrival=schedule.arrival,
        stations=schedule.stations,
        notes=schedule.notes,
        has_document=bool(schedule.pdf_file),
        created_at=schedule.created_at,
    )


def _server_link_out(link: ServerLink) -> ServerLinkOut:
    return ServerLinkOut(
        id=link.id, name=link.name, url=link.url, created_at=link.created_at
    )


@router.get("/status", response_model=StatusResponse)
def get_status(context: AppContext = Depends(get_app_context)):
    banner = status_banner(context.mode)
    return StatusResponse(
        mode=context.mode.value,
        banner=StatusBannerPayload(**asdict(banner)) if banner else None,
    )


@router.get("/schedules", response_model=ScheduleListResponse)
def list_schedules(context: AppContext = Depends(get_app_context)):
    return ScheduleListResponse(
        schedules=[_schedule_out(s) for s in context.schedules]
    )


@router.post(
    "/schedules",
    response_model=ScheduleOut,
    status_code=201,
    dependencies=[Depends(require_passphrase)],
)
def create_schedule(
    payload: ScheduleCreate, context: AppContext = Depends(get_app_context)
):
    if payload.pdf_file:
        try:
            decode_document(payload.pdf_file)
        except ValueError:
            raise HTTPException(status_code=422, detail="pdf_file is not valid base64")
    record = Schedule(
        train_number=payload.train_number,
        route=payload.route,
        departure=payload.departure,
        arrival=payload.arrival,
        stations=payload.stations,
        notes=payload.notes,
        pdf_file=payload.pdf_file or None,
    )
    try:
        created = context.create(Collection.SCHEDULES, record)
    except StoreWriteError:
        raise HTTPException(status_code=503, detail=SCHEDULE_CREATE_FAILED)
    return _schedule_out(created)


@router.delete(
    "/schedules/{schedule_id}",
    status_code=204,
    dependencies=[Depends(require_passphrase)],
)
def delete_schedule(schedule_id: str, context: AppContext = Depends(get_app_context)):
    try:
        found = context.delete(Collection.SCHEDULES, schedule_id)
    except StoreWriteError:
        raise HTTPException(status_code=503, detail=SCHEDULE_DELETE_FAILED)
    if not found:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return Response(status_code=204)


@router.get("/schedules/{schedule_id}/document")
def get_schedule_document(
    schedule_id: str, context: AppContext = Depends(get_app_context)
):
    schedule = context.get(Collection.SCHEDULES, schedule_id)
    if schedule is None or not schedule.pdf_file:
        raise HTTPException(status_code=404, detail="Document not found")
    try:
        content = decode_document(schedule.pdf_file)
    except ValueError:
        logger.warning("Schedule %s carries an undecodable document", schedule_id)
        raise HTTPException(status_code=404, detail="Document not found")
    filename = quote(document_filename(schedule.train_number))
    return Response(
        content=content,
        media_type=PDF_MIME,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )


@router.get("/server-links", response_model=ServerLinkListResponse)
def list_server_links(context: AppContext = Depends(get_app_context)):
    return ServerLinkListResponse(
        server_links=[_server_link_out(link) for link in context.server_links]
    )


@router.post(
    "/server-links",
    response_model=ServerLinkOut,
    status_code=201,
    dependencies=[Depends(require_passphrase)],
)
def create_server_link(
    payload: ServerLinkCreate, context: AppContext = Depends(get_app_context)
):
    try:
        created = context.create(
            Collection.SERVER_LINKS, ServerLink(name=payload.name, url=payload.url)
        )
    except StoreWriteError:
        raise HTTPException(status_code=503, detail=SERVER_CREATE_FAILED)
    return _server_link_out(created)


@router.delete(
    "/server-links/{link_id}",
    status_code=204,
    dependencies=[Depends(require_passphrase)],
)
def delete_server_link(link_id: str, context: AppContext = Depends(get_app_context)):
    try:
        found = context.delete(Collection.SERVER_LINKS, link_id)
    except StoreWriteError:
        raise HTTPException(status_code=503, detail=SERVER_DELETE_FAILED)
    if not found:
        raise HTTPException(status_code=404, detail="Server link not found")
    return Response(status_code=204)
