"""Non-conformance endpoints - CRUD, dashboards, CSV."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from nctrack.database import get_db
from nctrack.notifications import Notifier, get_notifier
from nctrack.schemas.analytics import AnalyticsResponse, ImportResult, StatisticsResponse
from nctrack.schemas.nonconformance import NCCreate, NCRead, NCUpdate
from nctrack.storage.queries import get_analytics, get_effectiveness_due, get_statistics, list_ncs
from nctrack.storage.repositories import create_nc, delete_nc, get_nc, update_nc
from nctrack.utils.csv_io import export_ncs, parse_import

logger = logging.getLogger(__name__)

router = APIRouter()

DbDep = Annotated[AsyncSession, Depends(get_db)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]


def _notify_assignment(background: BackgroundTasks, notifier: Notifier, nc: NCRead) -> None:
    if nc.responsible_person and nc.responsible_person_email:
        background.add_task(
            notifier.send_assignment, nc, nc.responsible_person, nc.responsible_person_email
        )


@router.get("/ncs", response_model=list[NCRead])
async def list_non_conformances(
    db: DbDep,
    status: str | None = None,
    severity: str | None = None,
    category: str | None = None,
    department: str | None = None,
    nc_source: str | None = None,
    search: str | None = None,
):
    """List records, newest first, with optional filters."""
    return await list_ncs(
        db,
        status=status,
        severity=severity,
        category=category,
        department=department,
        nc_source=nc_source,
        search=search,
    )


@router.get("/ncs/stats", response_model=StatisticsResponse)
async def statistics(db: DbDep):
    """Dashboard counters."""
    return await get_statistics(db)


@router.get("/ncs/analytics", response_model=AnalyticsResponse)
async def analytics(db: DbDep):
    """SLA, closure-time and effectiveness analytics."""
    return await get_analytics(db, date.today())


@router.get("/ncs/effectiveness-checks", response_model=list[NCRead])
async def effectiveness_checks(db: DbDep):
    """Effectiveness checks that are due and not yet scored."""
    return await get_effectiveness_due(db, date.today())


@router.get("/ncs/export")
async def export_csv(
    db: DbDep,
    status: str | None = None,
    severity: str | None = None,
    category: str | None = None,
    department: str | None = None,
    nc_source: str | None = None,
    search: str | None = None,
):
    """Export the filtered listing as CSV."""
    ncs = await list_ncs(
        db,
        status=status,
        severity=severity,
        category=category,
        department=department,
        nc_source=nc_source,
        search=search,
    )
    filename = f"nc-export-{date.today().isoformat()}.csv"
    return Response(
        content=export_ncs(ncs),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/ncs/import", response_model=ImportResult)
async def import_csv(
    request: Request,
    db: DbDep,
    notifier: NotifierDep,
    background: BackgroundTasks,
):
    """Create records from a CSV body. Invalid rows are reported and skipped."""
    content = (await request.body()).decode("utf-8-sig", errors="replace")
    payloads, errors = parse_import(content, date.today())
    for payload in payloads:
        nc = NCRead.model_validate(await create_nc(db, payload.model_dump()))
        _notify_assignment(background, notifier, nc)
    logger.info("CSV import: %d created, %d rejected", len(payloads), len(errors))
    return ImportResult(imported=len(payloads), errors=errors)


@router.get("/ncs/{nc_id}", response_model=NCRead)
async def get_non_conformance(nc_id: int, db: DbDep):
    nc = await get_nc(db, nc_id)
    if not nc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Non-conformance not found",
        )
    return nc


@router.post("/ncs", response_model=NCRead, status_code=status.HTTP_201_CREATED)
async def create_non_conformance(
    body: NCCreate,
    db: DbDep,
    notifier: NotifierDep,
    background: BackgroundTasks,
):
    """Create a record. Notifies the responsible person when one is assigned."""
    nc = NCRead.model_validate(await create_nc(db, body.model_dump()))
    _notify_assignment(background, notifier, nc)
    return nc


@router.put("/ncs/{nc_id}", response_model=NCRead)
async def update_non_conformance(
    nc_id: int,
    body: NCUpdate,
    db: DbDep,
    notifier: NotifierDep,
    background: BackgroundTasks,
):
    """
    Partial update. Sends an assignment email when a new responsible email is
    supplied, and a status email when the status changes.
    """
    existing = await get_nc(db, nc_id)
    if not existing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Non-conformance not found",
        )
    old_status = existing.status
    old_email = existing.responsible_person_email

    changes = body.changes()
    updated = await update_nc(db, nc_id, changes)
    if updated is None:
        # Deleted between the read and the write.
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Non-conformance not found",
        )
    nc = NCRead.model_validate(updated)

    new_email = changes.get("responsible_person_email")
    new_person = changes.get("responsible_person") or nc.responsible_person
    if new_email and new_email != old_email and new_person:
        background.add_task(notifier.send_assignment, nc, new_person, new_email)

    new_status = changes.get("status")
    if new_status and new_status != old_status and nc.responsible_person_email:
        background.add_task(
            notifier.send_status_change,
            nc,
            nc.responsible_person,
            nc.responsible_person_email,
            old_status,
        )
    return nc


@router.delete("/ncs/{nc_id}")
async def delete_non_conformance(nc_id: int, db: DbDep):
    """Delete a record and its comments."""
    if not await delete_nc(db, nc_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Non-conformance not found",
        )
    return {"message": "Non-conformance deleted successfully"}
