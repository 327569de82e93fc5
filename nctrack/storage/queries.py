"""Read-only derived views over non-conformance records."""

from datetime import date

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nctrack.engine.analytics import (
    average_days,
    closure_distribution,
    days_between,
    round_half_up,
    sla_compliance_rate,
)
from nctrack.models import NonConformance, Status
from nctrack.schemas.analytics import (
    AnalyticsResponse,
    ClosureBucket,
    DepartmentBreakdown,
    OverdueNC,
    RootCauseCount,
    StatisticsResponse,
    TimelinePoint,
)

TIMELINE_DAYS = 30

_CLOSED = Status.CLOSED.value


def _non_empty(column):
    return (column.is_not(None)) & (column != "")


async def list_ncs(
    db: AsyncSession,
    status: str | None = None,
    severity: str | None = None,
    category: str | None = None,
    department: str | None = None,
    nc_source: str | None = None,
    search: str | None = None,
) -> list[NonConformance]:
    """Filtered listing, newest first. Absent filters do not constrain."""
    query = select(NonConformance)
    equality = {
        NonConformance.status: status,
        NonConformance.severity: severity,
        NonConformance.category: category,
        NonConformance.department: department,
        NonConformance.nc_source: nc_source,
    }
    for column, value in equality.items():
        if value:
            query = query.where(column == value)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(NonConformance.title.ilike(pattern), NonConformance.description.ilike(pattern))
        )
    query = query.order_by(NonConformance.created_at.desc(), NonConformance.id.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def _count_by(db: AsyncSession, column, skip_empty: bool = False) -> dict[str, int]:
    query = select(column, func.count()).group_by(column)
    if skip_empty:
        query = query.where(_non_empty(column))
    result = await db.execute(query)
    return {key: count for key, count in result.all()}


async def get_statistics(db: AsyncSession) -> StatisticsResponse:
    """Dashboard counters and the report-date timeline."""
    total = (
        await db.execute(select(func.count()).select_from(NonConformance))
    ).scalar_one()

    result = await db.execute(
        select(NonConformance.date_reported, func.count())
        .group_by(NonConformance.date_reported)
        .order_by(NonConformance.date_reported.desc())
        .limit(TIMELINE_DAYS)
    )
    timeline = [
        TimelinePoint(date=reported.isoformat(), count=count) for reported, count in result.all()
    ]

    return StatisticsResponse(
        total=total,
        by_status=await _count_by(db, NonConformance.status),
        by_severity=await _count_by(db, NonConformance.severity),
        by_source=await _count_by(db, NonConformance.nc_source, skip_empty=True),
        timeline=timeline,
    )


async def get_effectiveness_due(db: AsyncSession, today: date) -> list[NonConformance]:
    """Checks that are due and not yet scored, most overdue first."""
    result = await db.execute(
        select(NonConformance)
        .where(NonConformance.needs_effectiveness_check.is_(True))
        .where(NonConformance.effectiveness_check_date <= today)
        .where(
            or_(
                NonConformance.effectiveness_score.is_(None),
                NonConformance.effectiveness_score == 0,
            )
        )
        .order_by(NonConformance.effectiveness_check_date.asc(), NonConformance.id.asc())
    )
    return list(result.scalars().all())


async def get_analytics(db: AsyncSession, today: date) -> AnalyticsResponse:
    """
    Reporting bundle. Composed from independent queries; a reporting view
    tolerates the read skew between them.
    """
    # Closed records with both dates drive every closure-time metric.
    result = await db.execute(
        select(
            NonConformance.department,
            NonConformance.date_reported,
            NonConformance.closure_date,
            NonConformance.due_date,
        )
        .where(NonConformance.status == _CLOSED)
        .where(NonConformance.closure_date.is_not(None))
    )
    closed_rows = result.all()
    durations = [days_between(r.date_reported, r.closure_date) for r in closed_rows]
    sla_pairs = [(r.closure_date, r.due_date) for r in closed_rows if r.due_date is not None]

    dept_durations: dict[str, list[int]] = {}
    for row, days in zip(closed_rows, durations):
        if row.department:
            dept_durations.setdefault(row.department, []).append(days)

    overdue_result = await db.execute(
        select(NonConformance)
        .where(NonConformance.status != _CLOSED)
        .where(NonConformance.due_date.is_not(None))
        .where(NonConformance.due_date < today)
    )
    overdue_ncs = [
        OverdueNC(
            id=nc.id,
            title=nc.title,
            severity=nc.severity,
            department=nc.department,
            responsible_person=nc.responsible_person,
            due_date=nc.due_date,
            days_overdue=days_between(nc.due_date, today),
        )
        for nc in overdue_result.scalars().all()
    ]
    overdue_ncs.sort(key=lambda item: (-item.days_overdue, item.id))

    avg_score = (
        await db.execute(
            select(func.avg(NonConformance.effectiveness_score)).where(
                NonConformance.effectiveness_score.is_not(None),
                NonConformance.effectiveness_score != 0,
            )
        )
    ).scalar_one()

    result = await db.execute(
        select(
            NonConformance.department,
            func.count(),
            func.sum(case((NonConformance.status != _CLOSED, 1), else_=0)),
        )
        .where(_non_empty(NonConformance.department))
        .group_by(NonConformance.department)
    )
    departments = [
        DepartmentBreakdown(
            department=department,
            total=total,
            open_count=int(open_count or 0),
            avg_days_to_close=average_days(dept_durations.get(department, [])),
        )
        for department, total, open_count in result.all()
    ]
    departments.sort(key=lambda d: (-d.total, d.department))

    result = await db.execute(
        select(NonConformance.root_cause_category, func.count().label("count"))
        .where(_non_empty(NonConformance.root_cause_category))
        .group_by(NonConformance.root_cause_category)
        .order_by(func.count().desc(), NonConformance.root_cause_category)
    )
    root_causes = [RootCauseCount(category=c, count=n) for c, n in result.all()]

    return AnalyticsResponse(
        avg_days_to_close=average_days(durations),
        overdue_count=len(overdue_ncs),
        sla_compliance_rate=sla_compliance_rate(sla_pairs),
        avg_effectiveness=None if avg_score is None else round_half_up(float(avg_score), 1),
        department_breakdown=departments,
        root_cause_categories=root_causes,
        nc_source_breakdown=await _count_by(db, NonConformance.nc_source, skip_empty=True),
        closure_distribution=[ClosureBucket(**b) for b in closure_distribution(durations)],
        overdue_ncs=overdue_ncs,
    )
