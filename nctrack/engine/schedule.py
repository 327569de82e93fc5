"""Effectiveness-check scheduling."""

import calendar
from datetime import date

from nctrack.models import NonConformance, Status

EFFECTIVENESS_CHECK_MONTHS = 4


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping to the last day of the target month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def schedule_effectiveness_check(nc: NonConformance) -> bool:
    """
    Derive the effectiveness check for a closed record.

    Applies only when the record is Closed, has a closure date and carries no
    check date yet; a check date already on the record always wins.
    Returns True when a date was derived.
    """
    if nc.status != Status.CLOSED.value or nc.closure_date is None:
        return False
    if nc.effectiveness_check_date is not None:
        return False
    nc.effectiveness_check_date = add_months(nc.closure_date, EFFECTIVENESS_CHECK_MONTHS)
    nc.needs_effectiveness_check = True
    return True
