"""CSV export and import of non-conformance records."""

import csv
import io
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from nctrack.errors import ValidationError
from nctrack.models import NonConformance
from nctrack.schemas.nonconformance import NCCreate

EXPORT_COLUMNS: list[tuple[str, str]] = [
    ("id", "ID"),
    ("title", "Title"),
    ("description", "Description"),
    ("status", "Status"),
    ("severity", "Severity"),
    ("category", "Category"),
    ("department", "Department"),
    ("nc_source", "NC Source"),
    ("date_reported", "Date Reported"),
    ("root_cause", "Root Cause"),
    ("root_cause_category", "Root Cause Category"),
    ("corrective_actions", "Corrective Actions"),
    ("preventive_actions", "Preventive Actions"),
    ("responsible_person", "Responsible Person"),
    ("responsible_person_email", "Responsible Email"),
    ("due_date", "Due Date"),
    ("closure_date", "Closure Date"),
    ("effectiveness_score", "Effectiveness Score"),
    ("effectiveness_notes", "Effectiveness Notes"),
    ("notes", "Notes"),
    ("created_at", "Created At"),
    ("updated_at", "Updated At"),
]

# Header (lowercased) -> record field
HEADER_SYNONYMS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "severity": "severity",
    "category": "category",
    "department": "department",
    "nc_source": "nc_source",
    "nc source": "nc_source",
    "source": "nc_source",
    "date_reported": "date_reported",
    "date reported": "date_reported",
    "root_cause": "root_cause",
    "root cause": "root_cause",
    "root_cause_category": "root_cause_category",
    "root cause category": "root_cause_category",
    "corrective_actions": "corrective_actions",
    "corrective actions": "corrective_actions",
    "preventive_actions": "preventive_actions",
    "preventive actions": "preventive_actions",
    "responsible_person": "responsible_person",
    "responsible person": "responsible_person",
    "assigned to": "responsible_person",
    "assignee": "responsible_person",
    "responsible_person_email": "responsible_person_email",
    "responsible email": "responsible_person_email",
    "email": "responsible_person_email",
    "due_date": "due_date",
    "due date": "due_date",
    "closure_date": "closure_date",
    "closure date": "closure_date",
    "notes": "notes",
}


def _format(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def export_ncs(ncs: list[NonConformance]) -> str:
    """Render records as CSV text with a header row."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([label for _, label in EXPORT_COLUMNS])
    for nc in ncs:
        writer.writerow([_format(getattr(nc, key)) for key, _ in EXPORT_COLUMNS])
    return buf.getvalue()


def map_headers(headers: list[str]) -> dict[str, str | None]:
    """Map CSV headers to record fields; unknown headers map to None."""
    return {h: HEADER_SYNONYMS.get(h.strip().lower()) for h in headers}


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"]) or "row"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


def parse_import(content: str, today: date) -> tuple[list[NCCreate], list[str]]:
    """
    Parse CSV text into validated create payloads.

    Rows that fail validation are reported as "Row N: ..." (N counts data rows
    from 1) and skipped. Raises ValidationError when there is no header or no
    data row.
    """
    reader = csv.reader(io.StringIO(content.lstrip("\ufeff")))
    rows = [row for row in reader if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        raise ValidationError("CSV file must contain at least a header row and one data row")

    headers, data_rows = rows[0], rows[1:]
    mapping = map_headers(headers)

    payloads: list[NCCreate] = []
    errors: list[str] = []
    for index, row in enumerate(data_rows, start=1):
        record: dict[str, Any] = {
            "date_reported": today.isoformat(),
            "status": "Open",
            "severity": "Medium",
        }
        for header, value in zip(headers, row):
            field = mapping.get(header)
            if field and value.strip():
                record[field] = value.strip()
        try:
            payloads.append(NCCreate(**record))
        except PydanticValidationError as exc:
            errors.append(f"Row {index}: {_describe(exc)}")
    return payloads, errors
