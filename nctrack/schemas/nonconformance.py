"""Non-conformance request/response schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nctrack.models import Severity, Status

REQUIRED_FIELDS = ("title", "description", "date_reported", "status", "severity")

_OPTIONAL_FIELDS = (
    "type",
    "category",
    "department",
    "nc_source",
    "standard_reference",
    "clause_reference",
    "root_cause",
    "root_cause_category",
    "corrective_actions",
    "preventive_actions",
    "responsible_person",
    "responsible_person_email",
    "due_date",
    "closure_date",
    "effectiveness_check_date",
    "effectiveness_score",
    "effectiveness_notes",
    "notes",
)


class NCFields(BaseModel):
    """Optional descriptive, investigation and scheduling fields."""

    model_config = ConfigDict(use_enum_values=True)

    type: str | None = None
    category: str | None = None
    department: str | None = None
    nc_source: str | None = None
    standard_reference: str | None = None
    clause_reference: str | None = None

    root_cause: str | None = None
    root_cause_category: str | None = None
    corrective_actions: str | None = None
    preventive_actions: str | None = None

    responsible_person: str | None = None
    responsible_person_email: str | None = None

    due_date: date | None = None
    closure_date: date | None = None

    needs_effectiveness_check: bool | None = None
    effectiveness_check_date: date | None = None
    effectiveness_score: int | None = Field(default=None, ge=0, le=5)
    effectiveness_notes: str | None = None

    notes: str | None = None

    @field_validator(*_OPTIONAL_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Forms submit empty strings for untouched inputs."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class NCCreate(NCFields):
    """POST /api/ncs request."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    date_reported: date
    status: Status
    severity: Severity

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class NCUpdate(NCFields):
    """PUT /api/ncs/{id} request - any subset of fields. id and created_at are ignored."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    date_reported: date | None = None
    status: Status | None = None
    severity: Severity | None = None

    @model_validator(mode="after")
    def required_fields_not_cleared(self):
        for name in REQUIRED_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict:
        """Fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class NCRead(BaseModel):
    """Non-conformance as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    description: str
    date_reported: date
    status: str
    severity: str
    category: str | None = None
    department: str | None = None
    nc_source: str | None = None
    standard_reference: str | None = None
    clause_reference: str | None = None
    root_cause: str | None = None
    root_cause_category: str | None = None
    corrective_actions: str | None = None
    preventive_actions: str | None = None
    responsible_person: str | None = None
    responsible_person_email: str | None = None
    due_date: date | None = None
    closure_date: date | None = None
    needs_effectiveness_check: bool
    effectiveness_check_date: date | None = None
    effectiveness_score: int | None = None
    effectiveness_notes: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
