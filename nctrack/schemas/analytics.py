"""Dashboard statistics and analytics response schemas."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Dashboard payloads use camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimelinePoint(BaseModel):
    date: str  # ISO calendar date
    count: int


class StatisticsResponse(_CamelModel):
    """GET /api/ncs/stats response."""

    total: int
    by_status: dict[str, int] = Field(default_factory=dict)
    by_severity: dict[str, int] = Field(default_factory=dict)
    by_source: dict[str, int] = Field(default_factory=dict)
    timeline: list[TimelinePoint] = Field(default_factory=list)


class DepartmentBreakdown(_CamelModel):
    department: str
    total: int
    open_count: int
    avg_days_to_close: float | None = None


class RootCauseCount(BaseModel):
    category: str
    count: int


class ClosureBucket(BaseModel):
    range: str
    count: int


class OverdueNC(BaseModel):
    id: int
    title: str
    severity: str
    department: str | None = None
    responsible_person: str | None = None
    due_date: date
    days_overdue: int


class AnalyticsResponse(_CamelModel):
    """GET /api/ncs/analytics response."""

    avg_days_to_close: float | None = None
    overdue_count: int = 0
    sla_compliance_rate: int | None = None
    avg_effectiveness: float | None = None
    department_breakdown: list[DepartmentBreakdown] = Field(default_factory=list)
    root_cause_categories: list[RootCauseCount] = Field(default_factory=list)
    nc_source_breakdown: dict[str, int] = Field(default_factory=dict)
    closure_distribution: list[ClosureBucket] = Field(default_factory=list)
    overdue_ncs: list[OverdueNC] = Field(default_factory=list, alias="overdueNCs")


class ImportResult(BaseModel):
    """POST /api/ncs/import response."""

    imported: int
    errors: list[str] = Field(default_factory=list)
