"""Non-conformance model."""

import enum
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from nctrack.database import Base


class Status(str, enum.Enum):
    """Investigation status. Any value may follow any other, including reopening."""

    OPEN = "Open"
    UNDER_INVESTIGATION = "Under Investigation"
    ACTION_REQUIRED = "Action Required"
    CLOSED = "Closed"


class Severity(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class NonConformance(Base):
    """Non-conformance report."""

    __tablename__ = "non_conformances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(Text, nullable=False, default="NC")
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    date_reported: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)

    category: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str | None] = mapped_column(Text, nullable=True)
    nc_source: Mapped[str | None] = mapped_column(Text, nullable=True)
    standard_reference: Mapped[str | None] = mapped_column(Text, nullable=True)
    clause_reference: Mapped[str | None] = mapped_column(Text, nullable=True)

    root_cause: Mapped[str | None] = mapped_column(Text, nullable=True)
    root_cause_category: Mapped[str | None] = mapped_column(Text, nullable=True)
    corrective_actions: Mapped[str | None] = mapped_column(Text, nullable=True)
    preventive_actions: Mapped[str | None] = mapped_column(Text, nullable=True)

    responsible_person: Mapped[str | None] = mapped_column(Text, nullable=True)
    responsible_person_email: Mapped[str | None] = mapped_column(Text, nullable=True)

    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    closure_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    needs_effectiveness_check: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    effectiveness_check_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    effectiveness_score: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-5
    effectiveness_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
