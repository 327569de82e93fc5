"""RCA comment model."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from nctrack.database import Base


class CommentTag(str, enum.Enum):
    CONTAINMENT_ACTION = "Containment Action"
    ROOT_CAUSE_FINDING = "Root Cause Finding"
    CORRECTIVE_ACTION = "Corrective Action"
    VERIFICATION = "Verification"
    GENERAL_NOTE = "General Note"


COMMENT_TAGS = [tag.value for tag in CommentTag]


class Comment(Base):
    """Investigation comments - append-only, owned by one NC."""

    __tablename__ = "nc_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nc_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("non_conformances.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_name: Mapped[str] = mapped_column(Text, nullable=False)
    comment_text: Mapped[str] = mapped_column(Text, nullable=False)
    comment_tag: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
