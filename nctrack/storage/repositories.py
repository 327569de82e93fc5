"""Record store: non-conformances and their RCA comments."""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from nctrack.engine.schedule import schedule_effectiveness_check
from nctrack.errors import StorageError, ValidationError
from nctrack.models import COMMENT_TAGS, Comment, NonConformance

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"id", "created_at", "updated_at"}
_NC_COLUMNS = {c.key for c in NonConformance.__table__.columns}


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _commit(db: AsyncSession) -> None:
    """Commit one logical operation; nothing is persisted if it fails."""
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Commit failed")
        raise StorageError("Internal storage error") from exc


async def create_nc(db: AsyncSession, data: dict) -> NonConformance:
    """Persist a new record, deriving its effectiveness check when created closed."""
    fields = {
        k: v for k, v in data.items() if k in _NC_COLUMNS and k not in _IMMUTABLE_FIELDS
    }
    if not fields.get("type"):
        fields["type"] = "NC"
    if fields.get("needs_effectiveness_check") is None:
        fields["needs_effectiveness_check"] = False
    now = _now()
    nc = NonConformance(**fields, created_at=now, updated_at=now)
    schedule_effectiveness_check(nc)
    db.add(nc)
    await _commit(db)
    await db.refresh(nc)
    logger.info("Created NC #%s (%s, %s)", nc.id, nc.status, nc.severity)
    return nc


async def get_nc(db: AsyncSession, nc_id: int) -> NonConformance | None:
    """Get a record by ID; None when absent."""
    result = await db.execute(select(NonConformance).where(NonConformance.id == nc_id))
    return result.scalar_one_or_none()


async def update_nc(db: AsyncSession, nc_id: int, changes: dict) -> NonConformance | None:
    """
    Merge the supplied fields over the stored record.
    id and created_at are never written. Returns None if the record does not exist.
    """
    nc = await get_nc(db, nc_id)
    if nc is None:
        return None
    for key, value in changes.items():
        if key in _IMMUTABLE_FIELDS or key not in _NC_COLUMNS:
            continue
        if key == "type" and not value:
            value = "NC"
        if key == "needs_effectiveness_check" and value is None:
            value = False
        setattr(nc, key, value)
    schedule_effectiveness_check(nc)
    nc.updated_at = _now()
    await _commit(db)
    await db.refresh(nc)
    return nc


async def delete_nc(db: AsyncSession, nc_id: int) -> bool:
    """Delete a record and its comments in one transaction. False if nothing was deleted."""
    await db.execute(delete(Comment).where(Comment.nc_id == nc_id))
    result = await db.execute(delete(NonConformance).where(NonConformance.id == nc_id))
    await _commit(db)
    deleted = result.rowcount > 0
    if deleted:
        logger.info("Deleted NC #%s", nc_id)
    return deleted


async def list_comments(db: AsyncSession, nc_id: int) -> list[Comment]:
    """Comments for a record, oldest first."""
    result = await db.execute(
        select(Comment)
        .where(Comment.nc_id == nc_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return list(result.scalars().all())


async def add_comment(
    db: AsyncSession,
    nc_id: int,
    author_name: str,
    comment_text: str,
    comment_tag: str | None = None,
) -> Comment:
    """Append a comment. The caller checks that the record exists."""
    author_name = (author_name or "").strip()
    comment_text = (comment_text or "").strip()
    if not author_name or not comment_text:
        raise ValidationError("Author name and comment text are required")
    if comment_tag is not None and comment_tag not in COMMENT_TAGS:
        raise ValidationError(
            f"Invalid comment tag: {comment_tag}. Allowed: {', '.join(COMMENT_TAGS)}"
        )
    comment = Comment(
        nc_id=nc_id,
        author_name=author_name,
        comment_text=comment_text,
        comment_tag=comment_tag,
        created_at=_now(),
    )
    db.add(comment)
    await _commit(db)
    await db.refresh(comment)
    return comment


async def count_comments(db: AsyncSession, nc_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(Comment).where(Comment.nc_id == nc_id)
    )
    return result.scalar_one()
