"""RCA comment endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from nctrack.database import get_db
from nctrack.errors import NotFoundError
from nctrack.schemas.comment import CommentCount, CommentCreate, CommentRead
from nctrack.storage.repositories import add_comment, count_comments, get_nc, list_comments

router = APIRouter()

DbDep = Annotated[AsyncSession, Depends(get_db)]


async def _require_nc(db: AsyncSession, nc_id: int) -> None:
    if not await get_nc(db, nc_id):
        raise NotFoundError("Non-conformance not found")


@router.get("/ncs/{nc_id}/comments", response_model=list[CommentRead])
async def get_comments(nc_id: int, db: DbDep):
    """Investigation thread, oldest first."""
    await _require_nc(db, nc_id)
    return await list_comments(db, nc_id)


@router.get("/ncs/{nc_id}/comments/count", response_model=CommentCount)
async def get_comment_count(nc_id: int, db: DbDep):
    return CommentCount(count=await count_comments(db, nc_id))


@router.post(
    "/ncs/{nc_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(nc_id: int, body: CommentCreate, db: DbDep):
    await _require_nc(db, nc_id)
    return await add_comment(
        db,
        nc_id,
        author_name=body.author_name,
        comment_text=body.comment_text,
        comment_tag=body.comment_tag,
    )
