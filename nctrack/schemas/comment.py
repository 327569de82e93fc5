"""Comment request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nctrack.models import CommentTag


class CommentCreate(BaseModel):
    """POST /api/ncs/{id}/comments request."""

    model_config = ConfigDict(use_enum_values=True)

    author_name: str = Field(min_length=1)
    comment_text: str = Field(min_length=1)
    comment_tag: CommentTag | None = None

    @field_validator("author_name", "comment_text", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("comment_tag", mode="before")
    @classmethod
    def blank_tag(cls, v):
        return None if v == "" else v


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nc_id: int
    author_name: str
    comment_text: str
    comment_tag: str | None = None
    created_at: datetime


class CommentCount(BaseModel):
    count: int
