"""Database models."""

from nctrack.models.comment import COMMENT_TAGS, Comment, CommentTag
from nctrack.models.nonconformance import NonConformance, Severity, Status

__all__ = ["NonConformance", "Status", "Severity", "Comment", "CommentTag", "COMMENT_TAGS"]
