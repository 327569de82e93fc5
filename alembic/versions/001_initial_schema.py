"""Initial schema - non_conformances, nc_comments.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "non_conformances",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.Text(), nullable=False, server_default="NC"),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date_reported", sa.Date(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("department", sa.Text(), nullable=True),
        sa.Column("nc_source", sa.Text(), nullable=True),
        sa.Column("standard_reference", sa.Text(), nullable=True),
        sa.Column("clause_reference", sa.Text(), nullable=True),
        sa.Column("root_cause", sa.Text(), nullable=True),
        sa.Column("root_cause_category", sa.Text(), nullable=True),
        sa.Column("corrective_actions", sa.Text(), nullable=True),
        sa.Column("preventive_actions", sa.Text(), nullable=True),
        sa.Column("responsible_person", sa.Text(), nullable=True),
        sa.Column("responsible_person_email", sa.Text(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("closure_date", sa.Date(), nullable=True),
        sa.Column(
            "needs_effectiveness_check", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("effectiveness_check_date", sa.Date(), nullable=True),
        sa.Column("effectiveness_score", sa.Integer(), nullable=True),
        sa.Column("effectiveness_notes", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_non_conformances_status", "non_conformances", ["status"])

    op.create_table(
        "nc_comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "nc_id",
            sa.Integer(),
            sa.ForeignKey("non_conformances.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_name", sa.Text(), nullable=False),
        sa.Column("comment_text", sa.Text(), nullable=False),
        sa.Column("comment_tag", sa.String(32), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_nc_comments_nc_id", "nc_comments", ["nc_id"])


def downgrade() -> None:
    op.drop_index("ix_nc_comments_nc_id", table_name="nc_comments")
    op.drop_table("nc_comments")
    op.drop_index("ix_non_conformances_status", table_name="non_conformances")
    op.drop_table("non_conformances")
