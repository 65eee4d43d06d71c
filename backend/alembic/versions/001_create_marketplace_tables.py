"""Create marketplace tables

Revision ID: 001
Revises: None
Create Date: 2026-10-16 00:00:00.000000+00:00

What:  Creates users, cases, processed_cases, projects and reviews.
How:   Mirrors ideaflow/models; `files` columns are TEXT holding a JSON array.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _user_fk(name: str, comment: str) -> sa.Column:
    return sa.Column(
        name,
        sa.Integer(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment=comment,
    )


def _case_copy_columns() -> list:
    """Columns a ProcessedCase and a Project copy from their Case."""
    return [
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("theme", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cover", sa.Text(), nullable=True),
        sa.Column("files", sa.Text(), nullable=True, comment="JSON array of /uploads paths"),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False, comment="Login identifier, unique across users"),
        sa.Column("password", sa.String(255), nullable=False, comment="bcrypt hash of the user's password"),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("photo", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "cases",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _user_fk("user_id", "Owner of the brief"),
        *_case_copy_columns(),
        sa.Column("status", sa.String(50), nullable=False, server_default=sa.text("'open'"), comment="open → accepted"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_cases_user_id", "cases", ["user_id"])
    op.create_index("idx_cases_created_at", "cases", ["created_at"])

    op.create_table(
        "processed_cases",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), sa.ForeignKey("cases.id", ondelete="CASCADE"), nullable=False),
        _user_fk("user_id", "Owner of the original Case"),
        *_case_copy_columns(),
        sa.Column("status", sa.String(50), nullable=False, server_default=sa.text("'in_process'")),
        _user_fk("executor_id", "User working on the case"),
        sa.Column("executor_email", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("case_id", name="uq_processed_cases_case_id"),
    )
    op.create_index("idx_processed_cases_executor_id", "processed_cases", ["executor_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), sa.ForeignKey("cases.id", ondelete="CASCADE"), nullable=False),
        _user_fk("user_id", "Owner of the original Case"),
        *_case_copy_columns(),
        sa.Column("status", sa.String(50), nullable=False, server_default=sa.text("'closed'")),
        sa.Column("executor_email", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_projects_user_id", "projects", ["user_id"])
    op.create_index("idx_projects_executor_email", "projects", ["executor_email"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _user_fk("user_id", "The user being reviewed"),
        _user_fk("reviewer_id", "Author of the review"),
        sa.Column("reviewer_name", sa.Text(), nullable=True),
        sa.Column("reviewer_photo", sa.Text(), nullable=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )
    op.create_index("idx_reviews_user_id", "reviews", ["user_id"])


def downgrade() -> None:
    op.drop_index("idx_reviews_user_id", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("idx_projects_executor_email", table_name="projects")
    op.drop_index("idx_projects_user_id", table_name="projects")
    op.drop_table("projects")
    op.drop_index("idx_processed_cases_executor_id", table_name="processed_cases")
    op.drop_table("processed_cases")
    op.drop_index("idx_cases_created_at", table_name="cases")
    op.drop_index("idx_cases_user_id", table_name="cases")
    op.drop_table("cases")
    op.drop_table("users")
