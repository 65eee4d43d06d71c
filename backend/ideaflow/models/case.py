"""
IdeaFlow Backend — Case Lifecycle SQLAlchemy Models
=====================================================

What:  ORM models for the three stages a project brief passes through:
       `cases`, `processed_cases` and `projects`.

Lifecycle:
    ┌──────────────┐  accept   ┌────────────────────────┐  complete  ┌──────────────────┐
    │ Case         │──────────▶│ ProcessedCase          │───────────▶│ Project          │
    │ status=open  │           │ status=in_process      │            │ status=closed    │
    └──────────────┘           │ executor_id / email    │            │ executor_email   │
      status → accepted        └────────────────────────┘            └──────────────────┘
                                 deleted on completion                 immutable record

    The Case row stays behind with status "accepted" after both steps.

Constraints:
    - processed_cases.case_id is UNIQUE: one live ProcessedCase per Case.
      Two concurrent accepts on the same Case cannot both commit.
    - `files` columns store a JSON array of path strings (see models/types.py).
    - Owner/executor/case foreign keys cascade on delete.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from ideaflow.database import Base
from ideaflow.models.types import JSONPathList

CASE_STATUS_OPEN = "open"
CASE_STATUS_ACCEPTED = "accepted"
PROCESSED_CASE_STATUS = "in_process"
PROJECT_STATUS = "closed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Case(Base):
    """An open project brief posted by its owner, awaiting an executor."""

    __tablename__ = "cases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owner of the brief",
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    theme: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")
    cover: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    files: Mapped[List[str]] = mapped_column(JSONPathList, nullable=True, default=list)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=CASE_STATUS_OPEN,
        server_default=text("'open'"),
        comment="open → accepted",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_cases_user_id", "user_id"),
        Index("idx_cases_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Case(id={self.id}, status='{self.status}')>"


class ProcessedCase(Base):
    """A Case that has been accepted and is being worked on by an executor."""

    __tablename__ = "processed_cases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owner of the original Case",
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    theme: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    files: Mapped[List[str]] = mapped_column(JSONPathList, nullable=True, default=list)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=PROCESSED_CASE_STATUS,
        server_default=text("'in_process'"),
    )
    executor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    executor_email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("case_id", name="uq_processed_cases_case_id"),
        Index("idx_processed_cases_executor_id", "executor_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProcessedCase(id={self.id}, case_id={self.case_id}, "
            f"executor_id={self.executor_id})>"
        )


class Project(Base):
    """The closed, immutable record produced when a ProcessedCase is completed."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owner of the original Case",
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    theme: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    files: Mapped[List[str]] = mapped_column(JSONPathList, nullable=True, default=list)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=PROJECT_STATUS,
        server_default=text("'closed'"),
    )
    executor_email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_projects_user_id", "user_id"),
        Index("idx_projects_executor_email", "executor_email"),
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, case_id={self.case_id})>"
