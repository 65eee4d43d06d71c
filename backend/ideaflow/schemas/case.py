"""
IdeaFlow Backend — Case, ProcessedCase and Project Schemas
============================================================

What:  API contracts for the three lifecycle stages and the two transitions.

Every response carries `files` as a list of URL path strings (decoded by the
column type) and `userEmail`, the owner's email joined at read time.
Null text fields are rendered as "" so list views never see null titles.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ideaflow.schemas.common import CamelModel


class _LifecycleRecord(CamelModel):
    """Fields shared by Case, ProcessedCase and Project responses."""

    id: int
    user_id: int = Field(description="Owner of the original brief")
    user_email: Optional[str] = Field(default=None, description="Owner's email")
    title: str = ""
    theme: str = ""
    description: str = ""
    cover: Optional[str] = Field(default=None, description="URL path of the cover image")
    files: List[str] = Field(default_factory=list, description="URL paths of attachments")
    status: str
    created_at: datetime

    @field_validator("title", "theme", "description", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or ""

    @field_validator("files", mode="before")
    @classmethod
    def none_as_empty_list(cls, v):
        return v or []


# ══════════════════════════════════════════════════════════════════════════
# Cases
# ══════════════════════════════════════════════════════════════════════════


class CaseResponse(_LifecycleRecord):
    """Case detail and list item. status: open | accepted."""


class CaseCreateResponse(CamelModel):
    id: int
    message: str = "Case created successfully"


class AcceptCaseRequest(CamelModel):
    executor_id: Optional[int] = None


class AcceptCaseResponse(CamelModel):
    message: str = "Case accepted"
    case_id: int
    processed_case_id: int


# ══════════════════════════════════════════════════════════════════════════
# Processed Cases
# ══════════════════════════════════════════════════════════════════════════


class ProcessedCaseResponse(_LifecycleRecord):
    """An accepted case in progress. status: in_process."""
    case_id: int
    executor_id: int
    executor_email: Optional[str] = None


class FilesUploadResponse(CamelModel):
    message: str = "Files added"
    files: List[str]


class CompleteCaseRequest(CamelModel):
    """
    Body of PUT /api/processed-cases/{id}/complete.

    user_id is the acting executor. Every other field overrides the value
    copied from the ProcessedCase; empty strings fall back to the copied
    value, while `files: []` explicitly clears the attachments.
    """
    user_id: Optional[int] = None
    title: Optional[str] = None
    theme: Optional[str] = None
    description: Optional[str] = None
    cover: Optional[str] = None
    files: Optional[List[str]] = None


class CompleteCaseResponse(CamelModel):
    message: str = "Project created successfully"
    project_id: int


# ══════════════════════════════════════════════════════════════════════════
# Projects
# ══════════════════════════════════════════════════════════════════════════


class ProjectResponse(_LifecycleRecord):
    """A completed, closed record. status: closed."""
    case_id: int
    executor_email: Optional[str] = None
