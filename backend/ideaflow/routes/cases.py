"""
IdeaFlow Backend — Case Routes
================================

What:  Posting briefs, browsing them, and accepting one.

Request Flow (POST /api/cases, multipart/form-data):
    fields: userId, title, theme?, description?
    files:  cover (one image), files (up to MAX_ATTACHMENTS attachments)

    CaseService checks userId/title and the owner, then writes the uploads
    to FileStorage and inserts the Case with their URL paths.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import get_db_session
from ideaflow.schemas.case import (
    AcceptCaseRequest,
    AcceptCaseResponse,
    CaseCreateResponse,
    CaseResponse,
)
from ideaflow.schemas.common import ErrorResponse
from ideaflow.services.case_service import case_service
from ideaflow.services.lifecycle_service import lifecycle_service
from ideaflow.services.storage_service import FileStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cases", tags=["Cases"])


@router.post(
    "",
    response_model=CaseCreateResponse,
    responses={
        400: {"description": "Missing userId/title or too many files", "model": ErrorResponse},
        404: {"description": "Owner not found", "model": ErrorResponse},
    },
    summary="Post a new case",
)
async def create_case(
    user_id: Optional[int] = Form(default=None, alias="userId"),
    title: Optional[str] = Form(default=None),
    theme: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    cover: Optional[UploadFile] = File(default=None),
    files: Optional[List[UploadFile]] = File(default=None),
    db: AsyncSession = Depends(get_db_session),
    storage: FileStorage = Depends(get_storage),
) -> CaseCreateResponse:
    return await case_service.create_case(
        db,
        storage,
        user_id=user_id,
        title=title,
        theme=theme,
        description=description,
        cover=cover,
        files=files,
    )


@router.get(
    "",
    response_model=List[CaseResponse],
    summary="List cases, newest first",
)
async def list_cases(
    user_id: Optional[int] = Query(default=None, alias="userId", description="Only this owner's cases"),
    db: AsyncSession = Depends(get_db_session),
) -> List[CaseResponse]:
    return await case_service.list_cases(db, user_id=user_id)


@router.get(
    "/{case_id}",
    response_model=CaseResponse,
    responses={404: {"description": "Case not found", "model": ErrorResponse}},
    summary="Get a case",
)
async def get_case(
    case_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> CaseResponse:
    return await case_service.get_case(db, case_id)


@router.put(
    "/{case_id}/accept",
    response_model=AcceptCaseResponse,
    responses={
        400: {"description": "Missing executorId or case not open", "model": ErrorResponse},
        404: {"description": "Case or executor not found", "model": ErrorResponse},
    },
    summary="Accept an open case as its executor",
)
async def accept_case(
    case_id: int,
    payload: AcceptCaseRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AcceptCaseResponse:
    return await lifecycle_service.accept_case(db, case_id, payload.executor_id)
