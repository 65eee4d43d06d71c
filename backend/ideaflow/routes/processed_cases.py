"""
IdeaFlow Backend — Processed Case Routes
==========================================

What:  Work in progress: listing accepted cases, attaching deliverables,
       and completing a case into a Project.
Who:   Called by the executor's dashboard and the case owner's overview.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import get_db_session
from ideaflow.schemas.case import (
    CompleteCaseRequest,
    CompleteCaseResponse,
    FilesUploadResponse,
    ProcessedCaseResponse,
)
from ideaflow.schemas.common import ErrorResponse
from ideaflow.services.case_service import case_service
from ideaflow.services.lifecycle_service import lifecycle_service
from ideaflow.services.storage_service import FileStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/processed-cases", tags=["Processed Cases"])


@router.get(
    "",
    response_model=List[ProcessedCaseResponse],
    summary="List processed cases",
)
async def list_processed_cases(
    executor_id: Optional[int] = Query(default=None, alias="executorId"),
    user_id: Optional[int] = Query(default=None, alias="userId", description="Owner of the original case"),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProcessedCaseResponse]:
    return await case_service.list_processed_cases(db, executor_id=executor_id, user_id=user_id)


@router.get(
    "/{processed_case_id}",
    response_model=ProcessedCaseResponse,
    responses={404: {"description": "Processed case not found", "model": ErrorResponse}},
    summary="Get a processed case",
)
async def get_processed_case(
    processed_case_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ProcessedCaseResponse:
    return await case_service.get_processed_case(db, processed_case_id)


@router.post(
    "/{processed_case_id}/upload-files",
    response_model=FilesUploadResponse,
    responses={
        400: {"description": "No files or too many files", "model": ErrorResponse},
        404: {"description": "Processed case not found", "model": ErrorResponse},
    },
    summary="Attach files to a processed case",
)
async def upload_files(
    processed_case_id: int,
    extra_files: Optional[List[UploadFile]] = File(default=None, alias="extraFiles"),
    db: AsyncSession = Depends(get_db_session),
    storage: FileStorage = Depends(get_storage),
) -> FilesUploadResponse:
    return await case_service.append_files(db, storage, processed_case_id, extra_files)


@router.put(
    "/{processed_case_id}/complete",
    response_model=CompleteCaseResponse,
    responses={
        400: {"description": "Missing userId", "model": ErrorResponse},
        404: {"description": "Not found or not assigned to the caller", "model": ErrorResponse},
    },
    summary="Complete a processed case into a project",
)
async def complete_processed_case(
    processed_case_id: int,
    payload: CompleteCaseRequest,
    db: AsyncSession = Depends(get_db_session),
) -> CompleteCaseResponse:
    return await lifecycle_service.complete_case(db, processed_case_id, payload)
