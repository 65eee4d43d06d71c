"""IdeaFlow Backend — Project Routes (closed, read-only records)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import get_db_session
from ideaflow.schemas.case import ProjectResponse
from ideaflow.schemas.common import ErrorResponse
from ideaflow.services.case_service import case_service

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get(
    "",
    response_model=List[ProjectResponse],
    summary="List projects",
    description=(
        "userId returns the projects of that case owner. Without userId, "
        "userEmail returns the closed projects that user executed."
    ),
)
async def list_projects(
    user_id: Optional[int] = Query(default=None, alias="userId"),
    user_email: Optional[str] = Query(default=None, alias="userEmail"),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProjectResponse]:
    return await case_service.list_projects(db, user_id=user_id, user_email=user_email)


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    responses={404: {"description": "Project not found", "model": ErrorResponse}},
    summary="Get a project",
)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ProjectResponse:
    return await case_service.get_project(db, project_id)
