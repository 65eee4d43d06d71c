"""
IdeaFlow Backend — Review Routes
==================================

POST returns the reviewed user's complete list so the profile page can
re-render without a second request.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import get_db_session
from ideaflow.schemas.common import ErrorResponse
from ideaflow.schemas.review import ReviewCreateRequest, ReviewResponse
from ideaflow.services.review_service import review_service

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


@router.get("", response_model=List[ReviewResponse], summary="List reviews, oldest first")
async def list_reviews(
    user_id: Optional[int] = Query(default=None, alias="userId", description="The reviewed user"),
    db: AsyncSession = Depends(get_db_session),
) -> List[ReviewResponse]:
    return await review_service.list_reviews(db, user_id=user_id)


@router.post(
    "",
    response_model=List[ReviewResponse],
    responses={400: {"description": "Missing field or rating outside 1–5", "model": ErrorResponse}},
    summary="Leave a review",
)
async def create_review(
    payload: ReviewCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> List[ReviewResponse]:
    return await review_service.create_review(db, payload)
