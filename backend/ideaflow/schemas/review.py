"""IdeaFlow Backend — Review Schemas."""

from datetime import datetime
from typing import Optional

from ideaflow.schemas.common import CamelModel


class ReviewCreateRequest(CamelModel):
    """
    Body of POST /api/reviews.

    `rating` is deliberately not range-checked here: the reviews table's CHECK
    constraint is the single authority on the 1–5 range.
    """
    user_id: Optional[int] = None
    reviewer_id: Optional[int] = None
    reviewer_name: Optional[str] = None
    reviewer_photo: Optional[str] = None
    text: Optional[str] = None
    rating: Optional[int] = None


class ReviewResponse(CamelModel):
    id: int
    user_id: int
    reviewer_id: int
    reviewer_name: Optional[str] = None
    reviewer_photo: Optional[str] = None
    text: str
    rating: int
    created_at: datetime
