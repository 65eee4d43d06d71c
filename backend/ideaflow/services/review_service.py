"""
IdeaFlow Backend — Review Service
===================================

What:  Listing and adding reviews.
How:   Reviews are append-only. The 1–5 rating range is enforced by the
       reviews table's CHECK constraint; the resulting IntegrityError is
       translated into a ValidationError here.
Who:   Called by routes/reviews.py.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import fits_integer_column
from ideaflow.exceptions import DatabaseError, NotFoundError, ValidationError
from ideaflow.models.review import RATING_CHECK_NAME, Review
from ideaflow.schemas.review import ReviewCreateRequest, ReviewResponse
from ideaflow.services.validation import require_fields

logger = logging.getLogger(__name__)


class ReviewService:

    async def list_reviews(self, db: AsyncSession, user_id: Optional[int] = None) -> List[ReviewResponse]:
        """Reviews about `user_id` (or all reviews), oldest first."""
        if not fits_integer_column(user_id):
            return []
        stmt = select(Review)
        if user_id is not None:
            stmt = stmt.where(Review.user_id == user_id)
        stmt = stmt.order_by(Review.created_at, Review.id)
        try:
            result = await db.execute(stmt)
            reviews = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to list reviews: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_reviews"})
        return [ReviewResponse.model_validate(r) for r in reviews]

    async def create_review(self, db: AsyncSession, payload: ReviewCreateRequest) -> List[ReviewResponse]:
        """Insert a review and return the subject's full review list."""
        require_fields({
            "userId": payload.user_id,
            "reviewerId": payload.reviewer_id,
            "text": payload.text,
            "rating": payload.rating,
        })
        if not fits_integer_column(payload.rating):
            raise ValidationError(
                message="Rating must be between 1 and 5",
                field="rating",
                context={"rating": payload.rating},
            )
        if not (fits_integer_column(payload.user_id) and fits_integer_column(payload.reviewer_id)):
            raise NotFoundError(
                resource="user",
                message="Reviewed user or reviewer does not exist",
                context={"user_id": payload.user_id, "reviewer_id": payload.reviewer_id},
            )

        review = Review(
            user_id=payload.user_id,
            reviewer_id=payload.reviewer_id,
            reviewer_name=payload.reviewer_name,
            reviewer_photo=payload.reviewer_photo,
            text=payload.text,
            rating=payload.rating,
        )
        try:
            db.add(review)
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if RATING_CHECK_NAME in str(e.orig):
                logger.info("Review rejected, rating out of range: %s", payload.rating)
                raise ValidationError(
                    message="Rating must be between 1 and 5",
                    field="rating",
                    context={"rating": payload.rating},
                )
            logger.info("Review rejected, unknown user: %s", str(e.orig))
            raise NotFoundError(
                resource="user",
                message="Reviewed user or reviewer does not exist",
                context={"user_id": payload.user_id, "reviewer_id": payload.reviewer_id},
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to create review: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "create_review"})

        logger.info(
            "Review %s added for user %s by %s (rating=%s)",
            review.id, payload.user_id, payload.reviewer_id, payload.rating,
        )
        return await self.list_reviews(db, payload.user_id)


review_service = ReviewService()
