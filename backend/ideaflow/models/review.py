"""
IdeaFlow Backend — Review SQLAlchemy Model
============================================

What:  ORM model for the append-only `reviews` table.

The 1–5 rating range is a CHECK constraint on the table itself; the review
service relies on the database to reject out-of-range ratings and translates
the resulting IntegrityError into a 400.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from ideaflow.database import Base

RATING_CHECK_NAME = "ck_reviews_rating_range"


class Review(Base):
    """A rating and comment left by a reviewer about a subject user."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="The user being reviewed",
    )
    reviewer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Denormalised at write time so the listing needs no join
    reviewer_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewer_photo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name=RATING_CHECK_NAME),
        Index("idx_reviews_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, user_id={self.user_id}, rating={self.rating})>"
