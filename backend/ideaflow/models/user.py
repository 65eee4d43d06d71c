"""
IdeaFlow Backend — User SQLAlchemy Model
==========================================

What:  ORM model for the `users` table.
Who:   Created by registration, updated by profile edits, read by every
       route that resolves a caller, owner or executor.

Table Design:
    - Integer serial primary key (ids travel in URLs and the x-user-id header)
    - email is UNIQUE; duplicate registration surfaces as an IntegrityError
    - password holds a bcrypt hash, never the plain text
    - Users are never deleted through the API
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from ideaflow.database import Base


class User(Base):
    """A marketplace participant: case owner, executor, reviewer or review subject."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login identifier, unique across users",
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the user's password",
    )

    first_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relative URL path of the profile photo, e.g. /uploads/1718000000000.jpg
    photo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
