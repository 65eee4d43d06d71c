"""
IdeaFlow Backend — User Service
=================================

What:  Registration, login, profile reads and profile updates.
How:   bcrypt password hashing through passlib's CryptContext; users are read
       and written with async SQLAlchemy on the request's session.
Who:   Called by routes/users.py and by the caller resolver.

Error mapping:
    missing email/password        → MissingFieldsError (400)
    duplicate email               → ConflictError (400)
    unknown email / bad password  → ValidationError (400)
    unknown profile id            → NotFoundError (404)
    anything SQLAlchemy raises    → DatabaseError (500)
"""

import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.config import settings
from ideaflow.database import fits_integer_column
from ideaflow.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from ideaflow.models.user import User
from ideaflow.schemas.user import (
    CredentialsRequest,
    LoginResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RegisterResponse,
    UserPublic,
)
from ideaflow.services.validation import require_fields

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


class UserService:
    """Business logic for user accounts. Stateless; receives the session per call."""

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[User]:
        """Returns the user row or None."""
        if not fits_integer_column(user_id):
            return None
        try:
            result = await db.execute(select(User).where(User.id == user_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def register(self, db: AsyncSession, payload: CredentialsRequest) -> RegisterResponse:
        """
        Create a user with a bcrypt-hashed password.

        The unique index on users.email is the duplicate check: the insert is
        flushed and an IntegrityError becomes a ConflictError.
        """
        require_fields({"email": payload.email, "password": payload.password})
        email = payload.email.strip()

        user = User(email=email, password=hash_password(payload.password))
        try:
            db.add(user)
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.info("Registration rejected, email already registered: %s", email)
            raise ConflictError(
                message="Email is already registered",
                context={"field": "email"},
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Registration failed for %s: %s", email, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "register"})

        logger.info("User registered: id=%s", user.id)
        return RegisterResponse(id=user.id, email=user.email)

    async def login(self, db: AsyncSession, payload: CredentialsRequest) -> LoginResponse:
        require_fields({"email": payload.email, "password": payload.password})
        email = payload.email.strip()

        try:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Login query failed: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "login"})

        if user is None:
            logger.info("Login failed, unknown email: %s", email)
            raise ValidationError(message="User not found", field="email")

        if not verify_password(payload.password, user.password):
            logger.info("Login failed, password mismatch for user %s", user.id)
            raise ValidationError(message="Incorrect password", field="password")

        logger.info("Login successful for user %s", user.id)
        return LoginResponse.model_validate(user)

    async def get_profile(self, db: AsyncSession, user_id: int) -> UserPublic:
        user = await self.get_user(db, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserPublic.model_validate(user)

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: int,
        payload: ProfileUpdateRequest,
    ) -> ProfileUpdateResponse:
        """Writes only the fields present in the request body."""
        user = await self.get_user(db, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        changes = payload.model_dump(exclude_unset=True)
        try:
            for field, value in changes.items():
                setattr(user, field, value)
            await db.flush()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Profile update failed for user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not update the profile. Please try again.",
                context={"user_id": user_id},
            )

        logger.info("Profile updated for user %s: %s", user_id, sorted(changes))
        return ProfileUpdateResponse(user=UserPublic.model_validate(user))


user_service = UserService()
