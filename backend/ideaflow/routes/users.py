"""
IdeaFlow Backend — User Routes
================================

What:  Registration, login, caller lookup, profiles and profile photo upload.
Who:   Called by the frontend sign-in/sign-up pages and the profile page.

Authentication model:
    There are no tokens. Login returns the public user fields and the
    frontend sends the user id back in `x-user-id`; GET /api/current-user
    resolves it through the application's CallerResolver.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import get_db_session
from ideaflow.exceptions import ValidationError
from ideaflow.models.user import User
from ideaflow.schemas.common import ErrorResponse
from ideaflow.schemas.user import (
    CredentialsRequest,
    LoginResponse,
    PhotoUploadResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RegisterResponse,
    UserPublic,
)
from ideaflow.services.caller_service import get_current_user
from ideaflow.services.storage_service import FileStorage, get_storage
from ideaflow.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    responses={400: {"description": "Missing field or email taken", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    payload: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    return await user_service.register(db, payload)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"description": "Missing field or bad credentials", "model": ErrorResponse}},
    summary="Check credentials and return the public user fields",
)
async def login(
    payload: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await user_service.login(db, payload)


@router.get(
    "/current-user",
    response_model=UserPublic,
    responses={401: {"description": "Caller unknown", "model": ErrorResponse}},
    summary="Resolve the calling user from x-user-id",
)
async def current_user(user: User = Depends(get_current_user)) -> UserPublic:
    return UserPublic.model_validate(user)


@router.get(
    "/profile/{user_id}",
    response_model=UserPublic,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a public profile",
)
async def get_profile(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> UserPublic:
    return await user_service.get_profile(db, user_id)


@router.put(
    "/profile/{user_id}",
    response_model=ProfileUpdateResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Update profile fields",
)
async def update_profile(
    user_id: int,
    payload: ProfileUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ProfileUpdateResponse:
    return await user_service.update_profile(db, user_id, payload)


@router.post(
    "/upload-photo",
    response_model=PhotoUploadResponse,
    responses={400: {"description": "No file sent", "model": ErrorResponse}},
    summary="Store a profile photo and return its URL path",
)
async def upload_photo(
    photo: Optional[UploadFile] = File(default=None),
    storage: FileStorage = Depends(get_storage),
) -> PhotoUploadResponse:
    """
    Only stores the file. The client saves the returned path on the profile
    with PUT /api/profile/{id}.
    """
    paths = await storage.put_uploads([photo] if photo is not None else [])
    if not paths:
        raise ValidationError(message="No file uploaded", field="photo")
    return PhotoUploadResponse(photo_path=paths[0])
