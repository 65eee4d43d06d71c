"""
IdeaFlow Backend — User Schemas
=================================

What:  Request/response contracts for registration, login, profiles and
       profile photo upload.

Request bodies declare their fields Optional on purpose: presence is checked
by the user service so a missing field yields a 400 naming it, rather than
FastAPI's generic body validation error.
"""

from typing import Optional

from ideaflow.schemas.common import CamelModel


class CredentialsRequest(CamelModel):
    """Body of POST /api/register and POST /api/login."""
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterResponse(CamelModel):
    id: int
    email: str


class LoginResponse(CamelModel):
    """Fields the frontend keeps in its session after login."""
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    photo: Optional[str] = None


class UserPublic(CamelModel):
    """Public profile fields. The password hash never leaves the service layer."""
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    photo: Optional[str] = None
    description: Optional[str] = None


class ProfileUpdateRequest(CamelModel):
    """Only the fields present in the body are written."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    photo: Optional[str] = None
    description: Optional[str] = None


class ProfileUpdateResponse(CamelModel):
    message: str = "Profile updated successfully"
    user: UserPublic


class PhotoUploadResponse(CamelModel):
    photo_path: str
