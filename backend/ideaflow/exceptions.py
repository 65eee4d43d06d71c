"""
IdeaFlow Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for each error bucket the API exposes.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    IdeaFlowError (base)
    ├── ValidationError          → 400 Bad Request (missing/invalid input)
    ├── ConflictError            → 400 Bad Request (duplicate unique value, illegal transition)
    ├── AuthenticationError      → 401 Unauthorized (caller identity missing/unknown)
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

The `message` is safe to return to the client. The `context` dict is logged
server-side and only returned for the 4xx buckets.
"""

from typing import Any, Dict, List, Optional


class IdeaFlowError(Exception):
    """
    Base exception for all IdeaFlow application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(IdeaFlowError):
    """
    Raised when client input fails validation.

    When:    Required fields missing, too many attachments, rating out of range.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Missing required fields: email, password",
            "details": {"fields": ["email", "password"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class MissingFieldsError(ValidationError):
    """ValidationError for absent required fields; names every missing field."""

    def __init__(self, fields: List[str]):
        super().__init__(
            message=f"Missing required fields: {', '.join(fields)}",
            context={"fields": list(fields)},
        )
        self.fields = list(fields)


class ConflictError(IdeaFlowError):
    """
    Raised when a write collides with existing state.

    When:    Registering an email that is already taken, accepting a case that
             is no longer open, or a concurrent acceptance tripping the unique
             constraint on processed_cases.case_id.
    HTTP:    400 Bad Request (error code "conflict")
    """

    def __init__(
        self,
        message: str = "The request conflicts with existing data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(IdeaFlowError):
    """
    Raised when the caller's identity cannot be resolved.

    When:    No x-user-id header / currentUserId query parameter, a malformed
             id, or an id that matches no user.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "User is not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(IdeaFlowError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/cases/{id} with an unknown id, accepting a case for an
             unknown executor, completing a case not assigned to the caller.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; services convert that
    None into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class FileStorageError(IdeaFlowError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, uploads directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(IdeaFlowError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, deadlock, unexpected constraint violation.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the SQL error is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
