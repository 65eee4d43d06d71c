"""
IdeaFlow Backend — Caller Resolution
======================================

What:  Decides which user is making a request.
How:   A `CallerResolver` turns a Request into a User or raises
       AuthenticationError. The shipped `HeaderCallerResolver` trusts the
       `x-user-id` header (or the `currentUserId` query parameter) set by the
       frontend after login; there are no tokens or sessions.
Who:   Stored on app.state.caller_resolver; read through `get_current_user`.

Replacing the trust-the-header scheme with real authentication means writing
another CallerResolver and passing it to `create_app(caller_resolver=...)`.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.database import get_db_session
from ideaflow.exceptions import AuthenticationError
from ideaflow.models.user import User
from ideaflow.services.user_service import user_service

logger = logging.getLogger(__name__)

USER_ID_HEADER = "x-user-id"
USER_ID_QUERY_PARAM = "currentUserId"


class CallerResolver(ABC):
    """Capability interface: resolve the acting user for a request."""

    @abstractmethod
    async def resolve_caller(self, request: Request, db: AsyncSession) -> User:
        """Return the calling User or raise AuthenticationError."""
        ...


class HeaderCallerResolver(CallerResolver):
    """Trusts the user id the client sends in a header or query parameter."""

    def _raw_user_id(self, request: Request) -> Optional[str]:
        return request.headers.get(USER_ID_HEADER) or request.query_params.get(
            USER_ID_QUERY_PARAM
        )

    async def resolve_caller(self, request: Request, db: AsyncSession) -> User:
        raw = self._raw_user_id(request)
        if not raw:
            raise AuthenticationError()

        try:
            user_id = int(raw)
        except ValueError:
            logger.info("Rejected non-numeric caller id: %r", raw)
            raise AuthenticationError(context={"user_id": raw})

        user = await user_service.get_user(db, user_id)
        if user is None:
            logger.info("Rejected unknown caller id: %s", user_id)
            raise AuthenticationError(context={"user_id": user_id})
        return user


# ── Dependencies ──────────────────────────────────────────────────────────
def get_caller_resolver(request: Request) -> CallerResolver:
    return request.app.state.caller_resolver


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    resolver: CallerResolver = Depends(get_caller_resolver),
) -> User:
    """FastAPI dependency yielding the resolved caller."""
    return await resolver.resolve_caller(request, db)
