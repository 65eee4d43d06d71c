"""IdeaFlow Backend — disables HTTP caching of API responses."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

API_PREFIX = "/api"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",
    "Expires": "0",
}


class NoCacheMiddleware(BaseHTTPMiddleware):
    """
    Stamps no-store headers on every response under /api.

    The frontend polls case lists after each transition; cached responses
    would show a Case as still open after it was accepted.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        path = request.url.path
        if path == API_PREFIX or path.startswith(API_PREFIX + "/"):
            response.headers.update(NO_CACHE_HEADERS)
        return response
