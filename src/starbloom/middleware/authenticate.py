"""Authenticate middleware — resolve the caller's identity once per request.

Runs before routing reaches any handler:

1. Allow-listed routes (health, signup, login) skip resolution.
2. No Authorization header → Anonymous.
3. Header that isn't exactly "Bearer <token>" → 401, no handler runs.
4. Token resolved with the "authentication" scope. Unknown, expired or
   badly shaped tokens → 401. Store failure → opaque 500, since the
   credential may well be valid.
5. Success → Authenticated(user) on request.state.identity.

Every response that passes through here carries Vary: Authorization so
shared caches never hand one caller's response to another.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from starbloom.api.errors import error_response
from starbloom.auth.identity import Anonymous, Authenticated
from starbloom.auth.tokens import SCOPE_AUTHENTICATION
from starbloom.errors import (
    InvalidCredentialsFormat,
    InvalidOrExpiredToken,
    MalformedTokenError,
    NotFoundError,
    StoreError,
)
from starbloom.services.token_service import TokenService

logger = structlog.get_logger()

PUBLIC_ROUTES = frozenset(
    {
        ("GET", "/v1/healthcheck"),
        ("POST", "/v1/users"),
        ("POST", "/v1/tokens/authentication"),
    }
)


class AuthenticateMiddleware(BaseHTTPMiddleware):
    """Attach an Identity to every request that needs one."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if (request.method, request.url.path.rstrip("/")) in PUBLIC_ROUTES:
            response = await call_next(request)
        else:
            rejection = await self._authenticate(request)
            response = rejection or await call_next(request)

        response.headers.add_vary_header("Authorization")
        return response

    async def _authenticate(self, request: Request) -> Response | None:
        """Set request.state.identity, or return the rejection response."""
        header = request.headers.get("Authorization")
        if header is None:
            request.state.identity = Anonymous()
            return None

        parts = header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer":
            return error_response(InvalidCredentialsFormat())

        session_factory = request.app.state.session_factory
        try:
            async with session_factory() as session:
                user = await TokenService(session).resolve(
                    SCOPE_AUTHENTICATION, parts[1]
                )
        except (NotFoundError, MalformedTokenError):
            return error_response(InvalidOrExpiredToken())
        except StoreError as e:
            logger.error(
                "auth.store_error",
                error=str(e),
                request_method=request.method,
                request_url=str(request.url),
                request_host=request.headers.get("host"),
            )
            return error_response(e)

        request.state.identity = Authenticated(user=user)
        structlog.contextvars.bind_contextvars(user_id=user.id)
        return None
