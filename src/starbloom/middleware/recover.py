"""Recover middleware — the outermost guard.

Any exception nothing else handled is logged with its traceback and
turned into the same opaque 500 the store errors produce, so one bad
request never takes the process down or leaks internals.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from starbloom.api.errors import internal_error_response

logger = structlog.get_logger()


class RecoverMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "request.unhandled_exception",
                request_method=request.method,
                request_url=str(request.url),
                request_host=request.headers.get("host"),
            )
            response = internal_error_response()
            response.headers["Connection"] = "close"
            return response
