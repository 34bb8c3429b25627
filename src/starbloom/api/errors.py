"""Exception handlers — render every error as {"error": ...}.

4xx errors carry their message to the client. 5xx errors are logged with
the request method, URL and host, and the client only ever sees the
opaque internal-error message.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from starbloom.errors import INTERNAL_ERROR_MESSAGE, AppError

logger = structlog.get_logger()


def error_response(exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        return internal_error_response()
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=exc.headers,
    )


def internal_error_response() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


def _log_server_error(request: Request, exc: Exception) -> None:
    logger.error(
        "request.server_error",
        error=str(exc),
        error_type=type(exc).__name__,
        request_method=request.method,
        request_url=str(request.url),
        request_host=request.headers.get("host"),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        _log_server_error(request, exc)
    return error_response(exc)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        return JSONResponse(
            status_code=400, content={"error": "body contains badly-formed JSON"}
        )

    fields: dict[str, str] = {}
    for e in errors:
        loc = [str(part) for part in e.get("loc", ()) if part not in ("body", "query", "path")]
        fields.setdefault(".".join(loc) or "body", e.get("msg", "invalid value"))
    return JSONResponse(status_code=422, content={"error": fields})


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
