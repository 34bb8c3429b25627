"""Error taxonomy shared by services, auth, and the HTTP layer.

Each error carries the HTTP status and client-facing message it maps to,
so the exception handlers in api/errors.py stay a thin rendering step.
4xx errors are policy or input rejections and are never retried.
5xx errors are logged with request context and reach the client only as
an opaque message.
"""

from typing import Any, Optional

INTERNAL_ERROR_MESSAGE = (
    "the server encountered an issue and could not process the request"
)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class AppError(Exception):
    """Base class for every error the API knows how to render."""

    status_code: int = 500
    message: Any = INTERNAL_ERROR_MESSAGE
    headers: Optional[dict[str, str]] = None

    def __init__(self, message: Any = None):
        if message is not None:
            self.message = message
        super().__init__(message if isinstance(message, str) else self.message)


# ─── Token lifecycle ────────────────────────────────────


class MalformedTokenError(AppError):
    """Presented token fails the local shape check."""

    status_code = 401
    message = "invalid or missing authentication token"
    headers = _BEARER_CHALLENGE


class NotFoundError(AppError):
    """No matching record. For tokens this covers both unknown and expired."""

    status_code = 404
    message = "the requested resource could not be found"


class EntropyError(AppError):
    """The OS could not supply secure random bytes."""


class HashingError(AppError):
    """bcrypt failed to hash, or was handed a malformed digest."""


# ─── Store ──────────────────────────────────────────────


class StoreError(AppError):
    """Backing database failed. The raw cause stays in the logs."""


class StoreTimeout(StoreError):
    """A store operation exceeded its time budget."""


# ─── Authentication / authorization ─────────────────────


class InvalidCredentialsFormat(AppError):
    status_code = 401
    message = "invalid or missing authentication token"
    headers = _BEARER_CHALLENGE


class InvalidOrExpiredToken(AppError):
    status_code = 401
    message = "invalid or missing authentication token"
    headers = _BEARER_CHALLENGE


class InvalidCredentials(AppError):
    status_code = 401
    message = "invalid authentication credentials"


class AuthenticationRequired(AppError):
    status_code = 401
    message = "you must be authenticated to access this resource"
    headers = _BEARER_CHALLENGE


class AuthorizationDenied(AppError):
    status_code = 403
    message = "your user account doesn't have the necessary permissions to access this resource"


# ─── Resource conflicts ─────────────────────────────────


class ValidationFailed(AppError):
    """Field-level validation failure; message is a {field: reason} map."""

    status_code = 422
    message = {}


class DuplicateUser(ValidationFailed):
    pass


class AlreadyLiked(AppError):
    status_code = 400
    message = "already liked"


class AlreadyFollowing(AppError):
    status_code = 400
    message = "already following"


class EditConflict(AppError):
    status_code = 409
    message = "unable to update the record due to an edit conflict, please try again"
