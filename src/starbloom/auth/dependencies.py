"""FastAPI auth dependencies.

These are used as Depends() in route handlers to read the identity the
authenticate middleware attached to the request.

- get_identity: soft — Anonymous or Authenticated, never rejects
- require_authenticated: the gate — Anonymous is rejected with 401
  before the handler body runs
- ensure_owner: handler-local ownership check, since the owning column
  differs per resource
"""

from fastapi import Depends, Request

from starbloom.auth.identity import Anonymous, Authenticated, Identity
from starbloom.errors import AuthenticationRequired, AuthorizationDenied


def get_identity(request: Request) -> Identity:
    """Identity for this request. Allow-listed routes never resolve one."""
    return getattr(request.state, "identity", None) or Anonymous()


def require_authenticated(
    identity: Identity = Depends(get_identity),
) -> Authenticated:
    if identity.is_anonymous:
        raise AuthenticationRequired()
    return identity


def ensure_owner(identity: Authenticated, owner_id: int) -> None:
    """Only the user who created a resource may change or delete it."""
    if identity.user_id != owner_id:
        raise AuthorizationDenied()
