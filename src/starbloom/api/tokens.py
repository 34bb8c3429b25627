"""Token API — login and logout.

- POST /tokens/authentication → username/password → bearer token (open route)
- DELETE /tokens/authentication → revoke the caller's authentication tokens

Login replaces every existing authentication token of the user by
default (single active session per scope), in the same transaction as
the insert of the new one.
"""

from datetime import timedelta

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from starbloom.auth.dependencies import require_authenticated
from starbloom.auth.identity import Authenticated
from starbloom.auth.password import verify_password
from starbloom.auth.tokens import SCOPE_AUTHENTICATION
from starbloom.config import settings
from starbloom.db.engine import commit, get_db
from starbloom.errors import InvalidCredentials
from starbloom.schemas.user import AuthenticationTokenEnvelope, LoginRequest
from starbloom.services.token_service import TokenService
from starbloom.services.user_service import UserService

router = APIRouter(prefix="/tokens")

logger = structlog.get_logger()


@router.post("/authentication", response_model=AuthenticationTokenEnvelope)
async def create_authentication_token(
    body: LoginRequest, db: AsyncSession = Depends(get_db)
):
    """Login with username and password → bearer token."""
    user = await UserService(db).get_by_username(body.username)
    if not user:
        raise InvalidCredentials()

    if not await run_in_threadpool(verify_password, body.password, user.hashed_password):
        logger.info("auth.login_failed", user_id=user.id)
        raise InvalidCredentials()

    tokens = TokenService(db)
    if settings.prune_expired_tokens:
        await tokens.delete_expired(user_id=user.id)
    if settings.single_session_per_scope:
        await tokens.delete_all_for_user(SCOPE_AUTHENTICATION, user.id)

    token = await tokens.issue(
        user.id,
        timedelta(hours=settings.auth_token_ttl_hours),
        SCOPE_AUTHENTICATION,
    )
    await commit(db)

    return {"authentication_token": token}


@router.delete("/authentication")
async def delete_authentication_tokens(
    identity: Authenticated = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db),
):
    """Logout — every authentication token of the caller stops working."""
    await TokenService(db).delete_all_for_user(SCOPE_AUTHENTICATION, identity.user_id)
    await commit(db)
    return {"message": "authentication tokens revoked"}
