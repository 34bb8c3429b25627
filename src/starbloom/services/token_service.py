"""Token service — issue, resolve, and revoke bearer tokens.

The issuer persists only (hash, user_id, expired_at, scope) and hands
the plaintext back once. The resolver turns a presented plaintext into
the owning user, filtering expired rows at read time; an unknown token
and an expired token both surface as NotFoundError.
"""

from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from starbloom.auth.tokens import (
    Token,
    generate_token,
    hash_token,
    validate_token_plain_text,
)
from starbloom.db.engine import store_operation
from starbloom.db.models import Token as TokenRow
from starbloom.db.models import User
from starbloom.errors import NotFoundError

logger = structlog.get_logger()


class TokenService:
    """Token persistence and lookup."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def issue(self, user_id: int, ttl: timedelta, scope: str) -> Token:
        """Generate a token and stage its row. Caller commits."""
        token = generate_token(user_id, ttl, scope)
        async with store_operation():
            self.db.add(
                TokenRow(
                    hash=token.hash,
                    user_id=token.user_id,
                    expired_at=token.expired_at,
                    scope=token.scope,
                )
            )
            await self.db.flush()
        logger.info(
            "token.issued",
            user_id=user_id,
            scope=scope,
            expired_at=token.expired_at.isoformat(),
        )
        return token

    async def resolve(self, scope: str, plain_text: str) -> User:
        """Map a presented plaintext to its user.

        Raises MalformedTokenError on a bad shape (no store round trip),
        NotFoundError when no live token matches, StoreError on failure.
        """
        validate_token_plain_text(plain_text)

        q = (
            select(User)
            .join(TokenRow, TokenRow.user_id == User.id)
            .where(
                TokenRow.hash == hash_token(plain_text),
                TokenRow.scope == scope,
                TokenRow.expired_at > datetime.now(timezone.utc),
            )
        )
        async with store_operation():
            result = await self.db.execute(q)
            user = result.scalars().first()

        if user is None:
            raise NotFoundError()
        return user

    async def delete_all_for_user(self, scope: str, user_id: int) -> int:
        async with store_operation():
            result = await self.db.execute(
                delete(TokenRow).where(
                    TokenRow.scope == scope, TokenRow.user_id == user_id
                ).execution_options(synchronize_session=False)
            )
        return result.rowcount

    async def delete_expired(self, user_id: int | None = None) -> int:
        """Drop rows the resolver would already ignore, for one user or all."""
        q = delete(TokenRow).where(TokenRow.expired_at <= datetime.now(timezone.utc))
        if user_id is not None:
            q = q.where(TokenRow.user_id == user_id)
        async with store_operation():
            result = await self.db.execute(
                q.execution_options(synchronize_session=False)
            )
        return result.rowcount
