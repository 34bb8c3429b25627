"""User service — signup and lookup.

Usernames and emails are unique. The service checks first so the common
case returns a field-level error, and still maps the constraint violation
for the race where two signups land at once.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from starbloom.auth.password import hash_password
from starbloom.db.engine import store_operation
from starbloom.db.models import User
from starbloom.errors import DuplicateUser


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user(
        self,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
    ) -> User:
        async with store_operation():
            if await self._exists(User.email == email):
                raise DuplicateUser({"email": "a user with this email already exists"})
            if await self._exists(User.username == username):
                raise DuplicateUser({"username": "username already taken"})

        # bcrypt is deliberately slow; keep it off the event loop.
        hashed = await run_in_threadpool(hash_password, password)

        user = User(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            hashed_password=hashed,
        )
        self.db.add(user)
        try:
            async with store_operation():
                await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if "email" in str(e.orig):
                raise DuplicateUser({"email": "a user with this email already exists"}) from e
            raise DuplicateUser({"username": "username already taken"}) from e
        return user

    async def get_by_username(self, username: str) -> User | None:
        async with store_operation():
            result = await self.db.execute(
                select(User).where(User.username == username)
            )
            return result.scalars().first()

    async def get(self, user_id: int) -> User | None:
        async with store_operation():
            return await self.db.get(User, user_id)

    async def _exists(self, clause) -> bool:
        result = await self.db.execute(select(User.id).where(clause).limit(1))
        return result.first() is not None
