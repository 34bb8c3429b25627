"""Follow service — follower_id follows user_id.

Duplicate follows are rejected by the unique_follow constraint, so two
concurrent requests cannot both succeed.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from starbloom.db.engine import store_operation
from starbloom.db.models import Follow, User
from starbloom.errors import AlreadyFollowing, NotFoundError
from starbloom.schemas.pagination import Filter, Metadata, calculate_metadata


class FollowService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def follow(self, user_id: int, follower_id: int) -> Follow:
        follow = Follow(user_id=user_id, follower_id=follower_id)
        try:
            async with store_operation():
                if await self.db.get(User, user_id) is None:
                    raise NotFoundError()
                self.db.add(follow)
                await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyFollowing() from e
        return follow

    async def unfollow(self, user_id: int, follower_id: int) -> None:
        async with store_operation():
            result = await self.db.execute(
                delete(Follow)
                .where(Follow.user_id == user_id, Follow.follower_id == follower_id)
                .execution_options(synchronize_session=False)
            )
        if result.rowcount == 0:
            raise NotFoundError()

    async def followers(self, user_id: int, f: Filter) -> tuple[list[dict], Metadata]:
        q = (
            select(User.id, User.username, User.first_name, User.last_name)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.user_id == user_id)
            .order_by(Follow.created_at.desc(), User.id)
            .limit(f.limit)
            .offset(f.offset)
        )
        count_q = select(func.count()).select_from(Follow).where(Follow.user_id == user_id)

        async with store_operation():
            total = (await self.db.execute(count_q)).scalar_one()
            rows = (await self.db.execute(q)).all()

        users = [
            {"user_id": uid, "username": username, "first_name": first, "last_name": last}
            for uid, username, first, last in rows
        ]
        return users, calculate_metadata(total, f.page, f.page_size)
