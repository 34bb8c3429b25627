"""Like service — one like per (post, user), enforced by the unique_like constraint."""

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from starbloom.db.engine import store_operation
from starbloom.db.models import Like, Post
from starbloom.errors import AlreadyLiked, NotFoundError


class LikeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def like(self, post_id: int, user_id: int) -> Like:
        like = Like(post_id=post_id, user_id=user_id)
        try:
            async with store_operation():
                if await self.db.get(Post, post_id) is None:
                    raise NotFoundError()
                self.db.add(like)
                await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyLiked() from e
        return like

    async def unlike(self, post_id: int, user_id: int) -> None:
        """Remove the caller's own like. Nothing to remove → NotFoundError."""
        async with store_operation():
            result = await self.db.execute(
                delete(Like)
                .where(Like.post_id == post_id, Like.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
        if result.rowcount == 0:
            raise NotFoundError()

    async def count(self, post_id: int) -> int:
        async with store_operation():
            result = await self.db.execute(
                select(func.count()).select_from(Like).where(Like.post_id == post_id)
            )
            return result.scalar_one()
