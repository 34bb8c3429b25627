"""Post service — CRUD for posts and paginated listings.

Edits go through the mapper's version column: a concurrent update of the
same post makes the second flush match zero rows, surfaced as
EditConflict rather than silently overwriting.
"""

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from starbloom.db.engine import store_operation
from starbloom.db.models import Follow, Post, User
from starbloom.errors import EditConflict
from starbloom.schemas.pagination import Filter, Metadata, calculate_metadata

POST_SORTS = ("-created_at", "created_at", "-id", "id")


def _order_by(f: Filter, model):
    column = getattr(model, f.sort_column)
    direction = desc if f.sort_descending else asc
    return direction(column), direction(model.id)


class PostService:
    """Business logic for posts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, content: str) -> Post:
        post = Post(user_id=user_id, content=content)
        self.db.add(post)
        async with store_operation():
            await self.db.flush()
        return post

    async def get(self, post_id: int) -> Post | None:
        async with store_operation():
            return await self.db.get(Post, post_id)

    async def list_posts(
        self, f: Filter, user_id: int | None = None
    ) -> tuple[list[Post], Metadata]:
        q = select(Post)
        count_q = select(func.count()).select_from(Post)
        if user_id is not None:
            q = q.where(Post.user_id == user_id)
            count_q = count_q.where(Post.user_id == user_id)

        async with store_operation():
            total = (await self.db.execute(count_q)).scalar_one()
            result = await self.db.execute(
                q.order_by(*_order_by(f, Post)).limit(f.limit).offset(f.offset)
            )
            posts = list(result.scalars().all())

        return posts, calculate_metadata(total, f.page, f.page_size)

    async def update(self, post: Post, content: str) -> Post:
        post.content = content
        try:
            async with store_operation():
                await self.db.flush()
        except StaleDataError as e:
            await self.db.rollback()
            raise EditConflict() from e
        return post

    async def delete(self, post: Post) -> None:
        try:
            async with store_operation():
                await self.db.delete(post)
                await self.db.flush()
        except StaleDataError as e:
            await self.db.rollback()
            raise EditConflict() from e

    async def feed(self, follower_id: int, f: Filter) -> tuple[list[dict], Metadata]:
        """Posts by everyone follower_id follows, newest first."""
        followed = select(Follow.user_id).where(Follow.follower_id == follower_id)

        count_q = (
            select(func.count())
            .select_from(Post)
            .where(Post.user_id.in_(followed))
        )
        q = (
            select(Post, User.username, User.first_name, User.last_name)
            .join(User, Post.user_id == User.id)
            .where(Post.user_id.in_(followed))
            .order_by(*_order_by(f, Post))
            .limit(f.limit)
            .offset(f.offset)
        )

        async with store_operation():
            total = (await self.db.execute(count_q)).scalar_one()
            rows = (await self.db.execute(q)).all()

        posts = [
            {
                "id": post.id,
                "user_id": post.user_id,
                "content": post.content,
                "created_at": post.created_at,
                "updated_at": post.updated_at,
                "username": username,
                "first_name": first_name,
                "last_name": last_name,
            }
            for post, username, first_name, last_name in rows
        ]
        return posts, calculate_metadata(total, f.page, f.page_size)
