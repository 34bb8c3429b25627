"""Comment service — comments on posts, joined with author names on read."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from starbloom.db.engine import store_operation
from starbloom.db.models import Comment, Post, User
from starbloom.errors import EditConflict, NotFoundError
from starbloom.schemas.pagination import Filter, Metadata, calculate_metadata

COMMENT_SORTS = ("created_at", "-created_at", "id", "-id")


def _with_user(comment: Comment, username: str, first_name: str, last_name: str) -> dict:
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "user_id": comment.user_id,
        "comment": comment.comment,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
        "username": username,
        "first_name": first_name,
        "last_name": last_name,
    }


class CommentService:
    """Business logic for comments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, post_id: int, user_id: int, text: str) -> Comment:
        async with store_operation():
            if await self.db.get(Post, post_id) is None:
                raise NotFoundError()
            comment = Comment(post_id=post_id, user_id=user_id, comment=text)
            self.db.add(comment)
            await self.db.flush()
        return comment

    async def get(self, comment_id: int) -> Comment | None:
        async with store_operation():
            return await self.db.get(Comment, comment_id)

    async def get_with_user(self, comment_id: int) -> dict | None:
        q = (
            select(Comment, User.username, User.first_name, User.last_name)
            .join(User, Comment.user_id == User.id)
            .where(Comment.id == comment_id)
        )
        async with store_operation():
            row = (await self.db.execute(q)).first()
        return _with_user(*row) if row else None

    async def list_for_post(self, post_id: int, f: Filter) -> tuple[list[dict], Metadata]:
        order = getattr(Comment, f.sort_column)
        order = order.desc() if f.sort_descending else order.asc()
        q = (
            select(Comment, User.username, User.first_name, User.last_name)
            .join(User, Comment.user_id == User.id)
            .where(Comment.post_id == post_id)
            .order_by(order, Comment.id)
            .limit(f.limit)
            .offset(f.offset)
        )
        count_q = select(func.count()).select_from(Comment).where(Comment.post_id == post_id)

        async with store_operation():
            total = (await self.db.execute(count_q)).scalar_one()
            rows = (await self.db.execute(q)).all()

        return [_with_user(*row) for row in rows], calculate_metadata(total, f.page, f.page_size)

    async def update(self, comment: Comment, text: str) -> Comment:
        comment.comment = text
        try:
            async with store_operation():
                await self.db.flush()
        except StaleDataError as e:
            await self.db.rollback()
            raise EditConflict() from e
        return comment

    async def delete(self, comment: Comment) -> None:
        try:
            async with store_operation():
                await self.db.delete(comment)
                await self.db.flush()
        except StaleDataError as e:
            await self.db.rollback()
            raise EditConflict() from e
