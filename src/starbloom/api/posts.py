"""Post API — posts, their likes, their comments, and the following feed.

Reads are public; writing requires a bearer token; changing or deleting
a post additionally requires being its author.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from starbloom.auth.dependencies import ensure_owner, require_authenticated
from starbloom.auth.identity import Authenticated
from starbloom.db.engine import commit, get_db
from starbloom.db.models import Post
from starbloom.schemas.comment import CommentList
from starbloom.schemas.pagination import Filter, filter_params
from starbloom.schemas.post import (
    FeedList,
    PostCreate,
    PostEnvelope,
    PostList,
    PostUpdate,
)
from starbloom.schemas.social import LikeCount, LikeEnvelope
from starbloom.services.comment_service import COMMENT_SORTS, CommentService
from starbloom.services.like_service import LikeService
from starbloom.services.post_service import POST_SORTS, PostService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> PostService:
    return PostService(db)


async def _get_post_or_404(svc: PostService, post_id: int) -> Post:
    post = await svc.get(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="the requested resource could not be found")
    return post


# ─── Posts ──────────────────────────────────────────────

@router.post("/posts", response_model=PostEnvelope, status_code=201)
async def create_post(
    body: PostCreate,
    identity: Authenticated = Depends(require_authenticated),
    svc: PostService = Depends(_svc),
):
    post = await svc.create(user_id=identity.user_id, content=body.content)
    await commit(svc.db)
    return {"post": post}


@router.get("/posts", response_model=PostList, response_model_exclude_none=True)
async def list_posts(
    user_id: int | None = Query(None, gt=0),
    f: Filter = Depends(filter_params(10, POST_SORTS)),
    svc: PostService = Depends(_svc),
):
    posts, metadata = await svc.list_posts(f, user_id=user_id)
    return {"metadata": metadata, "posts": posts}


@router.get("/posts/{post_id}", response_model=PostEnvelope)
async def get_post(post_id: int, svc: PostService = Depends(_svc)):
    return {"post": await _get_post_or_404(svc, post_id)}


@router.patch("/posts/{post_id}", response_model=PostEnvelope)
async def update_post(
    post_id: int,
    body: PostUpdate,
    identity: Authenticated = Depends(require_authenticated),
    svc: PostService = Depends(_svc),
):
    post = await _get_post_or_404(svc, post_id)
    ensure_owner(identity, post.user_id)

    post = await svc.update(post, body.content)
    await commit(svc.db)
    return {"post": post}


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: int,
    identity: Authenticated = Depends(require_authenticated),
    svc: PostService = Depends(_svc),
):
    post = await _get_post_or_404(svc, post_id)
    ensure_owner(identity, post.user_id)

    await svc.delete(post)
    await commit(svc.db)
    return {"message": "post successfully deleted"}


# ─── Comments on a post ─────────────────────────────────

@router.get(
    "/posts/{post_id}/comments",
    response_model=CommentList,
    response_model_exclude_none=True,
)
async def list_post_comments(
    post_id: int,
    f: Filter = Depends(filter_params(10, COMMENT_SORTS)),
    svc: PostService = Depends(_svc),
):
    await _get_post_or_404(svc, post_id)
    comments, metadata = await CommentService(svc.db).list_for_post(post_id, f)
    return {"metadata": metadata, "comments": comments}


# ─── Likes ──────────────────────────────────────────────

@router.get("/posts/{post_id}/likes", response_model=LikeCount)
async def get_like_count(post_id: int, svc: PostService = Depends(_svc)):
    await _get_post_or_404(svc, post_id)
    return {"likes": await LikeService(svc.db).count(post_id)}


@router.post("/posts/{post_id}/likes", response_model=LikeEnvelope, status_code=201)
async def like_post(
    post_id: int,
    identity: Authenticated = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db),
):
    like = await LikeService(db).like(post_id, identity.user_id)
    await commit(db)
    return {"like": like}


@router.delete("/posts/{post_id}/likes")
async def unlike_post(
    post_id: int,
    identity: Authenticated = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db),
):
    """Remove the caller's like — the key includes the caller, so it is always their own."""
    await LikeService(db).unlike(post_id, identity.user_id)
    await commit(db)
    return {"message": "like removed"}


# ─── Feed ───────────────────────────────────────────────

@router.get("/feed", response_model=FeedList, response_model_exclude_none=True)
async def get_feed(
    identity: Authenticated = Depends(require_authenticated),
    f: Filter = Depends(filter_params(10, ("-created_at", "created_at"))),
    svc: PostService = Depends(_svc),
):
    posts, metadata = await svc.feed(identity.user_id, f)
    return {"metadata": metadata, "posts": posts}
