"""Comment API.

- POST /comments → comment on a post
- GET /comments/{id} → comment with its author's name
- PATCH/DELETE /comments/{id} → author only
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from starbloom.auth.dependencies import ensure_owner, require_authenticated
from starbloom.auth.identity import Authenticated
from starbloom.db.engine import commit, get_db
from starbloom.db.models import Comment
from starbloom.schemas.comment import (
    CommentCreate,
    CommentDetailEnvelope,
    CommentEnvelope,
    CommentUpdate,
)
from starbloom.services.comment_service import CommentService

router = APIRouter(prefix="/comments")


def _svc(db: AsyncSession = Depends(get_db)) -> CommentService:
    return CommentService(db)


async def _get_comment_or_404(svc: CommentService, comment_id: int) -> Comment:
    comment = await svc.get(comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="the requested resource could not be found")
    return comment


@router.post("", response_model=CommentEnvelope, status_code=201)
async def add_comment(
    body: CommentCreate,
    identity: Authenticated = Depends(require_authenticated),
    svc: CommentService = Depends(_svc),
):
    comment = await svc.create(body.post_id, identity.user_id, body.comment)
    await commit(svc.db)
    return {"comment": comment}


@router.get("/{comment_id}", response_model=CommentDetailEnvelope)
async def get_comment(comment_id: int, svc: CommentService = Depends(_svc)):
    comment = await svc.get_with_user(comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="the requested resource could not be found")
    return {"comment": comment}


@router.patch("/{comment_id}", response_model=CommentEnvelope)
async def update_comment(
    comment_id: int,
    body: CommentUpdate,
    identity: Authenticated = Depends(require_authenticated),
    svc: CommentService = Depends(_svc),
):
    comment = await _get_comment_or_404(svc, comment_id)
    ensure_owner(identity, comment.user_id)

    comment = await svc.update(comment, body.comment)
    await commit(svc.db)
    return {"comment": comment}


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    identity: Authenticated = Depends(require_authenticated),
    svc: CommentService = Depends(_svc),
):
    comment = await _get_comment_or_404(svc, comment_id)
    ensure_owner(identity, comment.user_id)

    await svc.delete(comment)
    await commit(svc.db)
    return {"message": "comment successfully deleted"}
