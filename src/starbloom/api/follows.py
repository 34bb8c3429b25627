"""Follow API — the caller follows or unfollows another user."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from starbloom.auth.dependencies import require_authenticated
from starbloom.auth.identity import Authenticated
from starbloom.db.engine import commit, get_db
from starbloom.errors import ValidationFailed
from starbloom.schemas.social import FollowCreate, FollowEnvelope
from starbloom.services.follow_service import FollowService

router = APIRouter(prefix="/follows")


@router.post("", response_model=FollowEnvelope, status_code=201)
async def follow_user(
    body: FollowCreate,
    identity: Authenticated = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db),
):
    if body.user_id == identity.user_id:
        raise ValidationFailed({"user_id": "must not be own user_id"})

    follow = await FollowService(db).follow(body.user_id, identity.user_id)
    await commit(db)
    return {"follow": follow}


@router.delete("/{user_id}")
async def unfollow_user(
    user_id: int,
    identity: Authenticated = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db),
):
    if user_id == identity.user_id:
        raise ValidationFailed({"user_id": "must not be own user_id"})

    await FollowService(db).unfollow(user_id, identity.user_id)
    await commit(db)
    return {"message": "unfollowed"}
