"""Pydantic schemas for likes and follows."""

from datetime import datetime

from pydantic import BaseModel, Field

from starbloom.schemas.pagination import Metadata
from starbloom.schemas.user import StrictBody


# ─── Likes ──────────────────────────────────────────────

class LikeRead(BaseModel):
    post_id: int
    user_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class LikeEnvelope(BaseModel):
    like: LikeRead


class LikeCount(BaseModel):
    likes: int


# ─── Follows ────────────────────────────────────────────

class FollowCreate(StrictBody):
    user_id: int = Field(..., gt=0)


class FollowRead(BaseModel):
    user_id: int
    follower_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class FollowEnvelope(BaseModel):
    follow: FollowRead


class FollowUser(BaseModel):
    user_id: int
    username: str
    first_name: str
    last_name: str


class FollowerList(BaseModel):
    metadata: Metadata = Field(serialization_alias="_metadata")
    users: list[FollowUser]
