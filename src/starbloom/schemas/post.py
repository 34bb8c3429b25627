"""Pydantic schemas for posts and the following feed."""

from datetime import datetime

from pydantic import BaseModel, Field

from starbloom.schemas.pagination import Metadata
from starbloom.schemas.user import StrictBody


class PostCreate(StrictBody):
    content: str = Field(..., min_length=1, max_length=255)


class PostUpdate(StrictBody):
    content: str = Field(..., min_length=1, max_length=255)


class PostRead(BaseModel):
    id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostWithUser(PostRead):
    """Feed entry — the post plus its author's display name."""
    username: str
    first_name: str
    last_name: str


class PostEnvelope(BaseModel):
    post: PostRead


class PostList(BaseModel):
    metadata: Metadata = Field(serialization_alias="_metadata")
    posts: list[PostRead]


class FeedList(BaseModel):
    metadata: Metadata = Field(serialization_alias="_metadata")
    posts: list[PostWithUser]
