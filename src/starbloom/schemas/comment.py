"""Pydantic schemas for comments."""

from datetime import datetime

from pydantic import BaseModel, Field

from starbloom.schemas.pagination import Metadata
from starbloom.schemas.user import StrictBody


class CommentCreate(StrictBody):
    post_id: int = Field(..., gt=0)
    comment: str = Field(..., min_length=1, max_length=255)


class CommentUpdate(StrictBody):
    comment: str = Field(..., min_length=1, max_length=255)


class CommentRead(BaseModel):
    id: int
    post_id: int
    user_id: int
    comment: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentWithUser(CommentRead):
    username: str
    first_name: str
    last_name: str


class CommentEnvelope(BaseModel):
    comment: CommentRead


class CommentDetailEnvelope(BaseModel):
    comment: CommentWithUser


class CommentList(BaseModel):
    metadata: Metadata = Field(serialization_alias="_metadata")
    comments: list[CommentWithUser]
