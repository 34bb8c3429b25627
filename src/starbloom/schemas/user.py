"""Pydantic schemas for users and authentication tokens.

Separate "Create" schemas (input) from "Read" schemas (output) for clean
APIs. The password only ever appears on input models.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class StrictBody(BaseModel):
    """Request bodies reject unknown keys."""

    model_config = ConfigDict(extra="forbid")


# ─── Users ──────────────────────────────────────────────

class UserCreate(StrictBody):
    username: str = Field(..., min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        # bcrypt ignores anything past 72 bytes
        size = len(v.encode("utf-8"))
        if size < 8:
            raise ValueError("must be at least 8 bytes long")
        if size > 72:
            raise ValueError("must not be more than 72 bytes long")
        return v


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    activated: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserEnvelope(BaseModel):
    user: UserRead


# ─── Tokens ─────────────────────────────────────────────

class LoginRequest(StrictBody):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenRead(BaseModel):
    """Issued token — plain_text is only shown in this response."""
    plain_text: str
    expired_at: datetime

    model_config = {"from_attributes": True}


class AuthenticationTokenEnvelope(BaseModel):
    authentication_token: TokenRead
