"""Bearer token generation and shape checks.

A token is 16 random bytes from the OS CSPRNG, base-32 encoded without
padding (26 characters). Only the SHA-256 of that plaintext is stored,
so a leaked tokens table cannot be replayed.
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from starbloom.errors import EntropyError, MalformedTokenError

SCOPE_AUTHENTICATION = "authentication"
SCOPE_AUTHORIZATION = "authorization"

TOKEN_BYTES = 16
TOKEN_LENGTH = 26


@dataclass
class Token:
    """A freshly issued token. plain_text is only ever available here."""

    plain_text: str
    hash: bytes = field(repr=False)
    user_id: int
    expired_at: datetime
    scope: str


def hash_token(plain_text: str) -> bytes:
    return hashlib.sha256(plain_text.encode("utf-8")).digest()


def generate_token(user_id: int, ttl: timedelta, scope: str) -> Token:
    """Build a new token. Raises EntropyError if the OS has no randomness."""
    try:
        random_bytes = secrets.token_bytes(TOKEN_BYTES)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"secure random source unavailable: {e}") from e

    plain_text = base64.b32encode(random_bytes).decode("ascii").rstrip("=")
    return Token(
        plain_text=plain_text,
        hash=hash_token(plain_text),
        user_id=user_id,
        expired_at=datetime.now(timezone.utc) + ttl,
        scope=scope,
    )


def validate_token_plain_text(plain_text: str) -> None:
    """Cheap local check before any store round trip."""
    if not plain_text:
        raise MalformedTokenError("token must be provided")
    if len(plain_text) != TOKEN_LENGTH:
        raise MalformedTokenError(f"token must be {TOKEN_LENGTH} characters long")
