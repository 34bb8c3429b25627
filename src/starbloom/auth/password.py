"""Password hashing utilities.

Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (settings.bcrypt_rounds, default 12) takes ~250ms
per hash on commodity hardware.
"""

import bcrypt

from starbloom.config import settings
from starbloom.errors import HashingError

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int | None = None) -> bytes:
    """Hash a password with bcrypt.

    bcrypt includes a random salt automatically and produces
    digests starting with "$2b$". Any failure here (salt generation,
    computation) is fatal to the calling operation.
    """
    pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
    try:
        salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
        return bcrypt.hashpw(pw_bytes, salt)
    except (ValueError, TypeError, OSError) as e:
        raise HashingError(f"bcrypt hash failed: {e}") from e


def verify_password(password: str, password_hash: bytes) -> bool:
    """Verify a password against its digest.

    A wrong password is a plain False. Only a digest bcrypt cannot
    parse raises HashingError.
    """
    pw_bytes = password.encode("utf-8")[:MAX_PASSWORD_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, bytes(password_hash))
    except (ValueError, TypeError) as e:
        raise HashingError(f"malformed password digest: {e}") from e
