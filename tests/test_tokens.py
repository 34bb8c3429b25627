"""Token generation tests — shape, hashing, entropy failure."""

import base64
import hashlib
import secrets
from datetime import datetime, timedelta, timezone

import pytest

from starbloom.auth.tokens import (
    SCOPE_AUTHENTICATION,
    TOKEN_LENGTH,
    generate_token,
    hash_token,
    validate_token_plain_text,
)
from starbloom.errors import EntropyError, MalformedTokenError


def test_generated_token_is_26_char_unpadded_base32():
    token = generate_token(7, timedelta(hours=1), SCOPE_AUTHENTICATION)
    assert len(token.plain_text) == TOKEN_LENGTH == 26
    assert "=" not in token.plain_text
    # Decodes back to 16 bytes once padding is restored
    assert len(base64.b32decode(token.plain_text + "======")) == 16


def test_generated_token_hash_is_sha256_of_plaintext():
    token = generate_token(7, timedelta(hours=1), SCOPE_AUTHENTICATION)
    assert token.hash == hashlib.sha256(token.plain_text.encode()).digest()
    assert token.hash == hash_token(token.plain_text)
    assert len(token.hash) == 32


def test_generated_token_carries_owner_scope_and_expiry():
    before = datetime.now(timezone.utc)
    token = generate_token(42, timedelta(hours=24), SCOPE_AUTHENTICATION)
    assert token.user_id == 42
    assert token.scope == SCOPE_AUTHENTICATION
    assert before + timedelta(hours=24) <= token.expired_at
    assert token.expired_at <= datetime.now(timezone.utc) + timedelta(hours=24)


def test_tokens_are_unique():
    seen = {generate_token(1, timedelta(minutes=1), "x").plain_text for _ in range(200)}
    assert len(seen) == 200


def test_hash_hidden_from_repr():
    token = generate_token(1, timedelta(minutes=1), "x")
    assert "hash=" not in repr(token)


def test_entropy_failure_is_fatal(monkeypatch):
    def no_randomness(n):
        raise OSError("getrandom failed")

    monkeypatch.setattr(secrets, "token_bytes", no_randomness)
    with pytest.raises(EntropyError):
        generate_token(1, timedelta(minutes=1), SCOPE_AUTHENTICATION)


@pytest.mark.parametrize("plain_text", ["", "short", "A" * 25, "A" * 27])
def test_validate_rejects_wrong_shape(plain_text):
    with pytest.raises(MalformedTokenError):
        validate_token_plain_text(plain_text)


def test_validate_accepts_26_chars():
    validate_token_plain_text("A" * 26)
