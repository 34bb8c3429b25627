"""Signup, login and logout over HTTP.

Tests cover:
1. User registration + duplicate prevention + validation
2. Login → opaque bearer token
3. Wrong credentials issue no token
4. A new login invalidates the previous token (single session per scope)
5. Logout revokes the caller's tokens
"""

import pytest
from sqlalchemy import func, select

from starbloom.db.models import Token


async def _token_count(db_session) -> int:
    return (await db_session.execute(select(func.count()).select_from(Token))).scalar_one()


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    r = await client.post(
        "/v1/users",
        json={
            "username": "alice",
            "email": "alice@example.com",
            "first_name": "Alice",
            "last_name": "Liddell",
            "password": "secure_password_123",
        },
    )
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["username"] == "alice"
    assert user["email"] == "alice@example.com"
    assert user["activated"] is False
    assert "id" in user
    assert "password" not in user
    assert "hashed_password" not in user


@pytest.mark.asyncio
async def test_register_duplicate_email(client, signup):
    await signup("alice")
    r = await client.post(
        "/v1/users",
        json={
            "username": "alice2",
            "email": "alice@example.com",
            "first_name": "A",
            "last_name": "L",
            "password": "password_123",
        },
    )
    assert r.status_code == 422
    assert r.json()["error"] == {"email": "a user with this email already exists"}


@pytest.mark.asyncio
async def test_register_duplicate_username(client, signup):
    await signup("alice")
    r = await client.post(
        "/v1/users",
        json={
            "username": "alice",
            "email": "other@example.com",
            "first_name": "A",
            "last_name": "L",
            "password": "password_123",
        },
    )
    assert r.status_code == 422
    assert r.json()["error"] == {"username": "username already taken"}


@pytest.mark.asyncio
async def test_register_short_password(client):
    r = await client.post(
        "/v1/users",
        json={
            "username": "shorty",
            "email": "shorty@example.com",
            "first_name": "S",
            "last_name": "P",
            "password": "abc",
        },
    )
    assert r.status_code == 422
    assert "password" in r.json()["error"]


@pytest.mark.asyncio
async def test_register_rejects_unknown_fields(client):
    r = await client.post(
        "/v1/users",
        json={
            "username": "eve",
            "email": "eve@example.com",
            "first_name": "E",
            "last_name": "V",
            "password": "password_123",
            "activated": True,
        },
    )
    assert r.status_code == 422
    assert "activated" in r.json()["error"]


@pytest.mark.asyncio
async def test_register_malformed_json(client):
    r = await client.post(
        "/v1/users",
        content=b'{"username": ',
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "body contains badly-formed JSON"


@pytest.mark.asyncio
async def test_get_user_by_username(client, signup):
    await signup("alice")
    r = await client.get("/v1/users/alice")
    assert r.status_code == 200
    assert r.json()["user"]["username"] == "alice"

    r = await client.get("/v1/users/nobody")
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client, signup):
    await signup("alice", "my_password_123")
    r = await client.post(
        "/v1/tokens/authentication",
        json={"username": "alice", "password": "my_password_123"},
    )
    assert r.status_code == 200
    token = r.json()["authentication_token"]
    assert len(token["plain_text"]) == 26
    assert "expired_at" in token


@pytest.mark.asyncio
async def test_login_wrong_password_twice_issues_no_tokens(client, signup, db_session):
    await signup("alice", "correct_password")

    for _ in range(2):
        r = await client.post(
            "/v1/tokens/authentication",
            json={"username": "alice", "password": "wrong_password"},
        )
        assert r.status_code == 401
        assert r.json()["error"] == "invalid authentication credentials"

    assert await _token_count(db_session) == 0


@pytest.mark.asyncio
async def test_login_nonexistent_user(client):
    r = await client.post(
        "/v1/tokens/authentication",
        json={"username": "nobody", "password": "whatever"},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_login_requires_fields(client):
    r = await client.post("/v1/tokens/authentication", json={"username": ""})
    assert r.status_code == 422
    assert set(r.json()["error"]) == {"username", "password"}


@pytest.mark.asyncio
async def test_second_login_invalidates_first_token(client, signup, get_token):
    await signup("alice")
    token_a = await get_token("alice")
    token_b = await get_token("alice")
    assert token_a != token_b

    r = await client.get("/v1/feed", headers={"Authorization": f"Bearer {token_a}"})
    assert r.status_code == 401

    r = await client.get("/v1/feed", headers={"Authorization": f"Bearer {token_b}"})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_login_ignores_stale_authorization_header(client, signup):
    """Login is allow-listed — a leftover bad header must not block it."""
    await signup("alice")
    r = await client.post(
        "/v1/tokens/authentication",
        json={"username": "alice", "password": "pa55word-long"},
        headers={"Authorization": "Bearer expired-or-garbage"},
    )
    assert r.status_code == 200


# ═══════════════════════════════════════════════════════════
# Logout
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_logout_revokes_token(client, login, db_session):
    _, headers = await login("alice")

    r = await client.delete("/v1/tokens/authentication", headers=headers)
    assert r.status_code == 200
    assert await _token_count(db_session) == 0

    r = await client.get("/v1/feed", headers=headers)
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_logout_requires_authentication(client):
    r = await client.delete("/v1/tokens/authentication")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"
