"""Post API tests — CRUD, ownership, pagination, edit conflicts."""

import pytest
from sqlalchemy import text

from starbloom.errors import EditConflict
from starbloom.services.post_service import PostService


async def _create_post(client, headers, content="hello world") -> dict:
    r = await client.post("/v1/posts", json={"content": content}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["post"]


# ═══════════════════════════════════════════════════════════
# Create + read
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_post(client, login):
    user, headers = await login("alice")
    post = await _create_post(client, headers, "first post")
    assert post["content"] == "first post"
    assert post["user_id"] == user["id"]
    assert "created_at" in post
    assert "updated_at" in post


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "x" * 256])
async def test_create_post_validates_content(client, login, content):
    _, headers = await login("alice")
    r = await client.post("/v1/posts", json={"content": content}, headers=headers)
    assert r.status_code == 422
    assert "content" in r.json()["error"]


@pytest.mark.asyncio
async def test_get_post(client, login):
    _, headers = await login("alice")
    post = await _create_post(client, headers)

    r = await client.get(f"/v1/posts/{post['id']}")
    assert r.status_code == 200
    assert r.json()["post"]["id"] == post["id"]


@pytest.mark.asyncio
async def test_get_missing_post(client):
    r = await client.get("/v1/posts/9999")
    assert r.status_code == 404
    assert r.json()["error"] == "the requested resource could not be found"


# ═══════════════════════════════════════════════════════════
# Ownership
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_requires_ownership(client, login):
    """Another user's token is authenticated but not authorized."""
    _, alice = await login("alice")
    _, bob = await login("bob")
    post = await _create_post(client, alice)

    r = await client.delete(f"/v1/posts/{post['id']}", headers=bob)
    assert r.status_code == 403
    assert r.json()["error"] == (
        "your user account doesn't have the necessary permissions to access this resource"
    )

    r = await client.delete(f"/v1/posts/{post['id']}", headers=alice)
    assert r.status_code == 200
    assert r.json()["message"] == "post successfully deleted"

    r = await client.get(f"/v1/posts/{post['id']}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_update_post(client, login):
    _, alice = await login("alice")
    _, bob = await login("bob")
    post = await _create_post(client, alice, "draft")

    r = await client.patch(
        f"/v1/posts/{post['id']}", json={"content": "hijacked"}, headers=bob
    )
    assert r.status_code == 403

    r = await client.patch(
        f"/v1/posts/{post['id']}", json={"content": "final"}, headers=alice
    )
    assert r.status_code == 200
    assert r.json()["post"]["content"] == "final"

    r = await client.get(f"/v1/posts/{post['id']}")
    assert r.json()["post"]["content"] == "final"


@pytest.mark.asyncio
async def test_update_missing_post(client, login):
    _, headers = await login("alice")
    r = await client.patch("/v1/posts/424242", json={"content": "x"}, headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_update_conflict(db_session, signup):
    """A stale version on flush surfaces as EditConflict."""
    user = await signup("alice")
    svc = PostService(db_session)
    post = await svc.create(user_id=user["id"], content="v1")
    await db_session.commit()

    # Someone else bumps the row behind this session's back
    await db_session.execute(
        text("UPDATE posts SET version = version + 1 WHERE id = :id"),
        {"id": post.id},
    )

    with pytest.raises(EditConflict):
        await svc.update(post, "v2")


# ═══════════════════════════════════════════════════════════
# Listing + pagination
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_posts_pagination(client, login):
    _, headers = await login("alice")
    for i in range(5):
        await _create_post(client, headers, f"post {i}")

    r = await client.get("/v1/posts", params={"page": 2, "page_size": 2})
    assert r.status_code == 200
    data = r.json()
    assert data["_metadata"] == {
        "current_page": 2,
        "page_size": 2,
        "first_page": 1,
        "last_page": 3,
        "total_records": 5,
    }
    # Newest first: posts 4, 3 | 2, 1 | 0
    assert [p["content"] for p in data["posts"]] == ["post 2", "post 1"]


@pytest.mark.asyncio
async def test_list_posts_sort_ascending(client, login):
    _, headers = await login("alice")
    for i in range(3):
        await _create_post(client, headers, f"post {i}")

    r = await client.get("/v1/posts", params={"sort": "id"})
    assert [p["content"] for p in r.json()["posts"]] == ["post 0", "post 1", "post 2"]


@pytest.mark.asyncio
async def test_list_posts_filtered_by_user(client, login):
    alice, alice_headers = await login("alice")
    _, bob_headers = await login("bob")
    await _create_post(client, alice_headers, "from alice")
    await _create_post(client, bob_headers, "from bob")

    r = await client.get("/v1/posts", params={"user_id": alice["id"]})
    posts = r.json()["posts"]
    assert [p["content"] for p in posts] == ["from alice"]
    assert r.json()["_metadata"]["total_records"] == 1


@pytest.mark.asyncio
async def test_list_page_past_the_end(client, login):
    _, headers = await login("alice")
    await _create_post(client, headers)

    r = await client.get("/v1/posts", params={"page": 7})
    data = r.json()
    assert data["posts"] == []
    assert data["_metadata"]["current_page"] == 7
    assert data["_metadata"]["last_page"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params, field",
    [
        ({"page": 0}, "page"),
        ({"page": 10_000_001}, "page"),
        ({"page_size": 0}, "page_size"),
        ({"page_size": 1001}, "page_size"),
        ({"sort": "content"}, "sort"),
    ],
)
async def test_list_rejects_bad_filters(client, params, field):
    r = await client.get("/v1/posts", params=params)
    assert r.status_code == 422
    assert field in r.json()["error"]
