"""API route aggregation.

All routers registered here get mounted in main.py under /v1.

Authentication is not a router dependency here: the authenticate
middleware resolves the caller for every request, and each handler that
needs a logged-in user declares Depends(require_authenticated) itself,
since the same router mixes public reads and gated writes.
"""

from fastapi import APIRouter

from starbloom.api.comments import router as comments_router
from starbloom.api.follows import router as follows_router
from starbloom.api.health import router as health_router
from starbloom.api.posts import router as posts_router
from starbloom.api.tokens import router as tokens_router
from starbloom.api.users import router as users_router

api_router = APIRouter(prefix="/v1")

# Open routes — on the authenticate middleware's allow-list
api_router.include_router(health_router, tags=["health"])
api_router.include_router(tokens_router, tags=["tokens"])

# Mixed public reads / gated writes
api_router.include_router(users_router, tags=["users"])
api_router.include_router(posts_router, tags=["posts", "likes", "feed"])
api_router.include_router(comments_router, tags=["comments"])
api_router.include_router(follows_router, tags=["follows"])
