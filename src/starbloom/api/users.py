"""User API — signup and public profile lookup.

- POST /users → create an account (open route)
- GET /users/{username} → public profile
- GET /users/{user_id}/followers → paginated followers
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from starbloom.db.engine import commit, get_db
from starbloom.schemas.pagination import Filter, filter_params
from starbloom.schemas.social import FollowerList
from starbloom.schemas.user import UserCreate, UserEnvelope
from starbloom.services.follow_service import FollowService
from starbloom.services.user_service import UserService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.post("/users", response_model=UserEnvelope, status_code=201)
async def create_user(body: UserCreate, svc: UserService = Depends(_svc)):
    user = await svc.create_user(
        username=body.username,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        password=body.password,
    )
    await commit(svc.db)
    return {"user": user}


@router.get("/users/{username}", response_model=UserEnvelope)
async def get_user(username: str, svc: UserService = Depends(_svc)):
    user = await svc.get_by_username(username)
    if not user:
        raise HTTPException(status_code=404, detail="the requested resource could not be found")
    return {"user": user}


@router.get(
    "/users/{user_id}/followers",
    response_model=FollowerList,
    response_model_exclude_none=True,
)
async def list_followers(
    user_id: int,
    f: Filter = Depends(filter_params(50, ("-created_at",))),
    db: AsyncSession = Depends(get_db),
):
    users, metadata = await FollowService(db).followers(user_id, f)
    return {"metadata": metadata, "users": users}
