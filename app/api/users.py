"""
app/api/users.py

Purpose: User endpoints

- Registration on first sign-in (public)
- Profile, admin status and own reviews (token)
- Listing, suggestions and admin promotion (admin)
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.api.deps import CurrentUser, get_current_user, get_database, require_admin
from app.core.config import settings
from app.db.mongo import MealDatabase
from app.schemas.response import UpdateResult
from app.schemas.user import AdminStatus, RegisterResponse, UserCreate, UserListResponse
from app.services import meal_service, user_service
from utils.serialization_utils import serialize_doc, serialize_docs

router = APIRouter(prefix="/users")


@router.post("", response_model=RegisterResponse)
async def register_user(body: UserCreate, database: MealDatabase = Depends(get_database)):
    created = await user_service.register_user(database, body.email, body.username, body.photo)
    return RegisterResponse(created=created)


@router.get("", response_model=UserListResponse)
async def list_users(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    search: Optional[str] = None,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    users, count = await user_service.list_users(
        database, search, limit or settings.DEFAULT_PAGE_SIZE, offset
    )
    return UserListResponse(users=serialize_docs(users), usersCount=count)


@router.get("/suggestions")
async def user_suggestions(
    query: str = Query(default=""),
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    users = await user_service.suggest_users(database, query, settings.SUGGESTION_LIMIT)
    return serialize_docs(users)


@router.get("/profile")
async def user_profile(
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
):
    return serialize_doc(await user_service.get_profile(database, current_user.email))


@router.get("/admin", response_model=AdminStatus)
async def admin_status(
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
):
    return AdminStatus(admin=await user_service.is_admin(database, current_user.email))


@router.get("/reviews")
async def user_reviews(
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
):
    meals = await meal_service.list_user_reviews(database, current_user.email)
    return serialize_docs(meals)


@router.put("/admin/{email}", response_model=UpdateResult)
async def make_admin(
    email: str,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    result = await user_service.promote_to_admin(database, email)
    return UpdateResult(matchedCount=result.matched_count, modifiedCount=result.modified_count)
