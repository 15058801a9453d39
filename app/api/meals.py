"""
app/api/meals.py

Purpose: Meal catalog and upcoming meal endpoints

- Public reads (listing, category tabs, details)
- Admin writes (create, edit, delete, publish)
- Likes and reviews (token), upcoming likes (paid tier)

Static paths are declared before /meals/{meal_id} so they win the match.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.api.deps import (
    CurrentUser,
    get_current_user,
    get_database,
    require_admin,
    require_paid_tier,
)
from app.core.config import settings
from app.db.mongo import MealDatabase
from app.schemas.meal import MealCreate, MealListResponse, MealUpdate, ReviewIn
from app.schemas.response import DeleteResult, InsertResult, UpdateResult
from app.services import meal_service, promotion_service
from utils.serialization_utils import serialize_doc, serialize_docs

router = APIRouter(prefix="/meals")


# ============================================================
# COLLECTION ROUTES
# ============================================================

@router.post("", response_model=InsertResult)
async def create_meal(
    body: MealCreate,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    meal_id = await meal_service.create_meal(database, body.model_dump())
    return InsertResult(insertedId=str(meal_id))


@router.get("", response_model=MealListResponse)
async def list_meals(
    category: Optional[str] = None,
    minPrice: Optional[float] = Query(default=None, ge=0),
    maxPrice: Optional[float] = Query(default=None, ge=0),
    search: Optional[str] = None,
    sort: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    database: MealDatabase = Depends(get_database),
):
    meals, count = await meal_service.list_meals(
        database,
        category=category,
        min_price=minPrice,
        max_price=maxPrice,
        search=search,
        sort=sort,
        limit=limit or settings.DEFAULT_PAGE_SIZE,
        offset=offset,
    )
    return MealListResponse(meals=serialize_docs(meals), mealsCount=count)


@router.get("/admin", response_model=MealListResponse)
async def list_meals_admin(
    sort: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    meals, count = await meal_service.list_meals_admin(
        database, sort, limit or settings.DEFAULT_PAGE_SIZE, offset
    )
    return MealListResponse(meals=serialize_docs(meals), mealsCount=count)


@router.get("/category/{category}")
async def meals_by_category(category: str, database: MealDatabase = Depends(get_database)):
    meals = await meal_service.meals_by_category(database, category, settings.CATEGORY_PAGE_SIZE)
    return serialize_docs(meals)


# ============================================================
# UPCOMING MEALS
# ============================================================

@router.post("/upcoming", response_model=InsertResult)
async def create_upcoming_meal(
    body: MealCreate,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    meal_id = await meal_service.create_upcoming_meal(database, body.model_dump())
    return InsertResult(insertedId=str(meal_id))


@router.get("/upcoming")
async def list_upcoming_meals(sort: Optional[str] = None, database: MealDatabase = Depends(get_database)):
    return serialize_docs(await meal_service.list_upcoming_meals(database, sort))


@router.get("/upcoming/{meal_id}")
async def get_upcoming_meal(meal_id: str, database: MealDatabase = Depends(get_database)):
    return serialize_doc(await meal_service.get_upcoming_meal(database, meal_id))


@router.put("/upcoming/{meal_id}/like")
async def like_upcoming_meal(
    meal_id: str,
    current_user: CurrentUser = Depends(require_paid_tier),
    database: MealDatabase = Depends(get_database),
):
    outcome = await promotion_service.like_upcoming_meal(database, meal_id, current_user.email)
    response = {"acknowledged": True, "likes": outcome["likes"], "promoted": outcome["promoted"]}
    if outcome["promoted"]:
        response["insertedId"] = str(outcome["mealId"])
    return response


@router.put("/upcoming/{meal_id}/publish", response_model=InsertResult)
async def publish_upcoming_meal(
    meal_id: str,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    promoted_id = await promotion_service.publish_upcoming_meal(database, meal_id)
    return InsertResult(insertedId=str(promoted_id))


@router.delete("/upcoming/{meal_id}", response_model=DeleteResult)
async def delete_upcoming_meal(
    meal_id: str,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    return DeleteResult(deletedCount=await meal_service.delete_upcoming_meal(database, meal_id))


# ============================================================
# SINGLE MEAL
# ============================================================

@router.get("/{meal_id}")
async def get_meal(meal_id: str, database: MealDatabase = Depends(get_database)):
    return serialize_doc(await meal_service.get_meal(database, meal_id))


@router.put("/{meal_id}", response_model=UpdateResult)
async def update_meal(
    meal_id: str,
    body: MealUpdate,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    matched, modified = await meal_service.update_meal(
        database, meal_id, body.model_dump(exclude_unset=True)
    )
    return UpdateResult(matchedCount=matched, modifiedCount=modified)


@router.delete("/{meal_id}", response_model=DeleteResult)
async def delete_meal(
    meal_id: str,
    _: CurrentUser = Depends(require_admin),
    database: MealDatabase = Depends(get_database),
):
    return DeleteResult(deletedCount=await meal_service.delete_meal(database, meal_id))


@router.put("/{meal_id}/like")
async def like_meal(
    meal_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
):
    meal = await meal_service.like_meal(database, meal_id, current_user.email)
    return {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1, "likes": meal["likes"]}


@router.put("/{meal_id}/review", response_model=UpdateResult)
async def review_meal(
    meal_id: str,
    body: ReviewIn,
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
):
    matched, modified = await meal_service.upsert_review(
        database, meal_id, current_user.email, body.review
    )
    return UpdateResult(matchedCount=matched, modifiedCount=modified)


@router.delete("/{meal_id}/review", response_model=UpdateResult)
async def delete_review(
    meal_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
):
    matched, modified = await meal_service.delete_review(database, meal_id, current_user.email)
    return UpdateResult(matchedCount=matched, modifiedCount=modified)
