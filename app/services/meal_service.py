"""
app/services/meal_service.py

Purpose: Meal catalog operations

- Admin CRUD on the catalog and staging collections
- Filtered, sorted, paged listings
- Likes (at most one per user) and reviews (at most one per user)
"""

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

from app.db.mongo import MealDatabase
from app.core.exceptions import DuplicateActionError, ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.models.meal import new_meal_document
from utils.constants import (
    ALL_CATEGORIES,
    SORT_BY_LIKES,
    SORT_BY_REVIEWS,
    MSG_ALREADY_LIKED,
    MSG_MEAL_NOT_FOUND,
    MSG_REVIEW_NOT_FOUND,
    MSG_UPCOMING_MEAL_NOT_FOUND,
)
from utils.validation_utils import parse_object_id
from typing import Optional, Dict, Any, List, Tuple

logger = get_logger(__name__)


def _meal_id(meal_id: str, message: str = MSG_MEAL_NOT_FOUND) -> ObjectId:
    oid = parse_object_id(meal_id)
    if oid is None:
        raise ResourceNotFoundError(message)
    return oid


def sort_stage(sort: Optional[str]) -> Optional[Dict[str, int]]:
    """
    Maps the ?sort= value to a $sort document; None keeps insertion order.
    """
    if sort == SORT_BY_LIKES:
        return {"likes": -1, "_id": 1}
    if sort == SORT_BY_REVIEWS:
        return {"reviewsCount": -1, "_id": 1}
    return None


def _listing_pipeline(
    match: Dict[str, Any],
    sort: Optional[str],
    offset: Optional[int] = None,
    limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    pipeline: List[Dict[str, Any]] = [
        {"$match": match},
        {"$addFields": {"reviewsCount": {"$size": {"$ifNull": ["$reviews", []]}}}},
    ]
    stage = sort_stage(sort)
    if stage:
        pipeline.append({"$sort": stage})
    if offset:
        pipeline.append({"$skip": offset})
    if limit is not None:
        pipeline.append({"$limit": limit})
    return pipeline


def build_meal_filter(
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    search: Optional[str] = None
) -> Dict[str, Any]:
    """
    Builds the $match document for the public meal listing.

    "All" (or no category) disables the category filter and a max price
    of 0 means unbounded.
    """
    match: Dict[str, Any] = {}

    if category and category != ALL_CATEGORIES:
        match["category"] = category

    price: Dict[str, float] = {"$gte": min_price or 0}
    if max_price:
        price["$lte"] = max_price
    match["price"] = price

    if search:
        match["$text"] = {"$search": search}

    return match


# ============================================================
# CREATE / READ
# ============================================================

async def _insert_meal(collection: AsyncIOMotorCollection, fields: Dict[str, Any]) -> ObjectId:
    result = await collection.insert_one(new_meal_document(fields))
    logger.info(
        f"Meal added: {fields.get('title')}",
        extra={"meal_id": str(result.inserted_id)}
    )
    return result.inserted_id


async def create_meal(database: MealDatabase, fields: Dict[str, Any]) -> ObjectId:
    return await _insert_meal(database.meals, fields)


async def create_upcoming_meal(database: MealDatabase, fields: Dict[str, Any]) -> ObjectId:
    return await _insert_meal(database.upcoming_meals, fields)


async def list_meals(
    database: MealDatabase,
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    limit: int = 10,
    offset: int = 0
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Public catalog listing.

    Returns:
        (page of meals, number of meals matching the filters)
    """
    match = build_meal_filter(category, min_price, max_price, search)
    meals = await database.meals.aggregate(
        _listing_pipeline(match, sort, offset, limit)
    ).to_list(length=None)
    count = await database.meals.count_documents(match)
    return meals, count


async def list_meals_admin(
    database: MealDatabase,
    sort: Optional[str] = None,
    limit: int = 10,
    offset: int = 0
) -> Tuple[List[Dict[str, Any]], int]:
    meals = await database.meals.aggregate(
        _listing_pipeline({}, sort, offset, limit)
    ).to_list(length=None)
    count = await database.meals.count_documents({})
    return meals, count


async def list_upcoming_meals(database: MealDatabase, sort: Optional[str] = None) -> List[Dict[str, Any]]:
    return await database.upcoming_meals.aggregate(
        _listing_pipeline({}, sort)
    ).to_list(length=None)


async def meals_by_category(database: MealDatabase, category: str, limit: int = 9) -> List[Dict[str, Any]]:
    query = {} if category == ALL_CATEGORIES else {"category": category}
    return await database.meals.find(query, limit=limit).to_list(length=limit)


async def get_meal(database: MealDatabase, meal_id: str) -> Dict[str, Any]:
    meal = await database.meals.find_one({"_id": _meal_id(meal_id)})
    if not meal:
        raise ResourceNotFoundError(MSG_MEAL_NOT_FOUND)
    return meal


async def get_upcoming_meal(database: MealDatabase, meal_id: str) -> Dict[str, Any]:
    oid = _meal_id(meal_id, MSG_UPCOMING_MEAL_NOT_FOUND)
    meal = await database.upcoming_meals.find_one({"_id": oid})
    if not meal:
        raise ResourceNotFoundError(MSG_UPCOMING_MEAL_NOT_FOUND)
    return meal


# ============================================================
# UPDATE / DELETE
# ============================================================

async def update_meal(database: MealDatabase, meal_id: str, fields: Dict[str, Any]):
    """
    $set of the supplied descriptive fields.

    Raises:
        ResourceNotFoundError: If the meal does not exist
    """
    oid = _meal_id(meal_id)
    if not fields:
        meal = await database.meals.find_one({"_id": oid}, {"_id": 1})
        if not meal:
            raise ResourceNotFoundError(MSG_MEAL_NOT_FOUND)
        return 1, 0

    result = await database.meals.update_one({"_id": oid}, {"$set": fields})
    if result.matched_count == 0:
        raise ResourceNotFoundError(MSG_MEAL_NOT_FOUND)

    logger.info("Meal updated", extra={"meal_id": meal_id})
    return result.matched_count, result.modified_count


async def delete_meal(database: MealDatabase, meal_id: str) -> int:
    result = await database.meals.delete_one({"_id": _meal_id(meal_id)})
    if result.deleted_count:
        logger.info("Meal deleted", extra={"meal_id": meal_id})
    return result.deleted_count


async def delete_upcoming_meal(database: MealDatabase, meal_id: str) -> int:
    oid = _meal_id(meal_id, MSG_UPCOMING_MEAL_NOT_FOUND)
    result = await database.upcoming_meals.delete_one({"_id": oid})
    if result.deleted_count:
        logger.info("Upcoming meal deleted", extra={"meal_id": meal_id})
    return result.deleted_count


# ============================================================
# LIKES
# ============================================================

async def add_like(
    collection: AsyncIOMotorCollection,
    oid: ObjectId,
    email: str,
    not_found_message: str = MSG_MEAL_NOT_FOUND
) -> Dict[str, Any]:
    """
    Records one like from `email` on the meal in `collection`.

    The membership check and the increment are one conditional update,
    so two concurrent likes from the same user cannot both land.

    Returns:
        The meal after the like

    Raises:
        ResourceNotFoundError: If the meal does not exist
        DuplicateActionError: If the user already liked it
    """
    meal = await collection.find_one_and_update(
        {"_id": oid, "likedBy": {"$ne": email}},
        {"$inc": {"likes": 1}, "$push": {"likedBy": email}},
        return_document=ReturnDocument.AFTER
    )
    if meal is not None:
        return meal

    if await collection.find_one({"_id": oid}, {"_id": 1}) is None:
        raise ResourceNotFoundError(not_found_message)
    raise DuplicateActionError(MSG_ALREADY_LIKED)


async def like_meal(database: MealDatabase, meal_id: str, email: str) -> Dict[str, Any]:
    with LogContext(email=email, meal_id=meal_id):
        meal = await add_like(database.meals, _meal_id(meal_id), email)
        logger.info(f"Meal liked, now at {meal.get('likes')} likes")
        return meal


# ============================================================
# REVIEWS
# ============================================================

async def upsert_review(database: MealDatabase, meal_id: str, email: str, review: str):
    """
    Replaces the caller's review or appends a new one.

    Concurrent submissions from the same user: last writer wins.
    """
    with LogContext(email=email, meal_id=meal_id):
        oid = _meal_id(meal_id)
        meal = await database.meals.find_one({"_id": oid}, {"reviews": 1})
        if not meal:
            raise ResourceNotFoundError(MSG_MEAL_NOT_FOUND)

        existing = meal.get("reviews") or []
        entry = {"email": email, "review": review}
        replaced = any(r.get("email") == email for r in existing)

        if replaced:
            # Keeps the entry at its original position
            reviews = [entry if r.get("email") == email else r for r in existing]
        else:
            reviews = existing + [entry]

        result = await database.meals.update_one({"_id": oid}, {"$set": {"reviews": reviews}})
        logger.info("Review updated" if replaced else "Review added")
        return result.matched_count, result.modified_count


async def delete_review(database: MealDatabase, meal_id: str, email: str):
    """
    Removes only the caller's review.

    Raises:
        ResourceNotFoundError: If the meal is missing or has no review from the caller
    """
    oid = _meal_id(meal_id)
    result = await database.meals.update_one(
        {"_id": oid, "reviews.email": email},
        {"$pull": {"reviews": {"email": email}}}
    )
    if result.matched_count == 0:
        if await database.meals.find_one({"_id": oid}, {"_id": 1}) is None:
            raise ResourceNotFoundError(MSG_MEAL_NOT_FOUND)
        raise ResourceNotFoundError(MSG_REVIEW_NOT_FOUND)

    logger.info("Review deleted", extra={"meal_id": meal_id, "email": email})
    return result.matched_count, result.modified_count


async def list_user_reviews(database: MealDatabase, email: str) -> List[Dict[str, Any]]:
    """
    Meals the caller reviewed, each carrying only the caller's review object.
    """
    meals = await database.meals.find(
        {"reviews": {"$elemMatch": {"email": email}}}
    ).to_list(length=None)

    return [
        {
            **meal,
            "reviews": next((r for r in meal.get("reviews", []) if r.get("email") == email), None),
        }
        for meal in meals
    ]
