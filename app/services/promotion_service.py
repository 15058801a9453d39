"""
app/services/promotion_service.py

Purpose: Upcoming meal promotion

- Likes on staged meals (paid tier), with automatic promotion once the
  like count reaches PROMOTION_LIKE_THRESHOLD
- Admin "publish" forces promotion at any like count
- Promotion is a retry-safe move from upcomingMeals into meals:
    1. mark the staged document promotionPending
    2. upsert it into meals under the same _id
    3. delete it from upcomingMeals
  An interruption leaves the marker (or a same-_id copy) behind and
  resume_pending_promotions() finishes the move.
"""

from bson import ObjectId
from pymongo import ReturnDocument

from app.db.mongo import MealDatabase
from app.core.config import settings
from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.models.meal import PROMOTION_MARKER, catalog_copy
from app.services.meal_service import add_like
from utils.constants import MSG_UPCOMING_MEAL_NOT_FOUND
from utils.validation_utils import parse_object_id
from typing import Optional, Dict, Any

logger = get_logger(__name__)


async def _complete_promotion(database: MealDatabase, staged: Dict[str, Any]) -> ObjectId:
    meal_id = staged["_id"]

    await database.meals.replace_one({"_id": meal_id}, catalog_copy(staged), upsert=True)
    await database.upcoming_meals.delete_one({"_id": meal_id})

    logger.info(
        f"Upcoming meal promoted to catalog with {staged.get('likes', 0)} likes",
        extra={"meal_id": str(meal_id)}
    )
    return meal_id


async def promote_upcoming_meal(database: MealDatabase, meal_id: ObjectId) -> ObjectId:
    """
    Moves a staged meal into the catalog.

    Safe to call again for the same meal after a partial failure, and
    when a concurrent call has already finished the move.

    Raises:
        ResourceNotFoundError: If the meal is in neither staging nor the catalog
    """
    staged = await database.upcoming_meals.find_one_and_update(
        {"_id": meal_id},
        {"$set": {PROMOTION_MARKER: True}},
        return_document=ReturnDocument.AFTER
    )
    if staged is None:
        if await database.meals.find_one({"_id": meal_id}, {"_id": 1}) is not None:
            logger.info("Upcoming meal already promoted", extra={"meal_id": str(meal_id)})
            return meal_id
        raise ResourceNotFoundError(MSG_UPCOMING_MEAL_NOT_FOUND)

    return await _complete_promotion(database, staged)


async def like_upcoming_meal(
    database: MealDatabase,
    meal_id: str,
    email: str,
    threshold: Optional[int] = None
) -> Dict[str, Any]:
    """
    Likes a staged meal and promotes it when the threshold is reached.

    Returns:
        {"likes": int, "promoted": bool, "mealId": ObjectId}
    """
    threshold = threshold or settings.PROMOTION_LIKE_THRESHOLD

    with LogContext(email=email, meal_id=meal_id):
        oid = parse_object_id(meal_id)
        if oid is None:
            raise ResourceNotFoundError(MSG_UPCOMING_MEAL_NOT_FOUND)

        meal = await add_like(
            database.upcoming_meals, oid, email,
            not_found_message=MSG_UPCOMING_MEAL_NOT_FOUND
        )
        likes = meal.get("likes", 0)
        logger.info(f"Upcoming meal liked ({likes}/{threshold})")

        promoted = False
        if likes >= threshold:
            await promote_upcoming_meal(database, oid)
            promoted = True

        return {"likes": likes, "promoted": promoted, "mealId": oid}


async def publish_upcoming_meal(database: MealDatabase, meal_id: str) -> ObjectId:
    """
    Admin action: promote regardless of likes.
    """
    oid = parse_object_id(meal_id)
    if oid is None:
        raise ResourceNotFoundError(MSG_UPCOMING_MEAL_NOT_FOUND)

    with LogContext(meal_id=meal_id):
        logger.info("Publishing upcoming meal")
        return await promote_upcoming_meal(database, oid)


async def resume_pending_promotions(database: MealDatabase) -> int:
    """
    Finishes every promotion interrupted between marking and deleting.
    Run at startup.

    Returns:
        Number of promotions completed
    """
    pending = await database.upcoming_meals.find({PROMOTION_MARKER: True}).to_list(length=None)

    for staged in pending:
        await _complete_promotion(database, staged)

    if pending:
        logger.warning(f"Completed {len(pending)} interrupted promotion(s)")
    return len(pending)
