"""
app/services/request_service.py

Purpose: Meal request / serve workflow

- Paid-tier users request catalog meals (once per meal)
- Admin marks requests Delivered
- Requester or admin cancels (deletes) a request
- Requests whose meal was deleted are removed when next read
"""

import asyncio
from datetime import datetime, timezone

from pymongo.errors import DuplicateKeyError

from app.db.mongo import MealDatabase
from app.core.exceptions import (
    AuthorizationError,
    DuplicateActionError,
    ResourceNotFoundError,
)
from app.core.logging import get_logger, LogContext
from app.models.meal_request import RequestStatus, is_valid_transition, parse_status
from utils.constants import (
    MSG_ALREADY_DELIVERED,
    MSG_ALREADY_REQUESTED,
    MSG_FORBIDDEN,
    MSG_MEAL_NOT_FOUND,
    MSG_REQUEST_NOT_FOUND,
)
from utils.validation_utils import parse_object_id
from typing import Optional, Dict, Any, List

logger = get_logger(__name__)


async def create_request(
    database: MealDatabase,
    email: str,
    meal_id: str,
    username: Optional[str] = None
):
    """
    Files a request for a catalog meal.

    Raises:
        ResourceNotFoundError: If the meal does not exist
        DuplicateActionError: If the caller already requested this meal
    """
    with LogContext(email=email, meal_id=meal_id):
        oid = parse_object_id(meal_id)
        if oid is None or await database.meals.find_one({"_id": oid}, {"_id": 1}) is None:
            raise ResourceNotFoundError(MSG_MEAL_NOT_FOUND)

        if await database.meal_requests.find_one({"email": email, "mealId": meal_id}):
            raise DuplicateActionError(MSG_ALREADY_REQUESTED)

        document = {
            "mealId": meal_id,
            "email": email,
            "username": username,
            "status": RequestStatus.REQUESTED.value,
            "requestedAt": datetime.now(timezone.utc),
        }
        try:
            result = await database.meal_requests.insert_one(document)
        except DuplicateKeyError:
            # Lost a race against a concurrent request for the same pair
            raise DuplicateActionError(MSG_ALREADY_REQUESTED)

        logger.info("Meal requested")
        return result.inserted_id


async def _join_request(database: MealDatabase, request: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    oid = parse_object_id(request.get("mealId"))
    meal = None
    if oid is not None:
        meal = await database.meals.find_one({"_id": oid}, {"_id": 0})

    if meal is None:
        await database.meal_requests.delete_one({"_id": request["_id"]})
        logger.info(
            "Removed request for a deleted meal",
            extra={"request_id": str(request["_id"]), "meal_id": request.get("mealId")}
        )
        return None

    return {**meal, **request}


async def reconcile_requests(database: MealDatabase, requests: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Joins each request with its meal and deletes requests whose meal is gone.

    Args:
        database: MealDatabase
        requests: Raw mealsRequest documents

    Returns:
        Live requests merged over their meal fields (request fields win)
    """
    joined = await asyncio.gather(*(_join_request(database, r) for r in requests))
    return [row for row in joined if row is not None]


async def list_user_requests(database: MealDatabase, email: str) -> List[Dict[str, Any]]:
    requests = await database.meal_requests.find({"email": email}).to_list(length=None)
    return await reconcile_requests(database, requests)


async def list_all_requests(database: MealDatabase) -> List[Dict[str, Any]]:
    requests = await database.meal_requests.find().to_list(length=None)
    return await reconcile_requests(database, requests)


async def _get_request(database: MealDatabase, request_id: str) -> Dict[str, Any]:
    oid = parse_object_id(request_id)
    request = await database.meal_requests.find_one({"_id": oid}) if oid else None
    if request is None:
        raise ResourceNotFoundError(MSG_REQUEST_NOT_FOUND)
    return request


async def serve_request(database: MealDatabase, request_id: str):
    """
    Marks a request Delivered.

    Raises:
        ResourceNotFoundError: If the request does not exist
        DuplicateActionError: If it was already delivered
    """
    with LogContext(request_id=request_id):
        request = await _get_request(database, request_id)
        stored_status = request.get("status")
        current = parse_status(stored_status)

        if not is_valid_transition(current, RequestStatus.DELIVERED):
            raise DuplicateActionError(MSG_ALREADY_DELIVERED)

        result = await database.meal_requests.update_one(
            {"_id": request["_id"], "status": stored_status},
            {
                "$set": {
                    "status": RequestStatus.DELIVERED.value,
                    "servedAt": datetime.now(timezone.utc),
                }
            }
        )
        if result.modified_count == 0:
            raise DuplicateActionError(MSG_ALREADY_DELIVERED)

        logger.info(f"Request served: {stored_status} -> {RequestStatus.DELIVERED.value}")
        return result.matched_count, result.modified_count


async def cancel_request(database: MealDatabase, request_id: str, email: str, is_admin: bool) -> int:
    """
    Deletes a request. Only the requester or an admin may cancel.

    Raises:
        ResourceNotFoundError: If the request does not exist
        AuthorizationError: If the caller neither owns it nor is admin
    """
    with LogContext(email=email, request_id=request_id):
        request = await _get_request(database, request_id)

        if request.get("email") != email and not is_admin:
            logger.warning("Rejected cancel of another user's request")
            raise AuthorizationError(MSG_FORBIDDEN)

        result = await database.meal_requests.delete_one({"_id": request["_id"]})
        logger.info("Request cancelled")
        return result.deleted_count
