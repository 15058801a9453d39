"""
app/services/user_service.py

Purpose: User data management

- Idempotent registration (upsert by email)
- Admin listing, search suggestions, promotion to admin
- Profile and per-user review lookups
"""

from app.db.mongo import MealDatabase
from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.models.user import Role, new_user_document
from utils.constants import MSG_USER_NOT_FOUND
from utils.validation_utils import escape_search_term
from typing import Optional, Dict, Any, List, Tuple

logger = get_logger(__name__)


async def register_user(
    database: MealDatabase,
    email: str,
    username: Optional[str] = None,
    photo: Optional[str] = None
) -> bool:
    """
    Creates the user on first sign-in; a no-op for known emails.

    Args:
        database: MealDatabase
        email: Unique user key
        username: Display name
        photo: Avatar URL

    Returns:
        True if a new user document was inserted
    """
    with LogContext(email=email):
        result = await database.users.update_one(
            {"email": email},
            {"$setOnInsert": new_user_document(email, username, photo)},
            upsert=True
        )

        created = result.upserted_id is not None
        if created:
            logger.info("New user created")
        return created


async def get_user_by_email(database: MealDatabase, email: str) -> Optional[Dict[str, Any]]:
    return await database.users.find_one({"email": email})


async def is_admin(database: MealDatabase, email: str) -> bool:
    user = await get_user_by_email(database, email)
    return bool(user) and user.get("role") == Role.ADMIN.value


async def list_users(
    database: MealDatabase,
    search: Optional[str] = None,
    limit: int = 10,
    offset: int = 0
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Pages through users, ranked by text score when searching.

    Returns:
        (users, total matching count)
    """
    match: Dict[str, Any] = {}
    if search:
        match["$text"] = {"$search": search}

    pipeline: List[Dict[str, Any]] = [{"$match": match}]
    if search:
        pipeline.append({"$sort": {"score": {"$meta": "textScore"}}})
    else:
        pipeline.append({"$sort": {"_id": 1}})
    pipeline += [{"$skip": offset}, {"$limit": limit}]

    users = await database.users.aggregate(pipeline).to_list(length=None)
    count = await database.users.count_documents(match)
    return users, count


async def suggest_users(database: MealDatabase, query: str, limit: int = 10) -> List[Dict[str, Any]]:
    """
    Case-insensitive substring match on username or email.
    """
    pattern = escape_search_term(query)
    cursor = database.users.find(
        {
            "$or": [
                {"username": {"$regex": pattern, "$options": "i"}},
                {"email": {"$regex": pattern, "$options": "i"}},
            ]
        },
        limit=limit
    )
    return await cursor.to_list(length=limit)


async def get_profile(database: MealDatabase, email: str) -> Dict[str, Any]:
    """
    Stored user (or an empty dict) plus the number of meals they listed.
    """
    profile = await get_user_by_email(database, email) or {}
    profile["mealCount"] = await database.meals.count_documents({"email": email})
    return profile


async def promote_to_admin(database: MealDatabase, email: str):
    """
    Grants the admin role.

    Raises:
        ResourceNotFoundError: If no user has this email
    """
    with LogContext(email=email):
        result = await database.users.update_one(
            {"email": email},
            {"$set": {"role": Role.ADMIN.value}}
        )
        if result.matched_count == 0:
            raise ResourceNotFoundError(MSG_USER_NOT_FOUND)

        logger.info("User promoted to admin")
        return result
