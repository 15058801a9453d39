"""
app/models/meal.py

Purpose: Meal document model

- Shared by the catalog (meals) and staging (upcomingMeals) collections
- likes / likedBy / reviews are owned by the server
- promotionPending marks a staged meal whose move into the catalog
  has started but not finished
"""

from datetime import datetime, timezone
from typing import Any, Dict

PROMOTION_MARKER = "promotionPending"

# Fields only the like/review/promotion paths may write
SERVER_FIELDS = ("_id", "likes", "likedBy", "reviews", "createdAt", "publishedAt", PROMOTION_MARKER)


def new_meal_document(fields: Dict[str, Any]) -> Dict[str, Any]:
    meal = {key: value for key, value in fields.items() if key not in SERVER_FIELDS}
    meal.update({
        "likes": 0,
        "likedBy": [],
        "reviews": [],
        "createdAt": datetime.now(timezone.utc),
    })
    return meal


def catalog_copy(staged: Dict[str, Any]) -> Dict[str, Any]:
    """
    The catalog version of a staged meal: same _id, marker dropped.
    """
    meal = {key: value for key, value in staged.items() if key != PROMOTION_MARKER}
    meal["publishedAt"] = datetime.now(timezone.utc)
    return meal
