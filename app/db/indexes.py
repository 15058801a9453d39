"""
app/db/indexes.py

Purpose: Database index management

- Unique indexes backing the at-most-once invariants
- Text indexes used by meal and user search
- Sort helpers for the like/review listings
"""

from pymongo import ASCENDING, DESCENDING, TEXT

from app.db.mongo import MealDatabase
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes(database: MealDatabase):
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        logger.info("Creating database indexes...")

        # ==============================================
        # USERS
        # ==============================================
        await database.users.create_index("email", unique=True, name="email_unique")
        await database.users.create_index(
            [("username", TEXT), ("email", TEXT)],
            name="users_text_idx"
        )
        logger.debug("Created users indexes")

        # ==============================================
        # MEALS
        # ==============================================
        await database.meals.create_index(
            [("title", TEXT), ("category", TEXT), ("description", TEXT)],
            name="meals_text_idx"
        )
        await database.meals.create_index("category", name="meal_category_idx")
        await database.meals.create_index("price", name="meal_price_idx")
        await database.meals.create_index([("likes", DESCENDING)], name="meal_likes_idx")
        await database.meals.create_index("email", name="meal_owner_idx")
        await database.meals.create_index("reviews.email", name="meal_reviewer_idx")
        logger.debug("Created meals indexes")

        # ==============================================
        # UPCOMING MEALS
        # ==============================================
        await database.upcoming_meals.create_index(
            [("likes", DESCENDING)], name="upcoming_likes_idx"
        )
        await database.upcoming_meals.create_index(
            "promotionPending", name="upcoming_promotion_idx", sparse=True
        )
        logger.debug("Created upcomingMeals indexes")

        # ==============================================
        # MEAL REQUESTS
        # ==============================================
        await database.meal_requests.create_index(
            [("email", ASCENDING), ("mealId", ASCENDING)],
            unique=True,
            name="request_email_meal_unique"
        )
        await database.meal_requests.create_index("status", name="request_status_idx")
        logger.debug("Created mealsRequest indexes")

        # ==============================================
        # PAYMENTS
        # ==============================================
        await database.payments.create_index(
            [("email", ASCENDING), ("createdAt", DESCENDING)],
            name="payment_history_idx"
        )
        await database.payments.create_index(
            "transactionId", unique=True, sparse=True, name="payment_transaction_unique"
        )
        logger.debug("Created payments indexes")

        logger.info("✅ All database indexes created successfully")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    """
    Run this script directly to create indexes manually.
    """
    import asyncio
    from app.db.mongo import connect_to_mongo

    async def main():
        database = await connect_to_mongo()
        try:
            await create_indexes(database)
        finally:
            database.close()

    asyncio.run(main())
