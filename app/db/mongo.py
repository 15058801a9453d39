"""
app/db/mongo.py

Purpose: MongoDB connection setup

- Initializes Motor client with connection pooling
- MealDatabase bundles the client and the five collections
  (users, meals, upcomingMeals, mealsRequest, payments)
- Created once in the application lifespan and injected into handlers
- Health checks and startup retry logic
"""

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
import asyncio
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

USERS = "users"
MEALS = "meals"
UPCOMING_MEALS = "upcomingMeals"
MEAL_REQUESTS = "mealsRequest"
PAYMENTS = "payments"


class MealDatabase:
    """
    Owns the Motor client and hands out collection handles.

    Any Motor-compatible client works, which lets tests pass an in-memory one.
    """

    def __init__(self, client: AsyncIOMotorClient, db_name: str):
        self.client = client
        self.db: AsyncIOMotorDatabase = client[db_name]

    @property
    def users(self) -> AsyncIOMotorCollection:
        return self.db[USERS]

    @property
    def meals(self) -> AsyncIOMotorCollection:
        return self.db[MEALS]

    @property
    def upcoming_meals(self) -> AsyncIOMotorCollection:
        return self.db[UPCOMING_MEALS]

    @property
    def meal_requests(self) -> AsyncIOMotorCollection:
        return self.db[MEAL_REQUESTS]

    @property
    def payments(self) -> AsyncIOMotorCollection:
        return self.db[PAYMENTS]

    async def ping(self) -> bool:
        await self.client.admin.command("ping")
        return True

    async def is_healthy(self) -> bool:
        """
        Checks if the database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        try:
            return await self.ping()
        except Exception as e:
            logger.error(f"Database health check failed: {str(e)}")
            return False

    def close(self):
        logger.info("Closing MongoDB connection")
        self.client.close()


async def connect_to_mongo(max_retries: int = 3, retry_delay: float = 2) -> MealDatabase:
    """
    Builds the MealDatabase, pinging the cluster with retries when
    settings.should_ping_database is on. Without the ping, Motor
    connects lazily on the first operation.

    Raises:
        ConnectionError: If every ping attempt fails
    """
    client = AsyncIOMotorClient(
        settings.mongodb_uri,
        maxPoolSize=50,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
        retryWrites=True,
        retryReads=True,
    )
    database = MealDatabase(client, settings.MONGODB_DB_NAME)

    if not settings.should_ping_database:
        logger.info("Skipping startup ping; MongoDB will connect on first use")
        return database

    for attempt in range(1, max_retries + 1):
        try:
            logger.info(
                f"Attempting to connect to MongoDB (attempt {attempt}/{max_retries})"
            )
            await database.ping()
            logger.info(
                f"✅ Pinged your deployment. Connected to MongoDB: {settings.MONGODB_DB_NAME}"
            )
            return database

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(
                f"Failed to connect to MongoDB (attempt {attempt}/{max_retries}): {e}"
            )

            if attempt < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.critical("Failed to connect to MongoDB after all retries")
                client.close()
                raise ConnectionError("Could not establish MongoDB connection") from e
