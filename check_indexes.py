"""
Reports which of the expected indexes exist in the configured database.

Run: python check_indexes.py
"""

import asyncio

from app.core.logging import setup_logging, get_logger
from app.db.mongo import (
    connect_to_mongo,
    MEAL_REQUESTS,
    MEALS,
    PAYMENTS,
    UPCOMING_MEALS,
    USERS,
)

setup_logging()
logger = get_logger("scripts.check_indexes")

# Indexes that back uniqueness rules; the rest only affect speed
REQUIRED_INDEXES = {
    USERS: ["email_unique"],
    MEALS: ["meals_text_idx"],
    UPCOMING_MEALS: [],
    MEAL_REQUESTS: ["request_email_meal_unique"],
    PAYMENTS: ["payment_transaction_unique"],
}


async def check_indexes() -> bool:
    database = await connect_to_mongo()
    ok = True

    try:
        for collection, required in REQUIRED_INDEXES.items():
            indexes = await database.db[collection].index_information()
            logger.info(f"{collection}: {sorted(indexes.keys())}")

            for name in required:
                if name in indexes:
                    logger.info(f"  ✅ '{name}' exists")
                else:
                    logger.error(f"  ❌ '{name}' is missing. Run scripts/init_db.py")
                    ok = False
    finally:
        database.close()

    return ok


if __name__ == "__main__":
    raise SystemExit(0 if asyncio.run(check_indexes()) else 1)
