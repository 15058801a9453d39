"""
Database initialization script

Run once per environment to create indexes, finish interrupted
promotions and optionally grant the first admin:
    python scripts/init_db.py
    python scripts/init_db.py --admin owner@example.com
"""

import argparse
import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo
from app.db.indexes import create_indexes
from app.models.user import Role, new_user_document
from app.services.promotion_service import resume_pending_promotions

setup_logging()
logger = get_logger("scripts.init_db")


async def init_db(admin_email=None):
    logger.info(f"🔌 Connecting to MongoDB: {settings.MONGODB_DB_NAME}")
    database = await connect_to_mongo()

    try:
        await database.ping()
        logger.info("✅ Connected successfully")

        await create_indexes(database)
        logger.info("✅ Indexes created")

        completed = await resume_pending_promotions(database)
        logger.info(f"✅ Pending promotions completed: {completed}")

        if admin_email:
            document = new_user_document(admin_email)
            document.pop("role")
            await database.users.update_one(
                {"email": admin_email},
                {"$setOnInsert": document, "$set": {"role": Role.ADMIN.value}},
                upsert=True
            )
            logger.info(f"✅ {admin_email} is now an admin")

        for name in await database.db.list_collection_names():
            count = await database.db[name].count_documents({})
            logger.info(f"  📋 {name}: {count} documents")

    except Exception as e:
        logger.error(f"❌ Initialization failed: {e}")
        raise
    finally:
        database.close()
        logger.info("🔌 Connection closed")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create MealMate indexes and bootstrap an admin")
    parser.add_argument("--admin", help="Email to register (if needed) and promote to admin")
    args = parser.parse_args()

    asyncio.run(init_db(args.admin))
