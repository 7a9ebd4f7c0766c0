"""MongoDB database connection using Motor (async driver)"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from urbansprout.config import settings

logger = logging.getLogger(__name__)


class Database:
    """Database connection manager"""
    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None


database = Database()


async def connect_to_mongo():
    """Connect to MongoDB on application startup"""
    database.client = AsyncIOMotorClient(settings.mongodb_url)
    database.db = database.client[settings.mongodb_db_name]
    await ensure_indexes(database.db)
    logger.info(f"Connected to MongoDB: {settings.mongodb_db_name}")


async def close_mongo_connection():
    """Close MongoDB connection on application shutdown"""
    if database.client:
        database.client.close()
        logger.info("Closed MongoDB connection")


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """Create the indexes the store and blog queries rely on"""
    await db.carts.create_index("user_id", unique=True)
    await db.wishlists.create_index("user_id", unique=True)
    await db.orders.create_index("order_number", unique=True)
    await db.orders.create_index([("user_id", 1), ("created_at", -1)])
    await db.orders.create_index(
        "razorpay_payment_id",
        unique=True,
        partialFilterExpression={"razorpay_payment_id": {"$type": "string"}}
    )
    await db.products.create_index([("category", 1), ("published", 1)])
    await db.reviews.create_index(
        [("user_id", 1), ("order_id", 1), ("product_id", 1)], unique=True
    )
    await db.blogs.create_index([("status", 1), ("approval_status", 1), ("created_at", -1)])
    await db.notifications.create_index([("user_id", 1), ("is_read", 1)])
    await db.gardens.create_index(
        [("user_id", 1), ("plant.name", 1)],
        unique=True,
        partialFilterExpression={"is_active": True}
    )
    await db.plants.create_index([("sunlight", 1), ("space", 1), ("experience", 1), ("time", 1)])
    await db.plants.create_index(
        [("plant_name", "text"), ("description", "text"), ("benefits", "text")]
    )


def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance"""
    return database.db
