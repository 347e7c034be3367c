"""MongoDB database configuration and connection management."""

from typing import Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from merchant_notifications.config.logging import get_logger
from merchant_notifications.config.settings import settings

logger = get_logger(__name__)


class MongoDBManager:
    """MongoDB connection and database management."""

    client: Optional[AsyncIOMotorClient] = None
    database: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect_to_mongo(cls) -> None:
        """Create database connection."""
        try:
            if not settings.MONGODB_URI:
                raise ValueError("MONGODB_URI not configured")

            logger.info("Connecting to MongoDB")
            cls.client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
            cls.database = cls.client[settings.MONGODB_DATABASE]

            # Test the connection
            await cls.client.admin.command("ping")
            logger.info("Connected to MongoDB", database=settings.MONGODB_DATABASE)

        except Exception as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            raise

    @classmethod
    async def close_mongo_connection(cls) -> None:
        """Close database connection."""
        if cls.client:
            cls.client.close()
            cls.client = None
            cls.database = None
            logger.info("Disconnected from MongoDB")

    @classmethod
    def get_database(cls) -> Optional[AsyncIOMotorDatabase]:
        """Get the database instance."""
        return cls.database

    @classmethod
    def orders_collection(cls) -> AsyncIOMotorCollection:
        if cls.database is None:
            raise RuntimeError("MongoDB is not connected")
        return cls.database[settings.ORDERS_COLLECTION]

    @classmethod
    def config_collection(cls) -> AsyncIOMotorCollection:
        if cls.database is None:
            raise RuntimeError("MongoDB is not connected")
        return cls.database[settings.CONFIG_COLLECTION]


async def ping_mongodb() -> bool:
    """Test MongoDB connection."""
    try:
        if not MongoDBManager.client:
            return False

        await MongoDBManager.client.admin.command("ping")
        return True
    except Exception as e:
        logger.error("MongoDB ping failed", error=str(e))
        return False
