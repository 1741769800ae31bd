"""MongoDB client for the user store."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient

from auth_service.config import Settings

logger = logging.getLogger(__name__)


class MongodbClient:
    """Thin wrapper owning the motor client and the users collection."""

    def __init__(self, settings: Settings):
        """Initialize MongoDB client."""
        if settings.mongo_uri is None:
            raise ValueError("MONGO_URI must be set to use the MongoDB user store")

        self.database_name = settings.mongo_database_name
        self.users_collection_name = settings.mongo_users_collection
        try:
            self.client = AsyncIOMotorClient(
                settings.mongo_uri.get_secret_value(),
                maxPoolSize=settings.mongo_max_pool_size,
                serverSelectionTimeoutMS=settings.mongo_timeout_ms,
                uuidRepresentation="standard",
                tz_aware=True,
            )
            self.db = self.client[self.database_name]
            self.users = self.db[self.users_collection_name]
            logger.info(f"MongoDB connection to db '{self.database_name}' established successfully.")
        except Exception as e:
            logger.error(f"Error connecting to MongoDB: {str(e)}", exc_info=True)
            raise

    async def ensure_user_indexes(self) -> None:
        """Ensure the unique email index that makes inserts atomic per email."""
        try:
            await self.users.create_index("email", unique=True, name="email_unique")
            logger.info("User indexes applied")
        except Exception as e:
            logger.error(f"Error applying user indexes: {str(e)}", exc_info=True)
            # Without the unique index duplicate accounts become possible
            raise

    async def close(self) -> None:
        """Close the MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed successfully.")
