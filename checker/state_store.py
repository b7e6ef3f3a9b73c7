"""
MongoDB-backed key-value store for page state.

Each key is one document in the state collection:
{"_id": key, "value": str, "updated_at": datetime}
"""

from datetime import datetime
from typing import Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from checker.errors import StoreError

logger = structlog.get_logger(__name__)


PAGE_HASH_KEY = "page_content_hash"
PREVIOUS_HASH_DEBUG_KEY = "previous_hash_debug"
CURRENT_HASH_DEBUG_KEY = "current_hash_debug"
LAST_CHANGE_TIMESTAMP_KEY = "last_change_timestamp"


class MongoStateStore:
    """
    Async key-value store on a single MongoDB collection.
    Failures surface as StoreError, never swallowed.
    """

    def __init__(self, connection_url: str, database_name: str, collection_name: str):
        """
        Initialize the state store.

        Args:
            connection_url: MongoDB connection URL
            database_name: Name of the database
            collection_name: Name of the collection acting as the key namespace
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.collection_name = collection_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.collection: Optional[AsyncIOMotorCollection] = None
        self.logger = logger.bind(component="state_store", collection=collection_name)

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            self.client = AsyncIOMotorClient(self.connection_url)
            self.collection = self.client[self.database_name][self.collection_name]

            # Test connection
            await self.client.admin.command('ping')
            self.logger.info("Connected to state store", database=self.database_name)

        except PyMongoError as e:
            self.logger.error("Failed to connect to state store", error=str(e))
            raise StoreError(f"Failed to connect to MongoDB: {e}", operation="connect") from e

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            self.client = None
            self.collection = None
            self.logger.info("Disconnected from state store")

    def _require_collection(self, operation: str, key: str) -> AsyncIOMotorCollection:
        if self.collection is None:
            raise StoreError("State store is not connected", operation=operation, key=key)
        return self.collection

    async def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Key to read

        Returns:
            Stored value, or None if the key is absent
        """
        collection = self._require_collection("get", key)
        try:
            document = await collection.find_one({"_id": key})
        except PyMongoError as e:
            self.logger.error("State store read failed", key=key, error=str(e))
            raise StoreError(f"Failed to read {key}: {e}", operation="get", key=key) from e

        if document is None:
            return None
        return document.get("value")

    async def put(self, key: str, value: str) -> bool:
        """
        Write a value, replacing any previous one.

        Args:
            key: Key to write
            value: Text value

        Returns:
            True once the write is acknowledged
        """
        collection = self._require_collection("put", key)
        try:
            await collection.update_one(
                {"_id": key},
                {"$set": {"value": value, "updated_at": datetime.utcnow()}},
                upsert=True
            )
        except PyMongoError as e:
            self.logger.error("State store write failed", key=key, error=str(e))
            raise StoreError(f"Failed to write {key}: {e}", operation="put", key=key) from e

        self.logger.debug("Stored value", key=key)
        return True
