"""
Unit tests for the MongoDB-backed state store.
Motor is replaced with mocks; no database is required.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ConnectionFailure, OperationFailure

from checker.errors import StoreError
from checker.state_store import PAGE_HASH_KEY, MongoStateStore


class TestMongoStateStore:
    """Test cases for MongoStateStore."""

    @pytest.fixture
    def store(self):
        """Create a store with a mocked collection."""
        store = MongoStateStore("mongodb://localhost:27017", "jlpt_checker", "page_state")
        store.collection = AsyncMock()
        return store

    @pytest.mark.asyncio
    async def test_get_existing_key(self, store):
        store.collection.find_one.return_value = {"_id": PAGE_HASH_KEY, "value": "f" * 64}

        assert await store.get(PAGE_HASH_KEY) == "f" * 64
        store.collection.find_one.assert_awaited_once_with({"_id": PAGE_HASH_KEY})

    @pytest.mark.asyncio
    async def test_get_missing_key(self, store):
        store.collection.find_one.return_value = None

        assert await store.get(PAGE_HASH_KEY) is None

    @pytest.mark.asyncio
    async def test_put_upserts(self, store):
        assert await store.put(PAGE_HASH_KEY, "e" * 64) is True

        store.collection.update_one.assert_awaited_once()
        args, kwargs = store.collection.update_one.call_args
        assert args[0] == {"_id": PAGE_HASH_KEY}
        assert args[1]["$set"]["value"] == "e" * 64
        assert "updated_at" in args[1]["$set"]
        assert kwargs["upsert"] is True

    @pytest.mark.asyncio
    async def test_read_failure_raises_store_error(self, store):
        store.collection.find_one.side_effect = OperationFailure("not authorized")

        with pytest.raises(StoreError) as exc_info:
            await store.get(PAGE_HASH_KEY)

        assert exc_info.value.operation == "get"
        assert exc_info.value.key == PAGE_HASH_KEY

    @pytest.mark.asyncio
    async def test_write_failure_raises_store_error(self, store):
        store.collection.update_one.side_effect = ConnectionFailure("connection reset")

        with pytest.raises(StoreError) as exc_info:
            await store.put(PAGE_HASH_KEY, "e" * 64)

        assert exc_info.value.operation == "put"

    @pytest.mark.asyncio
    async def test_use_before_connect_raises(self):
        store = MongoStateStore("mongodb://localhost:27017", "jlpt_checker", "page_state")

        with pytest.raises(StoreError):
            await store.get(PAGE_HASH_KEY)
        with pytest.raises(StoreError):
            await store.put(PAGE_HASH_KEY, "value")

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self):
        with patch("checker.state_store.AsyncIOMotorClient") as mock_client_cls:
            client = MagicMock()
            client.admin.command = AsyncMock(return_value={"ok": 1})
            mock_client_cls.return_value = client

            store = MongoStateStore("mongodb://db:27017", "jlpt_checker", "page_state")
            await store.connect()

            mock_client_cls.assert_called_once_with("mongodb://db:27017")
            client.admin.command.assert_awaited_once_with("ping")
            assert store.collection is not None

            await store.disconnect()

            client.close.assert_called_once()
            assert store.collection is None

    @pytest.mark.asyncio
    async def test_connect_failure_raises_store_error(self):
        with patch("checker.state_store.AsyncIOMotorClient") as mock_client_cls:
            client = MagicMock()
            client.admin.command = AsyncMock(side_effect=ConnectionFailure("no servers"))
            mock_client_cls.return_value = client

            store = MongoStateStore("mongodb://db:27017", "jlpt_checker", "page_state")

            with pytest.raises(StoreError) as exc_info:
                await store.connect()

            assert exc_info.value.operation == "connect"
