"""Unit tests for MongoSessionHandler against a mocked collection."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from pymongo import ReturnDocument
from pymongo.errors import AutoReconnect, OperationFailure, WriteError

from mongostore.config.models import SessionStoreConfig
from mongostore.db.errors import ConfigurationError, ConnectionError, StoreError
from mongostore.session.handlers import MongoSessionHandler, gc_filter


@pytest.fixture
def collection() -> MagicMock:
    collection = MagicMock()
    collection.find_one_and_update.return_value = {"_id": "s1", "reads": 1}
    collection.update_one.return_value.acknowledged = True
    collection.update_one.return_value.matched_count = 1
    collection.delete_many.return_value.acknowledged = True
    collection.delete_many.return_value.deleted_count = 0
    return collection


@pytest.fixture
def handler(collection: MagicMock) -> MongoSessionHandler:
    return MongoSessionHandler(collection)


class TestRead:
    """Tests for read."""

    def test_atomic_upsert_and_increment(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        assert handler.read("s1") == {}

        args, kwargs = collection.find_one_and_update.call_args
        query, update = args
        assert query == {"_id": "s1"}
        assert update["$inc"] == {"reads": 1}
        assert set(update["$set"]) == {"last_read_at"}
        assert kwargs["upsert"] is True
        assert kwargs["return_document"] is ReturnDocument.AFTER

    def test_returns_data(self, handler: MongoSessionHandler, collection: MagicMock) -> None:
        collection.find_one_and_update.return_value = {
            "_id": "s1",
            "reads": 4,
            "data": {"_d": "X", "cart": {"items": [1]}},
        }
        assert handler.read("s1") == {"_d": "X", "cart": {"items": [1]}}

    def test_tombstone_reads_empty(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.find_one_and_update.return_value = {
            "_id": "s1",
            "reads": 9,
            "data": {"_d": "X"},
            "destroyed": True,
            "destroyed_at": datetime.now(UTC),
        }
        assert handler.read("s1") == {}

    def test_tombstone_read_touches_counters_only(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        """The upsert still bumps reads on a tombstone, but data stays and the count restarts."""
        collection.find_one_and_update.return_value = {
            "_id": "s1",
            "reads": 9,
            "data": {"_d": "X"},
            "destroyed": True,
            "destroyed_at": datetime.now(UTC),
        }
        handler.read("s1")

        update = collection.find_one_and_update.call_args.args[1]
        assert set(update) == {"$set", "$inc"}
        assert set(update["$set"]) == {"last_read_at"}
        assert update["$inc"] == {"reads": 1}

        handler.write("s1", {"_d": "Y"}, user_agent="Firefox")
        assert collection.update_one.call_args.args[1]["$set"]["lifetime"] == 30

    def test_connection_loss_raises(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.find_one_and_update.side_effect = AutoReconnect("lost")
        with pytest.raises(ConnectionError):
            handler.read("s1")

    def test_driver_error_raises_store_error(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.find_one_and_update.side_effect = OperationFailure("denied")
        with pytest.raises(StoreError) as exc_info:
            handler.read("s1")
        assert not isinstance(exc_info.value, ConnectionError)


class TestWrite:
    """Tests for write."""

    def test_conditional_update_without_upsert(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        handler.read("s1")
        assert handler.write("s1", {"_d": "X"}, user_agent="Firefox") is True

        args, kwargs = collection.update_one.call_args
        query, update = args
        assert query == {"_id": "s1", "destroyed": {"$ne": True}}
        assert "upsert" not in kwargs
        assert update["$set"]["data._d"] == "X"
        assert update["$set"]["lifetime"] == 30
        assert update["$set"]["user_agent"] == "Firefox"
        assert "updated_at" in update["$set"]
        assert "$unset" not in update

    def test_unset_operations(self, handler: MongoSessionHandler, collection: MagicMock) -> None:
        handler.read("s1")
        handler.write("s1", {"cart": {"__operations": [{"type": "unset", "key": "coupon"}]}})

        update = collection.update_one.call_args.args[1]
        assert update["$unset"] == {"data.cart.coupon": 1}

    def test_read_count_sizes_lifetime(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.find_one_and_update.return_value = {"_id": "s1", "reads": 3}
        handler.read("s1")
        handler.write("s1", {"_d": 1})

        assert collection.update_one.call_args.args[1]["$set"]["lifetime"] == 810

    def test_empty_write_skips_store(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        assert handler.write("s1", {}) is True
        collection.update_one.assert_not_called()

    def test_driver_error_returns_false(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.update_one.side_effect = WriteError("rejected")
        assert handler.write("s1", {"_d": 1}) is False

    def test_connection_loss_raises(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.update_one.side_effect = AutoReconnect("lost")
        with pytest.raises(ConnectionError):
            handler.write("s1", {"_d": 1})

    def test_unacknowledged_write(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.update_one.return_value.acknowledged = False
        assert handler.write("s1", {"_d": 1}) is False


class TestDestroy:
    """Tests for destroy."""

    def test_tombstones_live_record_only(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        assert handler.destroy("s1") is True

        query, update = collection.update_one.call_args.args
        assert query == {"_id": "s1", "destroyed": {"$ne": True}}
        assert update["$set"]["destroyed"] is True
        assert isinstance(update["$set"]["destroyed_at"], datetime)
        collection.delete_one.assert_not_called()

    def test_driver_error_returns_false(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.update_one.side_effect = OperationFailure("denied")
        assert handler.destroy("s1") is False


class TestGc:
    """Tests for gc."""

    def test_single_delete_many(self, handler: MongoSessionHandler, collection: MagicMock) -> None:
        collection.delete_many.return_value.deleted_count = 2
        assert handler.gc(3600) is True

        collection.delete_many.assert_called_once()
        query = collection.delete_many.call_args.args[0]
        assert len(query["$or"]) == 2

    def test_driver_error_returns_false(
        self, handler: MongoSessionHandler, collection: MagicMock
    ) -> None:
        collection.delete_many.side_effect = OperationFailure("denied")
        assert handler.gc(3600) is False


class TestGcFilter:
    """Tests for the gc filter document."""

    def test_shape(self) -> None:
        now = datetime(2026, 1, 1, tzinfo=UTC)
        tombstones, idle = gc_filter(now, 60)["$or"]

        assert tombstones == {
            "destroyed": True,
            "destroyed_at": {"$lt": now - timedelta(seconds=60)},
        }
        assert idle["destroyed"] == {"$ne": True}
        assert idle["$expr"] == {
            "$lt": [
                "$last_read_at",
                {"$subtract": [now, {"$multiply": [{"$ifNull": ["$lifetime", 60]}, 1000]}]},
            ]
        }


class TestFromConfig:
    """Tests for MongoSessionHandler.from_config."""

    def test_requires_database(self) -> None:
        with pytest.raises(ConfigurationError):
            MongoSessionHandler.from_config(SessionStoreConfig(), client=MagicMock())

    def test_uses_configured_collection(self) -> None:
        client = MagicMock()
        config = SessionStoreConfig(database="app", collection="sessions")

        handler = MongoSessionHandler.from_config(config, client=client)

        database = client.get_database.return_value
        client.get_database.assert_any_call("app")
        database.get_collection.assert_called_with("sessions")
        assert handler._collection is database.get_collection.return_value
