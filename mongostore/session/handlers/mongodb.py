"""MongoDB implementation of SessionHandler.

Every operation is a single server-side atomic call; there is no
client-side locking:

- read:    find_one_and_update with upsert, ``$inc reads``
- write:   update_one on ``{_id, destroyed != true}``, never an upsert,
           so an in-flight write cannot resurrect a destroyed session
- destroy: update_one setting the tombstone fields
- gc:      one delete_many over stale tombstones and idle live sessions
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, TypeVar

from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, PyMongoError

from mongostore.config.models.storage import SessionStoreConfig
from mongostore.db.adapter import MongoAdapter
from mongostore.db.errors import ConnectionError, StoreError
from mongostore.observability.logging import get_logger
from mongostore.observability.metrics import SESSION_GC_DELETED, SESSION_OPERATIONS
from mongostore.session.compiler import CompiledUpdate
from mongostore.session.handler import SessionHandler
from mongostore.session.models import SessionRecord, utc_now

logger = get_logger(__name__)

T = TypeVar("T")


def gc_filter(now: datetime, max_lifetime: int) -> dict[str, Any]:
    """Filter matching the records a gc sweep at ``now`` removes.

    The two clauses are disjoint: tombstones older than ``max_lifetime``,
    and live records whose last read is older than their own ``lifetime``
    (``max_lifetime`` for records that were never written).
    """
    return {
        "$or": [
            {
                "destroyed": True,
                "destroyed_at": {"$lt": now - timedelta(seconds=max_lifetime)},
            },
            {
                "destroyed": {"$ne": True},
                "$expr": {
                    "$lt": [
                        "$last_read_at",
                        {
                            "$subtract": [
                                now,
                                {"$multiply": [{"$ifNull": ["$lifetime", max_lifetime]}, 1000]},
                            ]
                        },
                    ]
                },
            },
        ]
    }


class MongoSessionHandler(SessionHandler):
    """Stores each session as one structured document.

    Uses the injected collection for every call; the owning client is
    created once at startup (see ``from_config``) and shared across requests.
    """

    def __init__(self, collection: Collection) -> None:
        """Initialize the handler.

        Args:
            collection: Session collection, one document per session id
        """
        super().__init__()
        self._collection = collection

    @classmethod
    def from_config(
        cls,
        config: SessionStoreConfig,
        client: MongoClient | None = None,
    ) -> "MongoSessionHandler":
        """Connect and prepare the session collection.

        Raises:
            ConfigurationError: If no database is configured
            ConnectionError: If MongoDB cannot be reached
        """
        adapter = MongoAdapter.from_config(config, client)
        logger.info(
            "session_handler_ready",
            database=config.database,
            collection=config.collection,
        )
        return cls(adapter.get_collection())

    def destroy(self, session_id: str) -> bool:
        # Matching only live records keeps the first destroyed_at
        result = self._call(
            "destroy",
            session_id,
            lambda: self._collection.update_one(
                {"_id": session_id, "destroyed": {"$ne": True}},
                {"$set": {"destroyed": True, "destroyed_at": utc_now()}},
            ),
        )
        if result is None:
            SESSION_OPERATIONS.labels(operation="destroy", outcome="failed").inc()
            return False

        SESSION_OPERATIONS.labels(operation="destroy", outcome="ok").inc()
        logger.info(
            "session_destroyed",
            session_id=session_id,
            matched=result.matched_count if result.acknowledged else None,
        )
        return result.acknowledged

    def gc(self, max_lifetime: int) -> bool:
        result = self._call(
            "gc",
            None,
            lambda: self._collection.delete_many(gc_filter(utc_now(), max_lifetime)),
        )
        if result is None:
            SESSION_OPERATIONS.labels(operation="gc", outcome="failed").inc()
            return False

        if result.acknowledged:
            SESSION_GC_DELETED.inc(result.deleted_count)
        SESSION_OPERATIONS.labels(operation="gc", outcome="ok").inc()
        logger.info(
            "session_gc_completed",
            max_lifetime=max_lifetime,
            deleted=result.deleted_count if result.acknowledged else None,
        )
        return result.acknowledged

    def _touch(self, session_id: str) -> SessionRecord:
        try:
            document = self._collection.find_one_and_update(
                {"_id": session_id},
                {
                    "$set": {"last_read_at": utc_now()},
                    "$inc": {"reads": 1},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except ConnectionFailure as e:
            logger.error("session_read_connection_lost", session_id=session_id, error=str(e))
            raise ConnectionError(f"Failed to read session: {e}", cause=e) from e
        except PyMongoError as e:
            logger.error("session_read_failed", session_id=session_id, error=str(e))
            raise StoreError(f"Failed to read session: {e}", cause=e) from e

        return SessionRecord.from_document(document)

    def _update_live(self, session_id: str, update: CompiledUpdate) -> bool:
        result = self._call(
            "write",
            session_id,
            lambda: self._collection.update_one(
                {"_id": session_id, "destroyed": {"$ne": True}},
                update.as_update_document(),
            ),
        )
        if result is None:
            return False

        logger.debug(
            "session_written",
            session_id=session_id,
            matched=result.matched_count if result.acknowledged else None,
            lifetime=update.to_set.get("lifetime"),
            fields_set=len(update.to_set),
            fields_unset=len(update.to_unset),
        )
        return result.acknowledged

    def _call(self, operation: str, session_id: str | None, call: Callable[[], T]) -> T | None:
        """Run one store call, reporting failures as None.

        Connection loss is raised as ConnectionError instead.
        """
        try:
            return call()
        except ConnectionFailure as e:
            logger.error(
                "session_connection_lost",
                operation=operation,
                session_id=session_id,
                error=str(e),
            )
            raise ConnectionError(f"Session {operation} failed: {e}", cause=e) from e
        except PyMongoError as e:
            logger.error(
                "session_operation_failed",
                operation=operation,
                session_id=session_id,
                error=str(e),
            )
            return None
