"""In-memory implementation of SessionHandler."""

import copy
import threading
from datetime import datetime
from typing import Any

from mongostore.observability.logging import get_logger
from mongostore.observability.metrics import SESSION_GC_DELETED, SESSION_OPERATIONS
from mongostore.session.compiler import CompiledUpdate, apply_update
from mongostore.session.handler import SessionHandler
from mongostore.session.models import SessionRecord, utc_now

logger = get_logger(__name__)


class InMemorySessionHandler(SessionHandler):
    """In-memory implementation of SessionHandler for testing and development.

    Keeps raw documents in a dict guarded by a lock, so every primitive is
    atomic per call like its MongoDB counterpart. Not suitable for
    production use: sessions vanish with the process.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        super().__init__()
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get_record(self, session_id: str) -> SessionRecord | None:
        """Stored record for a session, None if absent."""
        with self._lock:
            document = self._documents.get(session_id)
            if document is None:
                return None
            return SessionRecord.from_document(copy.deepcopy(document))

    def __len__(self) -> int:
        return len(self._documents)

    def destroy(self, session_id: str) -> bool:
        with self._lock:
            document = self._documents.get(session_id)
            if document is not None and not document.get("destroyed"):
                document["destroyed"] = True
                document["destroyed_at"] = utc_now()

        SESSION_OPERATIONS.labels(operation="destroy", outcome="ok").inc()
        logger.info("session_destroyed", session_id=session_id)
        return True

    def gc(self, max_lifetime: int) -> bool:
        now = utc_now()
        with self._lock:
            doomed = [
                session_id
                for session_id, document in self._documents.items()
                if self._is_collectable(SessionRecord.from_document(document), now, max_lifetime)
            ]
            for session_id in doomed:
                del self._documents[session_id]

        SESSION_GC_DELETED.inc(len(doomed))
        SESSION_OPERATIONS.labels(operation="gc", outcome="ok").inc()
        logger.info("session_gc_completed", max_lifetime=max_lifetime, deleted=len(doomed))
        return True

    def _touch(self, session_id: str) -> SessionRecord:
        with self._lock:
            document = self._documents.setdefault(session_id, {"_id": session_id})
            document["last_read_at"] = utc_now()
            document["reads"] = document.get("reads", 0) + 1
            return SessionRecord.from_document(copy.deepcopy(document))

    def _update_live(self, session_id: str, update: CompiledUpdate) -> bool:
        with self._lock:
            document = self._documents.get(session_id)
            if document is None or document.get("destroyed"):
                logger.debug("session_write_skipped", session_id=session_id)
                return True
            apply_update(document, copy.deepcopy(update))

        logger.debug("session_written", session_id=session_id)
        return True

    @staticmethod
    def _is_collectable(record: SessionRecord, now: datetime, max_lifetime: int) -> bool:
        return record.is_tombstone_expired(now, max_lifetime) or record.is_expired(
            now, max_lifetime
        )
