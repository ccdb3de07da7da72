"""SessionHandler abstract interface.

The web framework drives a handler through the classic session-handler
contract: ``open``/``read`` at the start of a request, ``write``/``close``
at the end, ``destroy`` on logout and ``gc`` from a periodic sweep.

A handler is built once at application startup and shared. What a request
learns during ``read`` (the read count used to size the lifetime) is kept
in a context variable, so concurrent requests on other threads or asyncio
tasks never see each other's counters.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from contextvars import ContextVar, Token
from typing import Any

from mongostore.observability.logging import get_logger
from mongostore.observability.metrics import SESSION_OPERATIONS
from mongostore.session.compiler import CompiledUpdate, compile_updates
from mongostore.session.lifetime import compute_lifetime
from mongostore.session.models import SessionRecord, utc_now

logger = get_logger(__name__)

_request_user_agent: ContextVar[str] = ContextVar("mongostore_request_user_agent", default="")


def bind_user_agent(user_agent: str | None) -> Token[str]:
    """Bind the current request's user agent for subsequent writes."""
    return _request_user_agent.set(user_agent or "")


def reset_user_agent(token: Token[str]) -> None:
    """Undo a ``bind_user_agent`` call at the end of a request."""
    _request_user_agent.reset(token)


def current_user_agent() -> str:
    """User agent bound for the current request, "" if none."""
    return _request_user_agent.get()


class SessionHandler(ABC):
    """Abstract interface for session storage.

    Subclasses provide the three store primitives (atomic touch on read,
    conditional update on write, bulk sweep) plus ``destroy``; the
    lifecycle rules shared by every backend live here.
    """

    def __init__(self) -> None:
        # (session_id, reads) captured by the last read of the current request
        self._reads: ContextVar[tuple[str, int] | None] = ContextVar(
            f"mongostore_session_reads_{id(self):x}", default=None
        )

    def open(self, path: str, name: str) -> bool:  # noqa: ARG002
        """Connections are established at construction; nothing to do."""
        return True

    def close(self) -> bool:
        """End of request: forget the read count so the next request starts clean."""
        self._reads.set(None)
        return True

    def _read_count(self, session_id: str) -> int:
        """Reads seen by this request's last read of ``session_id``, 0 otherwise."""
        captured = self._reads.get()
        if captured is None or captured[0] != session_id:
            return 0
        return captured[1]

    def read(self, session_id: str) -> dict[str, Any]:
        """Return the session payload, creating the record on first read.

        Tombstoned sessions read as empty and restart the read count.

        Raises:
            StoreError: If the store failed (ConnectionError on connection loss)
        """
        record = self._touch(session_id)

        if record.destroyed:
            self._reads.set((session_id, 1))
            SESSION_OPERATIONS.labels(operation="read", outcome="tombstoned").inc()
            logger.debug("session_read_tombstoned", session_id=session_id)
            return {}

        self._reads.set((session_id, record.reads or 1))
        SESSION_OPERATIONS.labels(operation="read", outcome="ok").inc()
        logger.debug("session_read", session_id=session_id, reads=record.reads)
        return dict(record.data)

    def write(
        self,
        session_id: str,
        data: Mapping[str, Any],
        *,
        user_agent: str | None = None,
    ) -> bool:
        """Apply the request's session mutations to an existing record.

        Never creates a record: writing to an unknown or destroyed session
        changes nothing and still succeeds.

        Args:
            session_id: Session identifier
            data: Namespaced mutation log (see ``parse_mutations``)
            user_agent: Client user agent, defaults to the bound one

        Returns:
            Whether the store acknowledged the update
        """
        if not data:
            SESSION_OPERATIONS.labels(operation="write", outcome="noop").inc()
            return True

        agent = user_agent if user_agent is not None else current_user_agent()
        lifetime = compute_lifetime(self._read_count(session_id), agent)

        update = compile_updates(data)
        update.to_set["updated_at"] = utc_now()
        update.to_set["lifetime"] = lifetime
        update.to_set["user_agent"] = agent

        acknowledged = self._update_live(session_id, update)
        SESSION_OPERATIONS.labels(
            operation="write", outcome="ok" if acknowledged else "failed"
        ).inc()
        return acknowledged

    @abstractmethod
    def destroy(self, session_id: str) -> bool:
        """Tombstone a session; destroying twice is not an error."""
        pass

    @abstractmethod
    def gc(self, max_lifetime: int) -> bool:
        """Remove stale tombstones and sessions idle past their own lifetime.

        ``max_lifetime`` bounds how long tombstones are kept; live sessions
        expire according to their stored lifetime.
        """
        pass

    @abstractmethod
    def _touch(self, session_id: str) -> SessionRecord:
        """Atomically upsert the record, bump ``reads`` and ``last_read_at``."""
        pass

    @abstractmethod
    def _update_live(self, session_id: str, update: CompiledUpdate) -> bool:
        """Apply ``update`` to the record if it exists and is not destroyed."""
        pass
