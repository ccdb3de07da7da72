"""Session record model: one document per session id."""

from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # pymongo hands back naive datetimes unless the client is tz_aware
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SessionRecord(BaseModel):
    """Stored state of one HTTP session.

    ``data`` is addressed with dotted paths (``data.<namespace>.<key>``) so a
    write only touches the fields it changed. ``reads`` is only ever bumped
    by the read path; ``lifetime`` is recomputed by every write. A record
    with ``destroyed`` set is a tombstone: it is never written again and is
    only removed by garbage collection.
    """

    model_config = ConfigDict(
        frozen=False,
        validate_assignment=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(..., alias="_id", description="Session identifier")
    data: dict[str, Any] = Field(
        default_factory=dict, description="Namespaced session payload"
    )
    reads: int = Field(default=0, ge=0, description="Reads since creation")
    last_read_at: datetime | None = Field(default=None, description="Last read time")
    lifetime: int | None = Field(
        default=None, ge=0, description="TTL in seconds, set on write"
    )
    user_agent: str | None = Field(default=None, description="Last client user agent")
    updated_at: datetime | None = Field(default=None, description="Last write time")
    destroyed: bool = Field(default=False, description="Tombstone marker")
    destroyed_at: datetime | None = Field(default=None, description="Tombstone time")

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "SessionRecord":
        """Build a record from a stored document."""
        return cls.model_validate(document)

    def to_document(self) -> dict[str, Any]:
        """Render the record as a document, leaving unset fields out."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def is_tombstone_expired(self, now: datetime, max_lifetime: int) -> bool:
        """Destroyed longer than ``max_lifetime`` seconds ago."""
        if not self.destroyed or self.destroyed_at is None:
            return False
        return _as_utc(self.destroyed_at) < now - timedelta(seconds=max_lifetime)

    def is_expired(self, now: datetime, fallback_lifetime: int) -> bool:
        """Live, and not read within its own lifetime.

        Records that were read but never written have no lifetime yet and
        fall back to ``fallback_lifetime``.
        """
        if self.destroyed or self.last_read_at is None:
            return False
        lifetime = self.lifetime if self.lifetime is not None else fallback_lifetime
        return _as_utc(self.last_read_at) < now - timedelta(seconds=lifetime)
