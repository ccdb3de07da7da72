"""Session domain models.

Contains the pydantic models for session state:
- SessionRecord for the stored per-session document
- Direct / Operations for the namespaced mutation log of a write
"""

from mongostore.session.models.mutations import (
    OPERATIONS_KEY,
    RESERVED_PREFIX,
    Direct,
    Mutation,
    Operation,
    Operations,
    SetOperation,
    UnsetOperation,
    parse_mutations,
)
from mongostore.session.models.record import SessionRecord, utc_now

__all__ = [
    # Record
    "SessionRecord",
    "utc_now",
    # Mutations
    "OPERATIONS_KEY",
    "RESERVED_PREFIX",
    "Direct",
    "Mutation",
    "Operation",
    "Operations",
    "SetOperation",
    "UnsetOperation",
    "parse_mutations",
]
