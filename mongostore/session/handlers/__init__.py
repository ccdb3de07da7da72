"""Session handler backends."""

from mongostore.session.handler import SessionHandler
from mongostore.session.handlers.inmemory import InMemorySessionHandler
from mongostore.session.handlers.mongodb import MongoSessionHandler, gc_filter

__all__ = [
    "SessionHandler",
    "InMemorySessionHandler",
    "MongoSessionHandler",
    "gc_filter",
]
