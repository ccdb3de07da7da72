"""HTTP session storage.

Sessions are stored as structured documents so a request only writes the
fields it changed. Lifetimes grow with use, crawlers get short ones, and
destroyed sessions are tombstoned so a concurrent write cannot bring them
back.
"""

from mongostore.session.compiler import CompiledUpdate, compile_updates
from mongostore.session.factory import create_session_handler
from mongostore.session.handler import (
    SessionHandler,
    bind_user_agent,
    current_user_agent,
    reset_user_agent,
)
from mongostore.session.handlers import InMemorySessionHandler, MongoSessionHandler
from mongostore.session.lifetime import BOT_LIFETIME, MAX_LIFETIME, compute_lifetime

__all__ = [
    "BOT_LIFETIME",
    "MAX_LIFETIME",
    "CompiledUpdate",
    "InMemorySessionHandler",
    "MongoSessionHandler",
    "SessionHandler",
    "bind_user_agent",
    "compile_updates",
    "compute_lifetime",
    "create_session_handler",
    "current_user_agent",
    "reset_user_agent",
]
