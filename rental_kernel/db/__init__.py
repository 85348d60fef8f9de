"""Database layer - engine, base classes and types."""

from rental_kernel.db.base import MONEY, UUID, Base, TrackedBase, UUIDString
from rental_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    session_scope,
)

__all__ = [
    "MONEY",
    "UUID",
    "Base",
    "TrackedBase",
    "UUIDString",
    "create_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_engine_from_url",
    "session_scope",
]
