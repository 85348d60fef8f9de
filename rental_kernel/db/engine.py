"""
Module: rental_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities.  Single point of database connection
    configuration for the whole system.
Architecture position: Kernel > DB.  May import from db/base.py.  MUST NOT
    import from services/, selectors/, domain/ or rental_modules (except
    create_tables, which imports the module ORM registry).

Invariants enforced:
    - PostgreSQL runs with READ COMMITTED and a QueuePool with pre-ping.
    - SQLite (tests, local runs) uses a StaticPool for in-memory URLs so that
      every session shares the one connection holding the schema.
    - Sessions never expire attributes on commit; DTOs built after commit
      read the committed values.

Failure modes:
    - RuntimeError if get_engine/get_session/get_session_factory is called
      before init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from rental_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _build_engine(
    database_url: str,
    echo: bool,
    pool_size: int,
    max_overflow: int,
    pool_pre_ping: bool,
    pool_timeout: int,
    pool_recycle: int,
) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        database_url,
        echo=echo,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        isolation_level="READ COMMITTED",
    )


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Initialize the SQLAlchemy engine from a database URL.

    A second call replaces the first engine (the old one is disposed).

    Args:
        database_url: postgresql:// or sqlite:// URL.
        echo: If True, log all SQL statements.
        pool_size: Connections kept in the pool (PostgreSQL only).
        max_overflow: Connections allowed beyond pool_size (PostgreSQL only).
        pool_pre_ping: Test connections before use.
        pool_timeout: Seconds to wait for a pooled connection.
        pool_recycle: Seconds after which a connection is recycled.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()

    _engine = _build_engine(
        database_url,
        echo,
        pool_size,
        max_overflow,
        pool_pre_ping,
        pool_timeout,
        pool_recycle,
    )
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "dialect": _engine.dialect.name,
            "pool_size": pool_size,
            "echo": echo,
        },
    )
    return _engine


def get_engine() -> Engine:
    """
    Get the current engine instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    """
    Get a new session instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory()


def get_session_factory() -> sessionmaker[Session]:
    """
    Get the session factory.

    The scheduler thread uses this to open one session per sweep.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Commits on normal exit; rolls back and re-raises on exception; always
    closes the session.

    Usage:
        with session_scope() as session:
            UnitStore(session).create(unit)
    """
    session = get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """
    Create every table known to the module ORM registry.

    Args:
        engine: Target engine.  Defaults to the module-level engine.
    """
    from rental_kernel.db.base import Base
    from rental_modules._orm_registry import import_all_orm_models

    target = engine or get_engine()
    import_all_orm_models()
    Base.metadata.create_all(target)
    logger.info("tables_created", extra={"dialect": target.dialect.name})


def drop_tables(engine: Engine | None = None) -> None:
    """Drop all tables. Use with caution - primarily for testing."""
    from rental_kernel.db.base import Base

    Base.metadata.drop_all(engine or get_engine())


def reset_engine() -> None:
    """Reset the engine and session factory. Useful for test cleanup."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
        _engine = None
    _SessionFactory = None


def _atexit_dispose():
    if _engine is not None:
        _engine.dispose()


atexit.register(_atexit_dispose)


def is_postgres() -> bool:
    """Check if the current engine is PostgreSQL."""
    if _engine is None:
        return False
    return _engine.dialect.name == "postgresql"
