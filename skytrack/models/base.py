"""
SQLAlchemy base configuration and session management.

Uses SQLAlchemy 2.0 style with type hints and declarative base.
Works with SQLite (dev, tests) and PostgreSQL (prod).

The resolver only ever reads from this store; rows are loaded by a
separate bulk import. Lookups run on worker threads, so the engine must
tolerate connections being used off the thread that opened them.
"""

from typing import Callable

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from skytrack.config import config

IN_MEMORY_SQLITE = 'sqlite://'


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def _enable_sqlite_wal(dbapi_connection, connection_record):
    """Let lookups read while an import is writing."""
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA journal_mode=WAL')
    cursor.execute('PRAGMA synchronous=NORMAL')
    cursor.close()


def create_store_engine(url: str, echo: bool = False) -> Engine:
    """
    Engine for the durable store.

    SQLite connections are shared across threads. An in-memory database
    keeps a single connection, otherwise every thread would see its own
    empty database.
    """
    if not url.startswith('sqlite'):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    kwargs = {'connect_args': {'check_same_thread': False}}
    if url in (IN_MEMORY_SQLITE, 'sqlite:///:memory:'):
        kwargs['poolclass'] = StaticPool

    store_engine = create_engine(url, echo=echo, **kwargs)
    if 'poolclass' not in kwargs:
        event.listen(store_engine, 'connect', _enable_sqlite_wal)
    return store_engine


def create_session_factory(bind: Engine) -> Callable[[], Session]:
    # Rows are read after the session closes
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = create_store_engine(config.database.url, echo=config.debug)

SessionLocal = create_session_factory(engine)


def init_db(bind=None) -> None:
    """
    Initialize database schema.

    Creates all tables if they don't exist. For production,
    use Alembic migrations instead.
    """
    Base.metadata.create_all(bind=bind or engine)
