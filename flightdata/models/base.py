"""
SQLAlchemy base configuration and session management.

Uses SQLAlchemy 2.0 style with type hints and declarative base.
Designed to be portable between SQLite (dev) and MySQL/PostgreSQL (prod).
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from flightdata.config import config


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Configure SQLite connections.

    WAL mode allows concurrent reads during writes, so searches are not
    blocked while flights are being created or updated.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA journal_mode=WAL')
    cursor.execute('PRAGMA synchronous=NORMAL')
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def build_engine(url: str, **kwargs) -> Engine:
    """
    Create an engine with settings appropriate for the database type.

    Extra keyword arguments are passed straight to create_engine()
    (tests use this to select a StaticPool for in-memory SQLite).
    """
    engine_kwargs = {
        'echo': config.debug,  # Log SQL in debug mode
    }
    engine_kwargs.update(kwargs)

    is_sqlite = url.startswith('sqlite')
    if is_sqlite:
        engine_kwargs.setdefault('connect_args', {'check_same_thread': False})

    new_engine = create_engine(url, **engine_kwargs)

    if is_sqlite:
        event.listen(new_engine, 'connect', _set_sqlite_pragma)

    return new_engine


def build_session_factory(bind: Engine) -> sessionmaker:
    """Session factory bound to the given engine."""
    return sessionmaker(
        bind=bind,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Records are read after the session closes
    )


engine = build_engine(config.database.url)

# Session factory
SessionLocal = build_session_factory(engine)


@contextmanager
def get_session(session_factory: sessionmaker = SessionLocal) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_session() as session:
            session.execute(...)

    Automatically handles commit/rollback and session cleanup.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Engine = engine) -> None:
    """
    Initialize database schema.

    Creates all tables if they don't exist. For production,
    use migrations instead.
    """
    Base.metadata.create_all(bind=bind)
