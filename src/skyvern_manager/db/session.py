"""Database session management.

Provides a session factory for the SQLite config store, safe for use
from FastAPI request handlers.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from skyvern_manager.config import DEFAULT_DB_PATH
from skyvern_manager.db.schema import Base

# Engines and session factories are cached per resolved db path
_engine_cache: dict[str, Engine] = {}
_session_factory_cache: dict[str, sessionmaker] = {}


def _cache_key(db_path: Path | None) -> tuple[Path, str]:
    db_path = Path(db_path) if db_path is not None else DEFAULT_DB_PATH
    return db_path, str(db_path.resolve())


def get_engine(db_path: Path | None = None) -> Engine:
    """Get the SQLAlchemy engine for a database file.

    The schema is created the first time an engine is built for a path.

    Args:
        db_path: Path to SQLite database file. Defaults to DEFAULT_DB_PATH.

    Returns:
        SQLAlchemy engine instance (cached).
    """
    db_path, key = _cache_key(db_path)
    if key in _engine_cache:
        return _engine_cache[key]

    db_path.parent.mkdir(parents=True, exist_ok=True)

    # check_same_thread=False + StaticPool: one connection shared across
    # FastAPI's worker threads
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    _engine_cache[key] = engine
    return engine


def get_session(db_path: Path | None = None) -> Session:
    """Get a database session. Caller is responsible for closing it."""
    _, key = _cache_key(db_path)
    factory = _session_factory_cache.get(key)
    if factory is None:
        factory = sessionmaker(bind=get_engine(db_path))
        _session_factory_cache[key] = factory
    return factory()


@contextmanager
def session_scope(db_path: Path | None = None) -> Generator[Session, None, None]:
    """Session that commits on success, rolls back on error, always closes.

    Example:
        with session_scope() as session:
            repo.put_document(session, "template", "<div>{title}</div>")
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
