# app/database.py
import logging
import threading
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from . import config
from .errors import BackendError

# This file holds the process-wide database engine. It is opened lazily on
# first use and reused for the life of the process.

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None
_database_url: Optional[str] = None
_init_lock = threading.Lock()


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}
    # in-memory sqlite only lives as long as its single connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


def configure(url: Optional[str] = None) -> None:
    """Point the process at a different database; the next use reconnects."""
    global _database_url
    dispose_engine()
    _database_url = url


def get_engine() -> Engine:
    global _engine, _SessionLocal
    if _engine is not None:
        return _engine

    with _init_lock:
        # another thread may have finished while we waited
        if _engine is not None:
            return _engine

        url = _database_url or config.DATABASE_URL
        try:
            engine = create_engine(url, **_engine_kwargs(url))
            # models must be registered on Base before create_all
            from . import models  # noqa: F401
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            logger.error("Database connection failed: %s", e, exc_info=True)
            raise BackendError() from e

        _SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
        _engine = engine
        logger.info("Database connected (%s)", engine.url.render_as_string(hide_password=True))
        return _engine


def dispose_engine() -> None:
    global _engine, _SessionLocal
    with _init_lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _SessionLocal = None


def get_db() -> Iterator[Session]:
    get_engine()
    db = _SessionLocal()
    try:
        yield db
    finally:
        db.close()
