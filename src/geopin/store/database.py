"""Database connection and session management."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from geopin.config.settings import DatabaseSettings
from geopin.core.env import resolve_project_path
from geopin.store.schema import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database: DatabaseSettings) -> Engine:
    """Create an engine for the configured URL.

    SQLite specifics:
    - relative file paths resolve against the project root (parent dirs are created),
    - in-memory databases share one connection so every session sees the same data.
    """
    url = make_url(database.url)
    kwargs: dict[str, Any] = {"echo": database.echo}

    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if not url.database or url.database == ":memory:":
            kwargs["poolclass"] = StaticPool
        else:
            path = resolve_project_path(url.database)
            path.parent.mkdir(parents=True, exist_ok=True)
            url = url.set(database=str(path))
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Views are built from rows after commit, so rows must not expire.
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready (%s)", engine.url.render_as_string(hide_password=True))
