"""Database engine setup.

SQLAlchemy Core (not ORM). Any SQLAlchemy URL works; SQLite connections
get WAL mode and foreign keys switched on at connect time.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from typegraph.infrastructure.database.schema import metadata

logger = logging.getLogger(__name__)


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for *url*, tuning SQLite connections."""
    engine = create_engine(url, echo=echo)

    if make_url(url).get_backend_name() == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_database(url: str, *, echo: bool = False) -> Engine:
    """Create all graph tables at *url* if missing.

    Idempotent — safe to call on an existing database.

    Returns the engine ready for use.
    """
    engine = create_db_engine(url, echo=echo)
    metadata.create_all(engine)
    logger.debug("Database initialized at %s", engine.url.render_as_string(hide_password=True))
    return engine
