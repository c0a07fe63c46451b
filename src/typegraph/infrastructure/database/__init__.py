"""Backing store engine and schema via SQLAlchemy Core."""

from typegraph.infrastructure.database.engine import create_db_engine, init_database
from typegraph.infrastructure.database.schema import (
    element,
    element_type,
    link,
    link_type,
    metadata,
)

__all__ = [
    "create_db_engine",
    "element",
    "element_type",
    "init_database",
    "link",
    "link_type",
    "metadata",
]
