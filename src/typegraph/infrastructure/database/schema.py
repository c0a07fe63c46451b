"""SQLAlchemy Core table definitions for the typegraph backing store.

Four tables: ``element``, ``link``, ``element_type``, ``link_type``.
Column types target PostgreSQL (``jsonb``, ``text[]``, ``timestamptz``)
and fall back to ``JSON`` on other dialects so the same metadata runs on
SQLite in tests and local use.

``link`` carries no foreign keys: cascade on element delete is performed
explicitly by the element service inside one transaction.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Column, DateTime, Index, MetaData, Table, Text, func, text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

metadata = MetaData()

JsonDocument = JSON().with_variant(JSONB(), "postgresql")
TextList = JSON().with_variant(ARRAY(Text), "postgresql")


def _timestamp(name: str) -> Column[Any]:
    return Column(name, DateTime(timezone=True), nullable=False, server_default=func.now())


element = Table(
    "element",
    metadata,
    Column("id", Text, primary_key=True),  # uuid4
    Column("type_id", Text, nullable=False),
    Column("data", JsonDocument, nullable=False, server_default=text("'{}'")),
    _timestamp("created_at"),
    _timestamp("updated_at"),
)

link = Table(
    "link",
    metadata,
    Column("id", Text, primary_key=True),  # uuid4
    Column("from_id", Text, nullable=False),
    Column("to_id", Text, nullable=False),
    Column("link_type_id", Text, nullable=False),
    Column("data", JsonDocument, nullable=False, server_default=text("'{}'")),
    _timestamp("created_at"),
    _timestamp("updated_at"),
)

element_type = Table(
    "element_type",
    metadata,
    Column("id", Text, primary_key=True),
    Column("schema", JsonDocument, nullable=False),  # serialized descriptor
    Column("parent_types", TextList, nullable=False, server_default=text("'{}'")),
    _timestamp("created_at"),
    _timestamp("updated_at"),
)

link_type = Table(
    "link_type",
    metadata,
    Column("id", Text, primary_key=True),
    Column("from_type", Text, nullable=False),
    Column("to_type", Text, nullable=False),
    Column("schema", JsonDocument, nullable=False),  # serialized descriptor
    Column("parent_types", TextList, nullable=False, server_default=text("'{}'")),
    _timestamp("created_at"),
    _timestamp("updated_at"),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("element_type_id_idx", element.c.type_id)
Index("link_from_id_idx", link.c.from_id)
Index("link_to_id_idx", link.c.to_id)
Index("link_link_type_id_idx", link.c.link_type_id)
