"""GraphDatabase — repository pattern with per-operation transactions.

The GraphDatabase is the single storage dependency injected into every
service. Its :meth:`GraphDatabase.transaction` context manager wraps a
native SQLAlchemy ``engine.begin()``: a service runs its whole
read -> validate -> write sequence inside one transaction, so an
operation either commits completely or not at all.

Rows are converted to :mod:`typegraph.domain.records` here; services
never see SQLAlchemy rows.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, or_, select, update

from typegraph.domain.descriptors import DescriptorNode, load_descriptor
from typegraph.domain.records import Element, ElementType, Link, LinkType
from typegraph.infrastructure.database.engine import init_database
from typegraph.infrastructure.database.schema import element, element_type, link, link_type

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection, Row
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def _string_list(raw: Any) -> list[str]:
    # SQLite stores the JSON server default '{}' as an object.
    if not raw:
        return []
    return [str(item) for item in raw]


def _element_type_from_row(row: Row[Any]) -> ElementType:
    return ElementType(
        id=row.id,
        schema=load_descriptor(row.schema),
        parent_types=_string_list(row.parent_types),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _link_type_from_row(row: Row[Any]) -> LinkType:
    return LinkType(
        id=row.id,
        from_type=row.from_type,
        to_type=row.to_type,
        schema=load_descriptor(row.schema),
        parent_types=_string_list(row.parent_types),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _element_from_row(row: Row[Any]) -> Element:
    return Element(
        id=row.id,
        type_id=row.type_id,
        data=dict(row.data or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _link_from_row(row: Row[Any]) -> Link:
    return Link(
        id=row.id,
        from_id=row.from_id,
        to_id=row.to_id,
        link_type_id=row.link_type_id,
        data=dict(row.data or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# GraphTransaction — yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class GraphTransaction:
    """Active transaction with row-level access to the four graph tables."""

    conn: Connection

    # -- element types ----------------------------------------------------

    def get_element_type(self, type_id: str) -> ElementType | None:
        row = self.conn.execute(select(element_type).where(element_type.c.id == type_id)).first()
        return _element_type_from_row(row) if row is not None else None

    def list_element_types(self) -> list[ElementType]:
        rows = self.conn.execute(select(element_type).order_by(element_type.c.id)).all()
        return [_element_type_from_row(row) for row in rows]

    def insert_element_type(
        self,
        type_id: str,
        schema: DescriptorNode,
        parent_types: list[str],
        now: datetime,
    ) -> None:
        self.conn.execute(
            insert(element_type).values(
                id=type_id,
                schema=schema.to_json(),
                parent_types=parent_types,
                created_at=now,
                updated_at=now,
            )
        )

    def update_element_type(self, type_id: str, values: dict[str, Any]) -> None:
        self.conn.execute(
            update(element_type).where(element_type.c.id == type_id).values(**values)
        )

    def delete_element_type(self, type_id: str) -> int:
        result = self.conn.execute(delete(element_type).where(element_type.c.id == type_id))
        return result.rowcount

    # -- link types -------------------------------------------------------

    def get_link_type(self, type_id: str) -> LinkType | None:
        row = self.conn.execute(select(link_type).where(link_type.c.id == type_id)).first()
        return _link_type_from_row(row) if row is not None else None

    def list_link_types(self) -> list[LinkType]:
        rows = self.conn.execute(select(link_type).order_by(link_type.c.id)).all()
        return [_link_type_from_row(row) for row in rows]

    def insert_link_type(
        self,
        type_id: str,
        from_type: str,
        to_type: str,
        schema: DescriptorNode,
        parent_types: list[str],
        now: datetime,
    ) -> None:
        self.conn.execute(
            insert(link_type).values(
                id=type_id,
                from_type=from_type,
                to_type=to_type,
                schema=schema.to_json(),
                parent_types=parent_types,
                created_at=now,
                updated_at=now,
            )
        )

    def update_link_type(self, type_id: str, values: dict[str, Any]) -> None:
        self.conn.execute(update(link_type).where(link_type.c.id == type_id).values(**values))

    def delete_link_type(self, type_id: str) -> int:
        result = self.conn.execute(delete(link_type).where(link_type.c.id == type_id))
        return result.rowcount

    # -- elements ---------------------------------------------------------

    def get_element(self, element_id: str) -> Element | None:
        row = self.conn.execute(select(element).where(element.c.id == element_id)).first()
        return _element_from_row(row) if row is not None else None

    def element_exists(self, element_id: str) -> bool:
        row = self.conn.execute(select(element.c.id).where(element.c.id == element_id)).first()
        return row is not None

    def elements_by_type(self, type_id: str) -> list[Element]:
        stmt = (
            select(element)
            .where(element.c.type_id == type_id)
            .order_by(element.c.created_at, element.c.id)
        )
        return [_element_from_row(row) for row in self.conn.execute(stmt).all()]

    def element_ids_by_type(self, type_id: str) -> list[str]:
        rows = self.conn.execute(select(element.c.id).where(element.c.type_id == type_id)).all()
        return [str(row.id) for row in rows]

    def count_elements(self, type_id: str) -> int:
        stmt = select(func.count()).select_from(element).where(element.c.type_id == type_id)
        return int(self.conn.execute(stmt).scalar_one() or 0)

    def insert_element(
        self,
        element_id: str,
        type_id: str,
        data: dict[str, Any],
        now: datetime,
    ) -> Element:
        self.conn.execute(
            insert(element).values(
                id=element_id,
                type_id=type_id,
                data=data,
                created_at=now,
                updated_at=now,
            )
        )
        return Element(element_id, type_id, data, created_at=now, updated_at=now)

    def update_element_data(self, element_id: str, data: dict[str, Any], now: datetime) -> None:
        self.conn.execute(
            update(element).where(element.c.id == element_id).values(data=data, updated_at=now)
        )

    def delete_element(self, element_id: str) -> int:
        result = self.conn.execute(delete(element).where(element.c.id == element_id))
        return result.rowcount

    def delete_elements_by_type(self, type_id: str) -> int:
        result = self.conn.execute(delete(element).where(element.c.type_id == type_id))
        return result.rowcount

    # -- links ------------------------------------------------------------

    def get_link(self, link_id: str) -> Link | None:
        row = self.conn.execute(select(link).where(link.c.id == link_id)).first()
        return _link_from_row(row) if row is not None else None

    def links_from(self, element_id: str, link_type_id: str | None = None) -> list[Link]:
        stmt = select(link).where(link.c.from_id == element_id)
        if link_type_id is not None:
            stmt = stmt.where(link.c.link_type_id == link_type_id)
        stmt = stmt.order_by(link.c.created_at, link.c.id)
        return [_link_from_row(row) for row in self.conn.execute(stmt).all()]

    def links_to(self, element_id: str, link_type_id: str | None = None) -> list[Link]:
        stmt = select(link).where(link.c.to_id == element_id)
        if link_type_id is not None:
            stmt = stmt.where(link.c.link_type_id == link_type_id)
        stmt = stmt.order_by(link.c.created_at, link.c.id)
        return [_link_from_row(row) for row in self.conn.execute(stmt).all()]

    def count_links(self, link_type_id: str) -> int:
        stmt = select(func.count()).select_from(link).where(link.c.link_type_id == link_type_id)
        return int(self.conn.execute(stmt).scalar_one() or 0)

    def insert_link(
        self,
        link_id: str,
        from_id: str,
        to_id: str,
        link_type_id: str,
        data: dict[str, Any],
        now: datetime,
    ) -> Link:
        self.conn.execute(
            insert(link).values(
                id=link_id,
                from_id=from_id,
                to_id=to_id,
                link_type_id=link_type_id,
                data=data,
                created_at=now,
                updated_at=now,
            )
        )
        return Link(link_id, from_id, to_id, link_type_id, data, created_at=now, updated_at=now)

    def update_link_data(self, link_id: str, data: dict[str, Any], now: datetime) -> None:
        self.conn.execute(
            update(link).where(link.c.id == link_id).values(data=data, updated_at=now)
        )

    def delete_link(self, link_id: str) -> int:
        result = self.conn.execute(delete(link).where(link.c.id == link_id))
        return result.rowcount

    def delete_links_touching(self, element_ids: list[str]) -> int:
        """Delete every link whose source or target is in *element_ids*."""
        if not element_ids:
            return 0
        result = self.conn.execute(
            delete(link).where(or_(link.c.from_id.in_(element_ids), link.c.to_id.in_(element_ids)))
        )
        return result.rowcount

    def delete_links_by_type(self, link_type_id: str) -> int:
        result = self.conn.execute(delete(link).where(link.c.link_type_id == link_type_id))
        return result.rowcount


# ---------------------------------------------------------------------------
# GraphDatabase
# ---------------------------------------------------------------------------


class GraphDatabase:
    """Owns the engine and hands out transaction scopes."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, url: str, *, echo: bool = False) -> GraphDatabase:
        """Open (and initialize if needed) the database at *url*."""
        return cls(init_database(url, echo=echo))

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def transaction(self) -> Iterator[GraphTransaction]:
        """Run a block inside one backing-store transaction.

        Commits on normal exit, rolls back if the block raises.
        """
        with self._engine.begin() as conn:
            yield GraphTransaction(conn=conn)

    def close(self) -> None:
        self._engine.dispose()
