"""TypeRegistry — CRUD over element types and link types.

Types are persisted as *serialized* descriptors, never as live schemas.
The only uniqueness rule is the primary key: creating a duplicate id is
a backing-store unique violation surfaced as ``WRITE_FAILED``.

Besides the ServiceResult API, the registry exposes plain lookups
(:meth:`TypeRegistry.element_type`, :meth:`TypeRegistry.link_type`) that
element/link services call inside their own transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from typegraph.domain.descriptors import DescriptorNode, load_descriptor
from typegraph.domain.schema import Schema
from typegraph.domain.serializer import serialize
from typegraph.services._helpers import now_utc
from typegraph.services.base import BaseService
from typegraph.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from typegraph.domain.records import ElementType, LinkType
    from typegraph.infrastructure.repository import GraphTransaction

logger = logging.getLogger(__name__)

type SchemaSource = Schema | DescriptorNode | Mapping[str, Any]


def to_descriptor(source: SchemaSource) -> DescriptorNode:
    """Serialize a live schema, or load an already-serialized descriptor."""
    if isinstance(source, Schema):
        return serialize(source)
    return load_descriptor(source)


class TypeRegistry(BaseService):
    """Handles element type and link type definitions."""

    # ------------------------------------------------------------------
    # Lookups used by other services
    # ------------------------------------------------------------------

    def element_type(
        self, type_id: str, *, txn: GraphTransaction | None = None
    ) -> ElementType | None:
        """Fetch an element type, optionally inside the caller's transaction."""
        if txn is not None:
            return txn.get_element_type(type_id)
        with self._db.transaction() as own:
            return own.get_element_type(type_id)

    def link_type(self, type_id: str, *, txn: GraphTransaction | None = None) -> LinkType | None:
        """Fetch a link type, optionally inside the caller's transaction."""
        if txn is not None:
            return txn.get_link_type(type_id)
        with self._db.transaction() as own:
            return own.get_link_type(type_id)

    def count_elements(self, type_id: str) -> int:
        with self._db.transaction() as txn:
            return txn.count_elements(type_id)

    def count_links(self, link_type_id: str) -> int:
        with self._db.transaction() as txn:
            return txn.count_links(link_type_id)

    # ------------------------------------------------------------------
    # Element types
    # ------------------------------------------------------------------

    def create_element_type(
        self,
        type_id: str,
        schema: SchemaSource,
        parent_types: list[str] | None = None,
    ) -> ServiceResult:
        op = "create_element_type"
        try:
            descriptor = to_descriptor(schema)
        except ValidationError as exc:
            return _invalid_schema(op, type_id, exc)
        try:
            with self._db.transaction() as txn:
                txn.insert_element_type(type_id, descriptor, list(parent_types or []), now_utc())
                created = txn.get_element_type(type_id)
        except SQLAlchemyError as exc:
            logger.warning("Failed to create element type %s: %s", type_id, exc)
            return ServiceResult.failure(
                op,
                ErrorCode.WRITE_FAILED,
                f"Could not create element type '{type_id}': {exc.__class__.__name__}",
                type_id=type_id,
            )

        assert created is not None
        logger.debug("Created element type %s", type_id)
        return ServiceResult(ok=True, op=op, data=created.to_dict())

    def get_element_type(self, type_id: str) -> ServiceResult:
        op = "get_element_type"
        found = self.element_type(type_id)
        if found is None:
            return _type_not_found(op, "Element", type_id)
        return ServiceResult(ok=True, op=op, data=found.to_dict())

    def update_element_type(
        self,
        type_id: str,
        *,
        schema: SchemaSource | None = None,
        parent_types: list[str] | None = None,
    ) -> ServiceResult:
        op = "update_element_type"
        values: dict[str, Any] = {"updated_at": now_utc()}
        if schema is not None:
            try:
                values["schema"] = to_descriptor(schema).to_json()
            except ValidationError as exc:
                return _invalid_schema(op, type_id, exc)
        if parent_types is not None:
            values["parent_types"] = list(parent_types)

        with self._db.transaction() as txn:
            if txn.get_element_type(type_id) is None:
                return _type_not_found(op, "Element", type_id)
            txn.update_element_type(type_id, values)
            updated = txn.get_element_type(type_id)

        assert updated is not None
        return ServiceResult(ok=True, op=op, data=updated.to_dict())

    def delete_element_type(self, type_id: str) -> ServiceResult:
        """Delete the type row only; elements of the type are left in place."""
        op = "delete_element_type"
        with self._db.transaction() as txn:
            if txn.delete_element_type(type_id) == 0:
                return _type_not_found(op, "Element", type_id)
        return ServiceResult(ok=True, op=op, data={"id": type_id, "deleted": True})

    def list_element_types(self) -> ServiceResult:
        with self._db.transaction() as txn:
            items = [t.to_dict() for t in txn.list_element_types()]
        return ServiceResult(
            ok=True,
            op="list_element_types",
            data={"count": len(items), "items": items},
        )

    # ------------------------------------------------------------------
    # Link types
    # ------------------------------------------------------------------

    def create_link_type(
        self,
        type_id: str,
        from_type: str,
        to_type: str,
        schema: SchemaSource,
        parent_types: list[str] | None = None,
    ) -> ServiceResult:
        op = "create_link_type"
        try:
            descriptor = to_descriptor(schema)
        except ValidationError as exc:
            return _invalid_schema(op, type_id, exc)
        try:
            with self._db.transaction() as txn:
                txn.insert_link_type(
                    type_id,
                    from_type,
                    to_type,
                    descriptor,
                    list(parent_types or []),
                    now_utc(),
                )
                created = txn.get_link_type(type_id)
        except SQLAlchemyError as exc:
            logger.warning("Failed to create link type %s: %s", type_id, exc)
            return ServiceResult.failure(
                op,
                ErrorCode.WRITE_FAILED,
                f"Could not create link type '{type_id}': {exc.__class__.__name__}",
                type_id=type_id,
            )

        assert created is not None
        logger.debug("Created link type %s (%s -> %s)", type_id, from_type, to_type)
        return ServiceResult(ok=True, op=op, data=created.to_dict())

    def get_link_type(self, type_id: str) -> ServiceResult:
        op = "get_link_type"
        found = self.link_type(type_id)
        if found is None:
            return _type_not_found(op, "Link", type_id)
        return ServiceResult(ok=True, op=op, data=found.to_dict())

    def update_link_type(
        self,
        type_id: str,
        *,
        from_type: str | None = None,
        to_type: str | None = None,
        schema: SchemaSource | None = None,
        parent_types: list[str] | None = None,
    ) -> ServiceResult:
        op = "update_link_type"
        values: dict[str, Any] = {"updated_at": now_utc()}
        if from_type is not None:
            values["from_type"] = from_type
        if to_type is not None:
            values["to_type"] = to_type
        if schema is not None:
            try:
                values["schema"] = to_descriptor(schema).to_json()
            except ValidationError as exc:
                return _invalid_schema(op, type_id, exc)
        if parent_types is not None:
            values["parent_types"] = list(parent_types)

        with self._db.transaction() as txn:
            if txn.get_link_type(type_id) is None:
                return _type_not_found(op, "Link", type_id)
            txn.update_link_type(type_id, values)
            updated = txn.get_link_type(type_id)

        assert updated is not None
        return ServiceResult(ok=True, op=op, data=updated.to_dict())

    def delete_link_type(self, type_id: str) -> ServiceResult:
        """Delete the type row only; links of the type are left in place."""
        op = "delete_link_type"
        with self._db.transaction() as txn:
            if txn.delete_link_type(type_id) == 0:
                return _type_not_found(op, "Link", type_id)
        return ServiceResult(ok=True, op=op, data={"id": type_id, "deleted": True})

    def list_link_types(self) -> ServiceResult:
        with self._db.transaction() as txn:
            items = [t.to_dict() for t in txn.list_link_types()]
        return ServiceResult(
            ok=True,
            op="list_link_types",
            data={"count": len(items), "items": items},
        )


def _type_not_found(op: str, kind: str, type_id: str) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.TYPE_NOT_FOUND,
        f"{kind} type '{type_id}' not found",
        type_id=type_id,
    )


def _invalid_schema(op: str, type_id: str, exc: ValidationError) -> ServiceResult:
    errors = [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    ]
    logger.warning("Rejected schema descriptor for %s: %s", type_id, "; ".join(errors))
    return ServiceResult.failure(
        op,
        ErrorCode.VALIDATION_FAILED,
        f"Invalid schema descriptor for '{type_id}'",
        type_id=type_id,
        errors=errors,
    )
