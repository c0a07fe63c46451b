"""ElementService — typed CRUD over graph nodes.

Write path (create/update): resolve the element type, strict-validate,
then persist. Read path: loose-validate stored data so records written
before a schema change pick up newly-defaulted fields without migration.

Pipeline per write: RESOLVE -> VALIDATE -> WRITE, all inside one
transaction; validation precedes every write so a failure never leaves a
partial row.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from typegraph.domain.validation import validate
from typegraph.domain.values import clone, to_value
from typegraph.services._helpers import new_record_id, now_utc
from typegraph.services.base import BaseService
from typegraph.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from typegraph.domain.records import Element
    from typegraph.infrastructure.repository import GraphDatabase, GraphTransaction
    from typegraph.services.registry import TypeRegistry

logger = logging.getLogger(__name__)


class ElementService(BaseService):
    """Handles element creation, reads, updates, and cascading deletes."""

    def __init__(self, db: GraphDatabase, registry: TypeRegistry) -> None:
        super().__init__(db)
        self._registry = registry

    # ------------------------------------------------------------------
    # Read helpers shared with QueryService
    # ------------------------------------------------------------------

    def load_element(
        self,
        element_id: str,
        *,
        txn: GraphTransaction | None = None,
        warnings: list[str] | None = None,
    ) -> Element | None:
        """Fetch an element with loose-validated data, or None."""
        if txn is None:
            with self._db.transaction() as own:
                return self.load_element(element_id, txn=own, warnings=warnings)

        found = txn.get_element(element_id)
        if found is None:
            return None
        return self._loosen(found, txn, warnings)

    def _loosen(
        self,
        found: Element,
        txn: GraphTransaction,
        warnings: list[str] | None,
    ) -> Element:
        type_def = self._registry.element_type(found.type_id, txn=txn)
        if type_def is None:
            return found
        result = validate(found.data, type_def.live_schema(), "loose")
        if result.errors and warnings is not None:
            warnings.extend(f"{found.id}: {err}" for err in result.errors)
        return found.with_data(to_value(result.data))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_element(self, type_id: str, data: dict[str, Any]) -> ServiceResult:
        """Create an element of *type_id* after strict validation."""
        op = "create_element"

        with self._db.transaction() as txn:
            # ── RESOLVE ──────────────────────────────────────────
            type_def = self._registry.element_type(type_id, txn=txn)
            if type_def is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.TYPE_NOT_FOUND,
                    f"Element type '{type_id}' not found",
                    type_id=type_id,
                )

            # ── VALIDATE ─────────────────────────────────────────
            result = validate(clone(data), type_def.live_schema(), "strict")
            if not result.success:
                return _validation_failed(op, result.errors)

            # ── WRITE ────────────────────────────────────────────
            try:
                created = txn.insert_element(
                    new_record_id(), type_id, to_value(result.data), now_utc()
                )
            except (SQLAlchemyError, TypeError) as exc:
                return _write_failed(op, type_id, exc)

        logger.debug("Created element %s of type %s", created.id, type_id)
        return ServiceResult(ok=True, op=op, data=created.to_dict())

    def get_element(self, element_id: str) -> ServiceResult:
        """Fetch one element, loose-validating its stored data."""
        op = "get_element"
        warnings: list[str] = []
        found = self.load_element(element_id, warnings=warnings)
        if found is None:
            return _not_found(op, element_id)
        return ServiceResult(ok=True, op=op, data=found.to_dict(), warnings=warnings)

    def update_element(self, element_id: str, changes: dict[str, Any]) -> ServiceResult:
        """Shallow-merge *changes* over the element, then strict-validate.

        Only top-level keys merge; a nested object in *changes* replaces
        the stored one wholesale.
        """
        op = "update_element"
        warnings: list[str] = []

        with self._db.transaction() as txn:
            existing = self.load_element(element_id, txn=txn, warnings=warnings)
            if existing is None:
                return _not_found(op, element_id)

            type_def = self._registry.element_type(existing.type_id, txn=txn)
            if type_def is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.TYPE_NOT_FOUND,
                    f"Element type '{existing.type_id}' not found",
                    type_id=existing.type_id,
                )

            merged = {**existing.data, **clone(changes)}
            result = validate(merged, type_def.live_schema(), "strict")
            if not result.success:
                return _validation_failed(op, result.errors)

            now = now_utc()
            try:
                data = to_value(result.data)
                txn.update_element_data(element_id, data, now)
            except (SQLAlchemyError, TypeError) as exc:
                return _write_failed(op, existing.type_id, exc)

        updated = existing.with_data(data)
        payload = {**updated.to_dict(), "updated_at": now.isoformat()}
        return ServiceResult(ok=True, op=op, data=payload)

    def delete_element(self, element_id: str) -> ServiceResult:
        """Delete an element and every link where it is source or target."""
        op = "delete_element"
        with self._db.transaction() as txn:
            if not txn.element_exists(element_id):
                return _not_found(op, element_id)
            links_removed = txn.delete_links_touching([element_id])
            txn.delete_element(element_id)

        logger.debug("Deleted element %s (%d links cascaded)", element_id, links_removed)
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": element_id, "deleted": True, "links_removed": links_removed},
        )

    def find_elements_by_type(self, type_id: str) -> ServiceResult:
        """All elements of *type_id*, each loose-validated."""
        op = "find_elements_by_type"
        warnings: list[str] = []
        with self._db.transaction() as txn:
            items = [
                self._loosen(found, txn, warnings).to_dict()
                for found in txn.elements_by_type(type_id)
            ]
        return ServiceResult(
            ok=True,
            op=op,
            data={"type_id": type_id, "count": len(items), "items": items},
            warnings=warnings,
        )


def _not_found(op: str, element_id: str) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.NOT_FOUND,
        f"Element '{element_id}' not found",
        id=element_id,
    )


def _validation_failed(op: str, errors: list[str]) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.VALIDATION_FAILED,
        f"Validation failed: {', '.join(errors)}",
        errors=errors,
    )


def _write_failed(op: str, type_id: str, exc: Exception) -> ServiceResult:
    logger.warning("Write failed during %s: %s", op, exc)
    return ServiceResult.failure(
        op,
        ErrorCode.WRITE_FAILED,
        f"Could not write record of type '{type_id}': {exc}",
        type_id=type_id,
    )
