"""LinkService — typed CRUD over directed graph edges.

Endpoint existence is checked before anything else: a link whose source
or target element does not exist is refused with
``REFERENTIAL_INTEGRITY`` naming the missing side. Endpoint *types* are
not checked against the link type's ``from_type``/``to_type``.

Link updates replace the stored data wholesale (no merge).
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
    from typegraph.domain.records import Link
    from typegraph.infrastructure.repository import GraphDatabase, GraphTransaction
    from typegraph.services.registry import TypeRegistry

logger = logging.getLogger(__name__)


class LinkService(BaseService):
    """Handles link creation, reads, replacement updates, and deletes."""

    def __init__(self, db: GraphDatabase, registry: TypeRegistry) -> None:
        super().__init__(db)
        self._registry = registry

    # ------------------------------------------------------------------
    # Read helpers shared with QueryService
    # ------------------------------------------------------------------

    def load_links(
        self,
        element_id: str,
        *,
        outgoing: bool,
        link_type_id: str | None = None,
        warnings: list[str] | None = None,
    ) -> list[Link]:
        """Outgoing or incoming links of *element_id*, loose-validated."""
        with self._db.transaction() as txn:
            if outgoing:
                found = txn.links_from(element_id, link_type_id)
            else:
                found = txn.links_to(element_id, link_type_id)
            return [self._loosen(item, txn, warnings) for item in found]

    def _loosen(
        self,
        found: Link,
        txn: GraphTransaction,
        warnings: list[str] | None,
    ) -> Link:
        type_def = self._registry.link_type(found.link_type_id, txn=txn)
        if type_def is None:
            return found
        result = validate(found.data, type_def.live_schema(), "loose")
        if result.errors and warnings is not None:
            warnings.extend(f"{found.id}: {err}" for err in result.errors)
        return found.with_data(to_value(result.data))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_link(
        self,
        from_id: str,
        to_id: str,
        link_type_id: str,
        data: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Create a link after endpoint, type, and strict data checks."""
        op = "create_link"

        with self._db.transaction() as txn:
            # ── ENDPOINTS ────────────────────────────────────────
            for side, element_id in (("from", from_id), ("to", to_id)):
                if not txn.element_exists(element_id):
                    return ServiceResult.failure(
                        op,
                        ErrorCode.REFERENTIAL_INTEGRITY,
                        f"Referenced '{side}' element '{element_id}' does not exist",
                        side=side,
                        id=element_id,
                    )

            # ── RESOLVE ──────────────────────────────────────────
            type_def = self._registry.link_type(link_type_id, txn=txn)
            if type_def is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.TYPE_NOT_FOUND,
                    f"Link type '{link_type_id}' not found",
                    type_id=link_type_id,
                )

            # ── VALIDATE ─────────────────────────────────────────
            result = validate(clone(data or {}), type_def.live_schema(), "strict")
            if not result.success:
                return _validation_failed(op, result.errors)

            # ── WRITE ────────────────────────────────────────────
            try:
                created = txn.insert_link(
                    new_record_id(),
                    from_id,
                    to_id,
                    link_type_id,
                    to_value(result.data),
                    now_utc(),
                )
            except (SQLAlchemyError, TypeError) as exc:
                logger.warning("Write failed during %s: %s", op, exc)
                return ServiceResult.failure(
                    op,
                    ErrorCode.WRITE_FAILED,
                    f"Could not write link of type '{link_type_id}': {exc}",
                    type_id=link_type_id,
                )

        logger.debug("Created link %s: %s -[%s]-> %s", created.id, from_id, link_type_id, to_id)
        return ServiceResult(ok=True, op=op, data=created.to_dict())

    def get_link(self, link_id: str) -> ServiceResult:
        op = "get_link"
        warnings: list[str] = []
        with self._db.transaction() as txn:
            found = txn.get_link(link_id)
            if found is None:
                return _not_found(op, link_id)
            loosened = self._loosen(found, txn, warnings)
        return ServiceResult(ok=True, op=op, data=loosened.to_dict(), warnings=warnings)

    def update_link(self, link_id: str, data: dict[str, Any]) -> ServiceResult:
        """Replace the link's data with *data* after strict validation."""
        op = "update_link"

        with self._db.transaction() as txn:
            existing = txn.get_link(link_id)
            if existing is None:
                return _not_found(op, link_id)

            type_def = self._registry.link_type(existing.link_type_id, txn=txn)
            if type_def is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.TYPE_NOT_FOUND,
                    f"Link type '{existing.link_type_id}' not found",
                    type_id=existing.link_type_id,
                )

            result = validate(clone(data), type_def.live_schema(), "strict")
            if not result.success:
                return _validation_failed(op, result.errors)

            now = now_utc()
            try:
                stored = to_value(result.data)
                txn.update_link_data(link_id, stored, now)
            except (SQLAlchemyError, TypeError) as exc:
                logger.warning("Write failed during %s: %s", op, exc)
                return ServiceResult.failure(
                    op,
                    ErrorCode.WRITE_FAILED,
                    f"Could not update link '{link_id}': {exc}",
                    id=link_id,
                )

        payload = {**existing.with_data(stored).to_dict(), "updated_at": now.isoformat()}
        return ServiceResult(ok=True, op=op, data=payload)

    def delete_link(self, link_id: str) -> ServiceResult:
        op = "delete_link"
        with self._db.transaction() as txn:
            if txn.delete_link(link_id) == 0:
                return _not_found(op, link_id)
        return ServiceResult(ok=True, op=op, data={"id": link_id, "deleted": True})

    def find_links_from(self, element_id: str, link_type_id: str | None = None) -> ServiceResult:
        return self._find("find_links_from", element_id, link_type_id, outgoing=True)

    def find_links_to(self, element_id: str, link_type_id: str | None = None) -> ServiceResult:
        return self._find("find_links_to", element_id, link_type_id, outgoing=False)

    def _find(
        self,
        op: str,
        element_id: str,
        link_type_id: str | None,
        *,
        outgoing: bool,
    ) -> ServiceResult:
        warnings: list[str] = []
        items = [
            item.to_dict()
            for item in self.load_links(
                element_id, outgoing=outgoing, link_type_id=link_type_id, warnings=warnings
            )
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={"element_id": element_id, "count": len(items), "items": items},
            warnings=warnings,
        )


def _not_found(op: str, link_id: str) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.NOT_FOUND,
        f"Link '{link_id}' not found",
        id=link_id,
    )


def _validation_failed(op: str, errors: list[str]) -> ServiceResult:
    return ServiceResult.failure(
        op,
        ErrorCode.VALIDATION_FAILED,
        f"Validation failed: {', '.join(errors)}",
        errors=errors,
    )
