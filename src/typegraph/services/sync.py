"""SyncService — reconcile code-declared types with stored ones.

For each declared type:

1. Not stored yet -> insert (``added``).
2. Stored and identical -> ``unchanged``.
3. Stored and different -> count instances, run the safety check on the
   field-level diff; safe -> overwrite the row (``updated``), unsafe ->
   record an error and leave the row alone.

Stored types missing from the declarations are ``orphaned``; with
``prune`` they are removed along with their instances (links before
elements, link types before element types).

Every type is handled in its own transaction so one failure never rolls
back the others. Errors are aggregated, never fail-fast.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from typegraph.domain.serializer import serialize
from typegraph.domain.validation import check_change_safety, diff_schemas
from typegraph.services._helpers import now_utc
from typegraph.services.base import BaseService
from typegraph.services.result import ErrorCode, ServiceError, ServiceResult

if TYPE_CHECKING:
    from typegraph.domain.descriptors import DescriptorNode
    from typegraph.domain.records import LinkTypeDefinition, TypeDefinition
    from typegraph.infrastructure.repository import GraphTransaction

logger = logging.getLogger(__name__)

_SYNC_ERRORS = (SQLAlchemyError, ValueError, TypeError)


def load_definitions(
    ref: str,
) -> tuple[Mapping[str, TypeDefinition], Mapping[str, LinkTypeDefinition]]:
    """Import a definitions module and return its ``ELEMENT_TYPES``/``LINK_TYPES``.

    *ref* is a dotted module path or a path to a ``.py`` file.

    Raises:
        ValueError: if the module cannot be loaded or lacks either mapping.
    """
    if ref.endswith(".py") or Path(ref).is_file():
        path = Path(ref)
        if not path.is_file():
            raise ValueError(f"Definitions file not found: {ref}")
        spec = importlib.util.spec_from_file_location(f"_typegraph_defs_{path.stem}", path)
        if spec is None or spec.loader is None:
            raise ValueError(f"Cannot load definitions from {ref}")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise ValueError(f"Cannot load definitions from {ref}: {exc!r}") from exc
    else:
        try:
            module = importlib.import_module(ref)
        except ImportError as exc:
            raise ValueError(f"Cannot import definitions module '{ref}': {exc}") from exc

    element_types = getattr(module, "ELEMENT_TYPES", None)
    link_types = getattr(module, "LINK_TYPES", None)
    if not isinstance(element_types, Mapping) or not isinstance(link_types, Mapping):
        raise ValueError(f"'{ref}' must define ELEMENT_TYPES and LINK_TYPES mappings")
    return element_types, link_types


@dataclass
class SyncReport:
    """Per-kind outcome of one sync pass."""

    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    orphaned: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "added": list(self.added),
            "updated": list(self.updated),
            "unchanged": list(self.unchanged),
            "orphaned": list(self.orphaned),
            "errors": list(self.errors),
        }


class SyncService(BaseService):
    """Applies code-side type declarations to the registry."""

    def sync(
        self,
        element_types: Mapping[str, TypeDefinition],
        link_types: Mapping[str, LinkTypeDefinition],
        *,
        prune: bool = False,
    ) -> ServiceResult:
        """Reconcile stored types with *element_types* and *link_types*."""
        op = "sync"

        elements_report = self._sync_element_types(element_types)
        links_report = self._sync_link_types(link_types)

        pruned: dict[str, Any] = {
            "element_types": [],
            "link_types": [],
            "elements": 0,
            "links": 0,
        }
        prune_errors: list[str] = []
        if prune and (elements_report.orphaned or links_report.orphaned):
            pruned, prune_errors = self._prune(elements_report.orphaned, links_report.orphaned)

        errors = elements_report.errors + links_report.errors + prune_errors
        data: dict[str, Any] = {
            "added": elements_report.added + links_report.added,
            "updated": elements_report.updated + links_report.updated,
            "unchanged": elements_report.unchanged + links_report.unchanged,
            "orphaned": elements_report.orphaned + links_report.orphaned,
            "errors": errors,
            "pruned": pruned,
            "element_types": elements_report.to_dict(),
            "link_types": links_report.to_dict(),
        }
        logger.info(
            "Sync finished: %d added, %d updated, %d unchanged, %d orphaned, %d errors",
            len(data["added"]),
            len(data["updated"]),
            len(data["unchanged"]),
            len(data["orphaned"]),
            len(errors),
        )

        if errors:
            return ServiceResult(
                ok=False,
                op=op,
                data=data,
                error=ServiceError(
                    code=ErrorCode.UNSAFE_SCHEMA_CHANGE.value,
                    message=f"{len(errors)} type(s) could not be synced",
                    detail={"errors": errors},
                ),
            )
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Element types
    # ------------------------------------------------------------------

    def _sync_element_types(self, declared: Mapping[str, TypeDefinition]) -> SyncReport:
        report = SyncReport()
        with self._db.transaction() as txn:
            stored_ids = [t.id for t in txn.list_element_types()]

        for type_id, definition in declared.items():
            try:
                with self._db.transaction() as txn:
                    self._apply_element_type(txn, type_id, definition, report)
            except _SYNC_ERRORS as exc:
                report.errors.append(f"Failed to process {type_id}: {exc}")
                logger.warning("Failed to sync element type %s: %s", type_id, exc)

        report.orphaned = [type_id for type_id in stored_ids if type_id not in declared]
        for type_id in report.orphaned:
            logger.warning("Orphaned element type: %s", type_id)
        return report

    def _apply_element_type(
        self,
        txn: GraphTransaction,
        type_id: str,
        definition: TypeDefinition,
        report: SyncReport,
    ) -> None:
        descriptor = serialize(definition.schema)
        parent_types = list(definition.parent_types)
        existing = txn.get_element_type(type_id)

        if existing is None:
            txn.insert_element_type(type_id, descriptor, parent_types, now_utc())
            report.added.append(type_id)
            logger.debug("Added element type %s", type_id)
            return

        if existing.schema.to_json() == descriptor.to_json() and (
            list(existing.parent_types) == parent_types
        ):
            report.unchanged.append(type_id)
            return

        reason = _unsafe_reason(existing.schema, descriptor, txn.count_elements(type_id))
        if reason is not None:
            report.errors.append(f"Cannot update {type_id}: {reason}")
            logger.warning("Refusing unsafe change to element type %s: %s", type_id, reason)
            return

        txn.update_element_type(
            type_id,
            {
                "schema": descriptor.to_json(),
                "parent_types": parent_types,
                "updated_at": now_utc(),
            },
        )
        report.updated.append(type_id)
        logger.debug("Updated element type %s", type_id)

    # ------------------------------------------------------------------
    # Link types
    # ------------------------------------------------------------------

    def _sync_link_types(self, declared: Mapping[str, LinkTypeDefinition]) -> SyncReport:
        report = SyncReport()
        with self._db.transaction() as txn:
            stored_ids = [t.id for t in txn.list_link_types()]

        for type_id, definition in declared.items():
            try:
                with self._db.transaction() as txn:
                    self._apply_link_type(txn, type_id, definition, report)
            except _SYNC_ERRORS as exc:
                report.errors.append(f"Failed to process {type_id}: {exc}")
                logger.warning("Failed to sync link type %s: %s", type_id, exc)

        report.orphaned = [type_id for type_id in stored_ids if type_id not in declared]
        for type_id in report.orphaned:
            logger.warning("Orphaned link type: %s", type_id)
        return report

    def _apply_link_type(
        self,
        txn: GraphTransaction,
        type_id: str,
        definition: LinkTypeDefinition,
        report: SyncReport,
    ) -> None:
        descriptor = serialize(definition.schema)
        parent_types = list(definition.parent_types)
        existing = txn.get_link_type(type_id)

        if existing is None:
            txn.insert_link_type(
                type_id,
                definition.from_type,
                definition.to_type,
                descriptor,
                parent_types,
                now_utc(),
            )
            report.added.append(type_id)
            logger.debug("Added link type %s", type_id)
            return

        if (
            existing.schema.to_json() == descriptor.to_json()
            and existing.from_type == definition.from_type
            and existing.to_type == definition.to_type
            and list(existing.parent_types) == parent_types
        ):
            report.unchanged.append(type_id)
            return

        reason = _unsafe_reason(existing.schema, descriptor, txn.count_links(type_id))
        if reason is not None:
            report.errors.append(f"Cannot update {type_id}: {reason}")
            logger.warning("Refusing unsafe change to link type %s: %s", type_id, reason)
            return

        txn.update_link_type(
            type_id,
            {
                "from_type": definition.from_type,
                "to_type": definition.to_type,
                "schema": descriptor.to_json(),
                "parent_types": parent_types,
                "updated_at": now_utc(),
            },
        )
        report.updated.append(type_id)
        logger.debug("Updated link type %s", type_id)

    # ------------------------------------------------------------------
    # Prune
    # ------------------------------------------------------------------

    def _prune(
        self, element_type_ids: list[str], link_type_ids: list[str]
    ) -> tuple[dict[str, Any], list[str]]:
        pruned: dict[str, Any] = {
            "element_types": [],
            "link_types": [],
            "elements": 0,
            "links": 0,
        }
        errors: list[str] = []

        for type_id in link_type_ids:
            try:
                with self._db.transaction() as txn:
                    removed = txn.delete_links_by_type(type_id)
                    txn.delete_link_type(type_id)
            except _SYNC_ERRORS as exc:
                errors.append(f"Failed to prune {type_id}: {exc}")
                logger.warning("Failed to prune link type %s: %s", type_id, exc)
                continue
            pruned["links"] += removed
            pruned["link_types"].append(type_id)
            logger.info("Pruned link type %s (%d links)", type_id, removed)

        for type_id in element_type_ids:
            try:
                with self._db.transaction() as txn:
                    element_ids = txn.element_ids_by_type(type_id)
                    links_removed = txn.delete_links_touching(element_ids)
                    elements_removed = txn.delete_elements_by_type(type_id)
                    txn.delete_element_type(type_id)
            except _SYNC_ERRORS as exc:
                errors.append(f"Failed to prune {type_id}: {exc}")
                logger.warning("Failed to prune element type %s: %s", type_id, exc)
                continue
            pruned["links"] += links_removed
            pruned["elements"] += elements_removed
            pruned["element_types"].append(type_id)
            logger.info(
                "Pruned element type %s (%d elements, %d links)",
                type_id,
                elements_removed,
                links_removed,
            )

        return pruned, errors


def _unsafe_reason(old: DescriptorNode, new: DescriptorNode, existing_count: int) -> str | None:
    verdict = check_change_safety(diff_schemas(old, new), existing_count)
    return None if verdict.safe else verdict.reason
