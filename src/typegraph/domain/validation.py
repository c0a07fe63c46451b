"""Validation modes, schema diffing, and safe-evolution rules.

Two validation modes (both total — they never raise):

- **strict** (write path): parse exactly as given. On failure the
  original value is returned untouched along with one error per path.
- **loose** (read path): fill absent top-level fields from their own
  defaults, then parse. Failures are logged as warnings and the
  defaulted-but-unparsed value is returned with ``success=True`` so a
  read is never blocked.

Safe evolution: a schema change is unsafe only when records already
exist and an added or changed field is required without a default.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal

from typegraph.domain.descriptors import DescriptorNode, ObjectNode, load_descriptor
from typegraph.domain.schema import MISSING, ObjectSchema, Schema
from typegraph.domain.serializer import deserialize

logger = logging.getLogger(__name__)

type ValidationMode = Literal["strict", "loose"]


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate`."""

    success: bool
    data: Any
    errors: list[str] = field(default_factory=list)


def validate(
    value: Any,
    schema: Schema | DescriptorNode | Mapping[str, Any],
    mode: ValidationMode = "strict",
) -> ValidationResult:
    """Validate *value* against *schema* in the given *mode*.

    *schema* may be a live schema or a descriptor (stored JSON form
    included), which is deserialized first.
    """
    processed = dict(value) if isinstance(value, Mapping) else value
    try:
        live = schema if isinstance(schema, Schema) else deserialize(schema)
        if mode == "loose":
            processed = apply_defaults(processed, live)
        outcome = live.safe_parse(processed)
    except Exception as exc:
        if mode == "strict":
            return ValidationResult(success=False, data=processed, errors=[str(exc)])
        logger.warning("Loose validation skipped, unusable schema: %s", exc)
        return ValidationResult(success=True, data=processed, errors=[str(exc)])

    if outcome.success:
        return ValidationResult(success=True, data=outcome.data)

    errors = [str(issue) for issue in outcome.issues]
    if mode == "strict":
        return ValidationResult(success=False, data=value, errors=errors)

    logger.warning("Loose validation failed: %s", "; ".join(errors))
    return ValidationResult(success=True, data=processed, errors=errors)


def apply_defaults(data: Any, schema: Schema) -> Any:
    """Fill absent top-level object fields with their defaults (shallow)."""
    if not isinstance(schema, ObjectSchema) or not isinstance(data, Mapping):
        return data
    result = dict(data)
    for key, field_schema in schema.shape.items():
        if key in result:
            continue
        default = field_schema.default_value()
        if default is not MISSING:
            result[key] = default
    return result


# ---------------------------------------------------------------------------
# Schema change detection
# ---------------------------------------------------------------------------


class ChangeKind(StrEnum):
    """How a field differs between two object descriptors."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


@dataclass(frozen=True)
class SchemaChange:
    """A single field-level difference between two descriptors."""

    kind: ChangeKind
    field: str
    required: bool | None = None
    has_default: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "field": self.field}
        if self.required is not None:
            data["required"] = self.required
        if self.has_default is not None:
            data["has_default"] = self.has_default
        return data


@dataclass(frozen=True)
class SafetyVerdict:
    safe: bool
    reason: str | None = None


def diff_schemas(
    old: DescriptorNode | Mapping[str, Any],
    new: DescriptorNode | Mapping[str, Any],
) -> list[SchemaChange]:
    """Field-level changes from *old* to *new*.

    Only object descriptors are compared; any other pair yields ``[]``.
    """
    old_node = load_descriptor(old)
    new_node = load_descriptor(new)
    if not isinstance(old_node, ObjectNode) or not isinstance(new_node, ObjectNode):
        return []

    old_shape = old_node.shape
    new_shape = new_node.shape
    changes: list[SchemaChange] = []

    for key, node in new_shape.items():
        if key not in old_shape:
            changes.append(
                SchemaChange(
                    ChangeKind.ADDED,
                    key,
                    required=not node.optional,
                    has_default=node.has_default,
                )
            )

    changes.extend(
        SchemaChange(ChangeKind.REMOVED, key) for key in old_shape if key not in new_shape
    )

    for key, node in new_shape.items():
        if key in old_shape and old_shape[key].to_json() != node.to_json():
            changes.append(
                SchemaChange(
                    ChangeKind.CHANGED,
                    key,
                    required=not node.optional,
                    has_default=node.has_default,
                )
            )

    return changes


def check_change_safety(changes: list[SchemaChange], existing_count: int) -> SafetyVerdict:
    """Judge whether *changes* can apply with *existing_count* records stored."""
    if existing_count == 0:
        return SafetyVerdict(safe=True)

    for change in changes:
        if not change.required or change.has_default:
            continue
        if change.kind is ChangeKind.ADDED:
            return SafetyVerdict(
                safe=False,
                reason=(
                    f"Cannot add required field '{change.field}' without default value "
                    f"when {existing_count} records exist"
                ),
            )
        if change.kind is ChangeKind.CHANGED:
            return SafetyVerdict(
                safe=False,
                reason=(
                    f"Cannot make field '{change.field}' required without default value "
                    f"when {existing_count} records exist"
                ),
            )

    return SafetyVerdict(safe=True)
