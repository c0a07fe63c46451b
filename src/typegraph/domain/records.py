"""Graph records and code-side type declarations.

Records mirror the four backing tables. ``to_dict`` produces the JSON
payload placed in ``ServiceResult.data``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any

from typegraph.domain.serializer import deserialize

if TYPE_CHECKING:
    from typegraph.domain.descriptors import DescriptorNode
    from typegraph.domain.schema import Schema


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class ElementType:
    """Stored declaration governing a class of elements.

    ``parent_types`` is persisted metadata only; nothing resolves it.
    """

    id: str
    schema: DescriptorNode
    parent_types: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def live_schema(self) -> Schema:
        return deserialize(self.schema)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "schema": self.schema.to_json(),
            "parent_types": list(self.parent_types),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class LinkType:
    """Stored declaration governing a class of links.

    ``from_type``/``to_type`` document the intended endpoints; link
    creation does not check element types against them.
    """

    id: str
    from_type: str
    to_type: str
    schema: DescriptorNode
    parent_types: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def live_schema(self) -> Schema:
        return deserialize(self.schema)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from_type": self.from_type,
            "to_type": self.to_type,
            "schema": self.schema.to_json(),
            "parent_types": list(self.parent_types),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class Element:
    id: str
    type_id: str
    data: dict[str, Any]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def with_data(self, data: dict[str, Any]) -> Element:
        return replace(self, data=data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type_id": self.type_id,
            "data": self.data,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class Link:
    id: str
    from_id: str
    to_id: str
    link_type_id: str
    data: dict[str, Any]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def with_data(self, data: dict[str, Any]) -> Link:
        return replace(self, data=data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from_id": self.from_id,
            "to_id": self.to_id,
            "link_type_id": self.link_type_id,
            "data": self.data,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


# ---------------------------------------------------------------------------
# Code-side declarations (consumed by the sync tool)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypeDefinition:
    """An element type declared in code."""

    id: str
    schema: Schema
    parent_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class LinkTypeDefinition:
    """A link type declared in code."""

    id: str
    from_type: str
    to_type: str
    schema: Schema
    parent_types: tuple[str, ...] = ()
