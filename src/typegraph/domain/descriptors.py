"""Schema descriptors — the storable form of a type description.

A descriptor is a recursive tagged union discriminated by ``type``.
Every node carries three flat annotations (``optional``, ``nullable``,
``default``) instead of nesting wrapper nodes, so downstream code can
inspect ``node.optional`` / ``node.nullable`` / ``node.default`` on any
node directly.

The JSON form omits annotations that are unset, so a required string
field is stored as ``{"type": "string"}``. Unrecognized ``type`` tags
load as :class:`UnknownNode`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Literal

from pydantic import (
    BaseModel,
    Discriminator,
    SerializerFunctionWrapHandler,
    Tag,
    TypeAdapter,
    model_serializer,
    model_validator,
)

DESCRIPTOR_KINDS: frozenset[str] = frozenset(
    {
        "string",
        "number",
        "boolean",
        "date",
        "bigint",
        "array",
        "object",
        "enum",
        "literal",
        "union",
        "intersection",
        "tuple",
        "record",
        "map",
        "set",
        "function",
        "lazy",
        "promise",
        "unknown",
    }
)


class DescriptorNode(BaseModel):
    """Fields shared by every descriptor variant."""

    model_config = {"frozen": True}

    # Keys dropped from the JSON form when their value is None.
    _omit_when_none: ClassVar[tuple[str, ...]] = ("default",)

    optional: bool = False
    nullable: bool = False
    default: Any = None

    @model_serializer(mode="wrap")
    def _drop_unset(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if not self.optional:
            data.pop("optional", None)
        if not self.nullable:
            data.pop("nullable", None)
        for key in self._omit_when_none:
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def annotated(self, **annotations: Any) -> DescriptorNode:
        """Return a copy with *annotations* flattened onto this node."""
        return self.model_copy(update=annotations)

    def to_json(self) -> dict[str, Any]:
        """Storable JSON form (unset annotations omitted)."""
        return self.model_dump(mode="json")


class StringNode(DescriptorNode):
    type: Literal["string"] = "string"


class NumberNode(DescriptorNode):
    type: Literal["number"] = "number"


class BooleanNode(DescriptorNode):
    type: Literal["boolean"] = "boolean"


class DateNode(DescriptorNode):
    type: Literal["date"] = "date"


class BigIntNode(DescriptorNode):
    type: Literal["bigint"] = "bigint"


class ArrayNode(DescriptorNode):
    type: Literal["array"] = "array"
    element: Descriptor


class ObjectNode(DescriptorNode):
    type: Literal["object"] = "object"
    shape: dict[str, Descriptor] = {}


class EnumNode(DescriptorNode):
    type: Literal["enum"] = "enum"
    values: list[str]


class LiteralNode(DescriptorNode):
    type: Literal["literal"] = "literal"
    value: Any


class UnionNode(DescriptorNode):
    type: Literal["union"] = "union"
    options: list[Descriptor]


class IntersectionNode(DescriptorNode):
    type: Literal["intersection"] = "intersection"
    left: Descriptor
    right: Descriptor


class TupleNode(DescriptorNode):
    _omit_when_none: ClassVar[tuple[str, ...]] = ("default", "rest")

    type: Literal["tuple"] = "tuple"
    items: list[Descriptor]
    rest: Descriptor | None = None


class RecordNode(DescriptorNode):
    type: Literal["record"] = "record"
    key: Descriptor
    value: Descriptor


class MapNode(DescriptorNode):
    type: Literal["map"] = "map"
    key: Descriptor
    value: Descriptor


class SetNode(DescriptorNode):
    type: Literal["set"] = "set"
    value: Descriptor


class FunctionNode(DescriptorNode):
    type: Literal["function"] = "function"


class LazyNode(DescriptorNode):
    type: Literal["lazy"] = "lazy"


class PromiseNode(DescriptorNode):
    type: Literal["promise"] = "promise"
    inner: Descriptor


class UnknownNode(DescriptorNode):
    type: Literal["unknown"] = "unknown"

    @model_validator(mode="before")
    @classmethod
    def _coerce_tag(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and data.get("type") != "unknown":
            return {**data, "type": "unknown"}
        return data


def _descriptor_kind(value: Any) -> str:
    """Discriminator: the node's ``type`` tag, or ``unknown``."""
    if isinstance(value, Mapping):
        kind = value.get("type")
    else:
        kind = getattr(value, "type", None)
    return kind if kind in DESCRIPTOR_KINDS else "unknown"


Descriptor = Annotated[
    Annotated[StringNode, Tag("string")]
    | Annotated[NumberNode, Tag("number")]
    | Annotated[BooleanNode, Tag("boolean")]
    | Annotated[DateNode, Tag("date")]
    | Annotated[BigIntNode, Tag("bigint")]
    | Annotated[ArrayNode, Tag("array")]
    | Annotated[ObjectNode, Tag("object")]
    | Annotated[EnumNode, Tag("enum")]
    | Annotated[LiteralNode, Tag("literal")]
    | Annotated[UnionNode, Tag("union")]
    | Annotated[IntersectionNode, Tag("intersection")]
    | Annotated[TupleNode, Tag("tuple")]
    | Annotated[RecordNode, Tag("record")]
    | Annotated[MapNode, Tag("map")]
    | Annotated[SetNode, Tag("set")]
    | Annotated[FunctionNode, Tag("function")]
    | Annotated[LazyNode, Tag("lazy")]
    | Annotated[PromiseNode, Tag("promise")]
    | Annotated[UnknownNode, Tag("unknown")],
    Discriminator(_descriptor_kind),
]

for _model in (
    ArrayNode,
    ObjectNode,
    UnionNode,
    IntersectionNode,
    TupleNode,
    RecordNode,
    MapNode,
    SetNode,
    PromiseNode,
):
    _model.model_rebuild()

_ADAPTER: TypeAdapter[Any] = TypeAdapter(Descriptor)


def load_descriptor(raw: Mapping[str, Any] | DescriptorNode) -> DescriptorNode:
    """Load a descriptor from its stored JSON form.

    Raises:
        pydantic.ValidationError: If a known variant is missing a child
            (e.g. an ``array`` without ``element``).
    """
    if isinstance(raw, DescriptorNode):
        return raw
    node: DescriptorNode = _ADAPTER.validate_python(dict(raw))
    return node


def dump_descriptor(node: DescriptorNode) -> dict[str, Any]:
    """Storable JSON form of *node*."""
    return node.to_json()
