"""Convert between type descriptions and storable descriptors.

``serialize`` recurses structurally and flattens the Optional, Nullable
and Default wrappers onto the already-serialized inner node.
``deserialize`` rebuilds the base schema for ``node.type`` and then
re-applies the annotations in the fixed order default -> nullable ->
optional.

INVARIANT: ``serialize(deserialize(d)) == d`` for any ``d`` produced by
``serialize``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from typegraph.domain.descriptors import (
    ArrayNode,
    BigIntNode,
    BooleanNode,
    DateNode,
    DescriptorNode,
    EnumNode,
    FunctionNode,
    IntersectionNode,
    LazyNode,
    LiteralNode,
    MapNode,
    NumberNode,
    ObjectNode,
    PromiseNode,
    RecordNode,
    SetNode,
    StringNode,
    TupleNode,
    UnionNode,
    UnknownNode,
    load_descriptor,
)
from typegraph.domain.schema import (
    ArraySchema,
    BigIntSchema,
    BooleanSchema,
    DateSchema,
    DefaultSchema,
    EnumSchema,
    FunctionSchema,
    IntersectionSchema,
    LazySchema,
    LiteralSchema,
    MapSchema,
    NullableSchema,
    NumberSchema,
    ObjectSchema,
    OptionalSchema,
    PromiseSchema,
    RecordSchema,
    Schema,
    SetSchema,
    StringSchema,
    TupleSchema,
    UnionSchema,
    UnknownSchema,
)
from typegraph.domain.values import to_value


def serialize(schema: Schema) -> DescriptorNode:
    """Serialize a type description to its descriptor."""
    match schema:
        case OptionalSchema():
            return serialize(schema.inner).annotated(optional=True)
        case NullableSchema():
            return serialize(schema.inner).annotated(nullable=True)
        case DefaultSchema():
            return serialize(schema.inner).annotated(default=to_value(schema.default_value()))
        case StringSchema():
            return StringNode()
        case NumberSchema():
            return NumberNode()
        case BooleanSchema():
            return BooleanNode()
        case DateSchema():
            return DateNode()
        case BigIntSchema():
            return BigIntNode()
        case ArraySchema():
            return ArrayNode(element=serialize(schema.element))
        case ObjectSchema():
            return ObjectNode(shape={k: serialize(v) for k, v in schema.shape.items()})
        case EnumSchema():
            return EnumNode(values=list(schema.values))
        case LiteralSchema():
            return LiteralNode(value=to_value(schema.value))
        case UnionSchema():
            return UnionNode(options=[serialize(o) for o in schema.options])
        case IntersectionSchema():
            return IntersectionNode(left=serialize(schema.left), right=serialize(schema.right))
        case TupleSchema():
            return TupleNode(
                items=[serialize(i) for i in schema.items],
                rest=serialize(schema.rest) if schema.rest is not None else None,
            )
        case RecordSchema():
            return RecordNode(key=serialize(schema.key), value=serialize(schema.value))
        case MapSchema():
            return MapNode(key=serialize(schema.key), value=serialize(schema.value))
        case SetSchema():
            return SetNode(value=serialize(schema.value))
        case FunctionSchema():
            return FunctionNode()
        case LazySchema():
            return LazyNode()
        case PromiseSchema():
            return PromiseNode(inner=serialize(schema.inner))
        case _:
            return UnknownNode()


def deserialize(descriptor: DescriptorNode | Mapping[str, Any]) -> Schema:
    """Rebuild a live schema from a descriptor (or its JSON form)."""
    node = load_descriptor(descriptor)
    schema = _build_base(node)
    if node.default is not None:
        schema = DefaultSchema(schema, node.default)
    if node.nullable:
        schema = NullableSchema(schema)
    if node.optional:
        schema = OptionalSchema(schema)
    return schema


def _build_base(node: DescriptorNode) -> Schema:
    """Base schema for ``node.type``, ignoring annotations."""
    match node:
        case StringNode():
            return StringSchema()
        case NumberNode():
            return NumberSchema()
        case BooleanNode():
            return BooleanSchema()
        case DateNode():
            return DateSchema()
        case BigIntNode():
            return BigIntSchema()
        case ArrayNode():
            return ArraySchema(deserialize(node.element))
        case ObjectNode():
            return ObjectSchema({k: deserialize(v) for k, v in node.shape.items()})
        case EnumNode():
            return EnumSchema(node.values)
        case LiteralNode():
            return LiteralSchema(node.value)
        case UnionNode():
            return UnionSchema([deserialize(o) for o in node.options])
        case IntersectionNode():
            return IntersectionSchema(deserialize(node.left), deserialize(node.right))
        case TupleNode():
            rest = deserialize(node.rest) if node.rest is not None else None
            return TupleSchema([deserialize(i) for i in node.items], rest)
        case RecordNode():
            return RecordSchema(deserialize(node.key), deserialize(node.value))
        case MapNode():
            return MapSchema(deserialize(node.key), deserialize(node.value))
        case SetNode():
            return SetSchema(deserialize(node.value))
        case FunctionNode():
            return FunctionSchema()
        case LazyNode():
            return LazySchema()
        case PromiseNode():
            return PromiseSchema(deserialize(node.inner))
        case _:
            return UnknownSchema()
