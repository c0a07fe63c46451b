"""Type descriptions — the in-code schema language.

Schemas are built from small combinators and double as live validators::

    from typegraph.domain import schema as s

    task = s.object_(
        {
            "title": s.string(),
            "completed": s.boolean().default(False),
            "tags": s.array(s.string()).optional(),
        }
    )
    task.parse({"title": "Buy milk"})
    # {'title': 'Buy milk', 'completed': False}

Parsing is a recursive interpreter: each schema checks a value, records
one :class:`Issue` per offending path, and returns the (possibly
transformed) value. Absence of an object key is represented by the
:data:`MISSING` sentinel so that ``None`` stays a real value.

Wrapper semantics for absence:

- :class:`DefaultSchema` replaces an absent value with its default.
- :class:`NullableSchema` accepts ``None`` and passes absence inward.
- :class:`OptionalSchema` accepts absence unless its inner schema can
  supply a default, in which case the default wins.
"""

from __future__ import annotations

import copy
import datetime as dt
import inspect
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

from typegraph.domain.values import type_name

type Path = tuple[str | int, ...]


class _Missing:
    """Sentinel type for an absent value."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


@dataclass(frozen=True)
class Issue:
    """A single validation failure at *path*."""

    path: Path
    message: str

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{'.'.join(str(p) for p in self.path)}: {self.message}"


class SchemaError(ValueError):
    """Raised by :meth:`Schema.parse` when a value does not conform."""

    def __init__(self, issues: list[Issue]) -> None:
        self.issues = issues
        super().__init__("; ".join(str(i) for i in issues))


@dataclass(frozen=True)
class ParseOutcome:
    """Result of :meth:`Schema.safe_parse`."""

    success: bool
    data: Any
    issues: list[Issue]


class Schema:
    """Base class for every type description."""

    def parse(self, value: Any) -> Any:
        """Parse *value*, raising :class:`SchemaError` on failure."""
        outcome = self.safe_parse(value)
        if not outcome.success:
            raise SchemaError(outcome.issues)
        return outcome.data

    def safe_parse(self, value: Any) -> ParseOutcome:
        """Parse *value* without raising."""
        issues: list[Issue] = []
        data = self._check(value, (), issues)
        if issues:
            return ParseOutcome(success=False, data=value, issues=issues)
        return ParseOutcome(success=True, data=data, issues=[])

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if value is MISSING:
            issues.append(Issue(path, "Required"))
            return MISSING
        return self._check_value(value, path, issues)

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        raise NotImplementedError

    def default_value(self) -> Any:
        """The value used when this schema sees an absent key."""
        return MISSING

    # -- wrappers -------------------------------------------------------

    def optional(self) -> OptionalSchema:
        return OptionalSchema(self)

    def nullable(self) -> NullableSchema:
        return NullableSchema(self)

    def default(self, value: Any) -> DefaultSchema:
        """Fill absent values with *value* (or the result of calling it).

        Raises:
            ValueError: if *value* is ``None``. Stored descriptors cannot tell a
                null default from no default; use :meth:`nullable` instead.
        """
        if value is None:
            raise ValueError("null defaults cannot be stored; use .nullable() instead")
        return DefaultSchema(self, value)


def _expected(issues: list[Issue], path: Path, expected: str, value: Any) -> Any:
    issues.append(Issue(path, f"Expected {expected}, received {type_name(value)}"))
    return value


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


class StringSchema(Schema):
    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if not isinstance(value, str):
            return _expected(issues, path, "string", value)
        return value


class NumberSchema(Schema):
    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return _expected(issues, path, "number", value)
        if isinstance(value, float) and math.isnan(value):
            issues.append(Issue(path, "Expected number, received nan"))
        return value


class BooleanSchema(Schema):
    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if not isinstance(value, bool):
            return _expected(issues, path, "boolean", value)
        return value


class DateSchema(Schema):
    """Accepts datetimes, dates, or ISO-8601 strings; yields a datetime."""

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if isinstance(value, dt.datetime):
            return value
        if isinstance(value, dt.date):
            return dt.datetime.combine(value, dt.time())
        if isinstance(value, str):
            try:
                return dt.datetime.fromisoformat(value)
            except ValueError:
                issues.append(Issue(path, "Invalid date"))
                return value
        return _expected(issues, path, "date", value)


class BigIntSchema(Schema):
    """Accepts ints and integer strings; yields an int."""

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value, 10)
            except ValueError:
                pass
        return _expected(issues, path, "bigint", value)


# ---------------------------------------------------------------------------
# Composites
# ---------------------------------------------------------------------------


class ArraySchema(Schema):
    def __init__(self, element: Schema) -> None:
        self.element = element

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if not isinstance(value, (list, tuple)):
            return _expected(issues, path, "array", value)
        return [self.element._check(item, (*path, i), issues) for i, item in enumerate(value)]


class ObjectSchema(Schema):
    """Fixed-shape mapping. Keys not in the shape are dropped."""

    def __init__(self, shape: Mapping[str, Schema]) -> None:
        self.shape: dict[str, Schema] = dict(shape)

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if not isinstance(value, Mapping):
            return _expected(issues, path, "object", value)
        result: dict[str, Any] = {}
        for key, field in self.shape.items():
            parsed = field._check(value.get(key, MISSING), (*path, key), issues)
            if parsed is not MISSING:
                result[key] = parsed
        return result


class EnumSchema(Schema):
    def __init__(self, values: Sequence[str]) -> None:
        if not values:
            raise ValueError("enum requires at least one value")
        self.values = list(values)

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if not isinstance(value, str) or value not in self.values:
            options = " | ".join(f"'{v}'" for v in self.values)
            issues.append(
                Issue(path, f"Invalid enum value. Expected {options}, received {value!r}")
            )
        return value


class LiteralSchema(Schema):
    def __init__(self, value: Any) -> None:
        self.value = value

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        same_kind = isinstance(value, bool) == isinstance(self.value, bool)
        if not (same_kind and value == self.value):
            issues.append(Issue(path, f"Invalid literal value, expected {self.value!r}"))
        return value


class UnionSchema(Schema):
    """First option that accepts the value wins."""

    def __init__(self, options: Sequence[Schema]) -> None:
        if not options:
            raise ValueError("union requires at least one option")
        self.options = list(options)

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        for option in self.options:
            attempt: list[Issue] = []
            parsed = option._check(value, path, attempt)
            if not attempt:
                return parsed
        issues.append(Issue(path, "Required" if value is MISSING else "Invalid input"))
        return value

    def default_value(self) -> Any:
        for option in self.options:
            found = option.default_value()
            if found is not MISSING:
                return found
        return MISSING


class IntersectionSchema(Schema):
    """Value must satisfy both sides; object results are merged."""

    def __init__(self, left: Schema, right: Schema) -> None:
        self.left = left
        self.right = right

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        attempt: list[Issue] = []
        left = self.left._check(value, path, attempt)
        right = self.right._check(value, path, attempt)
        if attempt:
            issues.extend(attempt)
            return value
        if left is MISSING and right is MISSING:
            return MISSING
        if isinstance(left, dict) and isinstance(right, dict):
            return {**left, **right}
        if left == right:
            return left
        issues.append(Issue(path, "Intersection results could not be merged"))
        return value


class TupleSchema(Schema):
    def __init__(self, items: Sequence[Schema], rest: Schema | None = None) -> None:
        self.items = list(items)
        self.rest = rest

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if not isinstance(value, (list, tuple)):
            return _expected(issues, path, "array", value)
        size = len(self.items)
        if len(value) < size:
            issues.append(Issue(path, f"Array must contain at least {size} element(s)"))
            return value
        if len(value) > size and self.rest is None:
            issues.append(Issue(path, f"Array must contain at most {size} element(s)"))
            return value
        result = [
            schema._check(item, (*path, i), issues)
            for i, (schema, item) in enumerate(zip(self.items, value, strict=False))
        ]
        if self.rest is not None:
            result.extend(
                self.rest._check(item, (*path, i), issues)
                for i, item in enumerate(value[size:], start=size)
            )
        return result


class RecordSchema(Schema):
    """Open mapping with a key schema and a value schema."""

    def __init__(self, key: Schema, value: Schema) -> None:
        self.key = key
        self.value = value

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if not isinstance(value, Mapping):
            return _expected(issues, path, "object", value)
        result: dict[Any, Any] = {}
        for k, v in value.items():
            parsed_key = self.key._check(k, (*path, k), issues)
            result[parsed_key] = self.value._check(v, (*path, k), issues)
        return result


class MapSchema(Schema):
    """Accepts a mapping or a list of ``[key, value]`` pairs."""

    def __init__(self, key: Schema, value: Schema) -> None:
        self.key = key
        self.value = value

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if isinstance(value, Mapping):
            pairs = list(value.items())
        elif isinstance(value, (list, tuple)) and all(
            isinstance(p, (list, tuple)) and len(p) == 2 for p in value
        ):
            pairs = [(p[0], p[1]) for p in value]
        else:
            return _expected(issues, path, "map", value)
        result: dict[Any, Any] = {}
        for i, (k, v) in enumerate(pairs):
            parsed_key = self.key._check(k, (*path, i, "key"), issues)
            parsed_value = self.value._check(v, (*path, i, "value"), issues)
            try:
                result[parsed_key] = parsed_value
            except TypeError:
                issues.append(Issue((*path, i, "key"), "Map keys must be hashable"))
        return result


class SetSchema(Schema):
    """Accepts a list, tuple or set of unique items; yields a list."""

    def __init__(self, value: Schema) -> None:
        self.value = value

    def _check_value(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return _expected(issues, path, "set", value)
        result: list[Any] = []
        for i, item in enumerate(value):
            parsed = self.value._check(item, (*path, i), issues)
            if parsed in result:
                issues.append(Issue((*path, i), "Set items must be unique"))
                continue
            result.append(parsed)
        return result


# ---------------------------------------------------------------------------
# Opaque / permissive kinds
# ---------------------------------------------------------------------------


class UnknownSchema(Schema):
    """Accepts anything, including absence."""

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        return value


class FunctionSchema(UnknownSchema):
    """Opaque stub: functions are not storable, so anything is accepted."""


class LazySchema(Schema):
    """Deferred schema for recursive shapes.

    With a *getter* the resolved schema is used; a lazy schema rebuilt
    from storage has no getter and accepts anything.
    """

    def __init__(self, getter: Callable[[], Schema] | None = None) -> None:
        self.getter = getter

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if self.getter is None:
            return value
        return self.getter()._check(value, path, issues)


class PromiseSchema(Schema):
    """Checks an already-resolved value against *inner*.

    Awaitables cannot be inspected synchronously and are passed through.
    """

    def __init__(self, inner: Schema) -> None:
        self.inner = inner

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if inspect.isawaitable(value):
            return value
        return self.inner._check(value, path, issues)


# ---------------------------------------------------------------------------
# Annotation wrappers
# ---------------------------------------------------------------------------


class OptionalSchema(Schema):
    def __init__(self, inner: Schema) -> None:
        self.inner = inner

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if value is MISSING and self.inner.default_value() is MISSING:
            return MISSING
        return self.inner._check(value, path, issues)

    def default_value(self) -> Any:
        return self.inner.default_value()

    def unwrap(self) -> Schema:
        return self.inner


class NullableSchema(Schema):
    def __init__(self, inner: Schema) -> None:
        self.inner = inner

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if value is None:
            return None
        return self.inner._check(value, path, issues)

    def default_value(self) -> Any:
        return self.inner.default_value()

    def unwrap(self) -> Schema:
        return self.inner


class DefaultSchema(Schema):
    def __init__(self, inner: Schema, default: Any) -> None:
        self.inner = inner
        self._default = default

    def _check(self, value: Any, path: Path, issues: list[Issue]) -> Any:
        if value is MISSING:
            value = self.default_value()
        return self.inner._check(value, path, issues)

    def default_value(self) -> Any:
        if callable(self._default):
            return self._default()
        return copy.deepcopy(self._default)

    def remove_default(self) -> Schema:
        return self.inner


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def string() -> StringSchema:
    return StringSchema()


def number() -> NumberSchema:
    return NumberSchema()


def boolean() -> BooleanSchema:
    return BooleanSchema()


def date() -> DateSchema:
    return DateSchema()


def bigint() -> BigIntSchema:
    return BigIntSchema()


def array(element: Schema) -> ArraySchema:
    return ArraySchema(element)


def object_(shape: Mapping[str, Schema]) -> ObjectSchema:
    return ObjectSchema(shape)


def enum(values: Sequence[str]) -> EnumSchema:
    return EnumSchema(values)


def literal(value: Any) -> LiteralSchema:
    return LiteralSchema(value)


def union(options: Sequence[Schema]) -> UnionSchema:
    return UnionSchema(options)


def intersection(left: Schema, right: Schema) -> IntersectionSchema:
    return IntersectionSchema(left, right)


def tuple_(items: Sequence[Schema], rest: Schema | None = None) -> TupleSchema:
    return TupleSchema(items, rest)


def record(key: Schema, value: Schema) -> RecordSchema:
    return RecordSchema(key, value)


def map_(key: Schema, value: Schema) -> MapSchema:
    return MapSchema(key, value)


def set_(value: Schema) -> SetSchema:
    return SetSchema(value)


def function() -> FunctionSchema:
    return FunctionSchema()


def lazy(getter: Callable[[], Schema] | None = None) -> LazySchema:
    return LazySchema(getter)


def promise(inner: Schema) -> PromiseSchema:
    return PromiseSchema(inner)


def unknown() -> UnknownSchema:
    return UnknownSchema()
