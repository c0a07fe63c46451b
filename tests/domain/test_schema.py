"""Tests for the type-description combinators as live validators."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from typegraph.domain import schema as s
from typegraph.domain.schema import MISSING, SchemaError


def _messages(schema: s.Schema, value: object) -> list[str]:
    outcome = schema.safe_parse(value)
    assert not outcome.success
    return [str(issue) for issue in outcome.issues]


class TestPrimitives:
    def test_string(self) -> None:
        assert s.string().parse("x") == "x"
        assert _messages(s.string(), 1) == ["Expected string, received number"]

    def test_number_rejects_booleans_and_nan(self) -> None:
        assert s.number().parse(2.5) == 2.5
        assert _messages(s.number(), True) == ["Expected number, received boolean"]
        assert _messages(s.number(), float("nan")) == ["Expected number, received nan"]

    def test_boolean(self) -> None:
        assert s.boolean().parse(False) is False
        assert _messages(s.boolean(), "yes") == ["Expected boolean, received string"]

    def test_date_accepts_iso_strings_and_dates(self) -> None:
        assert s.date().parse("2025-01-02T03:04:05") == datetime(2025, 1, 2, 3, 4, 5)
        assert s.date().parse(date(2025, 1, 2)) == datetime(2025, 1, 2)
        assert _messages(s.date(), "not a date") == ["Invalid date"]

    def test_bigint_accepts_digit_strings(self) -> None:
        assert s.bigint().parse("12345678901234567890") == 12345678901234567890
        assert _messages(s.bigint(), "1.5") == ["Expected bigint, received string"]


class TestObject:
    def test_strips_unknown_keys(self) -> None:
        schema = s.object_({"a": s.string()})
        assert schema.parse({"a": "x", "extra": 1}) == {"a": "x"}

    def test_reports_each_offending_path(self) -> None:
        schema = s.object_({"a": s.string(), "b": s.object_({"c": s.number()})})
        assert _messages(schema, {"b": {"c": "no"}}) == [
            "a: Required",
            "b.c: Expected number, received string",
        ]

    def test_parse_raises_schema_error(self) -> None:
        with pytest.raises(SchemaError, match="a: Required"):
            s.object_({"a": s.string()}).parse({})

    def test_failed_parse_returns_original_value(self) -> None:
        value = {"a": 1}
        assert s.object_({"a": s.string()}).safe_parse(value).data is value


class TestWrappers:
    def test_default_fills_absent_key(self) -> None:
        schema = s.object_({"done": s.boolean().default(False)})
        assert schema.parse({}) == {"done": False}

    def test_callable_default_is_invoked_per_parse(self) -> None:
        calls: list[int] = []

        def factory() -> list[int]:
            calls.append(1)
            return []

        schema = s.object_({"tags": s.array(s.string()).default(factory)})
        first = schema.parse({})
        second = schema.parse({})
        assert first == second == []
        assert first is not second
        assert len(calls) == 2

    def test_optional_omits_absent_key(self) -> None:
        schema = s.object_({"note": s.string().optional()})
        assert schema.parse({}) == {}

    def test_optional_still_applies_inner_default(self) -> None:
        schema = s.object_({"n": s.number().default(1).optional()})
        assert schema.parse({}) == {"n": 1}

    def test_nullable_accepts_none_but_not_absence(self) -> None:
        schema = s.object_({"n": s.number().nullable()})
        assert schema.parse({"n": None}) == {"n": None}
        assert _messages(schema, {}) == ["n: Required"]

    def test_default_value_of_plain_schema_is_missing(self) -> None:
        assert s.string().default_value() is MISSING

    def test_null_default_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="nullable"):
            s.string().nullable().default(None)

    def test_nullable_optional_covers_absent_values(self) -> None:
        schema = s.object_({"note": s.string().nullable().optional()})
        assert schema.parse({}) == {}
        assert schema.parse({"note": None}) == {"note": None}


class TestComposites:
    def test_enum(self) -> None:
        schema = s.enum(["low", "high"])
        assert schema.parse("low") == "low"
        assert _messages(schema, "mid") == [
            "Invalid enum value. Expected 'low' | 'high', received 'mid'"
        ]

    def test_literal_distinguishes_bool_from_int(self) -> None:
        assert s.literal(1).parse(1) == 1
        assert not s.literal(1).safe_parse(True).success

    def test_union_first_match_wins(self) -> None:
        schema = s.union([s.number(), s.string()])
        assert schema.parse("x") == "x"
        assert _messages(schema, None) == ["Invalid input"]

    def test_intersection_merges_objects(self) -> None:
        schema = s.intersection(s.object_({"a": s.string()}), s.object_({"b": s.number()}))
        assert schema.parse({"a": "x", "b": 1}) == {"a": "x", "b": 1}

    def test_tuple_with_rest(self) -> None:
        schema = s.tuple_([s.string()], rest=s.number())
        assert schema.parse(["x", 1, 2]) == ["x", 1, 2]
        assert _messages(s.tuple_([s.string()]), ["x", 1]) == [
            "Array must contain at most 1 element(s)"
        ]

    def test_record(self) -> None:
        schema = s.record(s.string(), s.number())
        assert schema.parse({"a": 1}) == {"a": 1}
        assert _messages(schema, {"a": "x"}) == ["a: Expected number, received string"]

    def test_map_accepts_pairs(self) -> None:
        assert s.map_(s.string(), s.number()).parse([["a", 1]]) == {"a": 1}

    def test_set_rejects_duplicates(self) -> None:
        assert s.set_(s.number()).parse({1, 2}) in ([1, 2], [2, 1])
        assert _messages(s.set_(s.number()), [1, 1]) == ["1: Set items must be unique"]


class TestPermissive:
    def test_unknown_and_function_accept_anything(self) -> None:
        assert s.unknown().parse(object) is object
        assert s.function().parse(1) == 1

    def test_lazy_resolves_getter(self) -> None:
        assert not s.lazy(lambda: s.string()).safe_parse(1).success
        assert s.lazy().parse(1) == 1

    def test_promise_checks_resolved_values(self) -> None:
        assert s.promise(s.number()).parse(1) == 1
        assert not s.promise(s.number()).safe_parse("x").success

    def test_promise_passes_awaitables_through(self) -> None:
        async def pending() -> int:
            return 1

        coro = pending()
        try:
            assert s.promise(s.number()).parse(coro) is coro
        finally:
            coro.close()
