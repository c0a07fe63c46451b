"""Tests for the Value model helpers."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from typegraph.domain.values import clone, is_value, to_value, type_name


class TestIsValue:
    @pytest.mark.parametrize(
        "obj",
        ["x", 1, 1.5, True, None, [1, "a"], {"a": {"b": [None]}}],
    )
    def test_accepts_json_shapes(self, obj: object) -> None:
        assert is_value(obj)

    @pytest.mark.parametrize("obj", [(1, 2), {1: "a"}, {"a": {1, 2}}, datetime(2025, 1, 1)])
    def test_rejects_non_json_shapes(self, obj: object) -> None:
        assert not is_value(obj)


class TestToValue:
    def test_converts_dates_to_iso_strings(self) -> None:
        assert to_value(datetime(2025, 3, 4, 5, 6, 7)) == "2025-03-04T05:06:07"
        assert to_value(date(2025, 3, 4)) == "2025-03-04"

    def test_converts_containers(self) -> None:
        assert to_value({"t": (1, 2), "d": Decimal("1.5")}) == {"t": [1, 2], "d": 1.5}

    def test_rejects_arbitrary_objects(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert"):
            to_value({"x": object()})


class TestClone:
    def test_clone_is_deep(self) -> None:
        original = {"a": [1, {"b": 2}]}
        copied = clone(original)
        copied["a"][1]["b"] = 3
        assert original == {"a": [1, {"b": 2}]}


class TestTypeName:
    @pytest.mark.parametrize(
        ("obj", "expected"),
        [
            (None, "null"),
            (True, "boolean"),
            (3, "number"),
            ("s", "string"),
            ([1], "array"),
            ({}, "object"),
            ({1}, "set"),
            (datetime(2025, 1, 1), "date"),
            (len, "function"),
        ],
    )
    def test_names(self, obj: object, expected: str) -> None:
        assert type_name(obj) == expected
