"""Value model — the universal in-memory form for stored payloads.

A Value is one of: str, int, float, bool, None, list[Value], or
dict[str, Value]. Stored element/link data is always a Value; typed
structures produced by schema parsing (datetimes, sets, tuples) are
converted back with :func:`to_value` before they reach the database.
"""

from __future__ import annotations

import copy
from datetime import date, datetime
from decimal import Decimal
from typing import Any

type Value = str | int | float | bool | None | list[Value] | dict[str, Value]


def is_value(obj: Any) -> bool:
    """Whether *obj* is a Value (recursively)."""
    if obj is None or isinstance(obj, (str, bool, int, float)):
        return True
    if isinstance(obj, list):
        return all(is_value(item) for item in obj)
    if isinstance(obj, dict):
        return all(isinstance(k, str) and is_value(v) for k, v in obj.items())
    return False


def to_value(obj: Any) -> Value:
    """Convert a parsed Python structure into a Value.

    Raises:
        TypeError: If *obj* contains something with no Value form.

    Examples:
        >>> to_value((1, 2))
        [1, 2]
        >>> to_value({"at": datetime(2025, 1, 1)})
        {'at': '2025-01-01T00:00:00'}
    """
    if obj is None or isinstance(obj, (str, bool, int, float)):
        return obj
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, dict):
        return {str(k): to_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_value(item) for item in obj]
    msg = f"Cannot convert {type(obj).__name__} to a stored value"
    raise TypeError(msg)


def clone(value: Value) -> Value:
    """Deep copy a Value so callers never share mutable payloads."""
    return copy.deepcopy(value)


def type_name(obj: Any) -> str:
    """Name the Value kind of *obj* for error messages."""
    if obj is None:
        return "null"
    if isinstance(obj, bool):
        return "boolean"
    if isinstance(obj, (int, float, Decimal)):
        return "number"
    if isinstance(obj, str):
        return "string"
    if isinstance(obj, (list, tuple)):
        return "array"
    if isinstance(obj, dict):
        return "object"
    if isinstance(obj, (set, frozenset)):
        return "set"
    if isinstance(obj, (datetime, date)):
        return "date"
    if callable(obj):
        return "function"
    return type(obj).__name__
