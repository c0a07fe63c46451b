"""Human and JSON output for ServiceResult.

The CLI renders a ServiceResult either for humans (key/value lines, with
``items`` lists drawn as a rich table) or for machines (--json, the full
pydantic dump).
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table

from typegraph.output.console import COLUMN_STYLES, create_console, get_output

if TYPE_CHECKING:
    from typegraph.services.result import ServiceResult


def _compact(value: Any) -> str:
    return _json.dumps(value, separators=(",", ":"), default=str)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return _compact(value)
    return str(value)


def _items_table(items: list[dict[str, Any]]) -> list[str]:
    columns: list[str] = []
    for item in items:
        columns.extend(key for key in item if key not in columns)

    table = Table(show_header=True, header_style="graph.header", pad_edge=False, expand=False)
    for key in columns:
        table.add_column(key, style=COLUMN_STYLES.get(key, ""), no_wrap=key == "id")
    for item in items:
        table.add_row(*(_cell(item.get(key)) for key in columns))

    console = create_console()
    console.print(table)
    return [f"    {line}".rstrip() for line in get_output(console).splitlines()]


def _format_items(items: list[Any]) -> list[str]:
    """Dict items become a table, one row each; anything else one line each."""
    if items and all(isinstance(item, dict) for item in items):
        return _items_table(items)
    return [f"    - {_compact(item)}" for item in items]


def _format_data_human(data: dict[str, Any]) -> str:
    """Format result data as indented key-value pairs.

    ``items`` lists are rendered below their key.
    """
    lines: list[str] = []
    for key, value in data.items():
        if key == "items" and isinstance(value, list):
            lines.append(f"  {key}:")
            lines.extend(_format_items(value))
        elif isinstance(value, (dict, list)):
            lines.append(f"  {key}: {_compact(value)}")
        else:
            lines.append(f"  {key}: {value}")
    return "\n".join(lines)


def format_result(result: ServiceResult, *, json_output: bool = False) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        json_output: If True, return JSON; otherwise return human-readable text.
    """
    if json_output:
        return result.model_dump_json(indent=2)
    if result.ok:
        parts = [f"OK: {result.op}"]
        if result.data:
            parts.append(_format_data_human(result.data))
        return "\n".join(parts)

    if result.error is None:
        return f"ERROR: {result.op}: Unknown error"
    parts = [f"ERROR: {result.op}: [{result.error.code}] {result.error.message}"]
    for error in result.error.detail.get("errors", []):
        parts.append(f"  - {error}")
    return "\n".join(parts)
