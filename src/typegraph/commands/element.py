"""Command group: element CRUD."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from typegraph.commands._base import JSON_OBJECT, GraphGroup

if TYPE_CHECKING:
    from typegraph.commands._context import AppContext

_ELEMENT_EXAMPLES = """\
  typegraph element create todo --data '{"title": "Write report"}'
  typegraph element get 6f1c...
  typegraph element update 6f1c... --data '{"completed": true}'
  typegraph element list todo --limit 20 --offset 40
  typegraph element delete 6f1c..."""


@click.group(cls=GraphGroup, examples=_ELEMENT_EXAMPLES)
def element() -> None:
    """Create, read, update, and delete elements."""


@element.command(
    examples="""\
  typegraph element create todo --data '{"title": "Write report"}'
  typegraph --json element create goal --data '{"title": "Ship", "description": "", "state": []}'"""
)
@click.argument("type_id")
@click.option("--data", type=JSON_OBJECT, default="{}", help="Element data as a JSON object.")
@click.pass_obj
def create(app: AppContext, type_id: str, data: dict[str, Any]) -> None:
    """Create an element of TYPE_ID."""
    app.emit(app.elements.create_element(type_id, data))


@element.command(examples="  typegraph element get 6f1c...")
@click.argument("element_id")
@click.pass_obj
def get(app: AppContext, element_id: str) -> None:
    """Show one element."""
    app.emit(app.elements.get_element(element_id))


@element.command(
    examples="""\
  typegraph element update 6f1c... --data '{"completed": true}'"""
)
@click.argument("element_id")
@click.option(
    "--data",
    type=JSON_OBJECT,
    required=True,
    help="Top-level fields to merge into the element, as a JSON object.",
)
@click.pass_obj
def update(app: AppContext, element_id: str, data: dict[str, Any]) -> None:
    """Merge fields into an element and re-validate it."""
    app.emit(app.elements.update_element(element_id, data))


@element.command(examples="  typegraph element delete 6f1c...")
@click.argument("element_id")
@click.pass_obj
def delete(app: AppContext, element_id: str) -> None:
    """Delete an element and every link touching it."""
    app.emit(app.elements.delete_element(element_id))


@element.command(
    "list",
    examples="""\
  typegraph element list todo
  typegraph element list todo --limit 5 --offset 10""",
)
@click.argument("type_id")
@click.option("--limit", type=int, default=None, help="Page size (default: [query] page_size).")
@click.option("--offset", type=int, default=0, help="Elements to skip.")
@click.pass_obj
def list_elements(app: AppContext, type_id: str, limit: int | None, offset: int) -> None:
    """List elements of TYPE_ID, one page at a time."""
    page_size = limit if limit is not None else app.settings.query.page_size
    app.emit(app.query.find_by_type_paginated(type_id, limit=page_size, offset=offset))
