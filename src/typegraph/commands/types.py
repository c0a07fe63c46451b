"""Command group: inspect registered element and link types."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from typegraph.commands._base import GraphGroup
from typegraph.services.result import ServiceResult

if TYPE_CHECKING:
    from typegraph.commands._context import AppContext

_TYPES_EXAMPLES = """\
  typegraph types list
  typegraph types list --kind link
  typegraph types show todo
  typegraph --json types show subTask"""


@click.group(cls=GraphGroup, examples=_TYPES_EXAMPLES)
def types() -> None:
    """Inspect the type registry."""


@types.command(
    "list",
    examples="""\
  typegraph types list
  typegraph types list --kind element""",
)
@click.option(
    "--kind",
    type=click.Choice(["all", "element", "link"]),
    default="all",
    help="Which registry to list.",
)
@click.pass_obj
def list_types(app: AppContext, kind: str) -> None:
    """List registered types."""
    data: dict[str, object] = {}
    if kind in ("all", "element"):
        data["element_types"] = app.registry.list_element_types().data["items"]
    if kind in ("all", "link"):
        data["link_types"] = app.registry.list_link_types().data["items"]
    app.emit(ServiceResult(ok=True, op="list_types", data=data))


@types.command(
    examples="""\
  typegraph types show todo
  typegraph types show taskToList --kind link""",
)
@click.argument("type_id")
@click.option(
    "--kind",
    type=click.Choice(["element", "link"]),
    default=None,
    help="Restrict the lookup; by default element types are tried first.",
)
@click.pass_obj
def show(app: AppContext, type_id: str, kind: str | None) -> None:
    """Show one type with its stored schema descriptor."""
    if kind == "link":
        app.emit(app.registry.get_link_type(type_id))
        return
    result = app.registry.get_element_type(type_id)
    if not result.ok and kind is None:
        linked = app.registry.get_link_type(type_id)
        if linked.ok:
            result = linked
    app.emit(result)
