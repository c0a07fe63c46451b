"""Command group: neighbourhood lookups and traversal."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from typegraph.commands._base import GraphGroup

if TYPE_CHECKING:
    from typegraph.commands._context import AppContext

_GRAPH_EXAMPLES = """\
  typegraph graph neighbors ELEMENT_ID
  typegraph graph neighbors ELEMENT_ID --type subTask
  typegraph graph traverse ELEMENT_ID --depth 2
  typegraph --json graph traverse ELEMENT_ID --type objectComponent"""


@click.group(cls=GraphGroup, examples=_GRAPH_EXAMPLES)
def graph() -> None:
    """Walk the element graph."""


@graph.command(
    examples="""\
  typegraph graph neighbors ELEMENT_ID
  typegraph graph neighbors ELEMENT_ID --type subTask"""
)
@click.argument("element_id")
@click.option("--type", "link_type_id", default=None, help="Only follow links of this type.")
@click.pass_obj
def neighbors(app: AppContext, element_id: str, link_type_id: str | None) -> None:
    """Elements one hop from ELEMENT_ID, in either direction."""
    app.emit(app.query.get_connected_elements(element_id, link_type_id))


@graph.command(
    examples="""\
  typegraph graph traverse ELEMENT_ID
  typegraph graph traverse ELEMENT_ID --depth 5 --type subTask"""
)
@click.argument("element_id")
@click.option("--type", "link_type_id", default=None, help="Only follow links of this type.")
@click.option(
    "--depth",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum hops (default: [query] max_depth).",
)
@click.pass_obj
def traverse(
    app: AppContext, element_id: str, link_type_id: str | None, depth: int | None
) -> None:
    """Breadth-first walk from ELEMENT_ID."""
    max_depth = depth if depth is not None else app.settings.query.max_depth
    app.emit(app.query.traverse(element_id, link_type_id, max_depth=max_depth))
