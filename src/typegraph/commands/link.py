"""Command group: link CRUD and per-element link listings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from typegraph.commands._base import JSON_OBJECT, GraphGroup

if TYPE_CHECKING:
    from typegraph.commands._context import AppContext

_LINK_EXAMPLES = """\
  typegraph link create SRC_ID DST_ID subTask
  typegraph link create SRC_ID LIST_ID taskToList --data '{"order": 1}'
  typegraph link from SRC_ID --type subTask
  typegraph link to DST_ID
  typegraph link delete LINK_ID"""


@click.group(cls=GraphGroup, examples=_LINK_EXAMPLES)
def link() -> None:
    """Create, read, and delete links between elements."""


@link.command(
    examples="""\
  typegraph link create SRC_ID DST_ID subTask
  typegraph link create SRC_ID LIST_ID taskToList --data '{"order": 1}'"""
)
@click.argument("from_id")
@click.argument("to_id")
@click.argument("link_type_id")
@click.option("--data", type=JSON_OBJECT, default="{}", help="Link data as a JSON object.")
@click.pass_obj
def create(
    app: AppContext, from_id: str, to_id: str, link_type_id: str, data: dict[str, Any]
) -> None:
    """Link FROM_ID to TO_ID with a LINK_TYPE_ID link."""
    app.emit(app.links.create_link(from_id, to_id, link_type_id, data))


@link.command(examples="  typegraph link get LINK_ID")
@click.argument("link_id")
@click.pass_obj
def get(app: AppContext, link_id: str) -> None:
    """Show one link."""
    app.emit(app.links.get_link(link_id))


@link.command(
    examples="""\
  typegraph link update LINK_ID --data '{"order": 2}'"""
)
@click.argument("link_id")
@click.option(
    "--data",
    type=JSON_OBJECT,
    required=True,
    help="Replacement link data as a JSON object.",
)
@click.pass_obj
def update(app: AppContext, link_id: str, data: dict[str, Any]) -> None:
    """Replace a link's data."""
    app.emit(app.links.update_link(link_id, data))


@link.command(examples="  typegraph link delete LINK_ID")
@click.argument("link_id")
@click.pass_obj
def delete(app: AppContext, link_id: str) -> None:
    """Delete one link."""
    app.emit(app.links.delete_link(link_id))


@link.command(
    "from",
    examples="""\
  typegraph link from ELEMENT_ID
  typegraph link from ELEMENT_ID --type subTask""",
)
@click.argument("element_id")
@click.option("--type", "link_type_id", default=None, help="Only links of this type.")
@click.pass_obj
def links_from(app: AppContext, element_id: str, link_type_id: str | None) -> None:
    """List links whose source is ELEMENT_ID."""
    app.emit(app.links.find_links_from(element_id, link_type_id))


@link.command(
    "to",
    examples="""\
  typegraph link to ELEMENT_ID
  typegraph link to ELEMENT_ID --type taskToList""",
)
@click.argument("element_id")
@click.option("--type", "link_type_id", default=None, help="Only links of this type.")
@click.pass_obj
def links_to(app: AppContext, element_id: str, link_type_id: str | None) -> None:
    """List links whose target is ELEMENT_ID."""
    app.emit(app.links.find_links_to(element_id, link_type_id))
