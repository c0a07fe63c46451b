"""Command: reconcile code-declared types with the stored registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from typegraph.commands._base import GraphCommand
from typegraph.services.sync import load_definitions

if TYPE_CHECKING:
    from typegraph.commands._context import AppContext

_SYNC_EXAMPLES = """\
  typegraph sync
  typegraph sync --prune
  typegraph sync --definitions myapp.graph_types
  typegraph --json sync --definitions ./types.py"""


@click.command("sync", cls=GraphCommand, examples=_SYNC_EXAMPLES)
@click.option(
    "--definitions",
    default=None,
    help="Module path or .py file exposing ELEMENT_TYPES and LINK_TYPES.",
)
@click.option(
    "--prune",
    is_flag=True,
    help="Delete stored types (and their elements/links) missing from the definitions.",
)
@click.pass_obj
def sync(app: AppContext, definitions: str | None, prune: bool) -> None:
    """Add, update, or report element and link types from code.

    Exits non-zero if any type change was unsafe or failed.
    """
    ref = definitions or app.settings.sync.definitions
    try:
        element_types, link_types = load_definitions(ref)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    prune = prune or app.settings.sync.prune
    app.emit(app.sync.sync(element_types, link_types, prune=prune))
