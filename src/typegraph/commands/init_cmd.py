"""Command: database initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from typegraph.commands._base import GraphCommand
from typegraph.services.result import ServiceResult

if TYPE_CHECKING:
    from typegraph.commands._context import AppContext

_INIT_EXAMPLES = """\
  typegraph init
  typegraph --db sqlite:///graph.db init
  typegraph --json init"""


@click.command("init", cls=GraphCommand, examples=_INIT_EXAMPLES)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create the graph tables if they do not exist."""
    db = app.db  # opening the database creates the tables
    app.emit(
        ServiceResult(
            ok=True,
            op="init",
            data={"url": db.engine.url.render_as_string(hide_password=True)},
        )
    )
