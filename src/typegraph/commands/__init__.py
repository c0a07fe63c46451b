"""Subcommand modules for typegraph.

Provides register_commands() which uses deferred imports to keep
``typegraph --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root group."""
    # --- Groups ---
    from typegraph.commands.element import element
    from typegraph.commands.graph import graph
    from typegraph.commands.link import link
    from typegraph.commands.types import types

    cli.add_command(types)
    cli.add_command(element)
    cli.add_command(link)
    cli.add_command(graph)

    # --- Standalone commands ---
    from typegraph.commands.init_cmd import init_cmd
    from typegraph.commands.sync import sync

    cli.add_command(init_cmd)
    cli.add_command(sync)
