"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Opens the database lazily and centralizes result
emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING

import click

from typegraph.config.logging import configure_logging
from typegraph.output.formatters import format_result

if TYPE_CHECKING:
    from typegraph.config.settings import GraphSettings
    from typegraph.infrastructure.repository import GraphDatabase
    from typegraph.services.elements import ElementService
    from typegraph.services.links import LinkService
    from typegraph.services.query import QueryService
    from typegraph.services.registry import TypeRegistry
    from typegraph.services.result import ServiceResult
    from typegraph.services.sync import SyncService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Services are built on first access so ``--help`` and ``--version``
    never touch the database.
    """

    def __init__(self, settings: GraphSettings) -> None:
        self.settings = settings
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @cached_property
    def db(self) -> GraphDatabase:
        from typegraph.infrastructure.repository import GraphDatabase

        return GraphDatabase.from_url(
            self.settings.database.url, echo=self.settings.database.echo
        )

    @cached_property
    def registry(self) -> TypeRegistry:
        from typegraph.services.registry import TypeRegistry

        return TypeRegistry(self.db)

    @cached_property
    def elements(self) -> ElementService:
        from typegraph.services.elements import ElementService

        return ElementService(self.db, self.registry)

    @cached_property
    def links(self) -> LinkService:
        from typegraph.services.links import LinkService

        return LinkService(self.db, self.registry)

    @cached_property
    def query(self) -> QueryService:
        from typegraph.services.query import QueryService

        return QueryService(self.elements, self.links)

    @cached_property
    def sync(self) -> SyncService:
        from typegraph.services.sync import SyncService

        return SyncService(self.db)

    def close(self) -> None:
        """Dispose the engine if a command opened one."""
        if "db" in self.__dict__:
            self.db.close()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout, returns normally. Warnings go to stderr so
          they stay out of piped output.
        * Failure: stderr, exit code 1.
        """
        json_output = self.settings.json_output
        output = format_result(result, json_output=json_output)
        if result.ok:
            click.echo(output)
            if not json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
