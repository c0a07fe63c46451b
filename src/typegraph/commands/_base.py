"""Click base classes (--examples support) and shared parameter types.

``GraphCommand`` and ``GraphGroup`` accept an ``examples`` string;
passing ``--examples`` prints it and exits, keeping ``--help`` short.
"""

from __future__ import annotations

import json
from typing import Any

import click


class _ExamplesMixin:
    """Adds the eager ``--examples`` option when examples are supplied."""

    params: list[click.Parameter]

    def _install_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return

        def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
            if value:
                click.echo(f"Examples for '{ctx.command_path}':\n\n{examples}")
                ctx.exit(0)

        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=show,
                help="Show usage examples.",
            )
        )


class GraphCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._install_examples(examples)


class GraphGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands default to :class:`GraphCommand`."""

    command_class = GraphCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._install_examples(examples)


class JsonObject(click.ParamType):
    """A JSON object given on the command line, e.g. ``'{"title": "x"}'``."""

    name = "json"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> dict[str, Any]:
        if isinstance(value, dict):
            return value
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            self.fail(f"invalid JSON: {exc.msg}", param, ctx)
        if not isinstance(parsed, dict):
            self.fail("expected a JSON object", param, ctx)
        return parsed


JSON_OBJECT = JsonObject()
