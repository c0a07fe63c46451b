"""Rich console for human-readable output.

Consoles render into a StringIO buffer so that formatting stays a
``ServiceResult -> str`` function. Outside a terminal (pipes, CliRunner)
rich emits no colour codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GRAPH_THEME = Theme(
    {
        "graph.id": "bold blue",
        "graph.type": "cyan",
        "graph.header": "bold",
    }
)

# Columns whose cells get a style, by item key.
COLUMN_STYLES: dict[str, str] = {
    "id": "graph.id",
    "type_id": "graph.type",
    "link_type_id": "graph.type",
}


def create_console(*, width: int = 120) -> Console:
    return Console(file=StringIO(), theme=GRAPH_THEME, highlight=False, width=width)


def get_output(console: Console) -> str:
    """Text written to a console made by :func:`create_console`."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
