"""Shared pytest fixtures and test helpers for typegraph tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator, Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner, Result

from typegraph.domain import schema as s
from typegraph.infrastructure.repository import GraphDatabase
from typegraph.services.elements import ElementService
from typegraph.services.links import LinkService
from typegraph.services.query import QueryService
from typegraph.services.registry import TypeRegistry
from typegraph.services.sync import SyncService


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo the handler and levels configure_logging() installs."""
    root = logging.getLogger()
    levels = {
        name: logging.getLogger(name).level for name in ("", "typegraph", "sqlalchemy.engine")
    }
    yield
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """SQLite URL for a fresh database file under tmp_path."""
    return f"sqlite:///{tmp_path / 'graph.db'}"


@pytest.fixture
def db(db_url: str) -> Iterator[GraphDatabase]:
    """Initialized database with all graph tables created."""
    database = GraphDatabase.from_url(db_url)
    try:
        yield database
    finally:
        database.close()


@pytest.fixture
def registry(db: GraphDatabase) -> TypeRegistry:
    return TypeRegistry(db)


@pytest.fixture
def elements(db: GraphDatabase, registry: TypeRegistry) -> ElementService:
    return ElementService(db, registry)


@pytest.fixture
def links(db: GraphDatabase, registry: TypeRegistry) -> LinkService:
    return LinkService(db, registry)


@pytest.fixture
def query(elements: ElementService, links: LinkService) -> QueryService:
    return QueryService(elements, links)


@pytest.fixture
def sync_service(db: GraphDatabase) -> SyncService:
    return SyncService(db)


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from tmp_path with no config or env leaking in.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")`` on command test
    classes; the default ``sqlite:///typegraph.db`` then lands in tmp_path.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TYPEGRAPH_CONFIG", raising=False)
    monkeypatch.delenv("TYPEGRAPH_DATABASE__URL", raising=False)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service and command test modules)
# ---------------------------------------------------------------------------


def todo_schema() -> s.ObjectSchema:
    """The todo shape used throughout the tests."""
    return s.object_(
        {
            "title": s.string(),
            "completed": s.boolean().default(False),
            "priority": s.enum(["low", "medium", "high"]).default("medium"),
        }
    )


def note_schema() -> s.ObjectSchema:
    return s.object_({"name": s.string()})


def register_graph_types(registry: TypeRegistry) -> None:
    """Register ``todo``/``note`` element types and a few link types."""
    for type_id, schema in (("todo", todo_schema()), ("note", note_schema())):
        result = registry.create_element_type(type_id, schema)
        assert result.ok, result.error

    link_types = (
        ("relates", "note", "note", s.object_({})),
        (
            "subTask",
            "todo",
            "todo",
            s.object_({"statement": s.string().default("is a sub-task of")}),
        ),
        ("ordered", "todo", "note", s.object_({"order": s.number()})),
    )
    for type_id, from_type, to_type, schema in link_types:
        result = registry.create_link_type(type_id, from_type, to_type, schema)
        assert result.ok, result.error


def create_element(service: ElementService, type_id: str, **data: Any) -> dict[str, Any]:
    """Create an element, asserting success; returns the record dict."""
    result = service.create_element(type_id, data)
    assert result.ok, result.error
    return result.data


def create_link(
    service: LinkService,
    from_id: str,
    to_id: str,
    link_type_id: str = "relates",
    **data: Any,
) -> dict[str, Any]:
    result = service.create_link(from_id, to_id, link_type_id, data)
    assert result.ok, result.error
    return result.data


def invoke_json(cli_runner: CliRunner, db_url: str, *args: str) -> tuple[Result, dict[str, Any]]:
    """Run ``typegraph --json --db URL ARGS...`` and parse the emitted result.

    Failures are emitted on stderr, possibly after log lines, so the
    payload is located by its leading ``"ok"`` key.
    """
    from typegraph.cli import cli

    result = cli_runner.invoke(cli, ["--json", "--db", db_url, *args])
    stream = result.stdout if result.exit_code == 0 else result.stderr
    start = stream.find('{\n  "ok"')
    assert start >= 0, result.output
    return result, json.loads(stream[start:])
