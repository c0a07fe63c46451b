"""End-to-end CLI flows: elements, links, types, and traversal."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from typegraph.cli import cli

from tests.conftest import invoke_json


@pytest.fixture
def synced(cli_runner: CliRunner, db_url: str) -> str:
    """Database URL with the default types synced in."""
    result, _ = invoke_json(cli_runner, db_url, "sync")
    assert result.exit_code == 0
    return db_url


def _create(cli_runner: CliRunner, db_url: str, type_id: str, data: dict) -> str:
    result, payload = invoke_json(
        cli_runner, db_url, "element", "create", type_id, "--data", json.dumps(data)
    )
    assert result.exit_code == 0, result.output
    return payload["data"]["id"]


def _link(cli_runner: CliRunner, db_url: str, src: str, dst: str, link_type: str) -> str:
    result, payload = invoke_json(cli_runner, db_url, "link", "create", src, dst, link_type)
    assert result.exit_code == 0, result.output
    return payload["data"]["id"]


@pytest.mark.usefixtures("_isolated_cwd")
class TestElementCommands:
    def test_create_get_update_delete(self, cli_runner: CliRunner, synced: str) -> None:
        todo_id = _create(cli_runner, synced, "todo", {"title": "Write report"})

        _, fetched = invoke_json(cli_runner, synced, "element", "get", todo_id)
        assert fetched["data"]["data"]["priority"] == "medium"
        assert fetched["data"]["data"]["completed"] is False

        _, updated = invoke_json(
            cli_runner, synced, "element", "update", todo_id, "--data", '{"completed": true}'
        )
        assert updated["data"]["data"]["completed"] is True
        assert updated["data"]["data"]["title"] == "Write report"

        _, deleted = invoke_json(cli_runner, synced, "element", "delete", todo_id)
        assert deleted["data"] == {"id": todo_id, "deleted": True, "links_removed": 0}

        result, missing = invoke_json(cli_runner, synced, "element", "get", todo_id)
        assert result.exit_code == 1
        assert missing["error"]["code"] == "NOT_FOUND"

    def test_validation_failure_human_output(self, cli_runner: CliRunner, synced: str) -> None:
        result = cli_runner.invoke(
            cli, ["--db", synced, "element", "create", "todo", "--data", '{"priority": "x"}']
        )
        assert result.exit_code == 1
        assert result.stdout == ""
        assert "ERROR: create_element: [VALIDATION_FAILED]" in result.stderr
        assert "  - title: Required" in result.stderr

    def test_bad_json_is_usage_error(self, cli_runner: CliRunner, synced: str) -> None:
        result = cli_runner.invoke(
            cli, ["--db", synced, "element", "create", "todo", "--data", "[1, 2]"]
        )
        assert result.exit_code == 2
        assert "expected a JSON object" in result.output

    def test_unknown_type(self, cli_runner: CliRunner, synced: str) -> None:
        result, payload = invoke_json(cli_runner, synced, "element", "create", "ghost")
        assert result.exit_code == 1
        assert payload["error"]["code"] == "TYPE_NOT_FOUND"

    def test_list_paginates(self, cli_runner: CliRunner, synced: str) -> None:
        for name in ("a", "b", "c"):
            _create(cli_runner, synced, "actor", {"name": name, "description": ""})

        _, page = invoke_json(
            cli_runner, synced, "element", "list", "actor", "--limit", "2", "--offset", "2"
        )

        assert page["data"]["total"] == 3
        assert len(page["data"]["items"]) == 1
        assert page["meta"] == {"limit": 2, "offset": 2}


@pytest.mark.usefixtures("_isolated_cwd")
class TestLinkAndGraphCommands:
    def test_link_lifecycle(self, cli_runner: CliRunner, synced: str) -> None:
        parent = _create(cli_runner, synced, "todo", {"title": "parent"})
        child = _create(cli_runner, synced, "todo", {"title": "child"})
        link_id = _link(cli_runner, synced, child, parent, "subTask")

        _, outgoing = invoke_json(cli_runner, synced, "link", "from", child, "--type", "subTask")
        assert [item["id"] for item in outgoing["data"]["items"]] == [link_id]
        assert outgoing["data"]["items"][0]["data"] == {"statement": "is a sub-task of"}

        _, incoming = invoke_json(cli_runner, synced, "link", "to", parent)
        assert incoming["data"]["count"] == 1

        _, deleted = invoke_json(cli_runner, synced, "element", "delete", parent)
        assert deleted["data"]["links_removed"] == 1

    def test_missing_endpoint(self, cli_runner: CliRunner, synced: str) -> None:
        todo_id = _create(cli_runner, synced, "todo", {"title": "t"})
        result, payload = invoke_json(
            cli_runner, synced, "link", "create", todo_id, "ghost", "subTask"
        )
        assert result.exit_code == 1
        assert payload["error"]["code"] == "REFERENTIAL_INTEGRITY"
        assert payload["error"]["detail"] == {"side": "to", "id": "ghost"}

    def test_link_update_replaces(self, cli_runner: CliRunner, synced: str) -> None:
        todo_id = _create(cli_runner, synced, "todo", {"title": "t"})
        list_id = _create(cli_runner, synced, "taskList", {"name": "L", "description": ""})
        result, created = invoke_json(
            cli_runner,
            synced,
            "link",
            "create",
            todo_id,
            list_id,
            "taskToList",
            "--data",
            '{"order": 1}',
        )
        assert result.exit_code == 0, result.output

        _, updated = invoke_json(
            cli_runner, synced, "link", "update", created["data"]["id"], "--data", '{"order": 2}'
        )
        assert updated["data"]["data"] == {"order": 2}

    def test_neighbors_and_traverse(self, cli_runner: CliRunner, synced: str) -> None:
        a = _create(cli_runner, synced, "todo", {"title": "a"})
        b = _create(cli_runner, synced, "todo", {"title": "b"})
        c = _create(cli_runner, synced, "todo", {"title": "c"})
        _link(cli_runner, synced, b, a, "subTask")
        _link(cli_runner, synced, c, b, "subTask")

        _, around = invoke_json(cli_runner, synced, "graph", "neighbors", b)
        directions = {
            item["element"]["id"]: item["direction"] for item in around["data"]["items"]
        }
        assert directions == {a: "to", c: "from"}

        _, walk = invoke_json(cli_runner, synced, "graph", "traverse", a, "--depth", "1")
        assert [item["element"]["id"] for item in walk["data"]["items"]] == [a, b]

        _, full = invoke_json(cli_runner, synced, "graph", "traverse", a)
        assert full["data"]["max_depth"] == 3
        assert [item["depth"] for item in full["data"]["items"]] == [0, 1, 2]

    def test_types_show_falls_back_to_link_types(
        self, cli_runner: CliRunner, synced: str
    ) -> None:
        _, shown = invoke_json(cli_runner, synced, "types", "show", "subTask")
        assert shown["op"] == "get_link_type"
        assert shown["data"]["from_type"] == "task"

        result, missing = invoke_json(
            cli_runner, synced, "types", "show", "todo", "--kind", "link"
        )
        assert result.exit_code == 1
        assert missing["error"]["code"] == "TYPE_NOT_FOUND"
