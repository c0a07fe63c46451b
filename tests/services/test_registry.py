"""Tests for TypeRegistry — element and link type CRUD."""

from __future__ import annotations

from typegraph.domain import schema as s
from typegraph.domain.serializer import serialize
from typegraph.services.elements import ElementService
from typegraph.services.links import LinkService
from typegraph.services.registry import TypeRegistry

from tests.conftest import create_element, create_link, register_graph_types, todo_schema


class TestElementTypes:
    def test_create_stores_serialized_descriptor(self, registry: TypeRegistry) -> None:
        result = registry.create_element_type("todo", todo_schema(), ["task"])
        assert result.ok
        assert result.op == "create_element_type"
        assert result.data["schema"] == serialize(todo_schema()).to_json()
        assert result.data["parent_types"] == ["task"]
        assert result.data["created_at"] is not None

    def test_create_accepts_descriptor_json(self, registry: TypeRegistry) -> None:
        stored = {"type": "object", "shape": {"name": {"type": "string"}}}
        assert registry.create_element_type("note", stored).ok
        found = registry.element_type("note")
        assert found is not None
        assert found.schema.to_json() == stored

    def test_duplicate_id_is_write_failed(self, registry: TypeRegistry) -> None:
        assert registry.create_element_type("todo", todo_schema()).ok
        result = registry.create_element_type("todo", todo_schema())
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "WRITE_FAILED"

    def test_get_unknown_is_type_not_found(self, registry: TypeRegistry) -> None:
        result = registry.get_element_type("ghost")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "TYPE_NOT_FOUND"
        assert result.error.detail == {"type_id": "ghost"}

    def test_update_replaces_schema(self, registry: TypeRegistry) -> None:
        registry.create_element_type("note", s.object_({"name": s.string()}))
        result = registry.update_element_type(
            "note", schema=s.object_({"name": s.string(), "body": s.string().optional()})
        )
        assert result.ok
        assert set(result.data["schema"]["shape"]) == {"name", "body"}
        assert result.data["parent_types"] == []

    def test_update_unknown_is_type_not_found(self, registry: TypeRegistry) -> None:
        result = registry.update_element_type("ghost", parent_types=["x"])
        assert result.error is not None
        assert result.error.code == "TYPE_NOT_FOUND"

    def test_delete_and_list(self, registry: TypeRegistry) -> None:
        registry.create_element_type("b", s.object_({}))
        registry.create_element_type("a", s.object_({}))
        listed = registry.list_element_types()
        assert [t["id"] for t in listed.data["items"]] == ["a", "b"]

        assert registry.delete_element_type("a").ok
        again = registry.delete_element_type("a")
        assert again.error is not None
        assert again.error.code == "TYPE_NOT_FOUND"
        assert registry.list_element_types().data["count"] == 1


class TestLinkTypes:
    def test_create_and_get(self, registry: TypeRegistry) -> None:
        created = registry.create_link_type(
            "subTask", "todo", "todo", s.object_({"statement": s.string().default("x")})
        )
        assert created.ok
        fetched = registry.get_link_type("subTask")
        assert fetched.ok
        assert fetched.data["from_type"] == "todo"
        assert fetched.data["to_type"] == "todo"
        assert fetched.data["schema"]["shape"]["statement"] == {
            "type": "string",
            "default": "x",
        }

    def test_update_endpoints(self, registry: TypeRegistry) -> None:
        registry.create_link_type("owns", "actor", "object", s.object_({}))
        result = registry.update_link_type("owns", to_type="goal")
        assert result.ok
        assert result.data["from_type"] == "actor"
        assert result.data["to_type"] == "goal"

    def test_unknown_link_type(self, registry: TypeRegistry) -> None:
        for result in (
            registry.get_link_type("ghost"),
            registry.update_link_type("ghost", from_type="x"),
            registry.delete_link_type("ghost"),
        ):
            assert result.error is not None
            assert result.error.code == "TYPE_NOT_FOUND"

    def test_list_link_types(self, registry: TypeRegistry) -> None:
        registry.create_link_type("owns", "actor", "object", s.object_({}))
        assert registry.list_link_types().data["count"] == 1


class TestCounts:
    def test_counts_instances(
        self, registry: TypeRegistry, elements: ElementService, links: LinkService
    ) -> None:
        register_graph_types(registry)
        a = create_element(elements, "note", name="a")["id"]
        b = create_element(elements, "note", name="b")["id"]
        create_link(links, a, b)
        assert registry.count_elements("note") == 2
        assert registry.count_elements("todo") == 0
        assert registry.count_links("relates") == 1


class TestMalformedDescriptors:
    def test_create_element_type(self, registry: TypeRegistry) -> None:
        result = registry.create_element_type("bad", {"type": "array"})

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.detail["type_id"] == "bad"
        assert any("element" in err for err in result.error.detail["errors"])
        assert registry.element_type("bad") is None

    def test_update_element_type_keeps_stored_schema(self, registry: TypeRegistry) -> None:
        registry.create_element_type("note", s.object_({"name": s.string()}))

        result = registry.update_element_type("note", schema={"type": "enum"})

        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        found = registry.element_type("note")
        assert found is not None
        assert set(found.schema.to_json()["shape"]) == {"name"}

    def test_create_link_type(self, registry: TypeRegistry) -> None:
        result = registry.create_link_type(
            "bad", "note", "note", {"type": "object", "shape": {"x": {"type": "union"}}}
        )

        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        assert registry.link_type("bad") is None

    def test_update_link_type(self, registry: TypeRegistry) -> None:
        registry.create_link_type("relates", "note", "note", s.object_({}))

        result = registry.update_link_type("relates", to_type="todo", schema={"type": "array"})

        assert result.error is not None
        assert result.error.code == "VALIDATION_FAILED"
        found = registry.link_type("relates")
        assert found is not None
        assert found.to_type == "note"
