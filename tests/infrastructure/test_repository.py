"""Tests for GraphDatabase, GraphTransaction, and the SQL schema."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy import inspect, select

from typegraph.domain.descriptors import ObjectNode, StringNode
from typegraph.infrastructure.database import element, init_database
from typegraph.infrastructure.repository import GraphDatabase

_NOW = datetime(2025, 1, 1, tzinfo=UTC)


class TestSchema:
    def test_tables_and_indexes_created(self, db: GraphDatabase) -> None:
        insp = inspect(db.engine)
        assert set(insp.get_table_names()) >= {"element", "link", "element_type", "link_type"}
        assert {ix["name"] for ix in insp.get_indexes("element")} == {"element_type_id_idx"}
        assert {ix["name"] for ix in insp.get_indexes("link")} == {
            "link_from_id_idx",
            "link_to_id_idx",
            "link_link_type_id_idx",
        }

    def test_init_is_idempotent(self, db_url: str, db: GraphDatabase) -> None:
        with db.transaction() as txn:
            txn.insert_element("e1", "note", {"name": "x"}, _NOW)
        engine = init_database(db_url)
        try:
            with engine.connect() as conn:
                assert conn.execute(select(element.c.id)).scalars().all() == ["e1"]
        finally:
            engine.dispose()


class TestTypeRows:
    def test_descriptor_round_trips_through_json_column(self, db: GraphDatabase) -> None:
        descriptor = ObjectNode(shape={"name": StringNode(optional=True)})
        with db.transaction() as txn:
            txn.insert_element_type("note", descriptor, ["object"], _NOW)
        with db.transaction() as txn:
            stored = txn.get_element_type("note")
        assert stored is not None
        assert stored.schema == descriptor
        assert stored.parent_types == ["object"]

    def test_missing_type_is_none(self, db: GraphDatabase) -> None:
        with db.transaction() as txn:
            assert txn.get_element_type("nope") is None
            assert txn.get_link_type("nope") is None


class TestTransactions:
    def test_rolls_back_on_error(self, db: GraphDatabase) -> None:
        with pytest.raises(RuntimeError), db.transaction() as txn:
            txn.insert_element("e1", "note", {}, _NOW)
            raise RuntimeError("boom")
        with db.transaction() as txn:
            assert not txn.element_exists("e1")

    def test_delete_links_touching(self, db: GraphDatabase) -> None:
        with db.transaction() as txn:
            for element_id in ("a", "b", "c"):
                txn.insert_element(element_id, "note", {}, _NOW)
            txn.insert_link("l1", "a", "b", "relates", {}, _NOW)
            txn.insert_link("l2", "c", "a", "relates", {}, _NOW)
            txn.insert_link("l3", "b", "c", "relates", {}, _NOW)
        with db.transaction() as txn:
            assert txn.delete_links_touching(["a"]) == 2
            assert txn.get_link("l3") is not None
            assert txn.delete_links_touching([]) == 0

    def test_links_filtered_by_type(self, db: GraphDatabase) -> None:
        with db.transaction() as txn:
            txn.insert_link("l1", "a", "b", "relates", {}, _NOW)
            txn.insert_link("l2", "a", "c", "owns", {}, _NOW)
        with db.transaction() as txn:
            assert [lk.id for lk in txn.links_from("a")] == ["l1", "l2"]
            assert [lk.id for lk in txn.links_from("a", "owns")] == ["l2"]
            assert [lk.id for lk in txn.links_to("b")] == ["l1"]
            assert txn.count_links("relates") == 1
