"""Tests for linksindex.models module."""

from __future__ import annotations

import sqlite3

import pytest

from linksindex.models import IndexEntry, Link, LinkedGraph, Node, RowError, RowSet


class TestNodeFromRow:
    """Tests for Node.from_row."""

    def test_basic(self) -> None:
        """Test a node gets its id and empty derived collections."""
        node = Node.from_row({"id": "a"})
        assert node.id == "a"
        assert node.links_by_source == []
        assert node.links_by_target == []
        assert node.links_by_node == []
        assert node.indexes_by_index == []
        assert node.indexes_by_list == []

    def test_integer_id_becomes_string(self) -> None:
        """Test numeric ids are normalized to strings."""
        assert Node.from_row({"id": 7}).id == "7"

    def test_missing_id(self) -> None:
        """Test a record without id is rejected."""
        with pytest.raises(RowError, match="missing required column 'id'"):
            Node.from_row({})

    def test_row_error_is_value_error(self) -> None:
        """Test RowError can be caught as ValueError."""
        assert issubclass(RowError, ValueError)

    def test_non_mapping_record(self) -> None:
        """Test a record that is not a mapping is rejected."""
        with pytest.raises(RowError, match="expected a mapping"):
            Node.from_row(["a"])

    def test_sqlite_row(self) -> None:
        """Test sqlite3.Row records are accepted."""
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        row = conn.execute("SELECT 'a' AS id").fetchone()
        conn.close()
        assert Node.from_row(row).id == "a"


class TestLinkFromRow:
    """Tests for Link.from_row."""

    def test_all_columns(self) -> None:
        """Test every stored column is read."""
        link = Link.from_row(
            {"id": 3, "source_id": "a", "target_id": "b", "type_id": 1, "node_id": "x"}
        )
        assert link == Link(3, "a", "b", 1, "x")
        assert link.source is None
        assert link.indexes == []

    def test_empty_foreign_keys_become_none(self) -> None:
        """Test null and empty-string references are unresolved markers."""
        link = Link.from_row({"id": 1, "source_id": "", "target_id": None})
        assert link.source_id is None
        assert link.target_id is None
        assert link.node_id is None
        assert link.type_id is None

    def test_numeric_string_id(self) -> None:
        """Test an id given as a numeric string is converted."""
        assert Link.from_row({"id": "12", "source_id": "a", "target_id": "b"}).id == 12

    def test_invalid_id(self) -> None:
        """Test a non-numeric id is rejected."""
        with pytest.raises(RowError, match="must be an integer"):
            Link.from_row({"id": "x", "source_id": "a", "target_id": "b"})

    def test_malformed_numeric_strings_rejected(self) -> None:
        """Test strings that only look numeric raise RowError, not a bare ValueError."""
        for value in ("--5", "\u00b2", "1.5", " "):
            with pytest.raises(RowError, match="must be an integer"):
                Link.from_row({"id": value, "source_id": "a", "target_id": "b"})

    def test_padded_numeric_string_id(self) -> None:
        """Test surrounding whitespace is ignored."""
        assert Link.from_row({"id": " -4 ", "source_id": "a", "target_id": "b"}).id == -4

    def test_bool_id_rejected(self) -> None:
        """Test booleans are not accepted as integers."""
        with pytest.raises(RowError):
            Link.from_row({"id": True, "source_id": "a", "target_id": "b"})

    def test_invalid_node_reference(self) -> None:
        """Test a node reference of the wrong type is rejected."""
        with pytest.raises(RowError, match="column 'source_id' must be a string"):
            Link.from_row({"id": 1, "source_id": ["a"], "target_id": "b"})


class TestIndexEntryFromRow:
    """Tests for IndexEntry.from_row."""

    def test_all_columns(self) -> None:
        """Test every stored column is read."""
        entry = IndexEntry.from_row(
            {
                "id": 5,
                "list_node_id": "b",
                "index_node_id": "a",
                "index_link_id": 2,
                "list_id": "Lb",
                "depth": 1,
            }
        )
        assert entry == IndexEntry(5, "b", "a", "Lb", 1, 2)

    def test_missing_depth(self) -> None:
        """Test depth is required."""
        with pytest.raises(RowError, match="'depth'"):
            IndexEntry.from_row({"id": 1, "list_node_id": "a", "index_node_id": "a"})

    def test_depth_zero_is_valid(self) -> None:
        """Test a zero depth is not mistaken for a missing value."""
        entry = IndexEntry.from_row(
            {"id": 1, "list_node_id": "a", "index_node_id": "a", "list_id": "L", "depth": 0}
        )
        assert entry.depth == 0
        assert entry.index_link_id is None

    def test_malformed_depth(self) -> None:
        """Test a depth that only looks numeric is a RowError."""
        with pytest.raises(RowError, match="column 'depth' must be an integer"):
            IndexEntry.from_row({"id": 1, "depth": "--5"})

    def test_error_keeps_record(self) -> None:
        """Test RowError exposes the offending record."""
        with pytest.raises(RowError) as exc_info:
            IndexEntry.from_row({"id": "bad", "depth": 0})
        assert exc_info.value.kind == "index"
        assert exc_info.value.record == {"id": "bad", "depth": 0}


class TestRowSet:
    """Tests for RowSet."""

    def test_from_records(self) -> None:
        """Test loosely-typed records are validated into entities."""
        rows = RowSet.from_records(
            nodes=[{"id": "a"}, {"id": "b"}],
            links=[{"id": 1, "source_id": "a", "target_id": "b", "type_id": 1}],
            index_entries=[
                {"id": 1, "list_node_id": "a", "index_node_id": "a", "list_id": "L", "depth": 0}
            ],
        )
        assert [n.id for n in rows.nodes] == ["a", "b"]
        assert rows.links[0].target_id == "b"
        assert rows.index_entries[0].list_id == "L"

    def test_to_dict_stored_columns_only(self, chain_rows: RowSet) -> None:
        """Test to_dict emits only the stored columns."""
        data = chain_rows.to_dict()
        assert data["nodes"][0] == {"id": "a"}
        assert set(data["links"][0]) == {"id", "source_id", "target_id", "type_id", "node_id"}
        assert set(data["indexes"][0]) == {
            "id",
            "list_node_id",
            "index_node_id",
            "index_link_id",
            "list_id",
            "depth",
        }


class TestLinkedGraphLookup:
    """Tests for LinkedGraph lookups."""

    def test_lookups_handle_none(self) -> None:
        """Test lookups of None return None."""
        graph = LinkedGraph(nodes=[], links=[], indexes=[])
        assert graph.node(None) is None
        assert graph.link(None) is None
        assert graph.index(None) is None
        assert graph.is_empty()

    def test_node_is_root(self) -> None:
        """Test is_root reflects the incoming-link collection."""
        assert Node("a").is_root
        assert not Node("b", links_by_target=[1]).is_root
