"""Data model for the links reachability index.

Three row types mirror the three tables of the store:

- Node: a graph vertex
- Link: a directed, typed edge, optionally naming an auxiliary node
- IndexEntry: one row of the materialized reachability index

Design decisions:
- Relations are stored as handles (entity ids), never as object references,
  so a linked graph has no reference cycles and serializes to JSON as-is
- Derived collections are filled by the linker and always initialized
- Loosely-typed records are validated once, at the row-source boundary
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

NodeId = str
LinkId = int
IndexId = int


class RowError(ValueError):
    """Raised when a raw record cannot be turned into an entity."""

    def __init__(self, kind: str, message: str, record: Mapping[str, Any] | None = None) -> None:
        self.kind = kind
        self.record = dict(record) if record is not None else None
        super().__init__(f"Invalid {kind} row: {message}")


def _get(record: Mapping[str, Any], key: str) -> Any:
    try:
        return record[key]
    except (KeyError, IndexError):
        return None


def _required(kind: str, record: Mapping[str, Any], key: str) -> Any:
    value = _get(record, key)
    if value is None or value == "":
        raise RowError(kind, f"missing required column '{key}'", record)
    return value


def _to_node_id(kind: str, record: Mapping[str, Any], key: str, value: Any) -> NodeId:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise RowError(kind, f"column '{key}' must be a string, got {type(value).__name__}", record)
    return str(value)


def _as_node_id(kind: str, record: Mapping[str, Any], key: str) -> NodeId | None:
    """Read an optional node reference column.

    Null and empty-string references both become None.
    """
    value = _get(record, key)
    if value is None or value == "":
        return None
    return _to_node_id(kind, record, key, value)


def _required_node_id(kind: str, record: Mapping[str, Any], key: str) -> NodeId:
    return _to_node_id(kind, record, key, _required(kind, record, key))


def _to_int(kind: str, record: Mapping[str, Any], key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise RowError(kind, f"column '{key}' must be an integer, got bool", record)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as e:
            raise RowError(kind, f"column '{key}' must be an integer, got {value!r}", record) from e
    raise RowError(kind, f"column '{key}' must be an integer, got {value!r}", record)


def _as_int(kind: str, record: Mapping[str, Any], key: str) -> int | None:
    value = _get(record, key)
    if value is None or value == "":
        return None
    return _to_int(kind, record, key, value)


def _required_int(kind: str, record: Mapping[str, Any], key: str) -> int:
    return _to_int(kind, record, key, _required(kind, record, key))


def _keys(record: Any) -> Mapping[str, Any]:
    # sqlite3.Row supports keys() and item access but is not a Mapping
    if isinstance(record, Mapping):
        return record
    if hasattr(record, "keys"):
        return {key: record[key] for key in record.keys()}
    raise RowError("record", f"expected a mapping, got {type(record).__name__}")


@dataclass
class Node:
    """A graph vertex.

    Attributes:
        id: Unique node identifier.
        links_by_source: Links whose source is this node.
        links_by_target: Links whose target is this node.
        links_by_node: Links naming this node as auxiliary participant.
        indexes_by_index: Index entries where this node is the indexed subject.
        indexes_by_list: Index entries where this node owns the list.
    """

    id: NodeId
    links_by_source: list[LinkId] = field(default_factory=list)
    links_by_target: list[LinkId] = field(default_factory=list)
    links_by_node: list[LinkId] = field(default_factory=list)
    indexes_by_index: list[IndexId] = field(default_factory=list)
    indexes_by_list: list[IndexId] = field(default_factory=list)

    @classmethod
    def from_row(cls, record: Any) -> Node:
        """Build a Node from a raw record with an ``id`` column."""
        row = _keys(record)
        return cls(id=_required_node_id("node", row, "id"))

    @property
    def is_root(self) -> bool:
        """True if no link targets this node."""
        return not self.links_by_target

    def to_row(self) -> dict[str, Any]:
        """Return the stored columns only."""
        return {"id": self.id}


@dataclass
class Link:
    """A directed, typed edge between two nodes.

    Attributes:
        id: Unique link identifier.
        source_id: Id of the source node, or None.
        target_id: Id of the target node, or None.
        type_id: Type discriminator.
        node_id: Optional auxiliary node id.
        source: Resolved source handle; None when null or dangling.
        target: Resolved target handle; None when null or dangling.
        node: Resolved auxiliary node handle; None when null or dangling.
        indexes: Index entries recording this link's contribution to lists.
    """

    id: LinkId
    source_id: NodeId | None
    target_id: NodeId | None
    type_id: int | None = None
    node_id: NodeId | None = None
    source: NodeId | None = None
    target: NodeId | None = None
    node: NodeId | None = None
    indexes: list[IndexId] = field(default_factory=list)

    @classmethod
    def from_row(cls, record: Any) -> Link:
        """Build a Link from a ``links`` table record."""
        row = _keys(record)
        return cls(
            id=_required_int("link", row, "id"),
            source_id=_as_node_id("link", row, "source_id"),
            target_id=_as_node_id("link", row, "target_id"),
            type_id=_as_int("link", row, "type_id"),
            node_id=_as_node_id("link", row, "node_id"),
        )

    def to_row(self) -> dict[str, Any]:
        """Return the stored columns only."""
        return {
            "id": self.id,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "type_id": self.type_id,
            "node_id": self.node_id,
        }


@dataclass
class IndexEntry:
    """One row of the materialized reachability index.

    Attributes:
        id: Unique entry identifier.
        list_node_id: Node owning the list this entry belongs to.
        index_node_id: Node being indexed (the subject).
        list_id: Groups all entries of the same list.
        depth: Depth of the subject within the list.
        index_link_id: Link whose traversal produced this entry, if any.
        link: Resolved link handle.
        index_node: Resolved subject node handle.
        list_node: Resolved list owner handle.
    """

    id: IndexId
    list_node_id: NodeId | None
    index_node_id: NodeId | None
    list_id: str | None
    depth: int
    index_link_id: LinkId | None = None
    link: LinkId | None = None
    index_node: NodeId | None = None
    list_node: NodeId | None = None

    @classmethod
    def from_row(cls, record: Any) -> IndexEntry:
        """Build an IndexEntry from a ``links_indexes`` table record."""
        row = _keys(record)
        list_id = _get(row, "list_id")
        return cls(
            id=_required_int("index", row, "id"),
            list_node_id=_as_node_id("index", row, "list_node_id"),
            index_node_id=_as_node_id("index", row, "index_node_id"),
            list_id=None if list_id is None or list_id == "" else str(list_id),
            depth=_required_int("index", row, "depth"),
            index_link_id=_as_int("index", row, "index_link_id"),
        )

    def to_row(self) -> dict[str, Any]:
        """Return the stored columns only."""
        return {
            "id": self.id,
            "list_node_id": self.list_node_id,
            "index_node_id": self.index_node_id,
            "index_link_id": self.index_link_id,
            "list_id": self.list_id,
            "depth": self.depth,
        }


@dataclass
class RowSet:
    """The three flat collections supplied by a row source."""

    nodes: list[Node] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    index_entries: list[IndexEntry] = field(default_factory=list)

    @classmethod
    def from_records(
        cls,
        nodes: Any = (),
        links: Any = (),
        index_entries: Any = (),
    ) -> RowSet:
        """Validate loosely-typed records into a RowSet.

        Raises:
            RowError: If any record is malformed.
        """
        return cls(
            nodes=[Node.from_row(r) for r in nodes],
            links=[Link.from_row(r) for r in links],
            index_entries=[IndexEntry.from_row(r) for r in index_entries],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_row() for n in self.nodes],
            "links": [lk.to_row() for lk in self.links],
            "indexes": [e.to_row() for e in self.index_entries],
        }


@dataclass
class LinkedGraph:
    """A linked snapshot of nodes, links and index entries.

    The three collections keep the order of the input rows. The lookup
    tables map ids to the entities of this snapshot only.
    """

    nodes: list[Node]
    links: list[Link]
    indexes: list[IndexEntry]
    nodes_by_id: dict[NodeId, Node] = field(default_factory=dict)
    links_by_id: dict[LinkId, Link] = field(default_factory=dict)
    indexes_by_id: dict[IndexId, IndexEntry] = field(default_factory=dict)

    def node(self, node_id: NodeId | None) -> Node | None:
        """Look up a node by id."""
        if node_id is None:
            return None
        return self.nodes_by_id.get(node_id)

    def link(self, link_id: LinkId | None) -> Link | None:
        """Look up a link by id."""
        if link_id is None:
            return None
        return self.links_by_id.get(link_id)

    def index(self, index_id: IndexId | None) -> IndexEntry | None:
        """Look up an index entry by id."""
        if index_id is None:
            return None
        return self.indexes_by_id.get(index_id)

    def list_entries(self, node: Node) -> list[IndexEntry]:
        """Return the entries of the lists owned by ``node``."""
        return [self.indexes_by_id[i] for i in node.indexes_by_list if i in self.indexes_by_id]

    def is_empty(self) -> bool:
        return not self.nodes and not self.links and not self.indexes

    def to_dict(self) -> dict[str, Any]:
        """Serialize the graph, derived collections included."""
        return {
            "nodes": [asdict(n) for n in self.nodes],
            "links": [asdict(lk) for lk in self.links],
            "indexes": [asdict(e) for e in self.indexes],
        }
