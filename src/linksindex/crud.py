"""CRUD operations for the links index store.

Provides the row mutations used to seed and tear down a store:
- Nodes and links
- Reachability index entries
- Clearing all three tables

Index entries are normally written by whatever maintains the index (e.g.
database triggers); add_index_entry exists for fixtures and repairs.
"""

from __future__ import annotations

import logging
from typing import Any, cast

from linksindex.database import IndexDB
from linksindex.schema import TABLES

logger = logging.getLogger(__name__)


def _validate_id(value: str, field_name: str) -> None:
    """Validate a node id.

    Raises:
        ValueError: If the id is empty or exceeds max length.
    """
    if not value or not value.strip():
        raise ValueError(f"{field_name} cannot be empty")
    if len(value) > 256:
        raise ValueError(f"{field_name} exceeds maximum length (256)")


def _row_to_dict(row: Any) -> dict[str, Any]:
    if row is None:
        return {}
    return dict(row)


def clear(db: IndexDB) -> None:
    """Delete every row of the nodes, links and links_indexes tables."""
    for table in TABLES:
        db.execute(f'DELETE FROM "{table}"')
    logger.debug("cleared tables %s", ", ".join(TABLES))


# Nodes


def add_node(db: IndexDB, node_id: str) -> str:
    """Insert a node.

    Returns:
        The node id.

    Raises:
        ValueError: If node_id is invalid.
        sqlite3.IntegrityError: If the node already exists.
    """
    _validate_id(node_id, "node_id")
    db.execute('INSERT INTO "nodes" ("id") VALUES (?)', (node_id,))
    return node_id


def remove_node(db: IndexDB, node_id: str) -> bool:
    """Delete a node.

    Links and index entries referring to it are left in place.

    Returns:
        True if a row was deleted, False if the node did not exist.
    """
    cursor = db.execute('DELETE FROM "nodes" WHERE "id" = ?', (node_id,))
    return cursor.rowcount > 0


def list_nodes(db: IndexDB) -> list[dict[str, Any]]:
    """List all nodes in insertion order."""
    results = db.fetchall('SELECT * FROM "nodes" ORDER BY rowid')
    return [_row_to_dict(row) for row in results]


# Links


def add_link(
    db: IndexDB,
    source_id: str,
    target_id: str,
    type_id: int = 1,
    node_id: str | None = None,
) -> int:
    """Insert a link from source_id to target_id.

    Returns:
        The id assigned to the new link.

    Raises:
        ValueError: If source_id or target_id is invalid.
    """
    _validate_id(source_id, "source_id")
    _validate_id(target_id, "target_id")
    if node_id is not None:
        _validate_id(node_id, "node_id")

    cursor = db.execute(
        """
        INSERT INTO "links" ("source_id", "target_id", "type_id", "node_id")
        VALUES (?, ?, ?, ?)
        """,
        (source_id, target_id, type_id, node_id),
    )
    return cast(int, cursor.lastrowid)


def remove_link(db: IndexDB, link_id: int) -> bool:
    """Delete a link.

    Returns:
        True if a row was deleted, False if the link did not exist.
    """
    cursor = db.execute('DELETE FROM "links" WHERE "id" = ?', (link_id,))
    return cursor.rowcount > 0


def list_links(db: IndexDB) -> list[dict[str, Any]]:
    """List all links ordered by id."""
    results = db.fetchall('SELECT * FROM "links" ORDER BY "id"')
    return [_row_to_dict(row) for row in results]


# Index entries


def add_index_entry(
    db: IndexDB,
    list_node_id: str,
    index_node_id: str,
    list_id: str,
    depth: int,
    index_link_id: int | None = None,
) -> int:
    """Insert a reachability index entry.

    Returns:
        The id assigned to the new entry.

    Raises:
        ValueError: If an id is invalid or depth is negative.
    """
    _validate_id(list_node_id, "list_node_id")
    _validate_id(index_node_id, "index_node_id")
    _validate_id(list_id, "list_id")
    if depth < 0:
        raise ValueError("depth cannot be negative")

    cursor = db.execute(
        """
        INSERT INTO "links_indexes"
            ("list_node_id", "index_node_id", "index_link_id", "list_id", "depth")
        VALUES (?, ?, ?, ?, ?)
        """,
        (list_node_id, index_node_id, index_link_id, list_id, depth),
    )
    return cast(int, cursor.lastrowid)


def list_index_entries(db: IndexDB) -> list[dict[str, Any]]:
    """List all index entries ordered by id."""
    results = db.fetchall('SELECT * FROM "links_indexes" ORDER BY "id"')
    return [_row_to_dict(row) for row in results]
