"""Row sources: where the three flat collections come from.

A row source takes one consistent snapshot of the store and validates its
records into a RowSet. Callers must make sure nothing mutates the store
between fetch and check.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from linksindex.crud import list_index_entries, list_links, list_nodes
from linksindex.database import IndexDB
from linksindex.linker import link_rows
from linksindex.models import LinkedGraph, RowError, RowSet

logger = logging.getLogger(__name__)


class RowSource(Protocol):
    """Anything that can supply nodes, links and index entries."""

    def fetch_all(self) -> RowSet:
        """Fetch and validate the three collections.

        Raises:
            RowError: If a record is malformed.
        """
        ...


class DatabaseRowSource:
    """Reads the three tables of an open IndexDB."""

    def __init__(self, db: IndexDB) -> None:
        self.db = db

    def fetch_all(self) -> RowSet:
        rows = RowSet.from_records(
            nodes=list_nodes(self.db),
            links=list_links(self.db),
            index_entries=list_index_entries(self.db),
        )
        logger.debug(
            "fetched %d nodes, %d links, %d index entries from %s",
            len(rows.nodes),
            len(rows.links),
            len(rows.index_entries),
            self.db.db_path,
        )
        return rows


class JsonRowSource:
    """Reads rows from a JSON file.

    Accepts either ``{"nodes": [...], "links": [...], "indexes": [...]}`` or
    a report dump, whose rows live under ``"data"``.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def fetch_all(self) -> RowSet:
        """Load and validate rows from the file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            json.JSONDecodeError: If the file is not valid JSON.
            RowError: If the document or a record is malformed.
        """
        with self.path.open("r", encoding="utf-8") as f:
            document: Any = json.load(f)

        if isinstance(document, dict) and isinstance(document.get("data"), dict):
            document = document["data"]
        if not isinstance(document, dict):
            raise RowError("document", f"{self.path} must contain a JSON object")

        collections: dict[str, list[Any]] = {}
        for key in ("nodes", "links", "indexes"):
            value = document.get(key, [])
            if not isinstance(value, list):
                raise RowError("document", f"'{key}' in {self.path} must be a list")
            collections[key] = value

        rows = RowSet.from_records(
            nodes=collections["nodes"],
            links=collections["links"],
            index_entries=collections["indexes"],
        )
        logger.debug("loaded rows from %s", self.path)
        return rows


def load(source: RowSource) -> LinkedGraph:
    """Fetch a snapshot from source and link it."""
    return link_rows(source.fetch_all())
