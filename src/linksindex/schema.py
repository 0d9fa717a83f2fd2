"""Database schema management for the links index store."""

from __future__ import annotations

import sqlite3
from importlib import resources
from pathlib import Path

TABLES = ("nodes", "links", "links_indexes")


def get_schema() -> str:
    """Load the database schema from package resources.

    Returns:
        The SQL schema as a string.

    Raises:
        FileNotFoundError: If schema.sql is not found in package resources.
    """
    schema = resources.files("linksindex.data").joinpath("schema.sql")
    if not schema.is_file():
        raise FileNotFoundError("schema.sql not found in package resources")
    return schema.read_text(encoding="utf-8")


def init_database(db_path: str | Path) -> None:
    """Initialize a new database from the schema.

    If the database already exists, the schema is applied again; it only
    uses CREATE ... IF NOT EXISTS, so existing tables and rows are preserved.

    Args:
        db_path: Path to the SQLite database file.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    connection = sqlite3.connect(str(db_path))
    try:
        connection.executescript(get_schema())
        connection.commit()
    finally:
        connection.close()
