"""SQLite access for the links index store.

IndexDB opens one connection per ``with`` block. The connection runs in
autocommit mode (``isolation_level=None``); writes are grouped explicitly
with :meth:`IndexDB.transaction`, and reads need no transaction at all.

Design decisions:
- No foreign-key enforcement: dangling rows must be storable so the checker
  can report them
- A transaction opened while another is active joins it (no savepoints)
- Not thread-safe; a check runs over one snapshot in one thread
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from linksindex.schema import init_database

if TYPE_CHECKING:
    from types import TracebackType

Parameters = tuple[Any, ...] | dict[str, Any]


class DatabaseError(Exception):
    """Base exception for database-related errors."""


class ConnectionError(DatabaseError):
    """Raised when the store cannot be created or opened."""


class TransactionError(DatabaseError):
    """Raised when BEGIN or COMMIT fails."""


class IndexDB:
    """Connection to a store holding the nodes, links and links_indexes tables.

    Example usage:
        >>> with IndexDB("links.db") as db, db.transaction():
        ...     db.execute("INSERT INTO nodes (id) VALUES (?)", ("a",))

    Attributes:
        db_path: Path to the SQLite database file.
        auto_init: Create the file and schema when the file is missing.
    """

    def __init__(self, db_path: str | Path, *, auto_init: bool = True) -> None:
        self.db_path = Path(db_path)
        self.auto_init = auto_init
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> IndexDB:
        """Open the connection, creating the store first if allowed.

        Raises:
            ConnectionError: If the file is missing and auto_init is off, or
                if the store cannot be created or opened.
        """
        if not self.db_path.exists():
            if not self.auto_init:
                raise ConnectionError(f"Database not found: {self.db_path}")
            try:
                init_database(self.db_path)
            except (sqlite3.Error, OSError) as e:
                raise ConnectionError(f"Failed to initialize database: {e}") from e

        try:
            conn = sqlite3.connect(str(self.db_path), isolation_level=None)
        except sqlite3.Error as e:
            raise ConnectionError(f"Failed to connect to database: {e}") from e
        conn.row_factory = sqlite3.Row
        self._conn = conn
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection.

        Raises:
            ConnectionError: Outside a ``with IndexDB(...)`` block.
        """
        if self._conn is None:
            raise ConnectionError("Database not connected. Use 'with IndexDB(...)' context.")
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group statements into one transaction.

        Commits when the block completes and rolls back when it raises. Inside
        an active transaction this is a no-op, so the outer block decides.

        Raises:
            ConnectionError: If not connected.
            TransactionError: If BEGIN or COMMIT fails.
        """
        conn = self.connection
        if conn.in_transaction:
            yield
            return

        try:
            conn.execute("BEGIN")
        except sqlite3.Error as e:
            raise TransactionError(f"Failed to begin transaction: {e}") from e

        try:
            yield
        except Exception:
            # sqlite may already have rolled back after a failed statement
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise

        try:
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise TransactionError(f"Failed to commit transaction: {e}") from e

    def execute(self, sql: str, parameters: Parameters = ()) -> sqlite3.Cursor:
        """Run one statement and return its cursor.

        Raises:
            ConnectionError: If not connected.
            sqlite3.Error: If the statement fails.
        """
        return self.connection.execute(sql, parameters)

    def fetchall(self, sql: str, parameters: Parameters = ()) -> list[sqlite3.Row]:
        """Run a query and return every row."""
        return self.execute(sql, parameters).fetchall()
