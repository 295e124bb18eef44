"""
Simple database wrapper for the novel workspace engine.

This module provides a thin wrapper around sqlite3 with explicit
transactions and the version-control schema.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Any, Iterable, Iterator, List

from ..utils.errors import StorageError, error_context
from ..utils.logging import get_logger

logger = get_logger("novel-workspace.storage.database")

SCHEMA_VERSION = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS nodes (
    id TEXT PRIMARY KEY NOT NULL,
    message TEXT NOT NULL,
    created_at_unix_ms INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_nodes_created
ON nodes(created_at_unix_ms);

CREATE TABLE IF NOT EXISTS node_parents (
    node_id TEXT NOT NULL REFERENCES nodes(id),
    parent_id TEXT NOT NULL REFERENCES nodes(id),
    ord INTEGER NOT NULL,
    PRIMARY KEY (node_id, ord)
);

CREATE TABLE IF NOT EXISTS blobs (
    id TEXT PRIMARY KEY NOT NULL,
    content BLOB NOT NULL,
    size INTEGER NOT NULL,
    compressed INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS node_files (
    node_id TEXT NOT NULL REFERENCES nodes(id),
    path TEXT NOT NULL,
    blob_id TEXT NOT NULL REFERENCES blobs(id),
    PRIMARY KEY (node_id, path)
);

CREATE TABLE IF NOT EXISTS head (
    singleton INTEGER PRIMARY KEY CHECK (singleton = 1),
    node_id TEXT REFERENCES nodes(id)
);

INSERT OR IGNORE INTO head (singleton, node_id) VALUES (1, NULL);
"""


class Database:
    """SQLite database wrapper with explicit transactions."""

    def __init__(
        self,
        db_path: Path | str,
        timeout: float = 30.0,
        journal_mode: str = "WAL",
        synchronous: str = "NORMAL"
    ):
        """
        Initialize database wrapper.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait on a locked database
            journal_mode: SQLite journal mode
            synchronous: SQLite synchronous setting
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.journal_mode = journal_mode
        self.synchronous = synchronous
        self._connection: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        """Open database connection."""
        if self._connection is not None:
            return

        with error_context("database", "connect", path=str(self.db_path)):
            # Autocommit mode; transactions are opened explicitly
            self._connection = sqlite3.connect(
                str(self.db_path),
                timeout=self.timeout,
                isolation_level=None
            )
            self._connection.execute("PRAGMA foreign_keys=ON")
            self._connection.execute(f"PRAGMA journal_mode={self.journal_mode}")
            self._connection.execute(f"PRAGMA synchronous={self.synchronous}")

    def initialize(self) -> None:
        """Connect and apply the schema if it is missing or outdated."""
        self.connect()

        with error_context("database", "initialize", path=str(self.db_path)):
            version = self._connection.execute("PRAGMA user_version").fetchone()[0]
            if version >= SCHEMA_VERSION:
                return

            self._connection.executescript(SCHEMA)
            self._connection.execute(f"PRAGMA user_version={SCHEMA_VERSION}")

        logger.info("schema_applied", path=str(self.db_path), version=SCHEMA_VERSION)

    def close(self) -> None:
        """Close database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def execute(self, sql: str, parameters: Iterable[Any] = ()) -> sqlite3.Cursor:
        """
        Execute SQL statement.

        Args:
            sql: SQL statement
            parameters: Query parameters

        Returns:
            Cursor object
        """
        with error_context("database", "execute"):
            return self._require().execute(sql, tuple(parameters))

    def executemany(self, sql: str, parameters: Iterable[Iterable[Any]]) -> sqlite3.Cursor:
        """
        Execute SQL statement with multiple parameter sets.

        Args:
            sql: SQL statement
            parameters: Parameter tuples

        Returns:
            Cursor object
        """
        with error_context("database", "executemany"):
            return self._require().executemany(sql, parameters)

    def fetchone(self, sql: str, parameters: Iterable[Any] = ()) -> Optional[tuple]:
        """Execute query and fetch one result."""
        with error_context("database", "fetchone"):
            return self._require().execute(sql, tuple(parameters)).fetchone()

    def fetchall(self, sql: str, parameters: Iterable[Any] = ()) -> List[tuple]:
        """Execute query and fetch all results."""
        with error_context("database", "fetchall"):
            return self._require().execute(sql, tuple(parameters)).fetchall()

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """
        Run the block inside one write transaction.

        Commits when the block exits normally and rolls back on any
        exception, which is then re-raised.
        """
        conn = self._require()
        with error_context("database", "begin"):
            conn.execute("BEGIN IMMEDIATE")

        try:
            yield self
        except BaseException:
            conn.rollback()
            logger.debug("transaction_rolled_back", path=str(self.db_path))
            raise

        with error_context("database", "commit"):
            try:
                conn.execute("COMMIT")
            except sqlite3.Error:
                conn.rollback()
                raise

    @property
    def in_transaction(self) -> bool:
        """Whether a transaction is currently open."""
        return self._connection is not None and self._connection.in_transaction

    @property
    def connection(self) -> Optional[sqlite3.Connection]:
        """Get raw connection object."""
        return self._connection

    def _require(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StorageError(f"Database is not connected: {self.db_path}")
        return self._connection

    def __enter__(self):
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
