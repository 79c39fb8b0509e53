"""Database connection and schema for the nodes table."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from types import TracebackType
from typing import Optional, Union

_CREATE_NODES = """
CREATE TABLE nodes (
    zone INTEGER NOT NULL,
    net INTEGER NOT NULL,
    node INTEGER NOT NULL,
    nodelist_date DATE NOT NULL,
    day_number INTEGER NOT NULL,
    system_name TEXT NOT NULL,
    location TEXT NOT NULL,
    sysop_name TEXT NOT NULL,
    phone TEXT NOT NULL,
    node_type TEXT NOT NULL,
    region INTEGER,
    max_speed TEXT NOT NULL,

    is_cm BOOLEAN DEFAULT 0,
    is_mo BOOLEAN DEFAULT 0,
    has_binkp BOOLEAN DEFAULT 0,
    has_telnet BOOLEAN DEFAULT 0,
    is_down BOOLEAN DEFAULT 0,
    is_hold BOOLEAN DEFAULT 0,
    is_pvt BOOLEAN DEFAULT 0,
    is_active BOOLEAN DEFAULT 1,

    -- lists are stored as JSON arrays
    flags TEXT DEFAULT '[]',
    modem_flags TEXT DEFAULT '[]',
    internet_protocols TEXT DEFAULT '[]',
    internet_hostnames TEXT DEFAULT '[]',
    internet_ports TEXT DEFAULT '[]',
    internet_emails TEXT DEFAULT '[]',

    has_inet BOOLEAN DEFAULT 0,
    internet_config TEXT,

    conflict_sequence INTEGER DEFAULT 0,
    has_conflict BOOLEAN DEFAULT 0,

    PRIMARY KEY (zone, net, node, nodelist_date, conflict_sequence)
)
"""

_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_nodes_date ON nodes(nodelist_date)",
    "CREATE INDEX IF NOT EXISTS idx_nodes_location ON nodes(zone, net)",
    "CREATE INDEX IF NOT EXISTS idx_nodes_system ON nodes(system_name)",
    "CREATE INDEX IF NOT EXISTS idx_nodes_type ON nodes(node_type)",
    "CREATE INDEX IF NOT EXISTS idx_nodes_flags ON nodes(is_cm, is_mo, has_binkp, has_telnet, has_inet)",
)


class DatabaseError(Exception):
    """Raised when the database cannot be opened or used."""


class Database:
    """A thread-safe connection to the nodelist database."""

    def __init__(self, path: Union[str, Path], read_only: bool = False) -> None:
        self.path = str(path)
        self.read_only = read_only
        self._lock = threading.RLock()
        try:
            if read_only:
                uri = Path(self.path).resolve().as_uri() + "?mode=ro"
                conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
            else:
                conn = sqlite3.connect(self.path, check_same_thread=False)
            conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as exc:
            mode = "read-only " if read_only else ""
            raise DatabaseError(f"failed to open {mode}database {self.path}: {exc}") from exc
        self._conn: Optional[sqlite3.Connection] = conn

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying connection; raises DatabaseError once closed."""
        with self._lock:
            if self._conn is None:
                raise DatabaseError("database is closed")
            return self._conn

    def close(self) -> None:
        """Close the connection; closing twice is harmless."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "Database":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def create_schema(self) -> None:
        """Create the nodes table and its indexes if they are missing."""
        with self._lock:
            conn = self.connection
            try:
                conn.execute(_CREATE_NODES)
            except sqlite3.OperationalError as exc:
                if "already exists" not in str(exc):
                    raise DatabaseError(f"failed to create nodes table: {exc}") from exc
            for statement in _INDEXES:
                try:
                    conn.execute(statement)
                except sqlite3.OperationalError as exc:
                    if "already exists" not in str(exc):
                        raise DatabaseError(f"failed to create index: {exc}") from exc
            try:
                conn.commit()
            except sqlite3.Error as exc:
                raise DatabaseError(f"failed to commit schema: {exc}") from exc

    def get_version(self) -> str:
        """Return the version of the database engine."""
        with self._lock:
            try:
                row = self.connection.execute("SELECT sqlite_version()").fetchone()
            except sqlite3.Error as exc:
                raise DatabaseError(f"failed to get database version: {exc}") from exc
            return str(row[0])