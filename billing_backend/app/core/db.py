"""
SQLite database integration and simple migration system.

This module resolves the configured database location, opens
connections (``get_connection``) and applies migrations
(``init_db``).  Applied migration versions are stored in the
``migrations`` table and new migrations run in order, so adding a
column later only means appending to ``MIGRATIONS``.

Bills are stored as documents: the caller's JSON object is kept
verbatim in ``document`` while the fields the analytics need are
copied into their own columns.  ``provider`` and ``city`` hold the
canonical JSON encoding of the value so that equality and grouping
compare by type as well as content.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Tuple

SQLITE_URL_PREFIXES = ("sqlite:///", "sqlite://")

MIGRATIONS: List[Tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS bills (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            provider TEXT,
            city TEXT,
            units_consumed REAL,
            total_amount REAL,
            document TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """,
    ),
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_bills_provider_city ON bills(provider, city);
        """,
    ),
]


def get_database_path(database_url: str) -> str:
    """Turn a ``DATABASE_URL`` value into a filesystem path.

    ``sqlite:///relative.db`` and plain paths are both accepted.
    Relative paths are resolved against the current working directory.
    """
    db_url = database_url.strip()
    for prefix in SQLITE_URL_PREFIXES:
        if db_url.startswith(prefix):
            db_url = db_url[len(prefix):]
            break
    if os.path.isabs(db_url):
        return db_url
    return str(Path(db_url).resolve())


def get_connection(db_path: str) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be read by
    name.  Connections are cheap and never shared between threads.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor(db_path: str) -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit on success and always close the connection."""
    conn = get_connection(db_path)
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db(db_path: str) -> None:
    """Create the database file if needed and apply pending migrations."""
    parent = Path(db_path).parent
    parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS migrations (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        row = cursor.execute("SELECT MAX(version) FROM migrations").fetchone()
        current_version = row[0] or 0
        for version, script in MIGRATIONS:
            if version <= current_version:
                continue
            cursor.executescript(script)
            cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
        conn.commit()
    finally:
        conn.close()
