"""
SQLite database integration and simple migration system.

This module owns the single process-wide SQLite connection.  The
connection is opened lazily by the first ``get_connection`` call,
which also applies any pending migrations, and is closed by
``close_connection`` when the application shuts down.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.  Helpers for
timestamps, identifiers and JSON list columns live here as well since
they describe how values are laid out in the store.
"""

import json
import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Optional

from .config import settings
from .errors import MalformedIdentifierException

logger = logging.getLogger(__name__)

# Largest value an SQLite INTEGER column can hold.
SQLITE_MAX_INTEGER = 2**63 - 1

_connection: Optional[sqlite3.Connection] = None
_lock = threading.RLock()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS articles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL DEFAULT '',
            content TEXT NOT NULL DEFAULT '',
            summary TEXT NOT NULL DEFAULT '',
            tags TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            version INTEGER NOT NULL DEFAULT 1,
            is_published INTEGER NOT NULL DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS postits (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            article_id INTEGER NOT NULL,
            content TEXT NOT NULL,
            pos_x REAL NOT NULL DEFAULT 0,
            pos_y REAL NOT NULL DEFAULT 0,
            width REAL NOT NULL DEFAULT 200,
            height REAL NOT NULL DEFAULT 150,
            z_index INTEGER NOT NULL DEFAULT 1,
            color TEXT NOT NULL DEFAULT '#FBBF24',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(article_id) REFERENCES articles(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS tags (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            name_key TEXT NOT NULL UNIQUE,
            description TEXT NOT NULL DEFAULT '',
            color TEXT NOT NULL DEFAULT '#3B82F6',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """,
    ),
    # Migration 2: indices for board loading and article listing
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_postits_article ON postits(article_id, z_index, created_at);
        CREATE INDEX IF NOT EXISTS idx_articles_updated_at ON articles(updated_at);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    ``:memory:`` and absolute paths are used as given; anything else is
    resolved relative to the project root.
    """
    db_url = settings.database_url
    if db_url == ":memory:" or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def _apply_migrations(conn: sqlite3.Connection) -> None:
    cursor = conn.cursor()
    cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
    row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
    current_version = row["version"] if row and row["version"] is not None else 0

    for version, sql in MIGRATIONS:
        if version > current_version:
            cursor.executescript(sql)
            cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
            current_version = version
            logger.info("Applied migration %s", version)
    conn.commit()


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def get_connection() -> sqlite3.Connection:
    """Return the shared SQLite connection, opening it on first use.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name, and foreign key enforcement is switched on for the lifetime
    of the connection.  A ``casefold(text)`` SQL function is registered
    for case-insensitive search beyond ASCII.
    """
    global _connection
    if _connection is not None:
        return _connection
    with _lock:
        if _connection is None:
            db_path = get_database_path()
            if db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.create_function("casefold", 1, _casefold, deterministic=True)
            conn.execute("PRAGMA foreign_keys = ON")
            _apply_migrations(conn)
            logger.info("SQLite database connected: %s", db_path)
            _connection = conn
    return _connection


def close_connection() -> None:
    """Close the shared connection if it is open."""
    global _connection
    with _lock:
        if _connection is not None:
            _connection.close()
            _connection = None
            logger.info("Database connection closed")


def init_db() -> None:
    """Open the database eagerly and apply pending migrations."""
    get_connection()


@contextmanager
def transaction() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor for one unit of work.

    Commits when the block finishes and rolls back if it raises.
    """
    conn = get_connection()
    with _lock:
        try:
            yield conn.cursor()
            conn.commit()
        except Exception:
            conn.rollback()
            raise


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string with microseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _is_id_text(text: str) -> bool:
    # More than 19 digits cannot fit an SQLite INTEGER.
    return text.isascii() and text.isdigit() and len(text) <= 19


def parse_identifier(value: Any, label: str) -> int:
    """Convert ``value`` to a record id or raise ``MalformedIdentifierException``.

    Ids are positive integers that fit an SQLite INTEGER; decimal strings
    are accepted since path segments and JSON bodies often carry them as
    text.
    """
    if isinstance(value, bool):
        raise MalformedIdentifierException(f"Invalid {label} ID format")
    if isinstance(value, int):
        ident = value
    elif isinstance(value, str) and _is_id_text(value.strip()):
        ident = int(value.strip())
    else:
        raise MalformedIdentifierException(f"Invalid {label} ID format")
    if ident <= 0 or ident > SQLITE_MAX_INTEGER:
        raise MalformedIdentifierException(f"Invalid {label} ID format")
    return ident


def dump_list(values: List[str]) -> str:
    return json.dumps(values)


def load_list(raw: Optional[str]) -> List[str]:
    """Decode a JSON list column, tolerating empty or damaged values."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        logger.warning("Discarding undecodable list column value %r", raw)
        return []
    if not isinstance(data, list):
        return []
    return [str(item) for item in data]
