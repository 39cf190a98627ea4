"""
FILE: personadev/core/repository.py
PURPOSE: Local replica store - persists the AppState document in SQLite
EXPORTS:
  - get_connection() -> Connection
  - open_database() -> context manager yielding Connection
  - init_database() -> None
  - load_state() -> AppState
  - save_state(state) -> None
  - reset_state() -> AppState
  - has_state() -> bool
DEPENDENCIES:
  - sqlite3 (stdlib)
  - pathlib (stdlib)
  - personadev.core.models (AppState)
NOTES:
  - Database stored at ~/.personadev/personadev.db (PERSONADEV_HOME overrides)
  - The whole document lives in one row under STORAGE_KEY
  - First load on an empty database returns default AppState
  - Writes are a single REPLACE, so a reader never sees half a document
  - SQLite failures surface as LocalStoreError
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from .constants import STORAGE_KEY
from .exceptions import LocalStoreError, MalformedSnapshotError
from .models import AppState

logger = logging.getLogger(__name__)

# Database file location (cross-platform)
DB_DIR = Path(os.environ.get("PERSONADEV_HOME", Path.home() / ".personadev"))
DB_PATH = DB_DIR / "personadev.db"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def get_connection() -> sqlite3.Connection:
    """
    Get SQLite connection to the PersonaDev database.

    Creates the data directory if it doesn't exist.
    Enables row_factory for dict-like row access.
    Initializes database schema on first connection.
    """
    DB_DIR.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row

    init_database(conn)

    return conn


def init_database(conn: sqlite3.Connection) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times (uses CREATE TABLE IF NOT EXISTS).
    """
    conn.executescript(SCHEMA_SQL)
    conn.commit()


@contextmanager
def open_database() -> Iterator[sqlite3.Connection]:
    """
    Yield a connection and close it afterwards.

    Raises:
        LocalStoreError: If SQLite fails to open, read or write
    """
    try:
        conn = get_connection()
    except (sqlite3.Error, OSError) as e:
        raise LocalStoreError(f"Cannot open local database at {DB_PATH}: {e}")
    try:
        yield conn
    except sqlite3.Error as e:
        raise LocalStoreError(f"Local database error at {DB_PATH}: {e}")
    finally:
        conn.close()


def has_state() -> bool:
    """Return True if a document has been stored."""
    with open_database() as conn:
        row = conn.execute(
            "SELECT 1 FROM documents WHERE key = ?", (STORAGE_KEY,)
        ).fetchone()
    return row is not None


def load_state() -> AppState:
    """
    Load the stored AppState.

    Returns:
        Stored AppState, or default AppState on first run

    Raises:
        MalformedSnapshotError: If the stored document is corrupt
        LocalStoreError: If the database can't be read
    """
    with open_database() as conn:
        row = conn.execute(
            "SELECT value FROM documents WHERE key = ?", (STORAGE_KEY,)
        ).fetchone()

    if row is None:
        logger.debug("No stored state at %s, starting with defaults", DB_PATH)
        return AppState()

    try:
        return AppState.from_json(row["value"])
    except MalformedSnapshotError as e:
        raise MalformedSnapshotError(f"Stored state at {DB_PATH} is corrupt: {e}")


def save_state(state: AppState) -> None:
    """
    Persist the whole AppState document.

    Args:
        state: Document to store (replaces any previous document)

    Raises:
        LocalStoreError: If the database can't be written
    """
    with open_database() as conn:
        conn.execute(
            "INSERT OR REPLACE INTO documents (key, value, updated_at) VALUES (?, ?, ?)",
            (STORAGE_KEY, state.to_json(), datetime.now().isoformat()),
        )
        conn.commit()
    logger.debug("Saved state to %s", DB_PATH)


def reset_state() -> AppState:
    """Remove the stored document and store fresh defaults."""
    with open_database() as conn:
        conn.execute("DELETE FROM documents WHERE key = ?", (STORAGE_KEY,))
        conn.commit()

    state = AppState()
    save_state(state)
    logger.info("Reset local state to defaults")
    return state
