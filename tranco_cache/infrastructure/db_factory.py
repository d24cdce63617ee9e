"""
SQLite connection factory utilities for tranco-cache.

Two kinds of connection exist:

- a short-lived writer, used only by the rebuild, which creates the database
  file if needed and runs with driver-level autocommit disabled so the whole
  rebuild is one explicit transaction;
- a long-lived reader, held by DomainStore, which never creates the file, so
  querying a store that was never built fails loudly. It is opened read-write
  so that opening it rolls back a hot journal left by a killed rebuild.

Opening the writer retries with tenacity while another process holds the
write lock.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from tranco_cache.domain.errors import StoreError
from tranco_cache.utils.logging import get_logger

log = get_logger(__name__)

TABLE = "domains"

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    rank    INTEGER PRIMARY KEY,
    domain  TEXT UNIQUE COLLATE NOCASE
)
"""

# Seconds a statement waits on another connection's lock before failing.
BUSY_TIMEOUT_SECONDS = 30.0


def _is_locked(exc: BaseException) -> bool:
    return isinstance(exc, sqlite3.OperationalError) and "locked" in str(exc).lower()


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception(_is_locked),
    reraise=True,
)
def _open_writer(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(path), timeout=BUSY_TIMEOUT_SECONDS, isolation_level=None)
    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def connect_writer(path: Path) -> sqlite3.Connection:
    """
    Open the store for a rebuild and start its transaction.

    The database file and its directory are created if absent. The returned
    connection is already inside `BEGIN IMMEDIATE`, holding the write lock;
    the caller must COMMIT or ROLLBACK and then close it.

    Raises
    ------
    StoreError
        If the file cannot be created/opened or the write lock cannot be taken
        after all retry attempts.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = _open_writer(path)
    except (OSError, sqlite3.Error) as exc:
        raise StoreError(f"cannot open {path} for writing: {exc}") from exc
    log.debug("Writer connection opened", extra={"path": str(path)})
    return conn


def connect_reader(path: Path) -> sqlite3.Connection:
    """
    Open a query connection to an existing store.

    The file must already exist (`mode=rw` never creates it). Write access is
    needed because SQLite rolls back a hot journal left by an interrupted
    writer when the next connection reads, and a read-only connection fails
    with "attempt to write a readonly database" instead.

    Raises
    ------
    StoreError
        If the database file does not exist or cannot be opened.
    """
    uri = f"{path.resolve().as_uri()}?mode=rw"
    try:
        conn = sqlite3.connect(uri, uri=True, timeout=BUSY_TIMEOUT_SECONDS)
    except sqlite3.Error as exc:
        raise StoreError(f"cannot open {path}: {exc}") from exc
    log.debug("Reader connection opened", extra={"path": str(path)})
    return conn


def count_rows(path: Path) -> int | None:
    """
    Return the number of rows in the store, or None if it has no database or table.
    """
    if not path.exists():
        return None
    conn = connect_reader(path)
    try:
        (count,) = conn.execute(f"SELECT COUNT(*) FROM {TABLE}").fetchone()
    except sqlite3.OperationalError as exc:
        if "no such table" in str(exc):
            return None
        raise StoreError(f"cannot count rows in {path}: {exc}") from exc
    except sqlite3.Error as exc:
        raise StoreError(f"cannot count rows in {path}: {exc}") from exc
    finally:
        conn.close()
    return int(count)


__all__ = [
    "BUSY_TIMEOUT_SECONDS",
    "SCHEMA",
    "TABLE",
    "connect_reader",
    "connect_writer",
    "count_rows",
]
