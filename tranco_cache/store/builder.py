"""
Full, transactional rebuild of the local SQLite store from the upstream archive.

The rebuild runs as a single write transaction: create the table if needed,
delete every row, stream-insert the new list, commit. Readers on other
connections keep seeing the previous snapshot until the commit, and any
failure rolls back to it.

Timestamps matter to FreshnessPolicy: a successful rebuild leaves the database
strictly newer than the archive it was built from, and a failed one leaves it
no newer, so the next process retries.
"""

from __future__ import annotations

import itertools
import os
import sqlite3
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, TypedDict

from tranco_cache.config import Settings
from tranco_cache.domain.errors import StoreError
from tranco_cache.infrastructure.archive import ArchiveReader, decode_records
from tranco_cache.infrastructure.db_factory import SCHEMA, TABLE, connect_writer
from tranco_cache.infrastructure.mirror import SourceFetcher
from tranco_cache.utils.logging import get_logger
from tranco_cache.utils.profiler import profile_block

log = get_logger(__name__)

_INSERT = f"INSERT INTO {TABLE} (rank, domain) VALUES (?, ?)"


class BuildReport(TypedDict):
    """
    Outcome of a successful rebuild.
    """

    rows: int
    duration_seconds: float
    rows_per_sec: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    archive_path: str
    database_path: str


def _batched(records: Iterable[Tuple[int, str]], size: int) -> Iterator[List[Tuple[int, str]]]:
    iterator = iter(records)
    while True:
        batch = list(itertools.islice(iterator, size))
        if not batch:
            return
        yield batch


def _rollback(conn: sqlite3.Connection) -> None:
    if conn.in_transaction:
        conn.execute("ROLLBACK")


class StoreBuilder:
    """
    Rebuilds the `domains` table at `database_path` from the list at `settings.url`.
    """

    def __init__(self, settings: Settings, fetcher: SourceFetcher, database_path: Path) -> None:
        self.settings = settings
        self.fetcher = fetcher
        self.database_path = database_path

    def rebuild(self) -> BuildReport:
        """
        Fetch (if stale), decode and load the list, replacing the current snapshot.

        Raises
        ------
        FetchError
            The archive is missing or stale locally and could not be downloaded.
        ArchiveError
            The archive is not a readable zip or lacks the CSV member.
        DecodeError
            A CSV row is malformed (a StoreError subclass).
        StoreError
            The database could not be opened or written.
        """
        settings = self.settings
        archive_path = self.fetcher.fetch(settings.url, settings.ttl)
        log.info(
            "Rebuilding store",
            extra={"archive": str(archive_path), "database": str(self.database_path)},
        )

        with ArchiveReader(archive_path, settings.member_name) as archive:
            with profile_block("rebuild") as stats:
                try:
                    rows = self._load(archive.open_text())
                except BaseException:
                    self._mark_incomplete(archive_path)
                    raise

        self._mark_newer(archive_path)
        duration = stats.duration_seconds
        report = BuildReport(
            rows=rows,
            duration_seconds=duration,
            rows_per_sec=rows / duration if duration > 0 else 0.0,
            peak_rss_bytes=stats.peak_rss_bytes,
            cpu_percent=stats.cpu_percent,
            archive_path=str(archive_path),
            database_path=str(self.database_path),
        )
        log.info(
            "Store rebuilt",
            extra={
                "rows": rows,
                "duration_seconds": round(duration, 2),
                "cpu_percent": stats.cpu_percent,
            },
        )
        return report

    def _load(self, lines: Iterable[str]) -> int:
        conn = connect_writer(self.database_path)
        inserted = 0
        try:
            conn.execute(SCHEMA)
            conn.execute(f"DELETE FROM {TABLE}")
            for batch in _batched(decode_records(lines), self.settings.load_batch_size):
                conn.executemany(_INSERT, batch)
                inserted += len(batch)
                log.debug("Inserted batch", extra={"rows": inserted})
            conn.execute("COMMIT")
        except sqlite3.Error as exc:
            _rollback(conn)
            raise StoreError(
                f"rebuild of {self.database_path} failed after {inserted} rows: {exc}"
            ) from exc
        except BaseException:
            _rollback(conn)
            raise
        finally:
            conn.close()
        return inserted

    def _mark_newer(self, archive_path: Path) -> None:
        # Coarse filesystem timestamps can leave both files with the same mtime.
        archive_ns = archive_path.stat().st_mtime_ns
        db_stat = self.database_path.stat()
        if db_stat.st_mtime_ns <= archive_ns:
            bumped = archive_ns + 1_000_000_000
            os.utime(self.database_path, ns=(db_stat.st_atime_ns, bumped))

    def _mark_incomplete(self, archive_path: Path) -> None:
        # A rolled-back transaction may still have touched the database file.
        try:
            if self.database_path.exists():
                archive_ns = archive_path.stat().st_mtime_ns
                os.utime(self.database_path, ns=(archive_ns, archive_ns))
        except OSError as exc:
            log.warning(
                "Could not reset database mtime after failed rebuild",
                extra={"database": str(self.database_path), "error": str(exc)},
            )


__all__ = ["BuildReport", "StoreBuilder"]
