"""
Query API over the locally cached Tranco list.

A DomainStore owns one query-only SQLite connection, opened lazily by the first
query. Opening it is the only point where freshness is evaluated: if the
store is stale it is rebuilt first. After that the connection is reused for
the lifetime of the object and freshness is never re-checked, so a snapshot
rebuilt later by another process is not seen through an already-open store.

Suffix filters match domains ending in "." + suffix, case-insensitively;
`None` or "" matches every domain.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from tranco_cache.config import Settings, get_settings
from tranco_cache.domain.errors import StoreError
from tranco_cache.domain.models import DomainRecord, StoreStatus
from tranco_cache.infrastructure.db_factory import TABLE, connect_reader, count_rows
from tranco_cache.infrastructure.mirror import MirrorFetcher, SourceFetcher, database_path, mirror_path
from tranco_cache.store.builder import BuildReport, StoreBuilder
from tranco_cache.store.freshness import FreshnessPolicy
from tranco_cache.utils.logging import get_logger

log = get_logger(__name__)

_FILTER = f"FROM {TABLE} WHERE domain LIKE ? ESCAPE '\\'"

_QUERIES: Dict[str, str] = {
    "random_domain": f"SELECT rank, domain {_FILTER} ORDER BY RANDOM() LIMIT 1",
    "top_domain": f"SELECT rank, domain {_FILTER} ORDER BY rank LIMIT 1",
    "sample": f"SELECT domain {_FILTER} ORDER BY RANDOM() LIMIT ?",
    "top_domains": f"SELECT domain {_FILTER} ORDER BY rank LIMIT ?",
    "all": f"SELECT domain {_FILTER} ORDER BY rank",
    "rank": f"SELECT rank FROM {TABLE} WHERE domain = ?",
}


def suffix_pattern(suffix: Optional[str]) -> str:
    """
    LIKE pattern for a suffix filter.

    A leading dot is optional (`"org"` and `".org"` are equivalent) and LIKE
    wildcards in the suffix are matched literally.
    """
    suffix = (suffix or "").lstrip(".")
    if not suffix:
        return "%"
    escaped = suffix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%.{escaped}"


def _check_count(count: int) -> None:
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")


def _mtime(path: Path) -> Optional[datetime]:
    if not path.exists():
        return None
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


class DomainStore:
    """
    Locally cached, queryable copy of the ranked domain list.

    Parameters
    ----------
    settings : Settings, optional
        Configuration; defaults to the process-wide `get_settings()`.
    fetcher : SourceFetcher, optional
        Provider of the local archive copy; defaults to an httpx MirrorFetcher
        writing under `settings.cache_dir`.

    Example
    -------
        with DomainStore() as store:
            store.rank("example.com")
            store.top_domains(10, "org")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[SourceFetcher] = None,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.fetcher = fetcher or MirrorFetcher(
            cache_dir=self.settings.cache_dir,
            timeout_seconds=self.settings.fetch_timeout_seconds,
            attempts=self.settings.fetch_attempts,
        )
        self.archive_path = mirror_path(self.settings.url, self.settings.cache_dir)
        self.database_path = database_path(self.archive_path)
        self.policy = FreshnessPolicy(self.archive_path, self.database_path, self.settings)
        self.builder = StoreBuilder(self.settings, self.fetcher, self.database_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._cursors: Dict[str, sqlite3.Cursor] = {}

    # connection lifecycle

    def connection(self) -> sqlite3.Connection:
        """
        Return the read connection, rebuilding the store first if it is stale.

        Freshness is only evaluated here, on the first call.
        """
        if self._conn is None:
            if self.policy.needs_update():
                log.info("Store needs update", extra={"reason": self.policy.reason()})
                self.builder.rebuild()
            self._conn = connect_reader(self.database_path)
        return self._conn

    def update_db(self) -> BuildReport:
        """
        Force a rebuild regardless of freshness.

        An already-open read connection is kept; whether it observes the new
        snapshot is up to SQLite's isolation, not this object.
        """
        return self.builder.rebuild()

    rebuild = update_db

    def needs_update(self) -> bool:
        return self.policy.needs_update()

    def close(self) -> None:
        self._cursors.clear()
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "DomainStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # queries

    def _cursor(self, kind: str) -> sqlite3.Cursor:
        cursor = self._cursors.get(kind)
        if cursor is None:
            cursor = self._cursors[kind] = self.connection().cursor()
        return cursor

    def _execute(self, kind: str, params: Sequence[Any]) -> sqlite3.Cursor:
        return self._cursor(kind).execute(_QUERIES[kind], params)

    def _fetch_row(self, kind: str, params: Sequence[Any]) -> Optional[tuple]:
        # Statements must run to completion: a pending SELECT holds a shared
        # lock that blocks a rebuild's commit.
        try:
            rows = self._execute(kind, params).fetchall()
            return rows[0] if rows else None
        except sqlite3.Error as exc:
            raise StoreError(f"{kind} query on {self.database_path} failed: {exc}") from exc

    def _fetch_domains(self, kind: str, params: Sequence[Any]) -> List[str]:
        try:
            return [domain for (domain,) in self._execute(kind, params).fetchall()]
        except sqlite3.Error as exc:
            raise StoreError(f"{kind} query on {self.database_path} failed: {exc}") from exc

    def random_domain(self, suffix: Optional[str] = None) -> Optional[DomainRecord]:
        """A uniformly random domain matching `suffix`, or None."""
        row = self._fetch_row("random_domain", (suffix_pattern(suffix),))
        return DomainRecord(rank=row[0], domain=row[1]) if row else None

    def top_domain(self, suffix: Optional[str] = None) -> Optional[DomainRecord]:
        """The highest-ranked (smallest rank) domain matching `suffix`, or None."""
        row = self._fetch_row("top_domain", (suffix_pattern(suffix),))
        return DomainRecord(rank=row[0], domain=row[1]) if row else None

    def sample(self, count: int, suffix: Optional[str] = None) -> List[str]:
        """Up to `count` distinct random domains matching `suffix`."""
        _check_count(count)
        return self._fetch_domains("sample", (suffix_pattern(suffix), count))

    def top_domains(self, count: int, suffix: Optional[str] = None) -> List[str]:
        """Up to `count` highest-ranked domains matching `suffix`, rank ascending."""
        _check_count(count)
        return self._fetch_domains("top_domains", (suffix_pattern(suffix), count))

    def all(self, suffix: Optional[str] = None) -> List[str]:
        """
        Every domain matching `suffix`, rank ascending.

        Without a suffix this is the whole list, about a million strings.
        """
        return self._fetch_domains("all", (suffix_pattern(suffix),))

    def rank(self, domain: str) -> Optional[int]:
        """Rank of `domain` (case-insensitive), or None if it is not listed."""
        row = self._fetch_row("rank", (domain,))
        return int(row[0]) if row else None

    # introspection

    def status(self) -> StoreStatus:
        """Describe the on-disk state without opening the query connection."""
        return StoreStatus(
            url=self.settings.url,
            archive_path=self.archive_path,
            database_path=self.database_path,
            archive_mtime=_mtime(self.archive_path),
            database_mtime=_mtime(self.database_path),
            ttl=self.settings.ttl,
            static=self.settings.static,
            needs_update=self.policy.needs_update(),
            reason=self.policy.reason(),
            rows=count_rows(self.database_path),
        )


__all__ = ["DomainStore", "suffix_pattern"]
