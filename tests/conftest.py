"""
Pytest configuration for tranco-cache.

Provides fixtures for:
- Settings pointing at a temporary cache directory
- Tranco-style zip archives built with scripts/make_fixture.py
- A local fetcher standing in for the HTTP mirror
- A DomainStore wired to both
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Generator, List, Sequence, Tuple

import pytest

from scripts.make_fixture import _write_archive
from tranco_cache.config import Settings
from tranco_cache.infrastructure.mirror import mirror_path
from tranco_cache.store import DomainStore

TEST_URL = "https://tranco.test/top-1m.csv.zip"

FIVE_ROWS: List[Tuple[int, str]] = [
    (1, "a.com"),
    (2, "b.org"),
    (3, "c.org"),
    (4, "d.com"),
    (5, "e.net"),
]


class LocalFetcher:
    """
    SourceFetcher that "downloads" by copying a local archive into the mirror path.

    Every call copies, whatever the max age, so tests control exactly which
    archive a rebuild sees. `calls` counts invocations.
    """

    def __init__(self, cache_dir: Path, source: Path) -> None:
        self.cache_dir = cache_dir
        self.source = source
        self.calls = 0

    def fetch(self, url: str, max_age_seconds: float) -> Path:
        self.calls += 1
        target = mirror_path(url, self.cache_dir)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.source, target)
        return target


def make_archive(directory: Path, records: Sequence[Tuple[int, str]], name: str = "source.zip") -> Path:
    return _write_archive(directory / name, records)


def age_file(path: Path, seconds: float) -> None:
    """Move a file's mtime `seconds` into the past."""
    stat = path.stat()
    os.utime(path, (stat.st_atime, stat.st_mtime - seconds))


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings fixture isolated to a per-test cache directory.

    A small batch size makes multi-batch rebuilds observable with tiny lists.
    """
    return Settings(
        url=TEST_URL,
        cache_dir=tmp_path / "cache",
        ttl=86_400,
        static=False,
        load_batch_size=2,
    )


@pytest.fixture
def source_archive(tmp_path: Path) -> Path:
    return make_archive(tmp_path, FIVE_ROWS)


@pytest.fixture
def local_fetcher(test_settings: Settings, source_archive: Path) -> LocalFetcher:
    return LocalFetcher(test_settings.cache_dir, source_archive)


@pytest.fixture
def store(test_settings: Settings, local_fetcher: LocalFetcher) -> Generator[DomainStore, None, None]:
    """
    DomainStore over the five-row snapshot; nothing is built until first query.
    """
    domain_store = DomainStore(settings=test_settings, fetcher=local_fetcher)
    try:
        yield domain_store
    finally:
        domain_store.close()
