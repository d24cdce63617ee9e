from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

import tranco_cache
from conftest import TEST_URL, LocalFetcher
from tranco_cache import api
from tranco_cache.config import Settings, get_settings
from tranco_cache.store import DomainStore


@pytest.fixture
def default_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[Settings, None, None]:
    monkeypatch.setenv("TRANCO_URL", TEST_URL)
    monkeypatch.setenv("TRANCO_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.delenv("TRANCO_STATIC", raising=False)
    get_settings.cache_clear()
    api.reset_store()
    try:
        yield get_settings()
    finally:
        api.reset_store()
        get_settings.cache_clear()


@pytest.fixture
def seeded(default_settings: Settings, source_archive: Path) -> LocalFetcher:
    fetcher = LocalFetcher(default_settings.cache_dir, source_archive)
    with DomainStore(settings=default_settings, fetcher=fetcher) as store:
        store.update_db()
    return fetcher


def test_default_store_is_memoized(default_settings: Settings):
    first = api.get_store()
    assert api.get_store() is first
    assert first.settings is default_settings

    api.reset_store()

    assert api.get_store() is not first


def test_module_functions_query_default_store(default_settings: Settings, seeded: LocalFetcher):
    default_settings.static = True

    assert tranco_cache.rank("B.ORG") == 2
    assert tranco_cache.top_domain().as_tuple() == ("a.com", 1)
    assert tranco_cache.top_domains(2, "org") == ["b.org", "c.org"]
    assert tranco_cache.sample(10, "net") == ["e.net"]
    assert tranco_cache.random_domain("net").domain == "e.net"
    assert tranco_cache.all_domains("com") == ["a.com", "d.com"]


def test_update_db_rebuilds_default_store(default_settings: Settings, seeded: LocalFetcher):
    api.get_store().builder.fetcher = seeded

    report = tranco_cache.update_db()

    assert report["rows"] == 5
    assert seeded.calls == 2
