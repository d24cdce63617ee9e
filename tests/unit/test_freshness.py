from __future__ import annotations

import os
from pathlib import Path

import pytest

from tranco_cache.config import Settings
from tranco_cache.store import freshness
from tranco_cache.store.freshness import FreshnessPolicy

NOW = 1_700_000_000.0
TTL = 3_600


def _touch(path: Path, mtime: float) -> Path:
    path.write_bytes(b"x")
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def paths(tmp_path: Path) -> tuple[Path, Path]:
    return tmp_path / "list.zip", tmp_path / "list.db"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(cache_dir=tmp_path, ttl=TTL, static=False)


def _policy(paths: tuple[Path, Path], settings: Settings) -> FreshnessPolicy:
    archive, database = paths
    return FreshnessPolicy(archive, database, settings, clock=lambda: NOW)


def test_up_to_date_when_database_newer_and_archive_within_ttl(paths, settings):
    archive, database = paths
    _touch(archive, NOW - 100)
    _touch(database, NOW - 50)

    policy = _policy(paths, settings)

    assert policy.needs_update() is False
    assert policy.reason() == freshness.CURRENT


@pytest.mark.parametrize("missing", ["archive", "database", "both"])
def test_missing_file_needs_update(paths, settings, missing):
    archive, database = paths
    if missing != "archive" and missing != "both":
        _touch(archive, NOW - 100)
    if missing != "database" and missing != "both":
        _touch(database, NOW - 50)

    policy = _policy(paths, settings)

    assert policy.needs_update() is True
    assert policy.reason() == freshness.MISSING


@pytest.mark.parametrize("database_offset", [0.0, -10.0])
def test_database_not_newer_than_archive_needs_update(paths, settings, database_offset):
    archive, database = paths
    _touch(archive, NOW - 100)
    _touch(database, NOW - 100 + database_offset)

    policy = _policy(paths, settings)

    assert policy.needs_update() is True
    assert policy.reason() == freshness.INCOMPLETE


@pytest.mark.parametrize("archive_age", [TTL, TTL + 1, 10 * TTL])
def test_archive_older_than_ttl_needs_update(paths, settings, archive_age):
    archive, database = paths
    _touch(archive, NOW - archive_age)
    _touch(database, NOW - 1)

    policy = _policy(paths, settings)

    assert policy.needs_update() is True
    assert policy.reason() == freshness.EXPIRED


def test_incomplete_rebuild_reported_before_expiry(paths, settings):
    archive, database = paths
    _touch(archive, NOW - 10 * TTL)
    _touch(database, NOW - 20 * TTL)

    assert _policy(paths, settings).reason() == freshness.INCOMPLETE


@pytest.mark.parametrize("create", [False, True])
def test_static_mode_never_needs_update(paths, settings, create):
    archive, database = paths
    if create:
        _touch(archive, NOW - 10 * TTL)
        _touch(database, NOW - 20 * TTL)
    settings.static = True

    policy = _policy(paths, settings)

    assert policy.needs_update() is False
    assert policy.reason() == freshness.STATIC


def test_settings_changes_apply_to_existing_policy(paths, settings):
    archive, database = paths
    _touch(archive, NOW - 100)
    _touch(database, NOW - 50)
    policy = _policy(paths, settings)
    assert policy.needs_update() is False

    settings.ttl = 60

    assert policy.needs_update() is True
