from __future__ import annotations

from pathlib import Path

import pytest

from tranco_cache import config

TRANCO_ENV = [
    "TRANCO_URL",
    "TRANCO_MEMBER",
    "TRANCO_TTL",
    "TRANCO_STATIC",
    "TRANCO_CACHE_DIR",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in TRANCO_ENV:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    settings = config.Settings()
    assert settings.url == "https://tranco-list.eu/top-1m.csv.zip"
    assert settings.ttl == 86_400
    assert settings.static is False
    assert settings.cache_dir == Path.home() / ".cache" / "tranco-cache"
    assert settings.fetch_attempts >= 1
    assert settings.load_batch_size > 0


def test_member_name_derived_from_url():
    assert config.Settings().member_name == "top-1m.csv"
    settings = config.Settings(url="https://mirror.test/lists/daily.csv.zip?key=1")
    assert settings.member_name == "daily.csv"


def test_member_name_override():
    settings = config.Settings(member="custom.csv")
    assert settings.member_name == "custom.csv"


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("TRANCO_TTL", "60")
    monkeypatch.setenv("TRANCO_STATIC", "1")
    monkeypatch.setenv("TRANCO_CACHE_DIR", str(tmp_path))

    settings = config.Settings()

    assert settings.ttl == 60
    assert settings.static is True
    assert settings.cache_dir == tmp_path


def test_get_settings_is_cached_and_mutable():
    config.get_settings.cache_clear()
    try:
        first = config.get_settings()
        first.ttl = 5
        assert config.get_settings() is first
        assert config.get_settings().ttl == 5
    finally:
        config.get_settings.cache_clear()
