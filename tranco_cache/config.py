"""
Configuration settings for tranco-cache.

Uses Pydantic Settings to load environment variables for the upstream list
location, refresh policy, local cache directory, and logging. The cached
instance returned by `get_settings()` is the process-wide configuration: its
`ttl` and `static` fields may be changed at runtime before the first query,
since they are read each time freshness is evaluated.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TRANCO_URL = "https://tranco-list.eu/top-1m.csv.zip"


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "tranco-cache"


class Settings(BaseSettings):
    # Upstream list
    url: str = Field(TRANCO_URL, alias="TRANCO_URL")
    member: Optional[str] = Field(None, alias="TRANCO_MEMBER")

    # Refresh policy
    ttl: int = Field(86_400, alias="TRANCO_TTL", ge=0)
    static: bool = Field(False, alias="TRANCO_STATIC")

    # Local state
    cache_dir: Path = Field(default_factory=_default_cache_dir, alias="TRANCO_CACHE_DIR")

    # Fetch / load tuning
    fetch_timeout_seconds: float = Field(60.0, alias="TRANCO_FETCH_TIMEOUT", gt=0)
    fetch_attempts: int = Field(3, alias="TRANCO_FETCH_ATTEMPTS", ge=1)
    load_batch_size: int = Field(10_000, alias="TRANCO_LOAD_BATCH_SIZE", ge=1)

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def member_name(self) -> str:
        """
        Name of the CSV entry inside the archive.

        Defaults to the URL's file name without its `.zip` extension, which is
        how the upstream provider names the member (`top-1m.csv.zip` holds
        `top-1m.csv`).
        """
        if self.member:
            return self.member
        name = PurePosixPath(urlsplit(self.url).path).name
        return name[: -len(".zip")] if name.endswith(".zip") else name


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "TRANCO_URL", "get_settings"]
