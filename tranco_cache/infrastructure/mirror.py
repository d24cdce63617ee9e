"""
Local mirroring of the upstream list archive.

`MirrorFetcher.fetch(url, max_age_seconds)` returns the path of a local copy of
`url` that is no older than `max_age_seconds`, downloading only when the copy
is missing or stale. The mirror path is a pure function of the URL, and the
mirror file's mtime records when its content was last fetched or revalidated.

Downloads are streamed into a temporary file next to the mirror and moved into
place atomically, so an interrupted transfer never replaces a good copy.
Transport errors are retried with tenacity before surfacing as FetchError.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
import time
from email.utils import formatdate
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import urlsplit

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from tranco_cache.domain.errors import FetchError
from tranco_cache.utils.logging import get_logger

log = get_logger(__name__)

USER_AGENT = "tranco-cache/0.1"
_CHUNK_SIZE = 1 << 16


def mirror_path(url: str, cache_dir: Path) -> Path:
    """
    Deterministic local path for `url` inside `cache_dir`.

    The name is the SHA-256 of the URL, keeping the URL's file extension so the
    archive type stays visible (`<sha256>.zip`).
    """
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    suffix = PurePosixPath(urlsplit(url).path).suffix
    return cache_dir / f"{digest}{suffix}"


def database_path(archive: Path) -> Path:
    """Path of the SQLite store derived from a mirrored archive: same stem, `.db`."""
    return archive.with_suffix(".db")


def is_fresh(path: Path, max_age_seconds: float, now: Optional[float] = None) -> bool:
    """True if `path` exists and its mtime is newer than `now - max_age_seconds`."""
    if not path.exists():
        return False
    current = time.time() if now is None else now
    return path.stat().st_mtime > current - max_age_seconds


@runtime_checkable
class SourceFetcher(Protocol):
    """
    Contract for anything that can provide a local copy of a remote resource.
    """

    def fetch(self, url: str, max_age_seconds: float) -> Path:
        """
        Return a local path whose content matches `url` as of a fetch no older
        than `max_age_seconds`.

        Raises
        ------
        FetchError
            If the resource is stale or missing locally and cannot be retrieved.
        """
        ...


class MirrorFetcher:
    """
    httpx-backed SourceFetcher storing mirrors under a cache directory.
    """

    retry_wait: wait_base = wait_exponential(multiplier=1, min=1, max=10)

    def __init__(
        self,
        cache_dir: Path,
        timeout_seconds: float = 60.0,
        attempts: int = 3,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.cache_dir = cache_dir
        self.timeout_seconds = timeout_seconds
        self.attempts = attempts
        self._client = client

    def path_for(self, url: str) -> Path:
        return mirror_path(url, self.cache_dir)

    def fetch(self, url: str, max_age_seconds: float) -> Path:
        target = self.path_for(url)
        if is_fresh(target, max_age_seconds):
            log.debug("Mirror is fresh", extra={"url": url, "path": str(target)})
            return target

        log.info("Fetching upstream list", extra={"url": url, "path": str(target)})
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._download_with_retry(url, target)
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"GET {url} failed with HTTP {exc.response.status_code}", url=url
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {url} failed: {exc}", url=url) from exc
        except OSError as exc:
            raise FetchError(f"cannot write mirror {target}: {exc}", url=url) from exc
        return target

    def _download_with_retry(self, url: str, target: Path) -> None:
        download = retry(
            stop=stop_after_attempt(self.attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )(self._download)
        download(url, target)

    def _download(self, url: str, target: Path) -> None:
        headers = {"User-Agent": USER_AGENT}
        if target.exists():
            headers["If-Modified-Since"] = formatdate(target.stat().st_mtime, usegmt=True)

        client = self._client or httpx.Client(
            follow_redirects=True, timeout=self.timeout_seconds
        )
        try:
            with client.stream("GET", url, headers=headers) as response:
                if response.status_code == httpx.codes.NOT_MODIFIED and target.exists():
                    os.utime(target)
                    log.info("Upstream not modified", extra={"url": url})
                    return
                response.raise_for_status()
                size = self._write_atomically(response, target)
        finally:
            if self._client is None:
                client.close()
        log.info("Upstream list fetched", extra={"url": url, "bytes": size})

    def _write_atomically(self, response: httpx.Response, target: Path) -> int:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".part", dir=str(target.parent)
        )
        size = 0
        try:
            with os.fdopen(fd, "wb") as f:
                for chunk in response.iter_bytes(_CHUNK_SIZE):
                    f.write(chunk)
                    size += len(chunk)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return size


__all__ = [
    "MirrorFetcher",
    "SourceFetcher",
    "database_path",
    "is_fresh",
    "mirror_path",
]
