"""
Error taxonomy for tranco-cache.

Third-party failures (httpx, zipfile, sqlite3) are translated into these types
at the infrastructure seam so callers only need to handle `TrancoError`.
A query that matches nothing is not an error: it returns `None` or `[]`.
"""

from __future__ import annotations

from typing import Optional


class TrancoError(Exception):
    """Base class for every failure raised by tranco-cache."""


class FetchError(TrancoError):
    """The upstream list could not be retrieved."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class ArchiveError(TrancoError):
    """The downloaded archive is unreadable, corrupt, or missing its CSV member."""


class StoreError(TrancoError):
    """The local SQLite store could not be opened, written, or queried."""


class DecodeError(StoreError):
    """
    A CSV row did not have the `rank,domain` shape.

    Subclasses StoreError: a decode failure aborts the rebuild transaction
    exactly like a failed insert does.
    """

    def __init__(self, message: str, line_number: int) -> None:
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number


__all__ = [
    "ArchiveError",
    "DecodeError",
    "FetchError",
    "StoreError",
    "TrancoError",
]
