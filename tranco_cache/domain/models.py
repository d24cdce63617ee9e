"""
Domain models for tranco-cache.

`DomainRecord` is one row of the ranked list as returned by single-row queries;
`StoreStatus` is a point-in-time description of the local cache used by the
CLI `info` command.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, Field


class DomainRecord(BaseModel):
    """
    Representation of a single row in the `domains` table.
    """

    # Values are returned as stored; upstream rows are only checked for shape.
    rank: int = Field(..., description="Position in the list, 1 = most popular.")
    domain: str = Field(..., description="Registered domain name.")

    model_config = {
        "frozen": True,
    }

    def as_tuple(self) -> Tuple[str, int]:
        """Return `(domain, rank)`."""
        return self.domain, self.rank


class StoreStatus(BaseModel):
    """
    Snapshot of the on-disk state behind a DomainStore.
    """

    url: str
    archive_path: Path
    database_path: Path
    archive_mtime: Optional[datetime] = None
    database_mtime: Optional[datetime] = None
    ttl: int
    static: bool
    needs_update: bool
    reason: str
    rows: Optional[int] = Field(None, description="Row count, None when no database exists.")

    model_config = {
        "frozen": True,
    }


__all__ = ["DomainRecord", "StoreStatus"]
