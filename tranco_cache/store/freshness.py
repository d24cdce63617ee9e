"""
Deciding whether the local store must be rebuilt before it is queried.

The only inputs are the static flag, the TTL, and the modification times of
the two local artifacts: the mirrored archive and the SQLite database derived
from it. Rules are evaluated in order and the first one that fires wins:

1. static mode        -> never rebuild, even if files are missing
2. a file is missing  -> rebuild
3. database not newer than archive (download finished, rebuild did not)
                      -> rebuild
4. archive older than now - TTL
                      -> rebuild
5. otherwise          -> up to date
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from tranco_cache.config import Settings

STATIC = "static"
MISSING = "missing"
INCOMPLETE = "incomplete"
EXPIRED = "expired"
CURRENT = "current"


class FreshnessPolicy:
    """
    Staleness check for one archive/database pair.

    `settings.ttl` and `settings.static` are read on every evaluation, so
    changes made to the shared Settings object before the first query apply.
    """

    def __init__(
        self,
        archive_path: Path,
        database_path: Path,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.archive_path = archive_path
        self.database_path = database_path
        self.settings = settings
        self._clock = clock

    def reason(self) -> str:
        """Name of the first rule that applies (see module docstring)."""
        if self.settings.static:
            return STATIC
        if not (self.database_path.exists() and self.archive_path.exists()):
            return MISSING
        archive_mtime = self.archive_path.stat().st_mtime
        if not self.database_path.stat().st_mtime > archive_mtime:
            return INCOMPLETE
        if not archive_mtime > self._clock() - self.settings.ttl:
            return EXPIRED
        return CURRENT

    def needs_update(self) -> bool:
        return self.reason() in (MISSING, INCOMPLETE, EXPIRED)


__all__ = ["CURRENT", "EXPIRED", "FreshnessPolicy", "INCOMPLETE", "MISSING", "STATIC"]
