"""
tranco-cache - a locally cached, queryable copy of the Tranco top-1M list.

The list is published as a zipped CSV of `rank,domain` rows. This package
mirrors it, loads it into a local SQLite database, and answers ranking queries
without a network round-trip:

- what rank does a domain have
- the top N domains, optionally under a suffix such as "org"
- random domains, optionally under a suffix

The local copy is rebuilt when it is older than `TTL` seconds (default one
day), at most once per process, and never in static mode.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from tranco_cache.api import (
    all_domains,
    get_store,
    random_domain,
    rank,
    reset_store,
    sample,
    top_domain,
    top_domains,
    update_db,
)
from tranco_cache.config import Settings, get_settings
from tranco_cache.domain import (
    ArchiveError,
    DecodeError,
    DomainRecord,
    FetchError,
    StoreError,
    TrancoError,
)
from tranco_cache.store import DomainStore, FreshnessPolicy, StoreBuilder
from tranco_cache.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Store
    "DomainStore",
    "FreshnessPolicy",
    "StoreBuilder",
    # Default-store queries
    "all_domains",
    "get_store",
    "random_domain",
    "rank",
    "reset_store",
    "sample",
    "top_domain",
    "top_domains",
    "update_db",
    # Models and errors
    "DomainRecord",
    "TrancoError",
    "FetchError",
    "ArchiveError",
    "DecodeError",
    "StoreError",
    # Logging
    "configure_logging",
    "get_logger",
]
