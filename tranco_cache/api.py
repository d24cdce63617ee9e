"""
Module-level query functions backed by a process-default DomainStore.

Usage:
    import tranco_cache

    tranco_cache.get_settings().ttl = 3600   # before the first query
    tranco_cache.rank("example.com")
    tranco_cache.top_domains(5, suffix="org")

The default store is created on first use by `get_store()` and then shared by
every function here, so freshness is checked once per process. Code that needs
its own configuration should construct a `DomainStore` directly.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from tranco_cache.domain.models import DomainRecord
from tranco_cache.store.builder import BuildReport
from tranco_cache.store.domain_store import DomainStore


@lru_cache(maxsize=1)
def get_store() -> DomainStore:
    """
    Retrieve the process-default DomainStore, built from `get_settings()`.
    """
    return DomainStore()


def reset_store() -> None:
    """Close and forget the default store; the next call builds a new one."""
    if get_store.cache_info().currsize:
        get_store().close()
    get_store.cache_clear()


def random_domain(suffix: Optional[str] = None) -> Optional[DomainRecord]:
    return get_store().random_domain(suffix)


def top_domain(suffix: Optional[str] = None) -> Optional[DomainRecord]:
    return get_store().top_domain(suffix)


def sample(count: int, suffix: Optional[str] = None) -> List[str]:
    return get_store().sample(count, suffix)


def top_domains(count: int, suffix: Optional[str] = None) -> List[str]:
    return get_store().top_domains(count, suffix)


def all_domains(suffix: Optional[str] = None) -> List[str]:
    return get_store().all(suffix)


def rank(domain: str) -> Optional[int]:
    return get_store().rank(domain)


def update_db() -> BuildReport:
    """Force a rebuild of the default store's database."""
    return get_store().update_db()


__all__ = [
    "all_domains",
    "get_store",
    "random_domain",
    "rank",
    "reset_store",
    "sample",
    "top_domain",
    "top_domains",
    "update_db",
]
