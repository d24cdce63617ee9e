"""
Store package for tranco-cache.

Re-exports the freshness policy, the rebuild pipeline and the query API so
downstream code can import from `tranco_cache.store` directly.
"""

from tranco_cache.store.builder import BuildReport, StoreBuilder
from tranco_cache.store.domain_store import DomainStore, suffix_pattern
from tranco_cache.store.freshness import FreshnessPolicy

__all__ = [
    "BuildReport",
    "DomainStore",
    "FreshnessPolicy",
    "StoreBuilder",
    "suffix_pattern",
]
