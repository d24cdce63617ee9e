"""
Domain package for tranco-cache.

Exports the record models and the error taxonomy shared by the
infrastructure, store, and CLI layers.
"""

from tranco_cache.domain.errors import (
    ArchiveError,
    DecodeError,
    FetchError,
    StoreError,
    TrancoError,
)
from tranco_cache.domain.models import DomainRecord, StoreStatus

__all__ = [
    "ArchiveError",
    "DecodeError",
    "DomainRecord",
    "FetchError",
    "StoreError",
    "StoreStatus",
    "TrancoError",
]
