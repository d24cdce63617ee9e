"""
Infrastructure package for tranco-cache.

Centralizes I/O concerns: mirroring the upstream archive, reading its CSV
member, and opening SQLite connections. Keep this layer focused on I/O and
error translation, decoupled from the freshness and query logic.
"""

from tranco_cache.infrastructure.archive import ArchiveReader, decode_records
from tranco_cache.infrastructure.db_factory import connect_reader, connect_writer, count_rows
from tranco_cache.infrastructure.mirror import (
    MirrorFetcher,
    SourceFetcher,
    database_path,
    mirror_path,
)

__all__ = [
    "ArchiveReader",
    "MirrorFetcher",
    "SourceFetcher",
    "connect_reader",
    "connect_writer",
    "count_rows",
    "database_path",
    "decode_records",
    "mirror_path",
]
