"""
Reading the ranked CSV out of the upstream zip archive.

The CSV has no header and two fields per row: integer rank, domain. Rows are
yielded in file order; the file is trusted to be rank-ordered and no
contiguity check is made.
"""

from __future__ import annotations

import csv
import io
import zipfile
import zlib
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, Tuple

from tranco_cache.domain.errors import ArchiveError, DecodeError


class ArchiveReader:
    """
    Context manager exposing one member of a zip archive as a UTF-8 text stream.

    Example
    -------
        with ArchiveReader(path, "top-1m.csv") as archive:
            for rank, domain in decode_records(archive.open_text()):
                ...
    """

    def __init__(self, path: Path, member: str) -> None:
        self.path = path
        self.member = member
        self._zip: Optional[zipfile.ZipFile] = None

    def open(self) -> "ArchiveReader":
        """Open the archive and check the member exists; raises ArchiveError."""
        self._zip = self._open_zip()
        return self

    def _open_zip(self) -> zipfile.ZipFile:
        try:
            archive = zipfile.ZipFile(self.path)
        except (OSError, zipfile.BadZipFile) as exc:
            raise ArchiveError(f"cannot read archive {self.path}: {exc}") from exc
        if self.member not in archive.namelist():
            archive.close()
            raise ArchiveError(f"archive {self.path} has no member {self.member!r}")
        return archive

    def open_text(self) -> Iterator[str]:
        """
        Yield the member's lines as text.

        Corruption detected while streaming (bad CRC, truncated deflate data)
        is raised as ArchiveError.
        """
        archive = self._zip
        if archive is None:
            archive = self._zip = self._open_zip()
        try:
            with archive.open(self.member) as raw:
                text: IO[str] = io.TextIOWrapper(raw, encoding="utf-8", newline="")
                yield from text
        except (zipfile.BadZipFile, zlib.error, EOFError) as exc:
            raise ArchiveError(f"corrupt member {self.member!r} in {self.path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ArchiveError(f"member {self.member!r} is not UTF-8: {exc}") from exc

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> "ArchiveReader":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def decode_records(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """
    Parse `rank,domain` CSV lines into `(rank, domain)` tuples.

    Blank lines are skipped. Any other row that is not exactly two fields with
    an integer first field raises DecodeError with its 1-based line number.
    """
    reader = csv.reader(lines)
    try:
        for row in reader:
            if not row:
                continue
            if len(row) != 2:
                raise DecodeError(f"expected 2 fields, got {len(row)}", reader.line_num)
            rank_text, domain = row
            try:
                rank = int(rank_text)
            except ValueError:
                raise DecodeError(f"rank {rank_text!r} is not an integer", reader.line_num) from None
            yield rank, domain
    except csv.Error as exc:
        raise DecodeError(str(exc), reader.line_num) from exc


__all__ = ["ArchiveReader", "decode_records"]
