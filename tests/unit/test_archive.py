from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from conftest import FIVE_ROWS, make_archive
from tranco_cache.domain.errors import ArchiveError, DecodeError, StoreError
from tranco_cache.infrastructure.archive import ArchiveReader, decode_records

MEMBER = "top-1m.csv"


def test_reads_records_in_file_order(tmp_path: Path):
    path = make_archive(tmp_path, FIVE_ROWS)

    with ArchiveReader(path, MEMBER) as archive:
        records = list(decode_records(archive.open_text()))

    assert records == FIVE_ROWS


def test_missing_archive_raises(tmp_path: Path):
    with pytest.raises(ArchiveError):
        ArchiveReader(tmp_path / "absent.zip", MEMBER).open()


def test_non_zip_raises(tmp_path: Path):
    path = tmp_path / "list.zip"
    path.write_text("1,a.com\n", encoding="utf-8")

    with pytest.raises(ArchiveError):
        ArchiveReader(path, MEMBER).open()


def test_missing_member_raises(tmp_path: Path):
    path = make_archive(tmp_path, FIVE_ROWS)

    with pytest.raises(ArchiveError, match="no member"):
        ArchiveReader(path, "other.csv").open()


def test_bad_crc_raises_while_streaming(tmp_path: Path):
    path = tmp_path / "list.zip"
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as zf:
        zf.writestr(MEMBER, b"1,a.com\r\n2,b.org\r\n")
    data = path.read_bytes()
    path.write_bytes(data.replace(b"2,b.org", b"2,b.orh", 1))

    with ArchiveReader(path, MEMBER) as archive:
        with pytest.raises(ArchiveError):
            list(decode_records(archive.open_text()))


def test_decode_skips_blank_lines():
    lines = ["1,a.com\r\n", "\r\n", "2,b.org\r\n"]

    assert list(decode_records(lines)) == [(1, "a.com"), (2, "b.org")]


def test_decode_rejects_wrong_field_count():
    lines = ["1,a.com\n", "2,b.org,extra\n"]

    with pytest.raises(DecodeError) as excinfo:
        list(decode_records(lines))

    assert excinfo.value.line_number == 2


def test_decode_rejects_non_integer_rank():
    with pytest.raises(DecodeError, match="not an integer"):
        list(decode_records(["one,a.com\n"]))


def test_decode_error_is_a_store_error():
    assert issubclass(DecodeError, StoreError)


def test_open_text_opens_archive_on_demand(tmp_path: Path):
    path = make_archive(tmp_path, FIVE_ROWS)
    reader = ArchiveReader(path, MEMBER)

    try:
        assert list(decode_records(reader.open_text())) == FIVE_ROWS
    finally:
        reader.close()


def test_open_text_on_missing_member_raises(tmp_path: Path):
    path = make_archive(tmp_path, FIVE_ROWS)
    reader = ArchiveReader(path, "other.csv")

    with pytest.raises(ArchiveError, match="no member"):
        next(reader.open_text())
