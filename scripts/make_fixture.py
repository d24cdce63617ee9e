"""
Fixture generation script for tranco-cache.

Writes a synthetic archive shaped like the upstream Tranco download: a zip
holding one header-less `rank,domain` CSV member. Ranks are dense from 1,
domains are unique and drawn deterministically from a seed, so the file can
be used for tests and for timing a full rebuild offline.
"""

from __future__ import annotations

import csv
import io
import random
import sys
import time
import zipfile
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

import typer

app = typer.Typer(help="Generate a synthetic Tranco-style zip archive.")

DEFAULT_SUFFIXES = ["com", "org", "net", "de", "co.uk", "io"]


def _generate_rows(rows: int, suffixes: Sequence[str], seed: int) -> Iterator[Tuple[int, str]]:
    rng = random.Random(seed)
    for rank in range(1, rows + 1):
        label = "".join(rng.choice("abcdefghijklmnopqrstuvwxyz") for _ in range(rng.randint(3, 10)))
        # The rank keeps every name unique whatever the RNG produces.
        yield rank, f"{label}{rank}.{rng.choice(suffixes)}"


def _write_archive(path: Path, records: Sequence[Tuple[int, str]], member: str = "top-1m.csv") -> Path:
    """
    Write `records` as a zipped `rank,domain` CSV (CRLF line endings, like upstream).
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n")
    writer.writerows(records)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(member, buffer.getvalue().encode("utf-8"))
    return path


def _generate_archive(
    path: Path, rows: int, suffixes: Sequence[str] = DEFAULT_SUFFIXES, seed: int = 42
) -> List[Tuple[int, str]]:
    records = list(_generate_rows(rows, suffixes, seed))
    _write_archive(path, records)
    return records


@app.command()
def main(
    output: Path = typer.Argument(..., help="Path of the zip archive to write."),
    rows: int = typer.Option(
        1_000_000,
        "--rows",
        "-r",
        min=1,
        help="Number of ranked domains to generate.",
    ),
    suffix: List[str] = typer.Option(
        DEFAULT_SUFFIXES,
        "--suffix",
        "-s",
        help="Suffix pool to draw from (repeatable).",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
) -> None:
    """
    Generate a ranked list and write it as a Tranco-style zip archive.
    """
    start = time.perf_counter()
    typer.echo(f"Generating {rows:,} rows -> {output} (seed={seed})")
    _generate_archive(output, rows=rows, suffixes=suffix, seed=seed)
    duration = time.perf_counter() - start
    typer.echo(f"Archive written in {duration:.2f}s ({output.stat().st_size:,} bytes)")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
