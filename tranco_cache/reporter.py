from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from tranco_cache.domain.models import DomainRecord, StoreStatus
from tranco_cache.store.builder import BuildReport


def _fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S UTC") if value else "[dim]missing[/dim]"


def print_records(
    records: Sequence[DomainRecord], title: str, console: Optional[Console] = None
) -> None:
    """
    Render ranked records as a two-column table (rank, domain).
    """
    console = console or Console()
    if not records:
        console.print("[yellow]No matching domains.[/yellow]")
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Rank", justify="right", style="magenta")
    table.add_column("Domain", style="cyan", no_wrap=True)
    for record in records:
        table.add_row(f"{record.rank:,}", record.domain)
    console.print(table)


def print_domains(domains: Iterable[str], console: Optional[Console] = None) -> int:
    """
    Print bare domain names one per line, for piping. Returns the number printed.
    """
    console = console or Console()
    printed = 0
    for domain in domains:
        console.print(domain, markup=False, highlight=False, soft_wrap=True)
        printed += 1
    return printed


def print_status(status: StoreStatus, console: Optional[Console] = None) -> None:
    """
    Render the local cache state: paths, ages, row count and freshness verdict.
    """
    console = console or Console()
    table = Table(title="Tranco Cache", box=box.ROUNDED, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")

    verdict = "[red]stale[/red]" if status.needs_update else "[green]fresh[/green]"
    rows = f"{status.rows:,}" if status.rows is not None else "[dim]no database[/dim]"

    table.add_row("URL", status.url)
    table.add_row("Archive", str(status.archive_path))
    table.add_row("Archive fetched", _fmt_time(status.archive_mtime))
    table.add_row("Database", str(status.database_path))
    table.add_row("Database built", _fmt_time(status.database_mtime))
    table.add_row("Rows", rows)
    table.add_row("TTL (s)", f"{status.ttl:,}")
    table.add_row("Static", "yes" if status.static else "no")
    table.add_row("Status", f"{verdict} ({status.reason})")
    console.print(table)


def print_build_report(report: BuildReport, console: Optional[Console] = None) -> None:
    """
    Render the outcome of a rebuild.
    """
    console = console or Console()
    table = Table(title="Rebuild", box=box.ROUNDED)
    table.add_column("Rows", justify="right", style="magenta")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Throughput (rows/s)", justify="right", style="bold green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("CPU %", justify="right", style="cyan")

    mem_bytes = report["peak_rss_bytes"] or 0
    cpu = report["cpu_percent"]
    table.add_row(
        f"{report['rows']:,}",
        f"{report['duration_seconds']:.1f}",
        f"{report['rows_per_sec']:,.0f}",
        f"{mem_bytes / (1024 * 1024):.2f}",
        f"{cpu:.1f}" if cpu is not None else "-",
    )
    console.print(table)
    console.print(f"[dim]{report['database_path']}[/dim]")


__all__ = ["print_build_report", "print_domains", "print_records", "print_status"]
