from __future__ import annotations

import sys
from typing import NoReturn, Optional

import typer

from tranco_cache.api import get_store
from tranco_cache.config import get_settings
from tranco_cache.domain.errors import TrancoError
from tranco_cache.reporter import print_build_report, print_domains, print_records, print_status
from tranco_cache.utils.logging import configure_logging

app = typer.Typer(help="Query a locally cached copy of the Tranco top-1M domain list.")

SUFFIX_OPTION = typer.Option(
    None,
    "--suffix",
    "-s",
    help="Only consider domains ending in this suffix (e.g. org, co.uk).",
)


def _fail(exc: TrancoError) -> NoReturn:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def configure(
    ttl: Optional[int] = typer.Option(
        None, "--ttl", help="Maximum age of the local copy in seconds (default from settings)."
    ),
    static: bool = typer.Option(
        False, "--static", help="Never refresh the local copy, even if it is stale or missing."
    ),
) -> None:
    """
    Apply process-wide settings before any command runs.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    if ttl is not None:
        settings.ttl = ttl
    if static:
        settings.static = True


@app.command()
def info() -> None:
    """
    Show effective configuration and the state of the local cache.
    """
    try:
        status = get_store().status()
    except TrancoError as exc:
        _fail(exc)
    print_status(status)


@app.command()
def update() -> None:
    """
    Force a rebuild of the local database, re-downloading the list if it is stale.
    """
    try:
        report = get_store().update_db()
    except TrancoError as exc:
        _fail(exc)
    print_build_report(report)


@app.command()
def rank(domain: str = typer.Argument(..., help="Domain to look up (case-insensitive).")) -> None:
    """
    Print the rank of DOMAIN; exits with status 1 if it is not listed.
    """
    try:
        value = get_store().rank(domain)
    except TrancoError as exc:
        _fail(exc)
    if value is None:
        typer.echo(f"{domain}: not ranked", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(value))


@app.command()
def top(
    suffix: Optional[str] = SUFFIX_OPTION,
    count: Optional[int] = typer.Option(
        None, "--count", "-n", min=0, help="Print this many domains, one per line."
    ),
) -> None:
    """
    Show the highest-ranked domain, or the top COUNT domains.
    """
    store = get_store()
    try:
        if count is None:
            record = store.top_domain(suffix)
            print_records([record] if record else [], title="Top domain")
        else:
            print_domains(store.top_domains(count, suffix))
    except TrancoError as exc:
        _fail(exc)


@app.command("random")
def random_(
    suffix: Optional[str] = SUFFIX_OPTION,
    count: Optional[int] = typer.Option(
        None, "--count", "-n", min=0, help="Print this many distinct domains, one per line."
    ),
) -> None:
    """
    Show a random domain, or a random sample of COUNT domains.
    """
    store = get_store()
    try:
        if count is None:
            record = store.random_domain(suffix)
            print_records([record] if record else [], title="Random domain")
        else:
            print_domains(store.sample(count, suffix))
    except TrancoError as exc:
        _fail(exc)


@app.command("all")
def all_(suffix: Optional[str] = SUFFIX_OPTION) -> None:
    """
    Print every listed domain (optionally under SUFFIX), in rank order.
    """
    try:
        print_domains(get_store().all(suffix))
    except TrancoError as exc:
        _fail(exc)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
