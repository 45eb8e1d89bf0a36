"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import HttpxFetcher
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import RemoteFetchError
from core.services.formatter import format_tree
from core.services.path_extractor import extract

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings, url: str) -> tuple[bool, str]:
    try:
        async with HttpxFetcher(settings) as fetcher:
            response = await fetcher.fetch(url)
    except RemoteFetchError as exc:
        return False, exc.reason
    return response.ok, f"HTTP {response.status_code}"


def _check_store(path: Path) -> tuple[bool, str]:
    if path.exists():
        if not path.is_file():
            return False, f"{path} is not a file"
        if not os.access(path, os.R_OK | os.W_OK):
            return False, f"{path} is not readable/writable"
        return True, str(path)
    parent = path.parent
    while not parent.exists() and parent != parent.parent:
        parent = parent.parent
    if os.access(parent, os.W_OK):
        return True, f"{path} (will be created)"
    return False, f"cannot create {path}"


def _check_core() -> tuple[bool, str]:
    """Run the formatter and extractor on a fixed sample."""

    tree = {
        "aaaaaaaaaaaaaaaaaaaaaaaa": {"Budget": {"value": 1}},
        "bbbbbbbbbbbbbbbbbbbbbbbb": {"Budget": {"value": 2}},
    }
    formatted = format_tree(tree)
    client = extract({"store": {"book": [{"client": "A"}]}}, "$.store.book[0].client")
    ok = list(formatted) == ["Budget", "Budget 2"] and client == "A"
    return ok, "formatter + extractor" if ok else "unexpected self-check output"


@app.command()
def run(
    url: str = typer.Option("https://api.github.com", "--url", help="URL used for the connectivity check."),
) -> None:
    """Run baseline diagnostics."""

    settings = AppSettings()

    table = Table(title="Akashi Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    ok_store, detail_store = _check_store(settings.store_path)
    table.add_row("Project store", "OK" if ok_store else "FAIL", detail_store)
    table.add_row("Fetch timeout", "OK", f"{settings.http_timeout_seconds}s")
    table.add_row("Max concurrency", "OK", str(settings.resolve_max_concurrency))

    ok_core, detail_core = _check_core()
    table.add_row("Core self-check", "OK" if ok_core else "FAIL", detail_core)

    ok_http, detail_http = asyncio.run(_check_http(settings, url))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)


@app.command()
def setup() -> None:
    """Interactive setup (stores values in the user config .env)."""

    settings = AppSettings()
    store_path = typer.prompt("Project store file", default=str(settings.store_path), show_default=True).strip()
    timeout = typer.prompt(
        "Remote fetch timeout (seconds)",
        default=str(settings.http_timeout_seconds),
        show_default=True,
    ).strip()

    try:
        if float(timeout) <= 0:
            raise ValueError
    except ValueError:
        raise typer.BadParameter("timeout must be a positive number") from None

    env_path = write_user_env_vars(
        {
            "AKASHI_STORE_PATH": store_path,
            "AKASHI_HTTP_TIMEOUT_SECONDS": timeout,
        }
    )
    _console.print(f"[green]Saved config to:[/green] {env_path}")
