"""`akashi` command line.

Drives `ProjectDataStore` against the JSON-file repository configured in
`AppSettings.store_path` (or `--store`). Values are JSON literals, or
`@path/to/file.json` to read them from disk.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.http_client import HttpxFetcher
from adapters.json_repository import JsonFileProjectRepository
from cli import doctor
from cli.ui_components import build_entries_table, build_projects_table, print_error
from core.config import AppSettings
from core.domain.errors import AkashiError
from core.services.data_store import ProjectDataStore
from core.services.source_resolver import SourceResolver

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Manage project data entries and remote sources.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


class _State:
    settings: AppSettings | None = None


_state = _State()


def _settings() -> AppSettings:
    if _state.settings is None:
        _state.settings = AppSettings()
    return _state.settings


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def _parse_json(raw: str) -> Any:
    text = raw
    if raw.startswith("@"):
        path = Path(raw[1:])
        if not path.is_file():
            raise typer.BadParameter(f"file not found: {path}")
        text = path.read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except ValueError as exc:
        raise typer.BadParameter(f"invalid JSON: {exc}") from exc


def _run(operation: Callable[[ProjectDataStore], Awaitable[T]]) -> T:
    settings = _settings()

    async def runner() -> T:
        async with HttpxFetcher(settings) as fetcher:
            store = ProjectDataStore(
                JsonFileProjectRepository(settings.store_path),
                SourceResolver(fetcher, settings),
                settings,
            )
            return await operation(store)

    try:
        return asyncio.run(runner())
    except AkashiError as exc:
        print_error(_err_console, str(exc))
        raise typer.Exit(code=1) from exc


def _print_json(data: Any) -> None:
    _console.print_json(data=data)


@app.callback()
def main(
    store: Optional[Path] = typer.Option(None, "--store", help="Project store JSON file."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    settings = AppSettings()
    if store is not None:
        settings = settings.model_copy(update={"store_path": store})
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    _state.settings = settings
    _configure_logging(settings.log_level)


@app.command()
def create(
    owner_id: str = typer.Argument(..., help="Owner (user) id."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Project name."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Initial data: JSON object or @file."),
) -> None:
    """Create a project; each top-level key of --data becomes one entry."""

    initial = _parse_json(data) if data else {}
    if not isinstance(initial, dict):
        raise typer.BadParameter("--data must be a JSON object")
    project = _run(lambda s: s.create_project(owner_id, initial, name=name))
    _print_json(project.model_dump(mode="json", by_alias=True))


@app.command()
def add(
    project_id: str,
    value: str = typer.Argument(..., help="Entry value: JSON or @file."),
) -> None:
    """Add an entry with a fresh id."""

    payload = _parse_json(value)
    result = _run(lambda s: s.add_entry(project_id, payload))
    _print_json(result.model_dump(mode="json", by_alias=True))


@app.command()
def update(
    project_id: str,
    entry_id: str,
    value: str = typer.Argument(..., help="Replacement value: JSON or @file."),
) -> None:
    """Replace one entry wholesale."""

    payload = _parse_json(value)
    project = _run(lambda s: s.update_entry(project_id, entry_id, payload))
    _print_json(project.model_dump(mode="json", by_alias=True))


@app.command()
def remove(project_id: str, entry_id: str) -> None:
    """Delete one entry (its id is never reused)."""

    result = _run(lambda s: s.delete_entry(project_id, entry_id))
    _print_json(result.model_dump(mode="json", by_alias=True))


@app.command()
def raw(
    project_id: str,
    table: bool = typer.Option(False, "--table", help="Show a summary table instead of JSON."),
) -> None:
    """Show the stored tree without resolving remote sources."""

    info = _run(lambda s: s.get_raw_data(project_id))
    if table:
        _console.print(build_entries_table(info.name, info.data_info))
    else:
        _print_json(info.model_dump(mode="json", by_alias=True))


@app.command()
def formatted(
    project_id: str,
    explicit: bool = typer.Option(
        False,
        "--explicit",
        help="Fail when the project plan does not allow remote sources.",
    ),
) -> None:
    """Resolve remote sources and show the collision-free view."""

    view = _run(lambda s: s.get_formatted_project(project_id, explicit=explicit))
    _print_json(view)


@app.command(name="list")
def list_projects(owner_id: str) -> None:
    """List projects owned by OWNER_ID."""

    async def collect(store: ProjectDataStore) -> list:
        return [summary async for summary in store.list_by_owner(owner_id)]

    summaries = _run(collect)
    _console.print(build_projects_table(summaries, owner_id=owner_id))


@app.command()
def drop(
    project_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete a project and all of its entries."""

    if not yes:
        typer.confirm(f"Delete project {project_id}?", abort=True)
    _print_json(_run(lambda s: s.delete_project(project_id)))


@app.command()
def plan(project_id: str, tier: str = typer.Argument(..., help="free | premium")) -> None:
    """Set the plan tier of a project."""

    project = _run(lambda s: s.set_plan(project_id, tier))
    _console.print(f"[green]{project.name}[/green] is now on plan [bold]{project.plan.value}[/bold]")


def run() -> None:
    app()
