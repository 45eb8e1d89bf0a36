"""CLI UI components (Rich).

Keeps command logic apart from presentation so tables/panels can be reused.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.entries import SourceDefinition, classify_entry
from core.domain.models import ProjectSummary


def build_projects_table(summaries: Iterable[ProjectSummary], *, owner_id: str) -> Table:
    table = Table(title=f"Projects of {owner_id}")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    for summary in summaries:
        table.add_row(summary.id, summary.name)
    return table


def _entry_row(entry_id: str, value: Any) -> tuple[str, str, str]:
    name = "-"
    inner = value
    if isinstance(value, dict) and len(value) == 1:
        (name, inner), = value.items()
    kind = classify_entry(inner)
    if isinstance(kind, SourceDefinition):
        detail = f"{kind.api_url} [{kind.json_path or '$'}]"
        if kind.status:
            detail += f" ({kind.status})"
        return entry_id, name, f"source: {detail}"
    return entry_id, name, "static"


def build_entries_table(name: str, data_info: dict[str, Any]) -> Table:
    """One row per stored entry: id, claimed name, static/source."""

    table = Table(title=name)
    table.add_column("Entry ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Kind", style="magenta")
    for entry_id, value in data_info.items():
        table.add_row(*_entry_row(entry_id, value))
    return table


def print_error(console: Console, message: str) -> None:
    console.print(Panel(Text(message), title=Text("Error", style="bold red"), border_style="red"))
