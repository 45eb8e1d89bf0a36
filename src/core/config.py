"""Core configuration.

Contract:
- Every setting is an `AKASHI_<FIELD>` environment variable (pydantic-settings),
  shared by the CLI and the adapters.
- Lookup order: process environment, `.env` in the working directory, then
  the per-user `.env` written by `akashi doctor setup`.
- `AKASHI_CONFIG_DIR` relocates the per-user directory (tests, portable installs).
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "akashi"
CONFIG_DIR_ENV = "AKASHI_CONFIG_DIR"

_ENV_LINE_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")
_NEEDS_QUOTES_RE = re.compile(r"[\s#'\"]")


def get_user_config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA", str(Path.home()))) / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def get_default_store_path() -> Path:
    return get_user_config_dir() / "projects.json"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\"', '"')
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    return value


def _parse_env_lines(text: str) -> dict[str, str]:
    """`KEY=value` pairs from dotenv text; comments, blanks and junk lines are skipped."""

    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        match = _ENV_LINE_RE.match(raw_line.strip())
        if match and not raw_line.lstrip().startswith("#"):
            data[match.group(1)] = _unquote(match.group(2).strip())
    return data


def _format_env_value(value: str) -> str:
    if value and not _NEEDS_QUOTES_RE.search(value):
        return value
    return '"' + value.replace('"', '\\"') + '"'


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Merge `values` into the per-user `.env`.

    Keys not in `values` are kept, a `None` value removes its key, and values
    with spaces or quotes are written double-quoted (store paths on Windows).
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    merged: dict[str, str] = {}
    if env_path.exists():
        merged = _parse_env_lines(env_path.read_text(encoding="utf-8"))
    for key, value in values.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value

    lines = [f"# {APP_DIR_NAME} user config (.env)"]
    lines.extend(f"{key}={_format_env_value(merged[key])}" for key in sorted(merged))
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Application-wide settings.

    Every field can be overridden with an `AKASHI_<FIELD>` environment variable.
    """

    model_config = SettingsConfigDict(
        env_prefix="AKASHI_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for each remote-source fetch (seconds).",
    )
    user_agent: str = Field(
        default="akashi-core/0.1",
        min_length=1,
        description="User-Agent sent with remote-source fetches.",
    )
    resolve_max_concurrency: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Maximum concurrent fetches during one resolution pass.",
    )
    placeholder_name: str = Field(
        default="New Object",
        min_length=1,
        description="Display name for entries that do not carry a name of their own.",
    )
    store_path: Path = Field(
        default_factory=get_default_store_path,
        description="JSON file backing the CLI project repository.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level used by the CLI (DEBUG, INFO, WARNING...).",
    )
