"""Entry vocabulary: EntryTree, EntryValue and SourceDefinition.

An entry value is a JSON-like tree (scalar, list or str-keyed mapping). A
mapping that carries both `apiUrl` and `JSONPath` is a remote-source
definition. The reserved key names live only in this module: the rest of the
core goes through `classify_entry` and `SourceDefinition`.
"""

from __future__ import annotations

import copy
import re
import uuid
from typing import Any, Iterator, Union

from pydantic import BaseModel, Field

from core.domain.errors import ValidationError

TreePath = tuple[Union[str, int], ...]

API_URL_KEY = "apiUrl"
JSON_PATH_KEY = "JSONPath"
CREDENTIAL_KEYS: tuple[str, ...] = ("x-api-key", "x_api_key", "apiKey")
CREDENTIAL_HEADER = "x-api-key"

DATA_RETURN_KEY = "dataReturn"
STATUS_KEY = "dataStatus"
ERROR_KEY = "dataError"
RESERVED_RESULT_KEYS: tuple[str, ...] = (DATA_RETURN_KEY, STATUS_KEY, ERROR_KEY)

STATUS_OK = "ok"
STATUS_NO_MATCH = "no_match"
STATUS_ERROR = "error"
STATUS_PLAN_REQUIRED = "plan_required"

_ENTRY_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def new_entry_id() -> str:
    """Opaque 24-hex identifier (same shape as a document-store object id)."""

    return uuid.uuid4().hex[:24]


def is_entry_id(key: object) -> bool:
    return isinstance(key, str) and bool(_ENTRY_ID_RE.match(key))


class StaticEntry(BaseModel):
    """Inline data supplied by the client."""

    value: Any = Field(default=None, description="The stored JSON-like value.")


class SourceDefinition(BaseModel):
    """Remote-data reference recognized structurally inside an entry tree."""

    api_url: str = Field(..., description="Endpoint returning JSON.")
    json_path: str = Field(default="", description="Path query applied to the response body.")
    credential: str | None = Field(
        default=None,
        description="Opaque access credential, sent verbatim as a request header.",
    )
    has_data_return: bool = Field(
        default=False,
        description="Whether a previous resolution cached a value.",
    )
    data_return: Any = Field(default=None, description="Last extracted value, if any.")
    status: str | None = Field(default=None, description="Outcome of the last resolution.")

    def request_headers(self) -> dict[str, str]:
        if self.credential:
            return {CREDENTIAL_HEADER: self.credential}
        return {}


EntryKind = Union[StaticEntry, SourceDefinition]


def is_source_mapping(value: Any) -> bool:
    return isinstance(value, dict) and API_URL_KEY in value and JSON_PATH_KEY in value


def classify_entry(value: Any) -> EntryKind:
    """Return a `SourceDefinition` for remote-source mappings, else a `StaticEntry`."""

    if not is_source_mapping(value):
        return StaticEntry(value=value)

    credential = None
    for key in CREDENTIAL_KEYS:
        raw = value.get(key)
        if raw not in (None, ""):
            credential = str(raw)
            break

    json_path = value.get(JSON_PATH_KEY)
    status = value.get(STATUS_KEY)
    return SourceDefinition(
        api_url=str(value.get(API_URL_KEY) or ""),
        json_path="" if json_path is None else str(json_path),
        credential=credential,
        has_data_return=DATA_RETURN_KEY in value,
        data_return=value.get(DATA_RETURN_KEY),
        status=status if isinstance(status, str) else None,
    )


def definition_fields(mapping: dict[str, Any]) -> dict[str, Any]:
    """Client-owned part of a source mapping (reserved result fields removed)."""

    return {k: v for k, v in mapping.items() if k not in RESERVED_RESULT_KEYS}


def strip_reserved(value: Any) -> Any:
    """Deep copy of `value` with resolver-owned fields removed from every source mapping."""

    if isinstance(value, dict):
        cleaned = {k: strip_reserved(v) for k, v in value.items()}
        if is_source_mapping(value):
            cleaned = definition_fields(cleaned)
        return cleaned
    if isinstance(value, list):
        return [strip_reserved(item) for item in value]
    return copy.deepcopy(value)


def ensure_json_value(value: Any, *, where: str = "value") -> None:
    """Reject anything that is not a JSON-like literal."""

    if value is None or isinstance(value, (bool, int, float, str)):
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            ensure_json_value(item, where=f"{where}[{index}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(f"{where}: mapping keys must be strings, got {key!r}")
            ensure_json_value(item, where=f"{where}.{key}")
        return
    raise ValidationError(f"{where}: unsupported type {type(value).__name__}")


def iter_source_mappings(value: Any, path: TreePath = ()) -> Iterator[tuple[TreePath, dict[str, Any]]]:
    """Yield `(path, mapping)` for every source mapping, in stored order.

    Source mappings are not descended into.
    """

    if isinstance(value, dict):
        if is_source_mapping(value):
            yield path, value
            return
        for key, item in value.items():
            yield from iter_source_mappings(item, (*path, key))
    elif isinstance(value, list):
        for index, item in enumerate(value):
            yield from iter_source_mappings(item, (*path, index))


def get_at(value: Any, path: TreePath) -> Any:
    """Follow `path` inside `value`; `None` when any step is missing."""

    current = value
    for step in path:
        if isinstance(current, dict) and isinstance(step, str):
            if step not in current:
                return None
            current = current[step]
        elif isinstance(current, list) and isinstance(step, int):
            if step >= len(current):
                return None
            current = current[step]
        else:
            return None
    return current
