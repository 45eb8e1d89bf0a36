"""JSONPath-style extraction over decoded JSON documents.

Supported:
- `$` root (optional), `.name`, `['name']` / `["name"]`
- `[n]` indices, negative ones counting from the end
- `[*]` and `.*` wildcards
- `..name`, `..*`, `..[n]` recursive descent

Pure: no I/O, the document is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator


class PathSyntaxError(ValueError):
    """The path query could not be parsed."""


class NoMatch:
    """Sentinel for a query that matched nothing."""

    _instance: "NoMatch | None" = None

    def __new__(cls) -> "NoMatch":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH = NoMatch()


@dataclass(frozen=True)
class _Step:
    kind: str  # "child" | "index" | "wildcard"
    key: Any = None
    descend: bool = False


def parse_path(query: str) -> list[_Step]:
    text = query.strip()
    if text.startswith("$"):
        text = text[1:]
    elif text and text[0] not in ".[":
        text = "." + text

    steps: list[_Step] = []
    pos = 0
    length = len(text)
    while pos < length:
        descend = False
        if text.startswith("..", pos):
            descend = True
            pos += 2
            if pos < length and text[pos] == "[":
                step, pos = _parse_bracket(text, pos)
                steps.append(_Step(step.kind, step.key, descend=True))
                continue
        elif text[pos] == ".":
            pos += 1
        elif text[pos] == "[":
            step, pos = _parse_bracket(text, pos)
            steps.append(step)
            continue
        else:
            raise PathSyntaxError(f"unexpected {text[pos]!r} at offset {pos} in {query!r}")

        start = pos
        while pos < length and text[pos] not in ".[":
            pos += 1
        name = text[start:pos]
        if not name:
            raise PathSyntaxError(f"empty segment at offset {start} in {query!r}")
        if name == "*":
            steps.append(_Step("wildcard", descend=descend))
        else:
            steps.append(_Step("child", name, descend=descend))
    return steps


def _parse_bracket(text: str, pos: int) -> tuple[_Step, int]:
    end = _find_closing(text, pos)
    inner = text[pos + 1 : end].strip()
    if not inner:
        raise PathSyntaxError(f"empty brackets at offset {pos}")
    if inner == "*":
        return _Step("wildcard"), end + 1
    if inner[0] in "'\"":
        if len(inner) < 2 or inner[-1] != inner[0]:
            raise PathSyntaxError(f"unterminated quoted key at offset {pos}")
        return _Step("child", inner[1:-1]), end + 1
    try:
        return _Step("index", int(inner)), end + 1
    except ValueError:
        raise PathSyntaxError(f"unsupported bracket expression [{inner}]") from None


def _find_closing(text: str, pos: int) -> int:
    quote: str | None = None
    for index in range(pos + 1, len(text)):
        ch = text[index]
        if quote:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch == "]":
            return index
    raise PathSyntaxError(f"unclosed '[' at offset {pos}")


def _walk(node: Any) -> Iterator[Any]:
    yield node
    if isinstance(node, dict):
        for value in node.values():
            yield from _walk(value)
    elif isinstance(node, list):
        for value in node:
            yield from _walk(value)


def _apply(step: _Step, node: Any) -> Iterator[Any]:
    if step.kind == "child":
        if isinstance(node, dict) and step.key in node:
            yield node[step.key]
    elif step.kind == "index":
        if isinstance(node, list) and -len(node) <= step.key < len(node):
            yield node[step.key]
    elif isinstance(node, dict):
        yield from node.values()
    elif isinstance(node, list):
        yield from node


def extract(document: Any, path_query: str | None) -> Any:
    """Evaluate `path_query` against `document`.

    Returns the whole document for an empty query, a single value for a
    definite path, a list (document order) when the query has a wildcard or
    descent segment, and `NO_MATCH` when nothing matched.
    """

    if path_query is None or not path_query.strip():
        return document

    steps = parse_path(path_query)
    nodes: list[Any] = [document]
    for step in steps:
        found: list[Any] = []
        for node in nodes:
            targets = _walk(node) if step.descend else (node,)
            for target in targets:
                found.extend(_apply(step, target))
        nodes = found
        if not nodes:
            return NO_MATCH

    if any(step.descend or step.kind == "wildcard" for step in steps):
        return nodes
    return nodes[0]
