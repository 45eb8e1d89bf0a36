"""Collision-free display rendering of an EntryTree.

The stored tree is keyed by opaque EntryIds; the formatted view is keyed by
the names the entries claim for themselves. Within one mapping level the
first occurrence of a name is kept as-is and later ones become
`"<name> 2"`, `"<name> 3"`... in stored order. Levels are counted
independently, so equal names at different depths are left alone.
"""

from __future__ import annotations

import copy
from typing import Any

from core.domain.entries import is_entry_id, is_source_mapping

DEFAULT_PLACEHOLDER = "New Object"


class _SiblingNames:
    """Per-level name allocator."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._taken: set[str] = set()

    def claim(self, base: str) -> str:
        occurrence = self._counts.get(base, 0) + 1
        candidate = base if occurrence == 1 else f"{base} {occurrence}"
        while candidate in self._taken:
            occurrence += 1
            candidate = f"{base} {occurrence}"
        self._counts[base] = occurrence
        self._taken.add(candidate)
        return candidate


def _regroup(value: Any, placeholder: str) -> tuple[str, Any]:
    # A single-key mapping names itself.
    if isinstance(value, dict) and len(value) == 1:
        (name, content), = value.items()
        return name, content
    return placeholder, value


def _format_value(value: Any, placeholder: str) -> Any:
    if isinstance(value, dict):
        if is_source_mapping(value):
            return copy.deepcopy(value)
        return _format_level(value, placeholder)
    return copy.deepcopy(value)


def _format_level(mapping: dict[str, Any], placeholder: str, *, entry_level: bool = False) -> dict[str, Any]:
    names = _SiblingNames()
    out: dict[str, Any] = {}
    for key, value in mapping.items():
        if entry_level or is_entry_id(key):
            base, content = _regroup(value, placeholder)
        else:
            base, content = key, value
        out[names.claim(base)] = _format_value(content, placeholder)
    return out


def format_tree(tree: dict[str, Any], *, placeholder: str = DEFAULT_PLACEHOLDER) -> dict[str, Any]:
    """Render `tree` keyed by display names; deterministic and side-effect free.

    Every top-level key is an EntryId whatever its shape. Below the top
    level only keys shaped like an EntryId are regrouped.
    """

    return _format_level(tree, placeholder, entry_level=True)
