"""Persistence contract for projects.

Rules:
- Every method is async: real stores do I/O.
- `save` and `delete` are atomic per document; no multi-document
  transactions are required.
- Implementations hand out copies, so callers may mutate what they receive.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import Project


@runtime_checkable
class ProjectRepository(Protocol):
    async def get(self, project_id: str) -> Project | None:
        """Return the stored project, or `None` when it does not exist."""

        ...

    async def save(self, project: Project) -> None:
        """Insert or replace the whole project document."""

        ...

    async def delete(self, project_id: str) -> bool:
        """Remove the project; `False` when nothing was stored under that id."""

        ...

    async def find_by_owner(self, owner_id: str) -> list[Project]:
        """Current projects owned by `owner_id`, in insertion order."""

        ...
