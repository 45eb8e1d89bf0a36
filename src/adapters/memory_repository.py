"""In-process project repository.

Used by tests and as the default store when no file path is configured.
Documents are deep-copied on the way in and out, so callers never share
state with the store.
"""

from __future__ import annotations

import asyncio

from core.domain.models import Project
from core.interfaces.repository import ProjectRepository


class InMemoryProjectRepository(ProjectRepository):
    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._lock = asyncio.Lock()

    async def get(self, project_id: str) -> Project | None:
        async with self._lock:
            project = self._projects.get(project_id)
            return project.model_copy(deep=True) if project else None

    async def save(self, project: Project) -> None:
        async with self._lock:
            self._projects[project.id] = project.model_copy(deep=True)

    async def delete(self, project_id: str) -> bool:
        async with self._lock:
            return self._projects.pop(project_id, None) is not None

    async def find_by_owner(self, owner_id: str) -> list[Project]:
        async with self._lock:
            return [p.model_copy(deep=True) for p in self._projects.values() if p.user_id == owner_id]
