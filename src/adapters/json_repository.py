"""JSON-file project repository.

Layout: `{"projects": [<project document>, ...]}`, UTF-8, stable formatting.
Each write replaces the file atomically (temp file + `os.replace`), so a
crash never leaves a half-written store behind. File I/O runs in a worker
thread (`asyncio.to_thread`) while the repository lock is held.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from core.domain.models import Project
from core.interfaces.repository import ProjectRepository

logger = logging.getLogger(__name__)


class JsonFileProjectRepository(ProjectRepository):
    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Project]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        data = json.loads(raw)
        documents: list[Any] = data.get("projects", []) if isinstance(data, dict) else []
        projects = (Project.model_validate(doc) for doc in documents)
        return {p.id: p for p in projects}

    def _write(self, projects: dict[str, Project]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"projects": [p.model_dump(mode="json", by_alias=True) for p in projects.values()]}
        fd, tmp_name = tempfile.mkstemp(prefix=".projects-", suffix=".json", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(payload, ensure_ascii=False, indent=2) + "\n")
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d project(s) to %s", len(projects), self._path)

    async def get(self, project_id: str) -> Project | None:
        async with self._lock:
            projects = await asyncio.to_thread(self._read)
            return projects.get(project_id)

    async def save(self, project: Project) -> None:
        async with self._lock:
            projects = await asyncio.to_thread(self._read)
            projects[project.id] = project
            await asyncio.to_thread(self._write, projects)

    async def delete(self, project_id: str) -> bool:
        async with self._lock:
            projects = await asyncio.to_thread(self._read)
            if projects.pop(project_id, None) is None:
                return False
            await asyncio.to_thread(self._write, projects)
            return True

    async def find_by_owner(self, owner_id: str) -> list[Project]:
        async with self._lock:
            projects = await asyncio.to_thread(self._read)
            return [p for p in projects.values() if p.user_id == owner_id]
