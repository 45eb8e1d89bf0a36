"""Project data orchestration.

`ProjectDataStore` owns the per-project EntryTree: it validates input,
allocates EntryIds, persists through a `ProjectRepository` and drives the
resolver and formatter on the formatted read. It does no printing and no
HTTP of its own, so any entry-point (CLI, API, batch job) can reuse it.

Writes are last-writer-wins per entry; there is no version token. Every
read-modify-write of one project runs under that project's lock, so
concurrent writes to different EntryIds never drop each other.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator

from core.config import AppSettings
from core.domain.entries import (
    RESERVED_RESULT_KEYS,
    definition_fields,
    ensure_json_value,
    get_at,
    is_source_mapping,
    new_entry_id,
    strip_reserved,
)
from core.domain.errors import NotFoundError, ValidationError
from core.domain.models import (
    DeleteEntryResult,
    EntryResult,
    PlanTier,
    Project,
    ProjectDataInfo,
    ProjectSummary,
)
from core.interfaces.repository import ProjectRepository
from core.services.formatter import format_tree
from core.services.source_resolver import ResolutionResult, SourceResolver

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Untitled project"

_MISSING = object()


class ProjectDataStore:
    def __init__(
        self,
        repository: ProjectRepository,
        resolver: SourceResolver,
        settings: AppSettings | None = None,
    ) -> None:
        self._repository = repository
        self._resolver = resolver
        self._settings = settings or AppSettings()
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, project_id: str) -> asyncio.Lock:
        return self._locks.setdefault(project_id, asyncio.Lock())

    async def _load(self, project_id: str) -> Project:
        project = await self._repository.get(project_id) if project_id else None
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def _commit(self, project: Project) -> Project:
        project.touch()
        await self._repository.save(project)
        return project

    @staticmethod
    def _allocate_id(project: Project) -> str:
        retired = set(project.retired_entry_ids)
        while True:
            entry_id = new_entry_id()
            if entry_id not in project.data_info and entry_id not in retired:
                return entry_id

    @staticmethod
    def _clean_value(value: Any) -> Any:
        ensure_json_value(value, where="entry")
        return strip_reserved(value)

    async def create_project(
        self,
        owner_id: str | None,
        initial_data: dict[str, Any] | None = None,
        *,
        name: str | None = None,
    ) -> Project:
        """Create a `free` project; each top-level key of `initial_data` becomes one entry."""

        if not owner_id or not str(owner_id).strip():
            raise ValidationError("User ID is required")

        data = dict(initial_data or {})
        ensure_json_value(data, where="initial_data")
        if name is None and isinstance(data.get("name"), str):
            name = data.pop("name")
        name = (name or "").strip() or DEFAULT_PROJECT_NAME

        project = Project(id=new_entry_id(), name=name, user_id=str(owner_id).strip(), plan=PlanTier.FREE)
        for key, value in data.items():
            project.data_info[self._allocate_id(project)] = {key: strip_reserved(value)}

        await self._commit(project)
        logger.info("Created project %s with %d entr(ies)", project.id, len(project.data_info))
        return project

    async def get_project(self, project_id: str) -> Project:
        return await self._load(project_id)

    async def add_entry(self, project_id: str, value: Any) -> EntryResult:
        cleaned = self._clean_value(value)
        async with self._lock_for(project_id):
            project = await self._load(project_id)
            entry_id = self._allocate_id(project)
            project.data_info[entry_id] = cleaned
            await self._commit(project)
        logger.info("Added entry %s to project %s", entry_id, project_id)
        return EntryResult(entry_id=entry_id, entry=cleaned, project=project)

    async def update_entry(self, project_id: str, entry_id: str, value: Any) -> Project:
        """Replace the value stored at `entry_id` wholesale (no deep merge)."""

        cleaned = self._clean_value(value)
        async with self._lock_for(project_id):
            project = await self._load(project_id)
            if entry_id not in project.data_info:
                raise NotFoundError("Entry", entry_id)
            project.data_info[entry_id] = cleaned
            await self._commit(project)
        logger.info("Updated entry %s in project %s", entry_id, project_id)
        return project

    async def delete_entry(self, project_id: str, entry_id: str) -> DeleteEntryResult:
        async with self._lock_for(project_id):
            project = await self._load(project_id)
            if entry_id not in project.data_info:
                raise NotFoundError("Entry", entry_id)
            del project.data_info[entry_id]
            project.retired_entry_ids.append(entry_id)
            await self._commit(project)
        logger.info("Deleted entry %s from project %s", entry_id, project_id)
        return DeleteEntryResult(entry_id=entry_id, project=project)

    async def get_raw_data(self, project_id: str) -> ProjectDataInfo:
        project = await self._load(project_id)
        return ProjectDataInfo(name=project.name, data_info=project.data_info)

    async def set_plan(self, project_id: str, plan: PlanTier | str) -> Project:
        try:
            tier = PlanTier(plan)
        except ValueError:
            raise ValidationError(f"Unknown plan '{plan}'") from None
        async with self._lock_for(project_id):
            project = await self._load(project_id)
            project.plan = tier
            await self._commit(project)
        logger.info("Project %s moved to plan '%s'", project_id, tier.value)
        return project

    async def delete_project(self, project_id: str) -> dict[str, str]:
        async with self._lock_for(project_id):
            if not await self._repository.delete(project_id):
                raise NotFoundError("Project", project_id)
        self._locks.pop(project_id, None)
        logger.info("Deleted project %s", project_id)
        return {"message": "Project deleted successfully"}

    async def list_by_owner(self, owner_id: str) -> AsyncIterator[ProjectSummary]:
        """Summaries of the owner's projects, queried fresh on every iteration."""

        for project in await self._repository.find_by_owner(owner_id):
            yield ProjectSummary(id=project.id, name=project.name)

    async def get_formatted_project(self, project_id: str, *, explicit: bool = False) -> dict[str, Any]:
        """Resolve remote sources on a snapshot, cache the results, and render by name.

        Returns `{project name: formatted tree}`.
        """

        snapshot = await self._load(project_id)
        result = await self._resolver.resolve(
            snapshot.data_info,
            snapshot.plan,
            explicit=explicit,
            project_id=project_id,
        )
        if result.outcomes:
            await self._write_back(project_id, snapshot, result)

        formatted = format_tree(result.tree, placeholder=self._settings.placeholder_name)
        return {snapshot.name: formatted}

    async def _write_back(self, project_id: str, snapshot: Project, result: ResolutionResult) -> None:
        """Copy reserved fields into the current document for untouched sources only."""

        async with self._lock_for(project_id):
            current = await self._repository.get(project_id)
            if current is None:
                return
            changed = self._merge_results(current, snapshot, result)
            if changed:
                await self._commit(current)
        if changed:
            logger.debug("Cached %d resolution result(s) on project %s", changed, project_id)

    @staticmethod
    def _merge_results(current: Project, snapshot: Project, result: ResolutionResult) -> int:
        changed = 0
        for outcome in result.outcomes:
            resolved = get_at(result.tree, outcome.path)
            before = get_at(snapshot.data_info, outcome.path)
            target = get_at(current.data_info, outcome.path)
            if not (is_source_mapping(resolved) and is_source_mapping(before) and is_source_mapping(target)):
                continue
            if definition_fields(target) != definition_fields(before):
                continue
            if all(resolved.get(k, _MISSING) == target.get(k, _MISSING) for k in RESERVED_RESULT_KEYS):
                continue
            for key in RESERVED_RESULT_KEYS:
                if key in resolved:
                    target[key] = resolved[key]
                else:
                    target.pop(key, None)
            changed += 1
        return changed
