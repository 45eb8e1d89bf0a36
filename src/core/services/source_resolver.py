"""Remote-source resolution.

Flow for one pass:
1. Deep-copy the tree and find every source mapping (nested ones included).
2. Gate on the plan: non-premium projects never fetch.
3. Fetch all sources concurrently, extract `JSONPath` from each body and
   merge the outcome into the reserved fields of that mapping only.

A failing source is recorded on its own mapping; siblings keep resolving.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any, cast

from core.config import AppSettings
from core.domain.entries import (
    DATA_RETURN_KEY,
    ERROR_KEY,
    STATUS_ERROR,
    STATUS_KEY,
    STATUS_NO_MATCH,
    STATUS_OK,
    STATUS_PLAN_REQUIRED,
    SourceDefinition,
    TreePath,
    classify_entry,
    iter_source_mappings,
)
from core.domain.errors import PlanRequiredError, RemoteFetchError
from core.domain.models import PlanTier
from core.interfaces.fetcher import RemoteFetcher
from core.services.path_extractor import NO_MATCH, PathSyntaxError, extract

logger = logging.getLogger(__name__)

PLAN_NOTICE = "External API integration requires Premium plan"


@dataclass
class SourceOutcome:
    """What happened to one source mapping during a pass."""

    path: TreePath
    status: str
    error: str | None = None


@dataclass
class ResolutionResult:
    tree: dict[str, Any]
    outcomes: list[SourceOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[SourceOutcome]:
        return [o for o in self.outcomes if o.status == STATUS_ERROR]


def _mark_success(mapping: dict[str, Any], value: Any) -> str:
    mapping.pop(ERROR_KEY, None)
    if value is NO_MATCH:
        mapping[DATA_RETURN_KEY] = None
        mapping[STATUS_KEY] = STATUS_NO_MATCH
        return STATUS_NO_MATCH
    mapping[DATA_RETURN_KEY] = value
    mapping[STATUS_KEY] = STATUS_OK
    return STATUS_OK


def _mark(mapping: dict[str, Any], status: str, message: str) -> None:
    # dataReturn is left as it was: the last good value survives failures.
    mapping[STATUS_KEY] = status
    mapping[ERROR_KEY] = message


class SourceResolver:
    def __init__(self, fetcher: RemoteFetcher, settings: AppSettings | None = None) -> None:
        self._fetcher = fetcher
        self._settings = settings or AppSettings()

    async def resolve(
        self,
        tree: dict[str, Any],
        plan: PlanTier,
        *,
        explicit: bool = False,
        project_id: str = "",
    ) -> ResolutionResult:
        """Resolve every source mapping in a copy of `tree`.

        Raises `PlanRequiredError` only when `explicit` is set and the plan
        does not allow remote sources; opportunistic passes mark the entries
        instead.
        """

        resolved = copy.deepcopy(tree)
        found = list(iter_source_mappings(resolved))
        if not found:
            return ResolutionResult(tree=resolved)

        plan = PlanTier(plan)
        if not plan.allows_remote_sources():
            if explicit:
                raise PlanRequiredError(project_id, plan.value)
            logger.info("Skipping %d remote source(s): plan '%s'", len(found), plan.value)
            for _, mapping in found:
                _mark(mapping, STATUS_PLAN_REQUIRED, PLAN_NOTICE)
            return ResolutionResult(
                tree=resolved,
                outcomes=[SourceOutcome(path, STATUS_PLAN_REQUIRED, PLAN_NOTICE) for path, _ in found],
            )

        sem = asyncio.Semaphore(self._settings.resolve_max_concurrency)

        async def resolve_one(path: TreePath, mapping: dict[str, Any]) -> SourceOutcome:
            definition = cast(SourceDefinition, classify_entry(mapping))
            async with sem:
                try:
                    value = await self._fetch_and_extract(definition)
                except (RemoteFetchError, PathSyntaxError) as exc:
                    message = str(exc)
                    logger.warning("Remote source at %s failed: %s", "/".join(map(str, path)), message)
                    _mark(mapping, STATUS_ERROR, message)
                    return SourceOutcome(path, STATUS_ERROR, message)
            return SourceOutcome(path, _mark_success(mapping, value))

        outcomes = await asyncio.gather(*(resolve_one(path, mapping) for path, mapping in found))
        logger.info(
            "Resolved %d remote source(s), %d failed",
            len(outcomes),
            sum(1 for o in outcomes if o.status == STATUS_ERROR),
        )
        return ResolutionResult(tree=resolved, outcomes=list(outcomes))

    async def _fetch_and_extract(self, definition: SourceDefinition) -> Any:
        url = definition.api_url.strip()
        if not url:
            raise RemoteFetchError("<empty>", "apiUrl is empty")

        timeout = self._settings.http_timeout_seconds
        try:
            resp = await asyncio.wait_for(
                self._fetcher.fetch(url, definition.request_headers()),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise RemoteFetchError(url, f"timed out after {timeout}s") from exc

        if not resp.ok:
            raise RemoteFetchError(url, f"HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            body = json.loads(resp.text)
        except ValueError as exc:
            raise RemoteFetchError(url, "response body is not valid JSON", status_code=resp.status_code) from exc

        return extract(body, definition.json_path)
