"""Error taxonomy of the project data core.

Propagation:
- `ValidationError`, `NotFoundError` and `PlanRequiredError` abort the request
  and reach the caller.
- `RemoteFetchError` is entry-scoped: the resolver captures it and records it
  on the entry, it never aborts a formatted read.
"""

from __future__ import annotations


class AkashiError(Exception):
    """Base class for every error raised by the core."""


class ValidationError(AkashiError):
    """Malformed or missing required input (e.g. no owner id)."""


class NotFoundError(AkashiError):
    """Unknown project or entry id."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} '{identifier}' not found")
        self.kind = kind
        self.identifier = identifier


class PlanRequiredError(AkashiError):
    """Explicit remote-source resolution requested on a non-premium project."""

    def __init__(self, project_id: str, plan: str) -> None:
        super().__init__(
            f"External API integration requires Premium plan (project '{project_id}' is on '{plan}')"
        )
        self.project_id = project_id
        self.plan = plan


class RemoteFetchError(AkashiError):
    """A remote source could not be fetched or decoded."""

    def __init__(self, url: str, reason: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code
