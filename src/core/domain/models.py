"""Domain models (Pydantic v2).

- Describe *what* a project is, not *how* it is stored or served.
- Aliases keep the wire names used by the controller layer (`_id`,
  `userId`, `dataInfo`).
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlanTier(str, Enum):
    """Subscription level; only `premium` may resolve remote sources."""

    FREE = "free"
    PREMIUM = "premium"

    def allows_remote_sources(self) -> bool:
        return self is PlanTier.PREMIUM


class Project(BaseModel):
    """Aggregate root: a named project owning one EntryTree."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        ...,
        alias="_id",
        min_length=1,
        description="Opaque project identifier.",
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="Human-readable project name.",
    )
    user_id: str = Field(
        ...,
        alias="userId",
        min_length=1,
        description="Owner reference (already authenticated upstream).",
    )
    plan: PlanTier = Field(
        default=PlanTier.FREE,
        description="Plan tier gating remote-source resolution.",
    )
    data_info: dict[str, Any] = Field(
        default_factory=dict,
        alias="dataInfo",
        description="EntryTree: EntryId -> EntryValue, in stored order.",
    )
    retired_entry_ids: list[str] = Field(
        default_factory=list,
        alias="retiredEntryIds",
        description="Deleted entry ids; never handed out again.",
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        alias="createdAt",
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        alias="updatedAt",
    )

    def touch(self) -> None:
        self.updated_at = _utcnow()


class ProjectSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str


class ProjectDataInfo(BaseModel):
    """Raw, unresolved view of a project's tree."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    data_info: dict[str, Any] = Field(default_factory=dict, alias="dataInfo")


class EntryResult(BaseModel):
    """Payload returned after adding an entry."""

    model_config = ConfigDict(populate_by_name=True)

    entry_id: str = Field(..., alias="entryId")
    entry: Any = Field(default=None, description="The stored entry value.")
    project: Project


class DeleteEntryResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Entry deleted successfully"
    entry_id: str = Field(..., alias="entryId")
    project: Project
