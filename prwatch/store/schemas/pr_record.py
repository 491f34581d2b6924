"""Tracked pull request, as stored under .prwatch/state/.

Plain data only: the live policy, sync owner and remote handle are
attached after load (see PullRequestState.rehydrate).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Keys written by older versions; accepted on load and discarded.
LEGACY_KEYS = ("asked_for_approval", "askedForApproval")


class PullRequestRecord(BaseModel):
    """One tracked pull request, keyed by id within a repository."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, populate_by_name=True)

    id: int = Field(..., frozen=True, description="Pull request number")
    author: str = Field(..., frozen=True, description="Login of the pull request creator")
    head: str = Field(..., description="Current head commit sha")
    target: str | None = Field(default=None, description="Base branch; None in records from old versions")
    updated: datetime = Field(..., description="Last processed remote update time")
    mergeable: bool | None = Field(default=None, description="Mergeable flag; None when unknown")
    accepted: bool = Field(default=False, description="Approved for automatic builds")
    should_run: bool = Field(default=False, alias="shouldRun", description="A build is owed at next evaluation")

    @model_validator(mode="before")
    @classmethod
    def _drop_legacy_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if k not in LEGACY_KEYS}
        return data
