"""Per-repository state file: .prwatch/state/{owner}__{name}.yaml."""

from typing import List

from pydantic import BaseModel, Field

from prwatch.store.schemas.pr_record import PullRequestRecord


class RepositoryStateFile(BaseModel):
    """Tracked pull requests of one repository."""

    repository: str = Field(..., description="Repository full_name, e.g. owner/repo")
    pulls: List[PullRequestRecord] = Field(default_factory=list)

    model_config = {"extra": "forbid"}
