"""Pull request as seen on the remote."""

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field

from prwatch.models.comment import Comment

CommitState = Literal["pending", "success", "error", "failure"]


class PullRequest(BaseModel):
    """Open (or closed) pull request fetched from the API or a webhook payload."""

    number: int
    state: str = "open"
    head_sha: str
    base_ref: str
    author: str
    updated_at: datetime
    mergeable: bool | None = None
    html_url: str | None = None
    comments: List[Comment] | None = Field(
        default=None,
        description="Comments carried by the payload; None means fetch them from the remote",
    )
