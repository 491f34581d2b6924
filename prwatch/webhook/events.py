"""Event schemas for the GitHub webhooks the dispatcher consumes.

- issue_comment: action, issue.number, issue.pull_request (present when the
  issue is a pull request), comment
- pull_request: action, number, pull_request
"""

from typing import Any, Dict

from pydantic import BaseModel

from prwatch.adapters.github import comment_from_api, pr_from_api
from prwatch.models import Comment, PullRequest


def _repo_full_name(payload: Dict[str, Any]) -> str | None:
    repo = payload.get("repository") or {}
    return repo.get("full_name") or None


class IssueCommentEvent(BaseModel):
    """Comment on an issue or pull request (issue_comment webhook)."""

    repo: str | None = None
    action: str
    issue_number: int
    is_pull_request: bool = False
    comment: Comment | None = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "IssueCommentEvent":
        """Raises KeyError, TypeError or ValueError on malformed payloads."""
        issue = payload["issue"]
        comment_payload = payload.get("comment")
        return cls(
            repo=_repo_full_name(payload),
            action=payload["action"],
            issue_number=issue["number"],
            is_pull_request=bool(issue.get("pull_request")),
            comment=comment_from_api(comment_payload) if comment_payload else None,
        )


class PullRequestEvent(BaseModel):
    """Pull request opened, reopened, synchronized, closed, ... (pull_request webhook)."""

    repo: str | None = None
    action: str
    number: int
    pull_request: PullRequest | None = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PullRequestEvent":
        """Raises KeyError, TypeError or ValueError on malformed payloads."""
        pr_payload = payload.get("pull_request")
        number = payload.get("number")
        if number is None and pr_payload:
            number = pr_payload.get("number")
        if number is None:
            raise KeyError("number")
        if pr_payload and "number" not in pr_payload:
            pr_payload = {**pr_payload, "number": number}
        return cls(
            repo=_repo_full_name(payload),
            action=payload["action"],
            number=number,
            pull_request=pr_from_api(pr_payload) if pr_payload else None,
        )
