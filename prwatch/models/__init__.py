"""Data models for repositories, pull requests, comments and hooks (Pydantic)."""

from prwatch.models.comment import Comment
from prwatch.models.hook import Hook
from prwatch.models.pr import CommitState, PullRequest
from prwatch.models.repository import Repository

__all__ = ["Comment", "CommitState", "Hook", "PullRequest", "Repository"]
