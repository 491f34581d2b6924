"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from prwatch.models import Comment, CommitState, Hook, PullRequest, Repository


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    pass


class GitPlatformAdapter(ABC):
    """Abstract interface for the hosting service.

    Every method is a blocking call and raises GitPlatformError on failure.
    """

    @abstractmethod
    def get_repository(self, repo: str) -> Repository:
        """Fetch repository by full name (owner/repo)."""
        ...

    @abstractmethod
    def list_open_prs(self, repo: str) -> List[PullRequest]:
        """List open pull requests."""
        ...

    @abstractmethod
    def get_pr(self, repo: str, pr_number: int) -> PullRequest:
        """Fetch a single pull request (includes mergeable when known)."""
        ...

    @abstractmethod
    def get_pr_comments(self, repo: str, pr_number: int) -> List[Comment]:
        """Fetch conversation comments on a pull request."""
        ...

    @abstractmethod
    def create_comment(self, repo: str, issue_number: int, body: str) -> Comment:
        """Post a comment on an issue or pull request."""
        ...

    @abstractmethod
    def create_commit_status(
        self,
        repo: str,
        sha: str,
        state: CommitState,
        target_url: str | None,
        description: str,
    ) -> None:
        """Set a commit status."""
        ...

    @abstractmethod
    def close_pr(self, repo: str, pr_number: int) -> None:
        """Close a pull request without merging."""
        ...

    @abstractmethod
    def list_hooks(self, repo: str) -> List[Hook]:
        """List repository webhooks."""
        ...

    @abstractmethod
    def create_hook(
        self,
        repo: str,
        name: str,
        config: Dict[str, Any],
        events: List[str],
        active: bool = True,
    ) -> Hook:
        """Register a repository webhook."""
        ...

    def get_pr_mergeable(self, repo: str, pr_number: int) -> bool | None:
        """Return mergeable flag of a pull request (None while GitHub computes it)."""
        return self.get_pr(repo, pr_number).mergeable
