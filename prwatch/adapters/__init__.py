"""Git platform adapters (base and implementations)."""

from prwatch.adapters.base import GitPlatformAdapter, GitPlatformError
from prwatch.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
