"""Abstract build trigger."""

from abc import ABC, abstractmethod

from prwatch.store.schemas import PullRequestRecord


def build_message(record: PullRequestRecord) -> str:
    """Status description for a started build."""
    if record.mergeable:
        return "Merged build triggered."
    return "Build triggered."


class BuildTrigger(ABC):
    """Starts builds. Implementations must not wait for the build to finish."""

    @abstractmethod
    def build(self, record: PullRequestRecord) -> str:
        """Start a build for the pull request; return a short description for its commit status."""
        ...
