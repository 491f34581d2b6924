"""Commit status reporting with optional fallback to a pull request comment."""

import logging

from prwatch.adapters.base import GitPlatformAdapter, GitPlatformError
from prwatch.models import CommitState

LOG = logging.getLogger("prwatch.status")


class StatusReporter:
    """Post commit statuses for one repository.

    When the status API fails and use_comments is set, the message is posted
    as a plain comment on the pull request instead. Never raises.
    """

    def __init__(self, adapter: GitPlatformAdapter, repo: str, use_comments: bool = False) -> None:
        self._adapter = adapter
        self._repo = repo
        self.use_comments = use_comments

    def report(
        self,
        commit: str,
        state: CommitState,
        target_url: str | None,
        message: str,
        pr_id: int,
    ) -> bool:
        """Set status of commit. Returns True if the status (not a fallback comment) was posted."""
        LOG.info("Setting status of %s to %s with url %s and message: %s", commit, state, target_url, message)
        try:
            self._adapter.create_commit_status(self._repo, commit, state, target_url, message)
            return True
        except GitPlatformError as e:
            if not self.use_comments:
                LOG.error("Could not update commit status of %s#%s: %s", self._repo, pr_id, e)
                return False
            LOG.info("Could not update commit status of %s#%s (%s); sending comment instead", self._repo, pr_id, e)
        try:
            self._adapter.create_comment(self._repo, pr_id, message)
        except GitPlatformError as e:
            LOG.error("Couldn't add comment to pull request %s#%s: %s", self._repo, pr_id, e)
        return False
