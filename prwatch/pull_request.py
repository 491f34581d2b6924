"""Per pull request state machine.

A tracked pull request is Unaccepted, AcceptedIdle or AcceptedPendingBuild,
derived from the record's `accepted` and `should_run` flags. New commits
and comment commands move it between states; a pending build is started
and cleared in the same step.
"""

import logging
from typing import TYPE_CHECKING, List

from prwatch.adapters.base import GitPlatformError
from prwatch.models import Comment, PullRequest
from prwatch.policy import AuthorizationPolicy
from prwatch.store.schemas import PullRequestRecord

if TYPE_CHECKING:
    from prwatch.repository import RepositorySync

LOG = logging.getLogger("prwatch.pull_request")


class PullRequestState:
    """Live wrapper around a PullRequestRecord with its collaborators attached."""

    def __init__(self, record: PullRequestRecord, policy: AuthorizationPolicy, sync: "RepositorySync") -> None:
        self.record = record
        self._policy = policy
        self._sync = sync

    @classmethod
    def create(cls, pr: PullRequest, policy: AuthorizationPolicy, sync: "RepositorySync") -> "PullRequestState":
        """Start tracking a pull request seen open for the first time.

        A whitelisted author gets an accepted pull request with a build
        pending; anyone else gets the request-for-testing comment, once.
        """
        record = PullRequestRecord(
            id=pr.number,
            author=pr.author,
            head=pr.head_sha,
            target=pr.base_ref,
            updated=pr.updated_at,
            mergeable=pr.mergeable,
        )
        state = cls(record, policy, sync)
        if policy.is_whitelisted(pr.author):
            record.accepted = True
            record.should_run = True
        else:
            LOG.info("Author of %s %s not in whitelist!", state, pr.author)
            sync.post_comment(record.id, policy.request_for_testing_phrase)
        LOG.info(
            "%s created; author: %s, updated: %s SHA: %s, accepted: %s",
            state,
            record.author,
            record.updated,
            record.head,
            record.accepted,
        )
        return state

    @classmethod
    def rehydrate(
        cls, record: PullRequestRecord, policy: AuthorizationPolicy, sync: "RepositorySync"
    ) -> "PullRequestState":
        """Attach live collaborators to a record loaded from storage."""
        return cls(record, policy, sync)

    @property
    def id(self) -> int:
        return self.record.id

    def __str__(self) -> str:
        return f"{self._sync.name}#{self.record.id}"

    def evaluate(self, pr: PullRequest) -> None:
        """React to the current remote view of the pull request, then build if one is owed."""
        if self.record.target is None:
            self.record.target = pr.base_ref

        if self._is_updated(pr):
            LOG.info("%s has been updated", self)
            comments_checked = self._check_comments(pr)
            new_commit = self._check_commit(pr.head_sha)
            if not new_commit and comments_checked == 0:
                LOG.info(
                    "%s was updated but there appears to be no new commit or comments"
                    " - that may mean that commit status was updated.",
                    self,
                )
            self.record.updated = pr.updated_at

        if self.record.should_run:
            self._build()

    def evaluate_comment(self, comment: Comment) -> None:
        """React to a single comment, then build if one is owed."""
        self._check_comment(comment.author, comment.body)
        self.record.updated = comment.updated_at
        if self.record.should_run:
            self._build()

    def _is_updated(self, pr: PullRequest) -> bool:
        # Both signals are checked: the timestamp can lag behind a new head sha.
        newer = self.record.updated < pr.updated_at
        new_head = pr.head_sha != self.record.head
        LOG.debug(
            "%s isUpdated: %s, updatedCheck: %s (updated: %s, pr.updated_at: %s), headCheck: %s (head: %s, pr.sha: %s)",
            self,
            newer or new_head,
            newer,
            self.record.updated,
            pr.updated_at,
            new_head,
            self.record.head,
            pr.head_sha,
        )
        return newer or new_head

    def _comments(self, pr: PullRequest) -> List[Comment]:
        if pr.comments is not None:
            return list(pr.comments)
        return self._sync.get_comments(self.record.id)

    def _check_comments(self, pr: PullRequest) -> int:
        """Run the comment rules for comments newer than the last update. Returns how many."""
        try:
            comments = self._comments(pr)
        except GitPlatformError as e:
            LOG.warning("%s unable to retrieve comments: %s", self, e)
            return 0
        count = 0
        for comment in sorted(comments, key=lambda c: c.updated_at):
            if self.record.updated < comment.updated_at:
                count += 1
                self._check_comment(comment.author, comment.body)
        LOG.info("%s checked %d new comments", self, count)
        return count

    def _check_comment(self, sender: str, body: str) -> None:
        LOG.info("%s checking comment; sender: %s, body: %s", self, sender, body)
        policy = self._policy

        if policy.is_whitelist_phrase(body) and policy.is_admin(sender):
            LOG.info("%s adding author %s to whitelist per comment by %s", self, self.record.author, sender)
            if not policy.is_whitelisted(self.record.author):
                policy.add_to_whitelist(self.record.author)
            self.record.accepted = True
            self.record.should_run = True

        if policy.is_ok_to_test_phrase(body) and policy.is_admin(sender):
            LOG.info("%s ok to test per comment by %s", self, sender)
            self.record.accepted = True
            self.record.should_run = True

        if policy.is_retest_phrase(body):
            if policy.is_admin(sender):
                self.record.should_run = True
            elif self.record.accepted and policy.is_whitelisted(sender):
                self.record.should_run = True
            if self.record.should_run:
                LOG.info("%s should be retested per comment by %s", self, sender)

    def _check_commit(self, sha: str) -> bool:
        """Record a new head commit. Returns False if head did not change."""
        if self.record.head == sha:
            return False
        LOG.debug("New commit. Sha: %s => %s", self.record.head, sha)
        self.record.head = sha
        if self.record.accepted:
            self.record.should_run = True
        return True

    def _check_mergeable(self) -> None:
        try:
            self.record.mergeable = self._sync.get_mergeable(self.record.id)
        except GitPlatformError as e:
            self.record.mergeable = False
            LOG.error("%s couldn't obtain mergeable status: %s", self, e)

    def _build(self) -> None:
        self._check_mergeable()
        self.record.should_run = False
        message = self._sync.builds.build(self.record)
        self._sync.create_status(self.record.head, "pending", None, message, self.record.id)
        LOG.info("%s: %s", self, message)
