"""Tracked pull requests of one repository, kept in line with the remote.

Two drivers mutate the tracked set: the poll loop (reconcile) and webhook
notifications (on_pull_request, on_issue_comment). Every entry point holds
this repository's lock for its whole run; repositories never share a lock.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Set

import yaml

from prwatch.adapters.base import GitPlatformAdapter, GitPlatformError
from prwatch.builds.base import BuildTrigger
from prwatch.models import Comment, CommitState, PullRequest, Repository
from prwatch.policy import AuthorizationPolicy
from prwatch.pull_request import PullRequestState
from prwatch.status import StatusReporter
from prwatch.store import save_repository_state, save_whitelist
from prwatch.store.schemas import PullRequestRecord

LOG = logging.getLogger("prwatch.repository")

HOOK_NAME = "web"
HOOK_EVENTS = ["issue_comment", "pull_request"]
TRACKED_ACTIONS = ("opened", "reopened", "synchronize")


class RepositorySync:
    """Owns the tracked pull requests of one repository."""

    def __init__(
        self,
        name: str,
        adapter: GitPlatformAdapter,
        policy: AuthorizationPolicy,
        builds: BuildTrigger,
        use_comments: bool = False,
        hook_url: str | None = None,
        verify_hook_ssl: bool = True,
        state_dir: Path | None = None,
        server_url: str = "https://github.com",
    ) -> None:
        self.name = name
        self.adapter = adapter
        self.policy = policy
        self.builds = builds
        self.hook_url = hook_url
        self.verify_hook_ssl = verify_hook_ssl
        self.state_dir = Path(state_dir) if state_dir is not None else None
        self._server_url = server_url.rstrip("/")
        self._status = StatusReporter(adapter, name, use_comments=use_comments)
        self._pulls: Dict[int, PullRequestState] = {}
        self._repo: Repository | None = None
        self._lock = threading.RLock()

    def init(self, records: Iterable[PullRequestRecord]) -> None:
        """Rehydrate records loaded from storage; run once before the first evaluation."""
        with self._lock:
            self._check_state()
            for record in records:
                self._pulls[record.id] = PullRequestState.rehydrate(record, self.policy, self)
            LOG.info("Repo %s tracking %d pull requests from storage", self.name, len(self._pulls))

    def _check_state(self) -> bool:
        """Resolve the remote repository once and cache it."""
        if self._repo is None:
            try:
                self._repo = self.adapter.get_repository(self.name)
            except GitPlatformError as e:
                LOG.error("Could not retrieve repo named %s: %s", self.name, e)
                return False
        return True

    @property
    def repo_url(self) -> str:
        if self._repo is not None and self._repo.html_url:
            return self._repo.html_url
        return f"{self._server_url}/{self.name}"

    def records(self) -> List[PullRequestRecord]:
        """Copies of the tracked records, sorted by id."""
        with self._lock:
            return [self._pulls[i].record.model_copy() for i in sorted(self._pulls)]

    def tracked_ids(self) -> Set[int]:
        with self._lock:
            return set(self._pulls)

    def get(self, pr_id: int) -> PullRequestState | None:
        with self._lock:
            return self._pulls.get(pr_id)

    def reconcile(self) -> None:
        """Poll path: evaluate every open pull request, then drop the closed ones."""
        with self._lock:
            LOG.info("Repo %s checking pull requests", self.name)
            if not self._check_state():
                return
            try:
                prs = self.adapter.list_open_prs(self.name)
            except GitPlatformError as e:
                LOG.error("Could not retrieve pull requests of %s: %s", self.name, e)
                return

            closed = set(self._pulls)
            for pr in prs:
                closed.discard(pr.number)
                try:
                    self._check(pr)
                except Exception:
                    LOG.exception("Failed to check %s#%s", self.name, pr.number)
            self._remove_closed(closed)
            self._save()

    def _check(self, pr: PullRequest) -> None:
        pull = self._pulls.get(pr.number)
        if pull is None:
            LOG.info("Creating new tracked pull request %s#%s", self.name, pr.number)
            pull = PullRequestState.create(pr, self.policy, self)
            self._pulls[pr.number] = pull
        pull.evaluate(pr)

    def _remove_closed(self, closed: Set[int]) -> None:
        for pr_id in closed:
            LOG.info("Removing closed pull request %s#%s", self.name, pr_id)
            self._pulls.pop(pr_id, None)

    def on_pull_request(self, action: str, number: int, pr: PullRequest | None) -> None:
        """Push path: a pull_request notification."""
        with self._lock:
            LOG.info("Repo %s pull request hook; action: %s, number: %s", self.name, action, number)
            if action in TRACKED_ACTIONS:
                if pr is None:
                    LOG.warning("Pull request hook %s for #%s carries no pull request", action, number)
                    return
                self._check(pr)
            elif action == "closed":
                LOG.info("Removing tracked pull request %s#%s", self.name, number)
                self._pulls.pop(number, None)
            else:
                LOG.warning("Unknown pull request action: %s", action)
                return
            self._save()

    def on_issue_comment(
        self,
        action: str,
        issue_number: int,
        comment: Comment | None,
        is_pull_request: bool,
    ) -> None:
        """Push path: an issue_comment notification."""
        with self._lock:
            LOG.info(
                "Repo %s issue comment hook; action: %s, issue.number: %s, comment.body: %s",
                self.name,
                action,
                issue_number,
                comment.body if comment else None,
            )
            if action != "created":
                LOG.warning("Unknown issue comment action: %s", action)
                return
            if not is_pull_request:
                LOG.info("Issue %s#%s is not a pull request; ignoring comment", self.name, issue_number)
                return
            self.comment_as_synchronize(issue_number)

    def comment_as_synchronize(self, number: int) -> bool:
        """Turn a new comment on an open pull request into a "synchronize" notification.

        A new comment always triggers a full re-evaluation of the pull
        request, not a comment-only one: commits may have changed since it
        was last seen. Returns False when the pull request is not open or
        cannot be fetched.
        """
        with self._lock:
            try:
                pr = self.adapter.get_pr(self.name, number)
            except GitPlatformError as e:
                LOG.warning("Failed to fetch pull request %s#%s for comment: %s", self.name, number, e)
                return False
            if pr.state != "open":
                LOG.info("Pull request %s#%s is %s; ignoring comment", self.name, number, pr.state)
                return False
            self.on_pull_request("synchronize", number, pr)
            return True

    def get_comments(self, pr_id: int) -> List[Comment]:
        """Fetch comments of a pull request. Raises GitPlatformError."""
        return self.adapter.get_pr_comments(self.name, pr_id)

    def get_mergeable(self, pr_id: int) -> bool | None:
        """Fetch mergeable flag of a pull request. Raises GitPlatformError."""
        return self.adapter.get_pr_mergeable(self.name, pr_id)

    def create_status(
        self,
        commit: str,
        state: CommitState,
        url: str | None,
        message: str,
        pr_id: int,
    ) -> None:
        self._status.report(commit, state, url, message, pr_id)

    def post_comment(self, pr_id: int, text: str) -> None:
        try:
            self.adapter.create_comment(self.name, pr_id, text)
        except GitPlatformError as e:
            LOG.error("Couldn't add comment to pull request %s#%s: %r: %s", self.name, pr_id, text, e)

    def close_pull_request(self, pr_id: int) -> None:
        try:
            self.adapter.close_pr(self.name, pr_id)
        except GitPlatformError as e:
            LOG.error("Couldn't close pull request %s#%s: %s", self.name, pr_id, e)

    def _hook_exists(self) -> bool:
        for hook in self.adapter.list_hooks(self.name):
            if hook.name == HOOK_NAME and hook.config.get("url") == self.hook_url:
                return True
        return False

    def ensure_webhook_registered(self) -> bool:
        """Register the webhook unless one with the same callback URL exists."""
        if not self.hook_url:
            LOG.info("No hook URL configured; not registering webhook for %s", self.name)
            return False
        try:
            if self._hook_exists():
                LOG.debug("Webhook %s already registered on %s", self.hook_url, self.name)
                return True
            config = {"url": self.hook_url, "content_type": "form"}
            if not self.verify_hook_ssl:
                config["insecure_ssl"] = "1"
            self.adapter.create_hook(self.name, HOOK_NAME, config, HOOK_EVENTS, active=True)
        except GitPlatformError as e:
            LOG.error("Couldn't create web hook for repository %s: %s", self.name, e)
            return False
        LOG.info("Registered webhook %s on %s", self.hook_url, self.name)
        return True

    def _save(self) -> None:
        if self.state_dir is None:
            return
        try:
            save_repository_state(self.state_dir, self.name, [p.record for p in self._pulls.values()])
            save_whitelist(self.state_dir, self.policy.added_logins())
        except (OSError, yaml.YAMLError) as e:
            LOG.error("Failed to save state of %s: %s", self.name, e)
