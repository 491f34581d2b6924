"""Route GitHub webhook events to the monitored repositories.

Handled events:
- issue_comment: RepositorySync.on_issue_comment
- pull_request: RepositorySync.on_pull_request
- ping: acknowledged

Anything else, and malformed payloads, are logged and dropped.
"""

import logging
from typing import Any, Dict, Mapping

from prwatch.repository import RepositorySync
from prwatch.webhook.events import IssueCommentEvent, PullRequestEvent

LOG = logging.getLogger("prwatch.webhook.handlers")


class WebhookDispatcher:
    """Stateless translation of notifications into RepositorySync calls."""

    def __init__(self, repositories: Mapping[str, RepositorySync]) -> None:
        self._repositories = dict(repositories)

    def _resolve(self, repo: str | None) -> RepositorySync | None:
        if repo is None:
            if len(self._repositories) == 1:
                return next(iter(self._repositories.values()))
            LOG.warning("Payload has no repository and %d repositories are monitored", len(self._repositories))
            return None
        sync = self._repositories.get(repo)
        if sync is None:
            LOG.info("Repository %s is not monitored; ignoring event", repo)
        return sync

    def dispatch(self, event: str, payload: Dict[str, Any] | None) -> None:
        """Handle one notification. Never raises for bad input."""
        if not payload:
            LOG.error("Request doesn't contain payload (event %s)", event)
            return
        if not isinstance(payload, dict):
            LOG.error("Payload of event %s is not an object; ignoring", event)
            return
        if event == "issue_comment":
            self._on_issue_comment(payload)
        elif event == "pull_request":
            self._on_pull_request(payload)
        elif event == "ping":
            LOG.debug("Ping received: %s", payload.get("zen"))
        else:
            LOG.warning("Request not known: event %r", event)

    def _on_issue_comment(self, payload: Dict[str, Any]) -> None:
        try:
            event = IssueCommentEvent.from_payload(payload)
        except (KeyError, TypeError, ValueError) as e:
            LOG.error("Failed to parse issue_comment payload: %r", e)
            return
        sync = self._resolve(event.repo)
        if sync is None:
            return
        sync.on_issue_comment(event.action, event.issue_number, event.comment, event.is_pull_request)

    def _on_pull_request(self, payload: Dict[str, Any]) -> None:
        try:
            event = PullRequestEvent.from_payload(payload)
        except (KeyError, TypeError, ValueError) as e:
            LOG.error("Failed to parse pull_request payload: %r", e)
            return
        sync = self._resolve(event.repo)
        if sync is None:
            return
        sync.on_pull_request(event.action, event.number, event.pull_request)
