"""
prwatch daemon: poll threads and webhook server.

Builds one RepositorySync per configured repository, restores its tracked
pull requests from .prwatch/state/, registers webhooks, then polls each
repository on its own thread while serving webhook notifications.
"""

import logging
from pathlib import Path
from typing import Dict

from prwatch.adapters.github import GitHubAdapter
from prwatch.builds import make_build_trigger
from prwatch.config import AppConfig
from prwatch.logging import PrwatchLogging
from prwatch.policy import AuthorizationPolicy
from prwatch.repository import RepositorySync
from prwatch.scheduler import start_poll_thread
from prwatch.store import load_repository_state, load_whitelist
from prwatch.webhook.handlers import WebhookDispatcher
from prwatch.webhook.server import run_webhook_server

LOG = logging.getLogger("prwatch.daemon")


def build_repositories(config: AppConfig) -> Dict[str, RepositorySync]:
    """Create and rehydrate a RepositorySync per configured repository."""
    state_dir = Path(config.store.state_dir)
    adapter = GitHubAdapter(token=config.github_token_resolved, api_url=config.github.api_url)
    policy = AuthorizationPolicy.from_config(config.trigger, extra_whitelist=load_whitelist(state_dir))
    repositories: Dict[str, RepositorySync] = {}
    for name in config.trigger.repositories:
        sync = RepositorySync(
            name,
            adapter,
            policy,
            make_build_trigger(config, name),
            use_comments=config.trigger.use_comments,
            hook_url=config.trigger.hook_url,
            verify_hook_ssl=config.trigger.verify_hook_ssl,
            state_dir=state_dir,
            server_url=config.github.server_url,
        )
        sync.init(load_repository_state(state_dir, name))
        repositories[name] = sync
    return repositories


def run_once(config: AppConfig) -> None:
    """Reconcile every repository once."""
    for sync in build_repositories(config).values():
        sync.reconcile()


def run_daemon(config: AppConfig) -> None:
    """Run poll threads (if enabled) and the webhook server (if enabled)."""
    PrwatchLogging(config.logging).setup()
    if not config.trigger.repositories:
        LOG.warning("No repositories configured; daemon will do nothing useful.")
    if not config.github_token_resolved:
        LOG.warning("No GitHub token; API rate limits apply and statuses cannot be posted.")

    repositories = build_repositories(config)
    if config.webhook.enabled:
        for sync in repositories.values():
            sync.ensure_webhook_registered()

    LOG.info(
        "prwatch daemon started | repos=%s | webhook=%s | poll=%s every %ss",
        ",".join(repositories) or "-",
        config.webhook.enabled,
        config.scheduler.enabled,
        config.scheduler.interval_seconds,
    )

    threads = []
    if config.scheduler.enabled:
        threads = [start_poll_thread(sync, config.scheduler.interval_seconds) for sync in repositories.values()]

    if config.webhook.enabled:
        run_webhook_server(config, WebhookDispatcher(repositories))
        return
    for thread in threads:
        thread.join()
