"""Tests for the CLI entry point and daemon wiring."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from conftest import REPO, at
from prwatch.config import AppConfig, SchedulerConfig, StoreConfig, TriggerConfig, WebhookConfig
from prwatch.daemon import build_repositories, run_daemon, run_once
from prwatch.main import main
from prwatch.repository import RepositorySync
from prwatch.store import save_repository_state, save_whitelist
from prwatch.store.schemas import PullRequestRecord


def _config(tmp_path: Path, **sections) -> AppConfig:
    return AppConfig(
        trigger=sections.get("trigger") or TriggerConfig(repositories=[REPO], admins=["alice"]),
        store=StoreConfig(state_dir=str(tmp_path / "state")),
        webhook=sections.get("webhook") or WebhookConfig(enabled=False),
        scheduler=sections.get("scheduler") or SchedulerConfig(enabled=False),
    )


class TestMain:
    """prwatch CLI."""

    def test_check(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("trigger:\n  repositories: [owner/repo]\n", encoding="utf-8")
        assert main(["--config", str(path), "--check"]) == 0
        assert "Config OK: owner/repo" in capsys.readouterr().out

    def test_once(self, tmp_path: Path) -> None:
        with patch("prwatch.daemon.run_once") as run:
            assert main(["--config", str(tmp_path / "absent.yaml"), "--once"]) == 0
        run.assert_called_once()

    def test_fatal_error_returns_1(self, tmp_path: Path) -> None:
        with patch("prwatch.daemon.run_daemon", side_effect=RuntimeError("boom")):
            assert main(["--config", str(tmp_path / "absent.yaml")]) == 1

    def test_interrupt_returns_0(self, tmp_path: Path) -> None:
        with patch("prwatch.daemon.run_daemon", side_effect=KeyboardInterrupt):
            assert main(["--config", str(tmp_path / "absent.yaml")]) == 0


class TestDaemon:
    """Repository wiring, state restore, run modes."""

    def test_build_repositories_restores_state(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        state_dir = tmp_path / "state"
        record = PullRequestRecord(id=4, author="bob", head="abc", target="main", updated=at(0))
        save_repository_state(state_dir, REPO, [record])
        save_whitelist(state_dir, ["dave"])

        with patch("prwatch.daemon.GitHubAdapter") as adapter_cls:
            repositories = build_repositories(config)

        adapter_cls.assert_called_once()
        sync = repositories[REPO]
        assert isinstance(sync, RepositorySync)
        assert sync.tracked_ids() == {4}
        assert sync.policy.is_whitelisted("dave")
        assert sync.policy.is_admin("alice")

    def test_run_once_reconciles_each(self, tmp_path: Path) -> None:
        sync = MagicMock(spec=RepositorySync)
        with patch("prwatch.daemon.build_repositories", return_value={REPO: sync}):
            run_once(_config(tmp_path))
        sync.reconcile.assert_called_once()

    def test_run_daemon_serves_webhooks(self, tmp_path: Path) -> None:
        """With webhooks enabled: hooks registered, poll threads started, server run."""
        config = _config(
            tmp_path,
            webhook=WebhookConfig(enabled=True),
            scheduler=SchedulerConfig(enabled=True, interval_seconds=60),
        )
        sync = MagicMock(spec=RepositorySync)
        with (
            patch("prwatch.daemon.build_repositories", return_value={REPO: sync}),
            patch("prwatch.daemon.start_poll_thread") as start,
            patch("prwatch.daemon.run_webhook_server") as serve,
        ):
            run_daemon(config)

        sync.ensure_webhook_registered.assert_called_once()
        start.assert_called_once_with(sync, 60)
        serve.assert_called_once()

    def test_run_daemon_poll_only_joins_threads(self, tmp_path: Path) -> None:
        config = _config(tmp_path, scheduler=SchedulerConfig(enabled=True))
        sync = MagicMock(spec=RepositorySync)
        thread = MagicMock()
        with (
            patch("prwatch.daemon.build_repositories", return_value={REPO: sync}),
            patch("prwatch.daemon.start_poll_thread", return_value=thread),
            patch("prwatch.daemon.run_webhook_server") as serve,
        ):
            run_daemon(config)

        sync.ensure_webhook_registered.assert_not_called()
        serve.assert_not_called()
        thread.join.assert_called_once()
