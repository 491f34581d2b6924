"""Tests for StatusReporter (status, fallback comment, give up)."""

from unittest.mock import MagicMock

from prwatch.adapters.base import GitPlatformAdapter, GitPlatformError
from prwatch.status import StatusReporter


def _adapter() -> MagicMock:
    return MagicMock(spec=GitPlatformAdapter)


def test_report_posts_status() -> None:
    adapter = _adapter()
    reporter = StatusReporter(adapter, "owner/repo")
    assert reporter.report("abc", "pending", None, "Build triggered.", 3) is True
    adapter.create_commit_status.assert_called_once_with("owner/repo", "abc", "pending", None, "Build triggered.")
    adapter.create_comment.assert_not_called()


def test_failure_without_fallback_gives_up() -> None:
    """No use_comments: failure is logged, nothing else is posted, nothing raised."""
    adapter = _adapter()
    adapter.create_commit_status.side_effect = GitPlatformError("403: forbidden")
    reporter = StatusReporter(adapter, "owner/repo", use_comments=False)
    assert reporter.report("abc", "failure", "https://ci/1", "Build failed.", 3) is False
    adapter.create_comment.assert_not_called()


def test_failure_with_fallback_posts_comment() -> None:
    adapter = _adapter()
    adapter.create_commit_status.side_effect = GitPlatformError("403: forbidden")
    reporter = StatusReporter(adapter, "owner/repo", use_comments=True)
    assert reporter.report("abc", "success", None, "Build finished.", 3) is False
    adapter.create_comment.assert_called_once_with("owner/repo", 3, "Build finished.")


def test_fallback_comment_failure_swallowed() -> None:
    adapter = _adapter()
    adapter.create_commit_status.side_effect = GitPlatformError("403: forbidden")
    adapter.create_comment.side_effect = GitPlatformError("403: forbidden")
    reporter = StatusReporter(adapter, "owner/repo", use_comments=True)
    assert reporter.report("abc", "error", None, "Build errored.", 3) is False
