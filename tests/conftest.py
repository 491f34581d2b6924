"""Shared fixtures: mocked adapter, policy, build trigger and a RepositorySync over them."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from prwatch.adapters.base import GitPlatformAdapter
from prwatch.builds.base import BuildTrigger
from prwatch.models import Comment, PullRequest, Repository
from prwatch.policy import AuthorizationPolicy
from prwatch.repository import RepositorySync

REPO = "owner/repo"
T0 = datetime(2024, 1, 15, 10, 0, tzinfo=UTC)
REQUEST_FOR_TESTING = "Can one of the admins verify this patch?"


def at(minutes: int) -> datetime:
    """T0 plus minutes."""
    return T0 + timedelta(minutes=minutes)


def make_pr(
    number: int,
    author: str = "bob",
    head: str = "sha1",
    updated: int = 0,
    state: str = "open",
    comments: list[Comment] | None = None,
) -> PullRequest:
    return PullRequest(
        number=number,
        state=state,
        head_sha=head,
        base_ref="main",
        author=author,
        updated_at=at(updated),
        comments=comments,
    )


def make_comment(body: str, author: str, minutes: int, comment_id: int = 1) -> Comment:
    return Comment(id=comment_id, body=body, author=author, created_at=at(minutes), updated_at=at(minutes))


@pytest.fixture
def adapter() -> MagicMock:
    """Adapter mock: repo resolves, no comments, mergeable, nothing open."""
    mock = MagicMock(spec=GitPlatformAdapter)
    mock.get_repository.return_value = Repository(full_name=REPO, html_url=f"https://github.com/{REPO}")
    mock.get_pr_comments.return_value = []
    mock.get_pr_mergeable.return_value = True
    mock.list_open_prs.return_value = []
    mock.list_hooks.return_value = []
    return mock


@pytest.fixture
def policy() -> AuthorizationPolicy:
    """alice is admin, carol is whitelisted."""
    return AuthorizationPolicy(admins=["alice"], whitelist=["carol"])


@pytest.fixture
def builds() -> MagicMock:
    mock = MagicMock(spec=BuildTrigger)
    mock.build.return_value = "Build triggered."
    return mock


@pytest.fixture
def sync(adapter: MagicMock, policy: AuthorizationPolicy, builds: MagicMock) -> RepositorySync:
    return RepositorySync(REPO, adapter, policy, builds)
