"""Tests for build triggers (stub, command, factory)."""

import subprocess
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from conftest import REPO, at
from prwatch.builds import CommandBuildTrigger, StubBuildTrigger, build_message, make_build_trigger
from prwatch.store.schemas import PullRequestRecord


def _record(mergeable: bool | None = None) -> PullRequestRecord:
    return PullRequestRecord(id=3, author="bob", head="abc", target="main", updated=at(0), mergeable=mergeable)


def test_build_message() -> None:
    assert build_message(_record(mergeable=True)) == "Merged build triggered."
    assert build_message(_record(mergeable=False)) == "Build triggered."
    assert build_message(_record(mergeable=None)) == "Build triggered."


def test_stub_returns_message() -> None:
    assert StubBuildTrigger(REPO).build(_record(mergeable=True)) == "Merged build triggered."


def test_command_started_with_pr_env() -> None:
    """Popen gets the command, cwd and PRWATCH_* variables; nothing is waited on."""
    trigger = CommandBuildTrigger(REPO, ["./ci.sh", "--fast"], working_directory="/srv/ci")
    proc = MagicMock(pid=42)
    with patch("prwatch.builds.command.subprocess.Popen", return_value=proc) as popen:
        message = trigger.build(_record(mergeable=True))

    assert message == "Merged build triggered."
    args, kwargs = popen.call_args
    assert args[0] == ["./ci.sh", "--fast"]
    assert kwargs["cwd"] == "/srv/ci"
    assert kwargs["stdout"] is subprocess.DEVNULL
    env = kwargs["env"]
    assert env["PRWATCH_REPOSITORY"] == REPO
    assert env["PRWATCH_PR_ID"] == "3"
    assert env["PRWATCH_PR_AUTHOR"] == "bob"
    assert env["PRWATCH_COMMIT"] == "abc"
    assert env["PRWATCH_TARGET_BRANCH"] == "main"
    assert env["PRWATCH_MERGEABLE"] == "true"
    proc.wait.assert_not_called()


def test_command_start_failure() -> None:
    trigger = CommandBuildTrigger(REPO, ["/nonexistent/ci"])
    with patch("prwatch.builds.command.subprocess.Popen", side_effect=FileNotFoundError("no such file")):
        assert trigger.build(_record()) == "Build could not be started."


def test_make_build_trigger() -> None:
    config = SimpleNamespace(build=SimpleNamespace(command=["make", "ci"], working_directory="/tmp"))
    trigger = make_build_trigger(config, REPO)
    assert isinstance(trigger, CommandBuildTrigger)
    assert trigger.command == ["make", "ci"]
    assert trigger.working_directory == "/tmp"

    config.build.command = None
    assert isinstance(make_build_trigger(config, REPO), StubBuildTrigger)
