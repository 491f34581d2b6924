"""
Command build trigger: starts a configured command per build.

The command runs detached from the caller; its outcome is reported by the
command itself (e.g. a CI job posting the final commit status). Pull request
details are passed in PRWATCH_* environment variables.
"""

import logging
import os
import subprocess
from typing import Dict, List

from prwatch.builds.base import BuildTrigger, build_message
from prwatch.store.schemas import PullRequestRecord


class CommandBuildTrigger(BuildTrigger):
    """Start `command` with subprocess.Popen for each build."""

    def __init__(
        self,
        repository: str,
        command: List[str],
        working_directory: str = ".",
        log: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.command = command
        self.working_directory = working_directory
        self._log = log or logging.getLogger("prwatch.builds.command")

    def _env(self, record: PullRequestRecord) -> Dict[str, str]:
        env = os.environ.copy()
        env["PRWATCH_REPOSITORY"] = self.repository
        env["PRWATCH_PR_ID"] = str(record.id)
        env["PRWATCH_PR_AUTHOR"] = record.author
        env["PRWATCH_COMMIT"] = record.head
        env["PRWATCH_TARGET_BRANCH"] = record.target or ""
        env["PRWATCH_MERGEABLE"] = "true" if record.mergeable else "false"
        return env

    def build(self, record: PullRequestRecord) -> str:
        """Start the command and return immediately."""
        try:
            proc = subprocess.Popen(
                self.command,
                cwd=self.working_directory,
                env=self._env(record),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            self._log.error("Could not start build for %s#%s: %s", self.repository, record.id, e)
            return "Build could not be started."
        self._log.info(
            "Started build for %s#%s at %s (pid %s)",
            self.repository,
            record.id,
            record.head,
            proc.pid,
        )
        return build_message(record)
