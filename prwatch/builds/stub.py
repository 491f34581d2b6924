"""
Stub build trigger: logs the request, starts nothing.

Use for development or until a build command is configured.
"""

import logging

from prwatch.builds.base import BuildTrigger, build_message
from prwatch.store.schemas import PullRequestRecord


class StubBuildTrigger(BuildTrigger):
    """Trigger that only logs."""

    def __init__(self, repository: str) -> None:
        self.repository = repository

    def build(self, record: PullRequestRecord) -> str:
        log = logging.getLogger("prwatch.builds.stub")
        log.info("Build (stub): %s#%s at %s", self.repository, record.id, record.head)
        return build_message(record)
