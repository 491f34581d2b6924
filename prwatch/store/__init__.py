"""Storage of tracked pull requests and whitelist additions in .prwatch/state/ (YAML)."""

from prwatch.store.schemas import PullRequestRecord, RepositoryStateFile
from prwatch.store.state_store import (
    load_repository_state,
    load_whitelist,
    save_repository_state,
    save_whitelist,
)

__all__ = [
    "PullRequestRecord",
    "RepositoryStateFile",
    "load_repository_state",
    "load_whitelist",
    "save_repository_state",
    "save_whitelist",
]
