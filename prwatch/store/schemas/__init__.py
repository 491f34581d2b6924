"""Pydantic schemas for persisted state files."""

from prwatch.store.schemas.pr_record import PullRequestRecord
from prwatch.store.schemas.repository_state import RepositoryStateFile

__all__ = ["PullRequestRecord", "RepositoryStateFile"]
