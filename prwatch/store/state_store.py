"""Tracked state storage as YAML files.

One file per repository: {state_dir}/{owner}__{name}.yaml with the
tracked pull requests. Runtime whitelist additions go to
{state_dir}/whitelist.yaml.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Iterable, List

import yaml
from pydantic import ValidationError

from prwatch.store.schemas import PullRequestRecord, RepositoryStateFile

WHITELIST_FILE = "whitelist.yaml"

LOG = logging.getLogger("prwatch.store.state_store")

# Whitelist file is shared by all repositories
_whitelist_lock = threading.Lock()


def _state_path(state_dir: Path, repo: str) -> Path:
    return Path(state_dir) / f"{repo.replace('/', '__')}.yaml"


def _write_yaml(path: Path, payload: object) -> None:
    """Write YAML via a temp file and rename, so readers never see half a file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    raw = yaml.dump(
        payload,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=1000,
    )
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(raw, encoding="utf-8")
    os.replace(tmp, path)


def load_repository_state(state_dir: Path, repo: str) -> List[PullRequestRecord]:
    """Load tracked pull requests of repo. Returns [] if missing or invalid."""
    path = _state_path(state_dir, repo)
    if not path.is_file():
        return []
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not data:
            return []
        state = RepositoryStateFile.model_validate(data)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        LOG.warning("Failed to load state of %s from %s: %s", repo, path, e)
        return []
    if state.repository != repo:
        LOG.warning("State file %s belongs to %s, not %s; ignoring", path, state.repository, repo)
        return []
    LOG.debug("Loaded %d pull requests of %s", len(state.pulls), repo)
    return state.pulls


def save_repository_state(state_dir: Path, repo: str, records: Iterable[PullRequestRecord]) -> Path:
    """Write tracked pull requests of repo, sorted by id. Creates dir if needed."""
    path = _state_path(state_dir, repo)
    state = RepositoryStateFile(repository=repo, pulls=sorted(records, key=lambda r: r.id))
    _write_yaml(path, state.model_dump(mode="json"))
    LOG.debug("Saved %d pull requests of %s to %s", len(state.pulls), repo, path)
    return path


def load_whitelist(state_dir: Path) -> List[str]:
    """Load persisted whitelist additions. Returns [] if missing or invalid."""
    path = Path(state_dir) / WHITELIST_FILE
    if not path.is_file():
        return []
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        LOG.warning("Failed to load whitelist from %s: %s", path, e)
        return []
    logins = data.get("whitelist") if isinstance(data, dict) else None
    if not isinstance(logins, list):
        return []
    return [str(login) for login in logins if login]


def save_whitelist(state_dir: Path, logins: Iterable[str]) -> Path:
    """Write whitelist additions (sorted, deduplicated)."""
    path = Path(state_dir) / WHITELIST_FILE
    with _whitelist_lock:
        _write_yaml(path, {"whitelist": sorted(set(logins))})
    return path
