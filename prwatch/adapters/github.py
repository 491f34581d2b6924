"""GitHub API adapter."""

from datetime import datetime
from typing import Any, Dict, List

import requests

from prwatch.adapters.base import GitPlatformAdapter, GitPlatformError
from prwatch.models import Comment, CommitState, Hook, PullRequest, Repository

PER_PAGE = 100


def _parse_iso(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def comment_from_api(data: Dict[str, Any]) -> Comment:
    """Build Comment from an API (or webhook) comment object."""
    user = data.get("user") or {}
    created = _parse_iso(data.get("created_at") or data["updated_at"])
    updated = _parse_iso(data.get("updated_at") or data["created_at"])
    return Comment(
        id=data["id"],
        body=data.get("body") or "",
        author=user.get("login", ""),
        created_at=created,
        updated_at=updated,
    )


def pr_from_api(data: Dict[str, Any]) -> PullRequest:
    """Build PullRequest from an API (or webhook) pull_request object.

    Webhook payloads may carry the comments as a list; the REST API
    returns only their count, in which case comments stay None.
    """
    head = data.get("head") or {}
    base = data.get("base") or {}
    user = data.get("user") or {}
    raw_comments = data.get("comments")
    comments = None
    if isinstance(raw_comments, list):
        comments = [comment_from_api(c) for c in raw_comments]
    return PullRequest(
        number=data["number"],
        state=data.get("state", "open"),
        head_sha=head.get("sha", ""),
        base_ref=base.get("ref", ""),
        author=user.get("login", ""),
        updated_at=_parse_iso(data["updated_at"]),
        mergeable=data.get("mergeable"),
        html_url=data.get("html_url"),
        comments=comments,
    )


def _hook_from_api(data: Dict[str, Any]) -> Hook:
    return Hook(
        id=data["id"],
        name=data.get("name", "web"),
        config=data.get("config") or {},
        events=data.get("events") or [],
        active=data.get("active", True),
    )


class GitHubAdapter(GitPlatformAdapter):
    """GitHub API implementation."""

    def __init__(self, token: str | None, api_url: str = "https://api.github.com") -> None:
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        if token:
            self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = path if path.startswith("http") else f"{self._api_url}/{path.lstrip('/')}"
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=30)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {url}: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                # body is not a JSON object
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        return resp

    def _get_paginated(self, path: str, params: Dict[str, Any] | None = None) -> List[Dict[str, Any]]:
        """GET all pages following the Link: rel=next header."""
        items: List[Dict[str, Any]] = []
        resp = self._request("GET", path, params={**(params or {}), "per_page": PER_PAGE})
        items.extend(resp.json() or [])
        next_url = resp.links.get("next", {}).get("url")
        while next_url:
            resp = self._request("GET", next_url)
            items.extend(resp.json() or [])
            next_url = resp.links.get("next", {}).get("url")
        return items

    def get_repository(self, repo: str) -> Repository:
        data = self._request("GET", f"/repos/{repo}").json()
        return Repository(
            full_name=data.get("full_name", repo),
            html_url=data.get("html_url", ""),
            default_branch=data.get("default_branch", "main"),
        )

    def list_open_prs(self, repo: str) -> List[PullRequest]:
        data = self._get_paginated(f"/repos/{repo}/pulls", params={"state": "open"})
        return [pr_from_api(d) for d in data]

    def get_pr(self, repo: str, pr_number: int) -> PullRequest:
        resp = self._request("GET", f"/repos/{repo}/pulls/{pr_number}")
        return pr_from_api(resp.json())

    def get_pr_comments(self, repo: str, pr_number: int) -> List[Comment]:
        data = self._get_paginated(f"/repos/{repo}/issues/{pr_number}/comments")
        return [comment_from_api(d) for d in data]

    def create_comment(self, repo: str, issue_number: int, body: str) -> Comment:
        resp = self._request(
            "POST",
            f"/repos/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )
        return comment_from_api(resp.json())

    def create_commit_status(
        self,
        repo: str,
        sha: str,
        state: CommitState,
        target_url: str | None,
        description: str,
    ) -> None:
        payload: Dict[str, Any] = {"state": state, "description": description}
        if target_url:
            payload["target_url"] = target_url
        self._request("POST", f"/repos/{repo}/statuses/{sha}", json=payload)

    def close_pr(self, repo: str, pr_number: int) -> None:
        self._request("PATCH", f"/repos/{repo}/pulls/{pr_number}", json={"state": "closed"})

    def list_hooks(self, repo: str) -> List[Hook]:
        data = self._get_paginated(f"/repos/{repo}/hooks")
        return [_hook_from_api(d) for d in data]

    def create_hook(
        self,
        repo: str,
        name: str,
        config: Dict[str, Any],
        events: List[str],
        active: bool = True,
    ) -> Hook:
        resp = self._request(
            "POST",
            f"/repos/{repo}/hooks",
            json={"name": name, "config": config, "events": events, "active": active},
        )
        return _hook_from_api(resp.json())
