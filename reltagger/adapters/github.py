"""GitHub API adapter."""

from typing import Any, Dict

import requests

from reltagger.adapters.base import GitPlatformAdapter, GitPlatformError
from reltagger.models import PullRequestEvent


def _event_from_api(repo: str, data: Dict[str, Any]) -> PullRequestEvent:
    head = data.get("head") or {}
    base = data.get("base") or {}
    base_repo = base.get("repo") or {}
    return PullRequestEvent(
        action="closed" if data.get("state") == "closed" else data.get("state") or "",
        number=data["number"],
        title=data.get("title") or "",
        head_ref=head.get("ref") or "",
        base_ref=base.get("ref") or "",
        merged=data.get("merged") is True,
        repository=base_repo.get("full_name") or repo,
        clone_url=base_repo.get("clone_url"),
        merge_commit_sha=data.get("merge_commit_sha"),
    )


class GitHubAdapter(GitPlatformAdapter):
    """GitHub REST API implementation."""

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
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        resp = self._session.request(method, url, params=params, timeout=30)
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except ValueError:
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        return resp

    def get_pull_request(self, repo: str, pr_number: int) -> PullRequestEvent:
        data = self._request("GET", f"/repos/{repo}/pulls/{pr_number}").json()
        return _event_from_api(repo, data)
