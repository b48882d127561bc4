"""A small client for the parts of the GitHub REST API that reviewdog uses."""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urlparse

import requests

DEFAULT_BASE_URL = "https://api.github.com/"
_JSON_MEDIA_TYPE = "application/vnd.github.v3+json"
_DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"


def _next_page(response: requests.Response) -> int:
    """Page number of the ``next`` link, or 0 when there is none."""
    link = response.links.get("next")
    if not link:
        return 0
    pages = parse_qs(urlparse(link.get("url", "")).query).get("page")
    if not pages:
        return 0
    try:
        return int(pages[0])
    except ValueError:
        return 0


class GitHubClient:
    """Thin wrapper over ``requests`` for the GitHub REST API."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.session = session if session is not None else requests.Session()
        self._headers = {"Accept": _JSON_MEDIA_TYPE}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        merged = {**self._headers, **(headers or {})}
        response = self.session.request(
            method, self.base_url + path.lstrip("/"), headers=merged, **kwargs
        )
        response.raise_for_status()
        return response

    def get_pull_request_diff(self, owner: str, repo: str, number: int) -> bytes:
        """Return the raw unified diff of a pull request."""
        response = self._request(
            "GET",
            f"repos/{owner}/{repo}/pulls/{number}",
            headers={"Accept": _DIFF_MEDIA_TYPE},
        )
        return response.content

    def list_review_comments(
        self, owner: str, repo: str, number: int, per_page: int = 100
    ) -> list[dict[str, Any]]:
        """Return every review comment of a pull request, following pagination."""
        path = f"repos/{owner}/{repo}/pulls/{number}/comments"
        params: dict[str, int] = {"per_page": per_page}
        comments: list[dict[str, Any]] = []
        while True:
            response = self._request("GET", path, params=params)
            comments.extend(response.json())
            page = _next_page(response)
            if not page:
                return comments
            params = {"page": page, "per_page": per_page}

    def create_review(
        self, owner: str, repo: str, number: int, review: dict[str, Any]
    ) -> dict[str, Any]:
        """Create a pull request review and return the created review."""
        response = self._request(
            "POST", f"repos/{owner}/{repo}/pulls/{number}/reviews", json=review
        )
        return response.json() if response.content else {}

    def list_org_repos(self, org: str, per_page: int = 100) -> list[dict[str, Any]]:
        """Return the first page of an organisation's repositories, newest update first."""
        response = self._request(
            "GET",
            f"orgs/{org}/repos",
            params={"sort": "updated", "direction": "desc", "per_page": per_page},
        )
        return response.json()

    def dispatch(self, owner: str, repo: str, event_type: str) -> None:
        """Trigger a repository dispatch event."""
        self._request(
            "POST", f"repos/{owner}/{repo}/dispatches", json={"event_type": event_type}
        )