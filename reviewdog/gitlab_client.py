"""A small client for the parts of the GitLab REST API that reviewdog uses."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = "https://gitlab.com/api/v4"


def _escape(value: object) -> str:
    """Escape a project id or branch name as a single path segment."""
    return quote(str(value), safe="")


class GitLabClient:
    """Thin wrapper over ``requests`` for the GitLab REST API (v4)."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self._headers: dict[str, str] = {}
        if token:
            self._headers["PRIVATE-TOKEN"] = token

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        response = self.session.request(
            method, f"{self.base_url}/{path}", headers=self._headers, **kwargs
        )
        response.raise_for_status()
        return response

    def _project_path(self, project: object) -> str:
        return f"projects/{_escape(project)}"

    def get_merge_request(self, project: object, mr: int) -> dict[str, Any]:
        """Return a merge request."""
        return self._request(
            "GET", f"{self._project_path(project)}/merge_requests/{mr}"
        ).json()

    def get_branch(self, project: object, branch: str) -> dict[str, Any]:
        """Return a branch of a project."""
        return self._request(
            "GET",
            f"{self._project_path(project)}/repository/branches/{_escape(branch)}",
        ).json()

    def merge_request_commits(self, project: object, mr: int) -> list[dict[str, Any]]:
        """Return the commits of a merge request."""
        return self._request(
            "GET", f"{self._project_path(project)}/merge_requests/{mr}/commits"
        ).json()

    def commit_comments(self, project: object, sha: str) -> list[dict[str, Any]]:
        """Return the comments on a commit."""
        return self._request(
            "GET",
            f"{self._project_path(project)}/repository/commits/{_escape(sha)}/comments",
        ).json()

    def post_commit_comment(
        self,
        project: object,
        sha: str,
        note: str,
        path: str,
        line: int,
        line_type: str = "new",
    ) -> dict[str, Any]:
        """Comment on a line of a commit and return the created comment."""
        response = self._request(
            "POST",
            f"{self._project_path(project)}/repository/commits/{_escape(sha)}/comments",
            json={"note": note, "path": path, "line": line, "line_type": line_type},
        )
        return response.json() if response.content else {}

    def list_discussions(
        self, project: object, mr: int, per_page: int = 100
    ) -> list[dict[str, Any]]:
        """Return every discussion of a merge request, following pagination."""
        path = f"{self._project_path(project)}/merge_requests/{mr}/discussions"
        params: dict[str, int] = {"per_page": per_page}
        discussions: list[dict[str, Any]] = []
        while True:
            response = self._request("GET", path, params=params)
            discussions.extend(response.json())
            next_page = response.headers.get("X-Next-Page", "").strip()
            if not next_page or next_page == "0":
                return discussions
            params = {"page": int(next_page), "per_page": per_page}

    def create_discussion(
        self, project: object, mr: int, body: str, position: dict[str, Any]
    ) -> dict[str, Any]:
        """Start a discussion on a merge request and return it."""
        response = self._request(
            "POST",
            f"{self._project_path(project)}/merge_requests/{mr}/discussions",
            json={"body": body, "position": position},
        )
        return response.json() if response.content else {}