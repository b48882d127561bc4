"""Diff and review services for Gerrit changes."""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

import requests

from reviewdog.core import Comment
from reviewdog.gitutil import git_rel_workdir, join_workdir, merge_base_diff

STRIP_DIFF_RESULT = 1

# Gerrit prefixes JSON responses with this line to defeat XSSI.
_MAGIC_PREFIX = ")]}"


def _decode(response: requests.Response) -> Any:
    text = response.text
    if text.startswith(_MAGIC_PREFIX):
        _, _, text = text.partition("\n")
    if not text.strip():
        return {}
    return json.loads(text)


class GerritClient:
    """Thin wrapper over ``requests`` for the Gerrit REST API."""

    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self.session.request(method, f"{self.base_url}/{path}", **kwargs)
        response.raise_for_status()
        return _decode(response)

    def get_change_detail(
        self, change_id: str, fields: Iterable[str] = ()
    ) -> dict[str, Any]:
        """Return the detail of a change, with the extra ``fields`` asked for."""
        params = {"o": list(fields)} if fields else None
        return self._request(
            "GET", f"changes/{quote(change_id, safe='')}/detail", params=params
        )

    def set_review(
        self, change_id: str, revision_id: str, review: dict[str, Any]
    ) -> dict[str, Any]:
        """Post a review on a revision of a change."""
        return self._request(
            "POST",
            f"changes/{quote(change_id, safe='')}/revisions/"
            f"{quote(revision_id, safe='')}/review",
            json=review,
        )


def _resolve_workdir(workdir: str | None, owner: str) -> str:
    if workdir is not None:
        return workdir
    try:
        return git_rel_workdir()
    except RuntimeError as exc:
        raise RuntimeError(f"{owner} needs 'git' command: {exc}") from exc


class ChangeDiff:
    """Produces the diff of a Gerrit change by running git locally."""

    def __init__(
        self,
        client: GerritClient,
        branch: str,
        change_id: str,
        workdir: str | None = None,
    ) -> None:
        self.client = client
        self.branch = branch
        self.change_id = change_id
        self.workdir = _resolve_workdir(workdir, "ChangeDiff")

    def diff(self) -> bytes:
        """Diff the change's current revision against its merge base with the branch."""
        change = self.client.get_change_detail(self.change_id, ["CURRENT_REVISION"])
        return merge_base_diff(change.get("current_revision", ""), self.branch)

    def strip(self) -> int:
        """Path components to strip from the diff."""
        return STRIP_DIFF_RESULT


class ChangeReviewCommenter:
    """Posts all held comments as one review on a Gerrit revision."""

    def __init__(
        self,
        client: GerritClient,
        change_id: str,
        revision_id: str,
        workdir: str | None = None,
    ) -> None:
        self.client = client
        self.change_id = change_id
        self.revision_id = revision_id
        self.workdir = _resolve_workdir(workdir, "ChangeReviewCommenter")
        self.post_comments: list[Comment] = []
        self._lock = threading.Lock()

    def post(self, comment: Comment) -> None:
        """Hold a comment until flush."""
        location = comment.result.diagnostic.location
        location.path = join_workdir(self.workdir, location.path)
        with self._lock:
            self.post_comments.append(comment)

    def flush(self) -> None:
        """Post the comments in diff files as a single review."""
        with self._lock:
            comments: dict[str, list[dict[str, Any]]] = {}
            for comment in self.post_comments:
                if not comment.result.in_diff_file:
                    continue
                diagnostic = comment.result.diagnostic
                comments.setdefault(diagnostic.location.path, []).append(
                    {
                        "line": diagnostic.location.range.start_line,
                        "message": diagnostic.message,
                    }
                )
            self.client.set_review(
                self.change_id, self.revision_id, {"comments": comments}
            )