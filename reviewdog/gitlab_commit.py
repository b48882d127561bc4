"""Comment service that posts commit comments for GitLab merge requests."""

from __future__ import annotations

import subprocess
import threading
from concurrent.futures import ThreadPoolExecutor

import requests

from reviewdog.commentutil import PostedComments, markdown_comment
from reviewdog.core import Comment
from reviewdog.gitlab_client import GitLabClient
from reviewdog.gitutil import git_rel_workdir, join_workdir


def _last_commit_id(path: str, line: int) -> str:
    """Commit that last touched ``line`` of ``path``, according to git blame."""
    try:
        out = subprocess.run(
            ["git", "blame", "-l", "-L", f"{line},{line}", path],
            check=True,
            capture_output=True,
        ).stdout
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"failed to get commitID: {exc}") from exc
    return out.decode().split(" ")[0]


class MergeRequestCommitCommenter:
    """Posts each comment on the commit that last changed its line."""

    def __init__(
        self,
        client: GitLabClient,
        project_id: str,
        mr: int,
        sha: str,
        workdir: str | None = None,
    ) -> None:
        if workdir is None:
            try:
                workdir = git_rel_workdir()
            except RuntimeError as exc:
                raise RuntimeError(
                    f"MergeRequestCommitCommenter needs 'git' command: {exc}"
                ) from exc
        self.client = client
        self.project_id = project_id
        self.mr = mr
        self.sha = sha
        self.workdir = workdir
        self.post_comments: list[Comment] = []
        self._lock = threading.Lock()

    def post(self, comment: Comment) -> None:
        """Hold a comment until flush."""
        location = comment.result.diagnostic.location
        location.path = join_workdir(self.workdir, location.path)
        with self._lock:
            self.post_comments.append(comment)

    def flush(self) -> None:
        """Post the held comments that are not on the merge request yet."""
        with self._lock:
            posted = self._posted_comments()
            self._post_each(posted)

    def _posted_comments(self) -> PostedComments:
        posted = PostedComments()
        for commit in self.client.merge_request_commits(self.project_id, self.mr):
            try:
                comments = self.client.commit_comments(self.project_id, commit["id"])
            except requests.RequestException:
                continue
            for existing in comments:
                line = existing.get("line") or 0
                path = existing.get("path") or ""
                note = existing.get("note") or ""
                # Resolved comments, or ones without a path or body.
                if not line or not path or not note:
                    continue
                posted.add_posted_comment(path, line, note)
        return posted

    def _post_one(self, path: str, line: int, body: str) -> None:
        try:
            commit_id = _last_commit_id(path, line)
        except RuntimeError:
            commit_id = self.sha
        self.client.post_commit_comment(
            self.project_id, commit_id, body, path, line, "new"
        )

    def _post_each(self, posted: PostedComments) -> None:
        with ThreadPoolExecutor() as pool:
            futures = []
            for comment in self.post_comments:
                location = comment.result.diagnostic.location
                line = location.range.start_line
                body = markdown_comment(comment)
                if (
                    not comment.result.in_diff_file
                    or line == 0
                    or posted.is_posted(comment, line, body)
                ):
                    continue
                futures.append(pool.submit(self._post_one, location.path, line, body))
        errors = [exc for exc in (f.exception() for f in futures) if exc is not None]
        if errors:
            raise errors[0]