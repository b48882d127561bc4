"""Comment service that opens discussions on GitLab merge requests."""

from __future__ import annotations

import io
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from reviewdog.codefence import get_code_fence_length, write_code_fence
from reviewdog.commentutil import PostedComments, markdown_comment
from reviewdog.core import Comment
from reviewdog.gitlab_client import GitLabClient
from reviewdog.gitutil import git_rel_workdir, join_workdir
from reviewdog.model import Suggestion

INVALID_SUGGESTION_PRE = "<details><summary>reviewdog suggestion error</summary>"
INVALID_SUGGESTION_POST = "</details>"


def build_single_suggestion(suggestion: Suggestion) -> str:
    """Render one suggestion as a GitLab multi-line suggestion block."""
    text = suggestion.text
    rng = suggestion.range
    lines = rng.end_line - rng.start_line if rng is not None else 0
    # Text holding a code fence needs a longer fence around it.
    backticks = get_code_fence_length(text)
    out = io.StringIO()
    write_code_fence(out, backticks)
    out.write(f"suggestion:-0+{lines}\n")
    if text:
        out.write(text)
        out.write("\n")
    write_code_fence(out, backticks)
    return out.getvalue()


def build_suggestions(comment: Comment) -> str:
    """Render every suggestion that has a full range."""
    parts = []
    for suggestion in comment.result.diagnostic.suggestions:
        rng = suggestion.range
        if rng is None or rng.start is None or rng.end is None:
            continue
        try:
            parts.append(build_single_suggestion(suggestion) + "\n")
        except ValueError as exc:
            parts.append(f"{INVALID_SUGGESTION_PRE}{exc}{INVALID_SUGGESTION_POST}\n")
    return "".join(parts)


class MergeRequestDiscussionCommenter:
    """Posts each comment as a new discussion on a merge request."""

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
                    f"MergeRequestDiscussionCommenter needs 'git' command: {exc}"
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
        """Post the held comments that are not discussed yet."""
        with self._lock:
            posted = self._posted_comments()
            self._post_each(posted)

    def _posted_comments(self) -> PostedComments:
        posted = PostedComments()
        for discussion in self.client.list_discussions(self.project_id, self.mr, per_page=100):
            for note in discussion.get("notes") or []:
                position = note.get("position")
                body = note.get("body") or ""
                if not position or not body:
                    continue
                path = position.get("new_path") or ""
                line = position.get("new_line") or 0
                if not path or not line:
                    continue
                posted.add_posted_comment(path, line, body)
        return posted

    def _post_each(self, posted: PostedComments) -> None:
        mr = self.client.get_merge_request(self.project_id, self.mr)
        branch = self.client.get_branch(mr["target_project_id"], mr["target_branch"])
        base_sha = branch["commit"]["id"]

        with ThreadPoolExecutor() as pool:
            futures = []
            for comment in self.post_comments:
                location = comment.result.diagnostic.location
                line = location.range.start_line
                body = markdown_comment(comment)
                suggestions = build_suggestions(comment)
                if suggestions:
                    body += "\n\n" + suggestions
                if (
                    not comment.result.in_diff_file
                    or line == 0
                    or posted.is_posted(comment, line, body)
                ):
                    continue
                position: dict[str, Any] = {
                    "start_sha": base_sha,
                    "head_sha": self.sha,
                    "base_sha": base_sha,
                    "position_type": "text",
                    "new_path": location.path,
                    "new_line": line,
                }
                if comment.result.old_path and comment.result.old_line:
                    position["old_path"] = comment.result.old_path
                    position["old_line"] = comment.result.old_line
                futures.append(
                    pool.submit(
                        self.client.create_discussion,
                        self.project_id,
                        self.mr,
                        body,
                        position,
                    )
                )
        errors = [exc for exc in (f.exception() for f in futures) if exc is not None]
        if errors:
            raise errors[0]