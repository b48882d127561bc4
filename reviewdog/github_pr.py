"""Comment and diff service for GitHub pull requests."""

from __future__ import annotations

import io
import os
import threading
from typing import Any

from reviewdog.actions_log import report_as_github_actions_log
from reviewdog.codefence import get_code_fence_length, write_code_fence
from reviewdog.commentutil import PostedComments, markdown_comment
from reviewdog.core import Comment
from reviewdog.github_client import GitHubClient
from reviewdog.githubutils import linked_markdown_diagnostic
from reviewdog.gitutil import git_rel_workdir, join_workdir
from reviewdog.model import Range, Suggestion

MAX_COMMENTS_PER_REQUEST = 30

INVALID_SUGGESTION_PRE = "<details><summary>reviewdog suggestion error</summary>"
INVALID_SUGGESTION_POST = "</details>"


class SuggestionError(ValueError):
    """A suggestion that cannot be rendered as a GitHub suggestion block."""


def _in_github_action() -> bool:
    return bool(os.environ.get("GITHUB_ACTIONS"))


def comment_line_range(comment: Comment) -> tuple[int, int]:
    """Start and end line the comment should cover on GitHub.

    The first suggestion's range wins when it lies in the diff context, so the
    suggestion can be posted along with the comment.
    """
    result = comment.result
    suggestions = result.diagnostic.suggestions
    if result.first_suggestion_in_diff_context and suggestions:
        rng = suggestions[0].range or Range()
    else:
        rng = result.diagnostic.location.range
    start = rng.start_line
    end = rng.end_line or start
    return start, end


def build_draft_review_comment(comment: Comment, body: str) -> dict[str, Any]:
    """Build a draft review comment payload for the review API."""
    start, end = comment_line_range(comment)
    draft: dict[str, Any] = {
        "path": comment.result.diagnostic.location.path,
        "side": "RIGHT",
        "body": body,
        "line": end,
    }
    # GitHub requires the start line to precede the end line.
    if start < end:
        draft["start_side"] = "RIGHT"
        draft["start_line"] = start
    return draft


def build_body(comment: Comment) -> str:
    """Markdown body of a comment, followed by its suggestions if any."""
    body = markdown_comment(comment)
    suggestions = build_suggestions(comment)
    if suggestions:
        body += "\n" + suggestions
    return body


def build_suggestions(comment: Comment) -> str:
    """Render every suggestion; invalid ones become a collapsed error note."""
    parts = []
    for suggestion in comment.result.diagnostic.suggestions:
        try:
            parts.append(_build_single_suggestion(comment, suggestion) + "\n")
        except SuggestionError as exc:
            parts.append(f"{INVALID_SUGGESTION_PRE}{exc}{INVALID_SUGGESTION_POST}\n")
    return "".join(parts)


def _fenced_suggestion(text: str, keep_empty: bool) -> str:
    backticks = get_code_fence_length(text)
    out = io.StringIO()
    write_code_fence(out, backticks)
    out.write("suggestion\n")
    if text or keep_empty:
        out.write(text)
        out.write("\n")
    write_code_fence(out, backticks)
    return out.getvalue()


def _build_single_suggestion(comment: Comment, suggestion: Suggestion) -> str:
    rng = suggestion.range or Range()
    start_line = rng.start_line
    end_line = rng.end_line or start_line
    g_start, g_end = comment_line_range(comment)
    if start_line != g_start or end_line != g_end:
        raise SuggestionError(
            "GitHub comment range and suggestion line range must be same. "
            f"L{g_start}-L{g_end} v.s. L{start_line}-L{end_line}"
        )
    if rng.start_column > 0 or rng.end_column > 0:
        return _build_non_line_based_suggestion(comment, suggestion, rng)
    return _fenced_suggestion(suggestion.text, keep_empty=False)


def _source_line(source_lines: dict[int, str], line: int) -> str:
    try:
        return source_lines[line]
    except KeyError:
        raise SuggestionError(
            f"source line (L={line}) is not available for this suggestion"
        ) from None


def _build_non_line_based_suggestion(
    comment: Comment, suggestion: Suggestion, rng: Range
) -> str:
    source_lines = comment.result.source_lines
    if not source_lines:
        raise SuggestionError("source lines are not available")
    first = _source_line(source_lines, rng.start_line)
    last = _source_line(source_lines, rng.end_line)
    text = (
        first[: max(rng.start_column - 1, 0)]
        + suggestion.text
        + last[max(rng.end_column - 1, 0):]
    )
    return _fenced_suggestion(text, keep_empty=True)


class PullRequest:
    """Posts comments as one review on a GitHub pull request and fetches its diff."""

    def __init__(
        self,
        client: GitHubClient,
        owner: str,
        repo: str,
        pr: int,
        sha: str,
        workdir: str | None = None,
    ) -> None:
        if workdir is None:
            try:
                workdir = git_rel_workdir()
            except RuntimeError as exc:
                raise RuntimeError(f"PullRequest needs 'git' command: {exc}") from exc
        self.client = client
        self.owner = owner
        self.repo = repo
        self.pr = pr
        self.sha = sha
        self.workdir = workdir
        self.post_comments: list[Comment] = []
        self._posted = PostedComments()
        self._lock = threading.Lock()

    def post(self, comment: Comment) -> None:
        """Hold a comment until flush."""
        location = comment.result.diagnostic.location
        location.path = join_workdir(self.workdir, location.path)
        with self._lock:
            self.post_comments.append(comment)

    def flush(self) -> None:
        """Post the held comments that are not on the pull request yet."""
        with self._lock:
            self._load_posted_comments()
            self._post_as_review_comment()

    def diff(self) -> bytes:
        """Return the pull request diff."""
        return self.client.get_pull_request_diff(self.owner, self.repo, self.pr)

    def strip(self) -> int:
        """Path components to strip from the diff."""
        return 1

    def _load_posted_comments(self) -> None:
        posted = PostedComments()
        for existing in self.client.list_review_comments(
            self.owner, self.repo, self.pr, per_page=100
        ):
            line = existing.get("line")
            path = existing.get("path")
            body = existing.get("body")
            if line is None or path is None or body is None:
                continue
            posted.add_posted_comment(path, line, body)
        self._posted = posted

    def _post_as_review_comment(self) -> None:
        drafts: list[dict[str, Any]] = []
        remaining: list[Comment] = []
        for comment in self.post_comments:
            if not comment.result.in_diff_context:
                # The review API cannot comment outside the diff; fall back to
                # workflow annotations when running in GitHub Actions.
                if _in_github_action():
                    report_as_github_actions_log(
                        comment.tool_name, "warning", comment.result.diagnostic
                    )
                continue
            body = build_body(comment)
            if self._posted.is_posted(comment, comment_line_range(comment)[1], body):
                continue
            # Too many comments in one request trips GitHub's abuse detection.
            if len(drafts) >= MAX_COMMENTS_PER_REQUEST:
                remaining.append(comment)
                continue
            drafts.append(build_draft_review_comment(comment, body))

        if not drafts:
            return

        review = {
            "commit_id": self.sha,
            "event": "COMMENT",
            "comments": drafts,
            "body": self._remaining_comments_summary(remaining),
        }
        self.client.create_review(self.owner, self.repo, self.pr, review)

    def _remaining_comments_summary(self, remaining: list[Comment]) -> str:
        if not remaining:
            return ""
        per_tool: dict[str, list[Comment]] = {}
        for comment in remaining:
            per_tool.setdefault(comment.tool_name, []).append(comment)
        parts = [
            "Remaining comments which cannot be posted as a review comment "
            "to avoid GitHub Rate Limit\n",
            "\n",
        ]
        for tool, comments in per_tool.items():
            parts.append("<details>\n")
            parts.append(f"<summary>{tool}</summary>\n")
            parts.append("\n")
            for comment in comments:
                parts.append(
                    linked_markdown_diagnostic(
                        self.owner, self.repo, self.sha, comment.result.diagnostic
                    )
                )
                parts.append("\n")
            parts.append("</details>\n")
        return "".join(parts)