"""Comment service that reports results as Bitbucket Code Insights reports."""

from __future__ import annotations

import contextlib
import threading

from reviewdog.bitbucket_api import (
    REPORT_RESULT_FAILED,
    REPORT_RESULT_PASSED,
    REPORT_RESULT_PENDING,
    REPORT_TYPE_BUG,
    AnnotationsRequest,
    APIClient,
    ReportRequest,
    external_id_from_diagnostic,
    report_id,
    report_title,
)
from reviewdog.core import Comment
from reviewdog.gitutil import join_workdir

LOGO_URL = "https://avatars1.githubusercontent.com/in/12131"
REPORTER = "reviewdog"
# Largest number of annotations sent in one call.
ANNOTATIONS_BATCH_SIZE = 100

_DETAILS = {
    REPORT_RESULT_PASSED: "Great news! Reviewdog couldn't spot any issues!",
    REPORT_RESULT_PENDING: "Please wait for Reviewdog to finish checking your code for issues.",
}
_DEFAULT_DETAILS = "Woof-Woof! This report generated for you by reviewdog."


class ReportAnnotator:
    """Holds comments per tool and sends one report with annotations per tool."""

    def __init__(
        self,
        client: APIClient,
        owner: str,
        repo: str,
        sha: str,
        runners: list[str] | None = None,
        workdir: str = "",
    ) -> None:
        self.client = client
        self.owner = owner
        self.repo = repo
        self.sha = sha
        self.workdir = workdir
        self.comments: dict[str, list[Comment]] = {}
        self._seen: set[str] = set()
        self._lock = threading.Lock()

        # Known runners get a report even when they find nothing.
        for runner in runners or ():
            if not runner:
                continue
            self.comments[runner] = []
            with contextlib.suppress(Exception):
                self._create_or_update_report(runner, REPORT_RESULT_PENDING)

    def post(self, comment: Comment) -> None:
        """Hold a comment until flush, dropping duplicates."""
        location = comment.result.diagnostic.location
        location.path = join_workdir(self.workdir, location.path)
        with self._lock:
            # The API rejects duplicated external ids of annotations.
            external_id = external_id_from_diagnostic(comment.result.diagnostic)
            if external_id in self._seen:
                return
            self._seen.add(external_id)
            self.comments.setdefault(comment.tool_name, []).append(comment)

    def flush(self) -> None:
        """Create or update each tool's report and send its annotations in batches."""
        with self._lock:
            for tool, comments in self.comments.items():
                if not comments:
                    self._create_or_update_report(tool, REPORT_RESULT_PASSED)
                    continue
                self._create_or_update_report(tool, REPORT_RESULT_FAILED)
                for start in range(0, len(comments), ANNOTATIONS_BATCH_SIZE):
                    req = AnnotationsRequest(
                        owner=self.owner,
                        repository=self.repo,
                        commit=self.sha,
                        report_id=report_id(tool, REPORTER),
                        comments=comments[start : start + ANNOTATIONS_BATCH_SIZE],
                    )
                    try:
                        self.client.create_or_update_annotations(req)
                    except Exception as exc:
                        raise RuntimeError(f"failed to post annotations: {exc}") from exc

    def _create_or_update_report(self, tool: str, status: str) -> None:
        self.client.create_or_update_report(
            ReportRequest(
                report_id=report_id(tool, REPORTER),
                owner=self.owner,
                repository=self.repo,
                commit=self.sha,
                type=REPORT_TYPE_BUG,
                title=report_title(tool, REPORTER),
                reporter=REPORTER,
                result=status,
                details=_DETAILS.get(status, _DEFAULT_DETAILS),
                logo_url=LOGO_URL,
            )
        )