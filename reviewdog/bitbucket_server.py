"""Client for the Bitbucket Server Code Insights API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, urlparse

import requests

from reviewdog.bitbucket_api import (
    ANNOTATION_SEVERITY_LOW,
    ANNOTATION_TYPE_CODE_SMELL,
    HTTP_TIMEOUT,
    REPORT_RESULT_FAILED,
    REPORT_RESULT_PENDING,
    AnnotationsRequest,
    ReportRequest,
    UnexpectedResponseError,
    convert_severity,
    external_id_from_diagnostic,
)
from reviewdog.core import Comment


def _segment(value: str) -> str:
    return quote(value, safe="")


def server_variables(server_url: str) -> dict[str, str]:
    """Protocol and domain of a Bitbucket Server URL."""
    try:
        parsed = urlparse(server_url)
    except ValueError as exc:
        raise ValueError(f"failed to parse Bitbucket Server URL: {exc}") from exc
    return {"protocol": parsed.scheme, "bitbucketDomain": parsed.netloc}


def convert_result(result: str) -> str:
    """Server report result for a report status."""
    return "FAIL" if result == REPORT_RESULT_FAILED else "PASS"


def build_server_report(req: ReportRequest) -> dict[str, Any]:
    """Report payload for the Server API."""
    return {
        "title": req.title,
        "reporter": req.reporter,
        "logoUrl": req.logo_url,
        "result": convert_result(req.result),
        "details": req.details,
    }


def _build_annotation(comment: Comment) -> dict[str, Any]:
    diagnostic = comment.result.diagnostic
    severity = convert_severity(diagnostic.severity) or ANNOTATION_SEVERITY_LOW
    annotation: dict[str, Any] = {
        "path": diagnostic.location.path,
        "line": diagnostic.location.range.start_line - 1,
        "message": f"[{comment.tool_name}] {diagnostic.message}",
        "severity": severity,
        "externalId": external_id_from_diagnostic(diagnostic),
        "type": ANNOTATION_TYPE_CODE_SMELL,
    }
    if diagnostic.code.url:
        annotation["link"] = diagnostic.code.url
    return annotation


def build_server_annotations(comments: list[Comment]) -> dict[str, Any]:
    """Annotations list payload for the Server API."""
    return {"annotations": [_build_annotation(comment) for comment in comments]}


class ServerAPIClient:
    """Creates reports and annotations through the Bitbucket Server API."""

    def __init__(
        self,
        server_url: str,
        session: requests.Session | None = None,
        user: str = "",
        password: str = "",
        token: str = "",
    ) -> None:
        variables = server_variables(server_url)
        self.base_url = (
            f"{variables['protocol']}://{variables['bitbucketDomain']}/rest/insights/1.0"
        )
        self.session = session if session is not None else requests.Session()
        self._headers: dict[str, str] = {}
        self._auth: tuple[str, str] | None = None
        if user and password:
            self._auth = (user, password)
        if token:
            self._auth = None
            self._headers["Authorization"] = f"Bearer {token}"

    def _report_path(self, owner: str, repo: str, commit: str, report: str) -> str:
        return (
            f"{self.base_url}/projects/{_segment(owner)}/repos/{_segment(repo)}"
            f"/commits/{_segment(commit)}/reports/{_segment(report)}"
        )

    def _send(
        self, method: str, url: str, payload: Any, expected: int, what: str
    ) -> None:
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers,
                auth=self._auth,
                timeout=HTTP_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise RuntimeError(f"failed to {what}: bitbucket API error: {exc}") from exc
        if response.status_code != expected:
            raise UnexpectedResponseError(response.status_code, response.content)

    def create_or_update_report(self, req: ReportRequest) -> None:
        """Replace a report; pending reports are skipped as Server has no such state."""
        if req.result == REPORT_RESULT_PENDING:
            return
        url = self._report_path(req.owner, req.repository, req.commit, req.report_id)
        # Dropping the report also drops the annotations created before.
        self._send("DELETE", url, None, 204, "delete code insights report")
        self._send(
            "PUT", url, build_server_report(req), 200, "create code insights report"
        )

    def create_or_update_annotations(self, req: AnnotationsRequest) -> None:
        """Add annotations to a report."""
        url = (
            self._report_path(req.owner, req.repository, req.commit, req.report_id)
            + "/annotations"
        )
        self._send(
            "POST",
            url,
            build_server_annotations(req.comments),
            204,
            "create annotations",
        )