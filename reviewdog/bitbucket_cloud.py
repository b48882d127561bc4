"""Client for the Bitbucket Cloud Code Insights API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from reviewdog.bitbucket_api import (
    ANNOTATION_TYPE_CODE_SMELL,
    HTTP_TIMEOUT,
    AnnotationsRequest,
    ReportRequest,
    UnexpectedResponseError,
    convert_severity,
    external_id_from_diagnostic,
)
from reviewdog.core import Comment

CLOUD_API_URL = "https://api.bitbucket.org/2.0"
# Inside Pipelines the HTTP endpoint must be used through the auth proxy.
PIPELINE_API_URL = "http://api.bitbucket.org/2.0"

# Auth proxy that runs alongside every Bitbucket Pipeline.
PIPELINE_PROXY_URL = "http://localhost:29418"
# The same proxy as seen from a Pipe, which runs in a docker container.
PIPE_PROXY_URL = "http://host.docker.internal:29418"


def _segment(value: str) -> str:
    return quote(value, safe="")


def build_cloud_report(req: ReportRequest) -> dict[str, Any]:
    """Report payload for the Cloud API."""
    return {
        "title": req.title,
        "report_type": req.type,
        "reporter": req.reporter,
        "logo_url": req.logo_url,
        "result": req.result,
        "details": req.details,
    }


def _build_annotation(comment: Comment) -> dict[str, Any]:
    diagnostic = comment.result.diagnostic
    annotation: dict[str, Any] = {
        "external_id": external_id_from_diagnostic(diagnostic),
        "annotation_type": ANNOTATION_TYPE_CODE_SMELL,
        "summary": diagnostic.message,
        "details": f"[{comment.tool_name}] {diagnostic.message}",
        "line": diagnostic.location.range.start_line,
        "path": diagnostic.location.path,
    }
    severity = convert_severity(diagnostic.severity)
    if severity:
        annotation["severity"] = severity
    if diagnostic.code.url:
        annotation["link"] = diagnostic.code.url
    return annotation


def build_cloud_annotations(comments: list[Comment]) -> list[dict[str, Any]]:
    """Annotation payloads for the Cloud API, one per comment."""
    return [_build_annotation(comment) for comment in comments]


class CloudAPIClient:
    """Creates reports and annotations through the Bitbucket Cloud API."""

    def __init__(
        self,
        base_url: str = CLOUD_API_URL,
        session: requests.Session | None = None,
        user: str = "",
        password: str = "",
        token: str = "",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self._headers: dict[str, str] = {}
        self._auth: tuple[str, str] | None = None
        if user and password:
            self._auth = (user, password)
        if token:
            # An access token takes precedence over basic credentials.
            self._auth = None
            self._headers["Authorization"] = f"Bearer {token}"

    def _report_path(self, owner: str, repo: str, commit: str, report: str) -> str:
        return (
            f"{self.base_url}/repositories/{_segment(owner)}/{_segment(repo)}"
            f"/commit/{_segment(commit)}/reports/{_segment(report)}"
        )

    def _send(self, method: str, url: str, payload: Any, expected: int, what: str) -> None:
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
        """Create or update a report."""
        url = self._report_path(req.owner, req.repository, req.commit, req.report_id)
        self._send(
            "PUT", url, build_cloud_report(req), 200, "create code insights report"
        )

    def create_or_update_annotations(self, req: AnnotationsRequest) -> None:
        """Create or update the annotations of a report in bulk."""
        url = (
            self._report_path(req.owner, req.repository, req.commit, req.report_id)
            + "/annotations"
        )
        self._send(
            "POST",
            url,
            build_cloud_annotations(req.comments),
            200,
            "create code insights annotations",
        )


def new_cloud_api_client(
    in_pipeline: bool = False,
    in_pipe: bool = False,
    user: str = "",
    password: str = "",
    token: str = "",
) -> CloudAPIClient:
    """Client for the Cloud API, routed through the Pipelines proxy when inside one."""
    session = requests.Session()
    base_url = CLOUD_API_URL
    if in_pipeline:
        proxy = PIPE_PROXY_URL if in_pipe else PIPELINE_PROXY_URL
        session.proxies = {"http": proxy, "https": proxy}
        base_url = PIPELINE_API_URL
    return CloudAPIClient(
        base_url=base_url, session=session, user=user, password=password, token=token
    )