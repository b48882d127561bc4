"""Reporting results as GitHub Actions workflow commands."""

from __future__ import annotations

import sys
import threading
from typing import Callable, TextIO

from reviewdog.core import Comment
from reviewdog.model import Diagnostic, Severity

MAX_LOGGING_ANNOTATIONS_PER_STEP = 10

_TOO_MANY_MESSAGE = """reviewdog: Too many results (annotations) in diff.
You may miss some annotations due to GitHub limitation for annotation created by logging command.
Please check GitHub Actions log console to see all results.

Limitation:
- 10 warning annotations and 10 error annotations per step
- 50 annotations per job (sum of annotations from all the steps)
- 50 annotations per run (separate from the job annotations, these annotations aren't created by users)"""


class TooManyAnnotations(Exception):
    """Raised when more annotations were logged than GitHub will show."""


def _escape_data(text: str) -> str:
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(text: str) -> str:
    return _escape_data(text).replace(":", "%3A").replace(",", "%2C")


def _issue(
    stream: TextIO | None,
    command: str,
    message: str,
    location: tuple[str, int, int] | None = None,
) -> None:
    out = stream if stream is not None else sys.stdout
    props = []
    if location is not None:
        path, line, col = location
        if path:
            props.append(f"file={_escape_property(path)}")
        if line:
            props.append(f"line={line}")
        if col:
            props.append(f"col={col}")
    head = f"::{command}" + (" " + ",".join(props) if props else "")
    out.write(f"{head}::{_escape_data(message)}\n")


def report_as_github_actions_log(
    tool_name: str,
    default_level: str,
    diagnostic: Diagnostic,
    stream: TextIO | None = None,
) -> None:
    """Write a diagnostic as a warning or error workflow command."""
    message = (
        f"[{tool_name}] reported by reviewdog \U0001f436\n{diagnostic.message}"
        f"\n\nRaw Output:\n{diagnostic.original_output}"
    )
    rng = diagnostic.location.range
    location = (diagnostic.location.path, rng.start_line, rng.start_column)

    level = default_level
    if diagnostic.severity is Severity.ERROR:
        level = "error"
    elif diagnostic.severity in (Severity.INFO, Severity.WARNING):
        level = "warning"

    if level in ("warning", "info"):
        _issue(stream, "warning", message, location)
    elif level in ("error", ""):
        _issue(stream, "error", message, location)
    else:
        _issue(stream, "error", f"Unknown level: {level}")
        _issue(stream, "error", message, location)


class _Once:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False

    def __call__(self, action: Callable[[], None]) -> None:
        with self._lock:
            if self._done:
                return
            self._done = True
        action()


_too_many_once = _Once()


def warn_too_many_annotations_once(stream: TextIO | None = None) -> None:
    """Warn about GitHub's annotation limits, at most once per process."""
    _too_many_once(lambda: _issue(stream, "error", _TOO_MANY_MESSAGE))


class GitHubActionLogWriter:
    """Comment service that logs results as workflow command annotations."""

    def __init__(self, level: str, stream: TextIO | None = None) -> None:
        self.level = level
        self.stream = stream
        self.report_num = 0

    def post(self, comment: Comment) -> None:
        self.report_num += 1
        if self.report_num == MAX_LOGGING_ANNOTATIONS_PER_STEP:
            warn_too_many_annotations_once(self.stream)
        report_as_github_actions_log(
            comment.tool_name, self.level, comment.result.diagnostic, self.stream
        )

    def flush(self) -> None:
        """Raise if more annotations were reported than GitHub shows."""
        if self.report_num >= MAX_LOGGING_ANNOTATIONS_PER_STEP:
            raise TooManyAnnotations(
                f"GitHubActionLogWriter: reported too many annotation (N={self.report_num})"
            )