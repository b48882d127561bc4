"""Comments, the service interfaces and posting of filtered results."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from reviewdog.model import FilteredDiagnostic


@dataclass
class Comment:
    """A reported result to be posted as a comment."""

    result: FilteredDiagnostic
    tool_name: str = ""


@runtime_checkable
class CommentService(Protocol):
    """Something that accepts comments."""

    def post(self, comment: Comment) -> None: ...


@runtime_checkable
class BulkCommentService(CommentService, Protocol):
    """A comment service that sends everything when flushed."""

    def flush(self) -> None: ...


@runtime_checkable
class DiffService(Protocol):
    """Something that produces a unified diff."""

    def diff(self) -> bytes: ...

    def strip(self) -> int: ...


class ViolationsFound(Exception):
    """Raised when results were reported and failing on them was asked for."""

    def __init__(self, message: str = "input data has violations") -> None:
        super().__init__(message)


def post_results(
    service: CommentService,
    checks: Iterable[FilteredDiagnostic],
    tool_name: str,
    fail_on_error: bool = False,
) -> None:
    """Post every check that should be reported, then flush the service."""
    has_violations = False
    for check in checks:
        if not check.should_report:
            continue
        service.post(Comment(result=check, tool_name=tool_name))
        has_violations = True

    if isinstance(service, BulkCommentService):
        service.flush()

    if fail_on_error and has_violations:
        raise ViolationsFound()