import pytest

from reviewdog.core import Comment, ViolationsFound, post_results
from reviewdog.model import Diagnostic, FilteredDiagnostic, Location, Position, Range

LINT_RESULTS = [
    ("golint.new.go", 3, 5, "exported var V should have comment or be unexported", False),
    ("golint.new.go", 5, 5, "exported var NewError1 should have comment or be unexported", True),
    ("golint.new.go", 7, 1, 'comment on exported function F should be of the form "F ..."', False),
    ("golint.new.go", 11, 1, 'comment on exported function F2 should be of the form "F2 ..."', True),
]


def _checks():
    return [
        FilteredDiagnostic(
            diagnostic=Diagnostic(
                message=msg,
                location=Location(
                    path=path, range=Range(start=Position(line=line, column=col))
                ),
            ),
            should_report=report,
            in_diff_file=True,
        )
        for path, line, col, msg, report in LINT_RESULTS
    ]


class Recorder:
    def __init__(self):
        self.posted = []
        self.flushed = 0

    def post(self, comment):
        self.posted.append(comment)

    def flush(self):
        self.flushed += 1


class PostOnly:
    def __init__(self):
        self.posted = []

    def post(self, comment):
        self.posted.append(comment)


def test_only_reportable_results_are_posted():
    service = Recorder()
    post_results(service, _checks(), "tool name", False)
    assert [c.result.diagnostic.message for c in service.posted] == [
        "exported var NewError1 should have comment or be unexported",
        'comment on exported function F2 should be of the form "F2 ..."',
    ]
    assert all(c.tool_name == "tool name" for c in service.posted)


def test_paths_are_kept():
    service = Recorder()
    post_results(service, _checks(), "tool name", False)
    assert {c.result.diagnostic.location.path for c in service.posted} == {"golint.new.go"}


def test_bulk_service_is_flushed_once():
    service = Recorder()
    post_results(service, _checks(), "tool", False)
    assert service.flushed == 1


def test_plain_service_needs_no_flush():
    service = PostOnly()
    post_results(service, _checks(), "tool", False)
    assert len(service.posted) == 2


def test_no_error_without_fail_on_error():
    service = Recorder()
    post_results(service, _checks(), "tool name", False)
    assert len(service.posted) == 2


def test_error_with_fail_on_error_and_violations():
    service = Recorder()
    with pytest.raises(ViolationsFound, match="input data has violations"):
        post_results(service, _checks(), "tool name", True)
    assert service.flushed == 1


def test_no_error_with_fail_on_error_and_nothing_to_report():
    service = Recorder()
    checks = [c for c in _checks() if not c.should_report]
    post_results(service, checks, "tool", True)
    assert service.posted == []


def test_post_errors_propagate():
    class Failing:
        def post(self, comment):
            raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        post_results(Failing(), _checks(), "tool", False)


def test_comment_tool_name_defaults_empty():
    assert Comment(result=FilteredDiagnostic()).tool_name == ""