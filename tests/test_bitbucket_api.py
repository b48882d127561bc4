import pytest

from reviewdog.bitbucket_api import (
    UnexpectedResponseError,
    convert_severity,
    external_id_from_diagnostic,
    report_id,
    report_title,
)
from reviewdog.model import Diagnostic, Location, Position, Range, Severity


def _diagnostic(message="test message", line=1):
    return Diagnostic(
        message=message,
        location=Location(path="main.go", range=Range(start=Position(line=line))),
    )


def test_report_id_joins_ids():
    assert report_id("runner1", "reviewdog") == "runner1-reviewdog"


def test_report_id_lowercases_and_replaces_spaces():
    assert report_id("My Tool", "reviewdog") == "my_tool-reviewdog"


def test_report_title():
    assert report_title("golint", "reviewdog") == "[golint] reviewdog report"


@pytest.mark.parametrize(
    "severity, want",
    [
        (Severity.INFO, "LOW"),
        (Severity.WARNING, "MEDIUM"),
        (Severity.ERROR, "HIGH"),
        (Severity.UNKNOWN_SEVERITY, ""),
    ],
)
def test_convert_severity(severity, want):
    assert convert_severity(severity) == want


def test_external_id_is_stable_for_equal_diagnostics():
    first = external_id_from_diagnostic(_diagnostic())
    second = external_id_from_diagnostic(_diagnostic())
    assert len(first) == 64
    assert first == second


def test_external_id_differs_for_different_diagnostics():
    ids = {
        external_id_from_diagnostic(_diagnostic("a", 1)),
        external_id_from_diagnostic(_diagnostic("b", 1)),
        external_id_from_diagnostic(_diagnostic("a", 2)),
    }
    assert len(ids) == 3


def test_external_id_is_hex_digest():
    value = external_id_from_diagnostic(_diagnostic())
    assert all(ch in "0123456789abcdef" for ch in value)
    assert len(value) == 64


def test_unexpected_response_error_without_body():
    err = UnexpectedResponseError(500)
    assert str(err) == "received unexpected 500 code from Bitbucket API"
    assert err.code == 500


def test_unexpected_response_error_with_body():
    err = UnexpectedResponseError(400, b"boom")
    assert str(err) == "received unexpected 400 code from Bitbucket API with message:\nboom"
    assert err.body == b"boom"