import logging

import pytest

from reviewdog.commentutil import BODY_PREFIX, PostedComments, markdown_comment
from reviewdog.core import Comment
from reviewdog.model import Code, Diagnostic, FilteredDiagnostic, Location, Severity, Source

PREFIX = "<sub>reported by [reviewdog](https://github.com/reviewdog/reviewdog) :dog:</sub><br>"


def _comment(tool_name="", **diag):
    return Comment(result=FilteredDiagnostic(diagnostic=Diagnostic(**diag)), tool_name=tool_name)


@pytest.mark.parametrize(
    ("comment", "want"),
    [
        (
            _comment("tool-name", message="test message 1"),
            "**[tool-name]** " + PREFIX + "test message 1",
        ),
        (
            _comment(message="test message 2 (no tool)"),
            PREFIX + "test message 2 (no tool)",
        ),
        (
            _comment(
                "global-tool-name",
                message="test message 3",
                source=Source(name="custom-tool-name"),
            ),
            "**[custom-tool-name]** " + PREFIX + "test message 3",
        ),
        (
            _comment(
                message="test message 4",
                source=Source(name="tool-name"),
                severity=Severity.WARNING,
            ),
            "\u26a0\ufe0f **[tool-name]** " + PREFIX + "test message 4",
        ),
        (
            _comment(
                message="test message 5 (code)",
                source=Source(name="tool-name"),
                code=Code(value="CODE14"),
            ),
            "**[tool-name]** <CODE14> " + PREFIX + "test message 5 (code)",
        ),
        (
            _comment(
                message="test message 6 (code with URL)",
                source=Source(name="tool-name"),
                code=Code(value="CODE14", url="https://example.com/#CODE14"),
            ),
            "**[tool-name]** <[CODE14](https://example.com/#CODE14)> "
            + PREFIX
            + "test message 6 (code with URL)",
        ),
    ],
)
def test_markdown_comment(comment, want):
    assert markdown_comment(comment) == want


def test_empty_comment_is_body_prefix():
    got = markdown_comment(_comment(message=""))
    assert got == PREFIX
    assert got == BODY_PREFIX


def test_error_and_info_marks():
    err = markdown_comment(_comment(message="m", severity=Severity.ERROR))
    info = markdown_comment(_comment(message="m", severity=Severity.INFO))
    assert err == "\U0001f6ab " + PREFIX + "m"
    assert info == "\U0001f4dd " + PREFIX + "m"


def test_posted_comments_roundtrip():
    posted = PostedComments()
    posted.add_posted_comment("reviewdog.go", 2, BODY_PREFIX + "already commented")
    comment = _comment(message="x", location=Location(path="reviewdog.go"))
    assert posted.is_posted(comment, 2, BODY_PREFIX + "already commented")
    assert not posted.is_posted(comment, 2, BODY_PREFIX + "other")
    assert not posted.is_posted(comment, 3, BODY_PREFIX + "already commented")


def test_posted_comments_unknown_path():
    posted = PostedComments()
    posted.add_posted_comment("a.go", 1, "body")
    comment = _comment(location=Location(path="b.go"))
    assert not posted.is_posted(comment, 1, "body")


def test_posted_comments_multiple_bodies_per_line():
    posted = PostedComments()
    posted.add_posted_comment("a.go", 1, "first")
    posted.add_posted_comment("a.go", 1, "second")
    comment = _comment(location=Location(path="a.go"))
    assert posted.is_posted(comment, 1, "first")
    assert posted.is_posted(comment, 1, "second")


def test_debug_log(caplog):
    posted = PostedComments()
    posted.add_posted_comment("a.go", 14, "body")
    with caplog.at_level(logging.DEBUG, logger="reviewdog.commentutil"):
        posted.debug_log()
    assert any("a.go:14" in record.getMessage() for record in caplog.records)