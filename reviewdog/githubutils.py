"""Formatting helpers for GitHub links and locations."""

from __future__ import annotations

from reviewdog.model import Diagnostic


def linked_markdown_diagnostic(owner: str, repo: str, sha: str, diagnostic: Diagnostic) -> str:
    """Markdown with a link to the diagnostic's location followed by its message."""
    path = diagnostic.location.path
    message = diagnostic.message
    if not path:
        return message
    loc = basic_location_format(diagnostic)
    link = path_link(owner, repo, sha, path, diagnostic.location.range.start_line)
    return f"[{loc}]({link}) {message}"


def path_link(owner: str, repo: str, sha: str, path: str, line: int) -> str:
    """Link to a file, and a line when positive, at ``sha`` on GitHub."""
    sha = sha or "master"
    fragment = f"#L{line}" if line > 0 else ""
    return f"http://github.com/{owner}/{repo}/blob/{sha}/{path}{fragment}"


def basic_location_format(diagnostic: Diagnostic) -> str:
    """Format a location as ``path|line col column|``."""
    loc = diagnostic.location
    out = loc.path + "|"
    line = loc.range.start_line
    column = loc.range.start_column
    if line:
        out += str(line)
        if column:
            out += f" col {column}"
    return out + "|"