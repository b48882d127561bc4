"""Diagnostic data model shared by every reporter."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Severity(enum.IntEnum):
    """Severity of a diagnostic."""

    UNKNOWN_SEVERITY = 0
    ERROR = 1
    WARNING = 2
    INFO = 3


@dataclass
class Position:
    """A 1-based line and column; zero means unknown."""

    line: int = 0
    column: int = 0


@dataclass
class Range:
    """A span between two positions; either end may be missing."""

    start: Position | None = None
    end: Position | None = None

    @property
    def start_line(self) -> int:
        return self.start.line if self.start is not None else 0

    @property
    def start_column(self) -> int:
        return self.start.column if self.start is not None else 0

    @property
    def end_line(self) -> int:
        return self.end.line if self.end is not None else 0

    @property
    def end_column(self) -> int:
        return self.end.column if self.end is not None else 0


@dataclass
class Location:
    """A file path and a range inside it."""

    path: str = ""
    range: Range = field(default_factory=Range)


@dataclass
class Code:
    """A rule code with an optional documentation link."""

    value: str = ""
    url: str = ""


@dataclass
class Source:
    """The tool that produced a diagnostic."""

    name: str = ""
    url: str = ""


@dataclass
class Suggestion:
    """A replacement text for a range of the source."""

    range: Range | None = None
    text: str = ""


@dataclass
class Diagnostic:
    """A single result reported by a checker."""

    message: str = ""
    location: Location = field(default_factory=Location)
    severity: Severity = Severity.UNKNOWN_SEVERITY
    source: Source = field(default_factory=Source)
    code: Code = field(default_factory=Code)
    suggestions: list[Suggestion] = field(default_factory=list)
    original_output: str = ""


@dataclass
class FilteredDiagnostic:
    """A diagnostic together with what filtering learnt about it."""

    diagnostic: Diagnostic = field(default_factory=Diagnostic)
    should_report: bool = False
    in_diff_file: bool = False
    in_diff_context: bool = False
    first_suggestion_in_diff_context: bool = False
    source_lines: dict[int, str] = field(default_factory=dict)
    old_path: str = ""
    old_line: int = 0