"""Markdown code fence sizing."""

from __future__ import annotations

from typing import Protocol


class _Writer(Protocol):
    def write(self, text: str) -> object: ...


def _count_backticks(code: str) -> int:
    """Longest run of backticks that starts a line."""
    return max(len(line) - len(line.lstrip("`")) for line in code.split("\n"))


def get_code_fence_length(code: str) -> int:
    """Return how many backticks a fence must have to wrap ``code``."""
    return max(_count_backticks(code) + 1, 3)


def write_code_fence(writer: _Writer, length: int) -> None:
    """Write a fence of ``length`` backticks to ``writer``."""
    writer.write("`" * length)