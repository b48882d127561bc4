"""Helpers that run the git command."""

from __future__ import annotations

import os
import posixpath
import subprocess


def _git(*args: str) -> bytes:
    return subprocess.run(["git", *args], check=True, capture_output=True).stdout


def git_rel_workdir() -> str:
    """Return the current directory relative to the repository root."""
    try:
        out = _git("rev-parse", "--show-prefix")
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"failed to run 'git rev-parse --show-prefix': {exc}") from exc
    return out.decode().strip("\n")


def merge_base_diff(base_sha: str, target_sha: str) -> bytes:
    """Diff ``base_sha`` against its merge base with ``target_sha``, finding renames."""
    try:
        merge_base = _git("merge-base", target_sha, base_sha).decode().strip("\n")
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"failed to get merge-base commit: {exc}") from exc
    try:
        return _git("diff", "--find-renames", merge_base, base_sha)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"failed to run git diff: {exc}") from exc


def join_workdir(workdir: str, path: str) -> str:
    """Join a working directory and a path into a clean slash-separated path."""
    joined = posixpath.join(workdir.replace(os.sep, "/"), path.replace(os.sep, "/"))
    if not joined:
        return ""
    return posixpath.normpath(joined)