"""Diff service for GitLab merge requests."""

from __future__ import annotations

from reviewdog.gitlab_client import GitLabClient
from reviewdog.gitutil import git_rel_workdir, merge_base_diff


class MergeRequestDiff:
    """Produces the diff of a merge request by running git locally.

    ``git diff --find-renames`` against the merge base is used instead of the
    API's diff, which does not detect renames.
    """

    def __init__(
        self,
        client: GitLabClient,
        project_id: str,
        mr: int,
        sha: str,
        workdir: str | None = None,
    ) -> None:
        if workdir is None:
            try:
                workdir = git_rel_workdir()
            except RuntimeError as exc:
                raise RuntimeError(f"MergeRequestDiff needs 'git' command: {exc}") from exc
        self.client = client
        self.project_id = project_id
        self.mr = mr
        self.sha = sha
        self.workdir = workdir

    def diff(self) -> bytes:
        """Return the diff of the merge request head against its target branch."""
        mr = self.client.get_merge_request(self.project_id, self.mr)
        branch = self.client.get_branch(mr["target_project_id"], mr["target_branch"])
        return merge_base_diff(self.sha, branch["commit"]["id"])

    def strip(self) -> int:
        """Path components to strip from the diff."""
        return 1