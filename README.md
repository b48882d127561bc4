# reviewdog

Post linter and compiler diagnostics as review comments on the code review
service that hosts a change: GitHub pull requests, GitLab merge requests,
Gerrit changes and Bitbucket Code Insights reports.

## Installation

From a checkout:

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What it contains

- `reviewdog.model`: the diagnostic data model (`Severity`, `Position`,
  `Range`, `Location`, `Code`, `Source`, `Suggestion`, `Diagnostic`,
  `FilteredDiagnostic`).
- `reviewdog.core`: `Comment`, the `CommentService`, `BulkCommentService`
  and `DiffService` protocols, and `post_results(service, checks,
  tool_name, fail_on_error=False)`. It posts every check whose
  `should_report` is true, calls `flush()` on services that have one, and
  raises `ViolationsFound` when `fail_on_error` is set and at least one
  result was posted.
- `reviewdog.commentutil`: `markdown_comment` renders a comment body
  (severity mark, tool name, rule code, `BODY_PREFIX`, message), and
  `PostedComments` records comments already posted by path, line and body.
- `reviewdog.codefence`: `get_code_fence_length` and `write_code_fence` for
  wrapping code safely in Markdown.
- `reviewdog.gitutil`: `git_rel_workdir`, `merge_base_diff` and
  `join_workdir`. The first two run the `git` command, which must be on
  `PATH`.
- `reviewdog.githubutils`: `linked_markdown_diagnostic`, `path_link` and
  `basic_location_format`.
- `reviewdog.actions_log`: `GitHubActionLogWriter` and
  `report_as_github_actions_log` write GitHub Actions workflow commands
  (`::warning` / `::error`) that become annotations. After ten annotations
  a one-time warning about GitHub's limits is written, and
  `GitHubActionLogWriter.flush` raises `TooManyAnnotations`.

### Services

| Service | Diff | Comments |
| --- | --- | --- |
| GitHub | `github_pr.PullRequest` | `github_pr.PullRequest` (review API) |
| GitLab | `gitlab_diff.MergeRequestDiff` | `gitlab_commit.MergeRequestCommitCommenter`, `gitlab_discussion.MergeRequestDiscussionCommenter` |
| Gerrit | `gerrit.ChangeDiff` | `gerrit.ChangeReviewCommenter` |
| Bitbucket | | `bitbucket_annotator.ReportAnnotator` with `bitbucket_cloud.CloudAPIClient` or `bitbucket_server.ServerAPIClient` |

The HTTP clients are `github_client.GitHubClient`,
`gitlab_client.GitLabClient` and `gerrit.GerritClient`, thin wrappers over
`requests`.

Comment services collect comments in `post(comment)`, joining each path
with the working directory relative to the repository root, and send them
when `flush()` is called. Comments already present on the change are not
posted again.

The GitHub service posts at most 30 review comments in one review; the rest
are summarised, grouped by tool, in the body of that review. Suggestions
become GitHub suggestion blocks, and suggestions that cannot be rendered
become a collapsed error note. Results outside the diff context are written
as GitHub Actions annotations when the `GITHUB_ACTIONS` environment
variable is set.

The GitLab and Gerrit diff services compute the diff locally with
`git diff --find-renames` against the merge base.

The Bitbucket annotator keeps one Code Insights report per tool and drops
duplicate diagnostics. Each runner named when it is created gets a pending
report straight away and a passed report if nothing was found. A tool with
results gets a failed report and its annotations in batches of 100. The
Server client skips pending reports and deletes a report before writing it
again. `bitbucket_cloud.new_cloud_api_client` routes requests through the
Bitbucket Pipelines proxy when asked to.

## Small examples

```python
from reviewdog.codefence import get_code_fence_length
from reviewdog.githubutils import path_link

get_code_fence_length("```\nLook! You can see my backticks.\n```\n")  # 4
path_link("o", "r", "s", "path/to/file.txt", 1414)
# 'http://github.com/o/r/blob/s/path/to/file.txt#L1414'
```

## Triggering dependency updates

`reviewdog-trigger-depup` sends a `depup` repository dispatch event to every
repository in an organisation whose name starts with `action-` (first 100
repositories, most recently updated first). It reads the API token from
`DEPUP_GITHUB_API_TOKEN`:

```
export DEPUP_GITHUB_API_TOKEN=token
reviewdog-trigger-depup --org reviewdog
```

`--org` defaults to `reviewdog`. The command exits with status 1 if the
token is missing or if any request fails.

## What it does not do

There is no command that runs a linter and reports its output. The package
does not parse checker output into diagnostics, does not parse unified
diffs, and does not decide which diagnostics fall inside a diff:
`post_results` expects `FilteredDiagnostic` values that already carry
`should_report`, `in_diff_file`, `in_diff_context` and the rest.