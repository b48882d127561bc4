import json

import pytest
import requests
import responses
from responses import matchers

from reviewdog.gitlab_client import GitLabClient

BASE = "https://gitlab.example.com/api/v4"
PROJECT = f"{BASE}/projects/o%2Fr"


@pytest.fixture
def client():
    return GitLabClient(token="token", base_url=BASE + "/")


def test_get_merge_request_escapes_project_and_sends_token(client):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            f"{PROJECT}/merge_requests/14",
            json={"target_project_id": 14, "target_branch": "test-branch"},
        )
        mr = client.get_merge_request("o/r", 14)
        headers = rsps.calls[0].request.headers
    assert mr == {"target_project_id": 14, "target_branch": "test-branch"}
    assert headers["PRIVATE-TOKEN"] == "token"


def test_get_branch():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            f"{BASE}/projects/14/repository/branches/test-branch",
            json={"commit": {"id": "xxx"}},
        )
        branch = GitLabClient(base_url=BASE).get_branch(14, "test-branch")
        headers = rsps.calls[0].request.headers
    assert branch["commit"]["id"] == "xxx"
    assert "PRIVATE-TOKEN" not in headers


def test_commits_and_comments(client):
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            f"{PROJECT}/merge_requests/14/commits",
            json=[{"id": "0123456789abcdef", "short_id": "012345678"}],
        )
        rsps.add(
            responses.GET,
            f"{PROJECT}/repository/commits/0123456789abcdef/comments",
            json=[{"path": "a.go", "line": 1, "note": "n"}],
        )
        commits = client.merge_request_commits("o/r", 14)
        comments = client.commit_comments("o/r", commits[0]["id"])
    assert [c["id"] for c in commits] == ["0123456789abcdef"]
    assert comments == [{"path": "a.go", "line": 1, "note": "n"}]


def test_post_commit_comment_payload_and_failure(client):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, f"{PROJECT}/repository/commits/sha/comments", json={})
        rsps.add(
            responses.POST, f"{PROJECT}/repository/commits/bad/comments", status=500
        )
        client.post_commit_comment("o/r", "sha", "body", "file.go", 14, "new")
        with pytest.raises(requests.HTTPError):
            client.post_commit_comment("o/r", "bad", "body", "file.go", 14, "new")
        sent = json.loads(rsps.calls[0].request.body)
    assert sent == {"note": "body", "path": "file.go", "line": 14, "line_type": "new"}


def test_list_discussions_follows_next_page(client):
    url = f"{PROJECT}/merge_requests/14/discussions"
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET,
            url,
            json=[{"id": "first"}],
            headers={"X-Next-Page": "2"},
            match=[matchers.query_param_matcher({"per_page": "100"})],
        )
        rsps.add(
            responses.GET,
            url,
            json=[{"id": "second"}],
            match=[matchers.query_param_matcher({"page": "2", "per_page": "100"})],
        )
        discussions = client.list_discussions("o/r", 14)
        calls = len(rsps.calls)
    assert [d["id"] for d in discussions] == ["first", "second"]
    assert calls == 2


def test_create_discussion_payload(client):
    position = {"new_path": "file.go", "new_line": 14, "position_type": "text"}
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, f"{PROJECT}/merge_requests/14/discussions", json={})
        client.create_discussion("o/r", 14, "hello", position)
        sent = json.loads(rsps.calls[0].request.body)
    assert sent == {"body": "hello", "position": position}


def test_http_error_is_raised(client):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, f"{PROJECT}/merge_requests/14", status=404)
        with pytest.raises(requests.HTTPError):
            client.get_merge_request("o/r", 14)