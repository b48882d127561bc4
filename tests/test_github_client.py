import json

import pytest
import requests
import responses
from responses import matchers

from reviewdog.github_client import GitHubClient

BASE = "https://github.example.com/api/"


def _client():
    return GitHubClient(token="token", base_url=BASE)


def test_pull_request_diff_uses_diff_media_type():
    with responses.RequestsMock() as rsps:
        rsps.get(BASE + "repos/o/r/pulls/14", body="Pull Request diff")
        got = _client().get_pull_request_diff("o", "r", 14)
        request = rsps.calls[0].request
    assert got == b"Pull Request diff"
    assert "diff" in request.headers["Accept"]
    assert request.headers["Authorization"] == "Bearer token"


def test_list_review_comments_follows_pages():
    url = BASE + "repos/o/r/pulls/14/comments"
    with responses.RequestsMock() as rsps:
        rsps.get(
            url,
            json=[{"path": "a.go", "line": 2, "body": "first"}],
            headers={"Link": f'<{url}?page=2>; rel="next"'},
            match=[matchers.query_param_matcher({"per_page": "100"})],
        )
        rsps.get(
            url,
            json=[{"path": "b.go", "line": 15, "body": "second"}],
            match=[matchers.query_param_matcher({"page": "2", "per_page": "100"})],
        )
        got = _client().list_review_comments("o", "r", 14)
        calls = len(rsps.calls)
    assert [c["body"] for c in got] == ["first", "second"]
    assert calls == 2


def test_create_review_sends_json():
    review = {"commit_id": "sha", "event": "COMMENT", "comments": [], "body": ""}
    with responses.RequestsMock() as rsps:
        rsps.post(BASE + "repos/o/r/pulls/14/reviews", json={"id": 1})
        got = _client().create_review("o", "r", 14, review)
        sent = json.loads(rsps.calls[0].request.body)
    assert sent == review
    assert got == {"id": 1}


def test_list_org_repos_sorted_by_update():
    with responses.RequestsMock() as rsps:
        rsps.get(
            BASE + "orgs/reviewdog/repos",
            json=[{"name": "action-one"}, {"name": "other"}],
            match=[
                matchers.query_param_matcher(
                    {"sort": "updated", "direction": "desc", "per_page": "100"}
                )
            ],
        )
        got = _client().list_org_repos("reviewdog")
    assert [r["name"] for r in got] == ["action-one", "other"]


def test_dispatch_posts_event_type_and_raises_on_failure():
    with responses.RequestsMock() as rsps:
        rsps.post(BASE + "repos/reviewdog/action-one/dispatches", status=204)
        rsps.post(BASE + "repos/reviewdog/action-two/dispatches", status=422)
        _client().dispatch("reviewdog", "action-one", "depup")
        with pytest.raises(requests.HTTPError):
            _client().dispatch("reviewdog", "action-two", "depup")
        sent = [json.loads(call.request.body) for call in rsps.calls]
    assert sent == [{"event_type": "depup"}, {"event_type": "depup"}]


def test_http_error_is_raised():
    with responses.RequestsMock() as rsps:
        rsps.get(BASE + "repos/o/r/pulls/1", status=500)
        with pytest.raises(requests.HTTPError):
            _client().get_pull_request_diff("o", "r", 1)