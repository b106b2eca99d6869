import threading

import pytest
import requests

from resumeinsight.backend import github_scraper
from resumeinsight.backend.errors import NetworkFailure, NotFound, UpstreamFetchFailure
from resumeinsight.backend.github_scraper import (
    GithubRepo,
    fetch_profile,
    language_tally,
    normalize_repos,
)

USER_JSON = {
    "login": "torvalds",
    "avatar_url": "https://avatars.githubusercontent.com/u/1024025",
    "html_url": "https://github.com/torvalds",
    "name": "Linus Torvalds",
    "bio": None,
    "followers": 200000,
    "following": 0,
    "public_repos": 7,
    "company": "Linux Foundation",
}

REPOS_JSON = [
    {"id": 1, "name": "linux", "html_url": "https://github.com/torvalds/linux",
     "description": "Linux kernel source tree", "stargazers_count": 170000, "language": "C", "fork": False},
    {"id": 2, "name": "subsurface-for-dirk", "html_url": "https://github.com/torvalds/subsurface-for-dirk",
     "description": None, "stargazers_count": 1500, "language": "C++", "fork": True},
    {"id": 3, "name": "uemacs", "html_url": "https://github.com/torvalds/uemacs",
     "description": "Random version of microemacs", "stargazers_count": 1400, "language": "C", "fork": False,
     "watchers": 1400},
]


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def repo(id, stars, fork=False, language=None):
    return GithubRepo(id=id, name=f"r{id}", stargazers_count=stars, fork=fork, language=language)


@pytest.fixture
def fake_github(monkeypatch):
    routes = {}
    calls = []

    def fake_get(url, headers=None, params=None, timeout=None):
        calls.append({"url": url, "headers": headers, "params": params, "timeout": timeout})
        handler = routes[url]
        if isinstance(handler, Exception):
            raise handler
        return handler

    monkeypatch.setattr(github_scraper.requests, "get", fake_get)
    monkeypatch.setattr(github_scraper.config, "GITHUB_API", "https://api.github.com")
    return routes, calls


def test_normalize_repos_drops_forks_and_sorts_by_stars():
    out = normalize_repos([repo(1, 50, fork=True), repo(2, 10), repo(3, 30)])
    assert [r.stargazers_count for r in out] == [30, 10]
    assert [r.id for r in out] == [3, 2]


def test_normalize_repos_keeps_api_order_for_equal_stars():
    out = normalize_repos([repo(1, 5), repo(2, 9), repo(3, 5), repo(4, 5)])
    assert [r.id for r in out] == [2, 1, 3, 4]


def test_language_tally_counts_and_orders_stably():
    repos = [repo(1, 0, language="Go"), repo(2, 0, language="Python"), repo(3, 0),
             repo(4, 0, language="Python"), repo(5, 0, language="Rust"), repo(6, 0, language="Go")]
    assert language_tally(repos) == [("Go", 2), ("Python", 2), ("Rust", 1)]
    assert language_tally([]) == []


def test_fetch_profile(fake_github):
    routes, calls = fake_github
    routes["https://api.github.com/users/torvalds"] = FakeResponse(payload=USER_JSON)
    routes["https://api.github.com/users/torvalds/repos"] = FakeResponse(payload=REPOS_JSON)

    snap = fetch_profile("torvalds")

    assert snap.user.login == "torvalds"
    assert snap.user.name == "Linus Torvalds"
    assert [r.name for r in snap.repos] == ["linux", "uemacs"]
    assert snap.languages == [("C", 2)]
    assert snap.to_dict()["languages"] == [["C", 2]]
    assert "company" not in snap.to_dict()["user"]

    repos_call = next(c for c in calls if c["url"].endswith("/repos"))
    assert repos_call["params"] == {"per_page": 100, "sort": "updated"}
    for c in calls:
        assert c["headers"]["Accept"] == "application/vnd.github+json"
        assert c["headers"]["Cache-Control"] == "no-cache"
        assert "Authorization" not in c["headers"]


def test_user_failure_fails_whole_lookup(fake_github):
    routes, _ = fake_github
    routes["https://api.github.com/users/ghost"] = FakeResponse(status_code=500)
    routes["https://api.github.com/users/ghost/repos"] = FakeResponse(payload=REPOS_JSON)

    with pytest.raises(UpstreamFetchFailure) as exc:
        fetch_profile("ghost")
    assert exc.value.message == "Failed to fetch user"


def test_repos_failure_fails_whole_lookup(fake_github):
    routes, _ = fake_github
    routes["https://api.github.com/users/octocat"] = FakeResponse(payload=USER_JSON)
    routes["https://api.github.com/users/octocat/repos"] = FakeResponse(status_code=403, payload={"message": "rate limit"})

    with pytest.raises(UpstreamFetchFailure) as exc:
        fetch_profile("octocat")
    assert exc.value.message == "Failed to fetch repos"


def test_missing_user_is_not_found(fake_github):
    routes, _ = fake_github
    routes["https://api.github.com/users/nobody-here"] = FakeResponse(status_code=404)
    routes["https://api.github.com/users/nobody-here/repos"] = FakeResponse(status_code=404)

    with pytest.raises(NotFound):
        fetch_profile("nobody-here")


def test_transport_error_is_network_failure(fake_github):
    routes, _ = fake_github
    routes["https://api.github.com/users/octocat"] = requests.ConnectionError("boom")
    routes["https://api.github.com/users/octocat/repos"] = FakeResponse(payload=[])

    with pytest.raises(NetworkFailure) as exc:
        fetch_profile("octocat")
    assert exc.value.message == "Failed to fetch user"


def test_failure_does_not_wait_for_the_other_request(monkeypatch):
    release = threading.Event()

    def slow_user(login):
        release.wait(5)
        return github_scraper.GithubUser(login=login)

    def failing_repos(login):
        raise UpstreamFetchFailure("Failed to fetch repos")

    monkeypatch.setattr(github_scraper, "fetch_user", slow_user)
    monkeypatch.setattr(github_scraper, "fetch_repos", failing_repos)
    try:
        with pytest.raises(UpstreamFetchFailure) as exc:
            fetch_profile("octocat")
        assert exc.value.message == "Failed to fetch repos"
        assert not release.is_set()
    finally:
        release.set()


def test_login_is_escaped_in_the_url(fake_github):
    routes, calls = fake_github
    routes["https://api.github.com/users/a%3Fb"] = FakeResponse(payload={"login": "a"})
    routes["https://api.github.com/users/a%3Fb/repos"] = FakeResponse(payload=[])

    fetch_profile("a?b")
    assert sorted(c["url"] for c in calls) == [
        "https://api.github.com/users/a%3Fb",
        "https://api.github.com/users/a%3Fb/repos",
    ]
