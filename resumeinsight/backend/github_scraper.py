import json
import logging
import sys
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass, field, fields
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from . import config
from .errors import (
    REPOS_FETCH_FAILED,
    USER_FETCH_FAILED,
    NetworkFailure,
    NotFound,
    UpstreamFetchFailure,
)

logger = logging.getLogger(__name__)

# ---------- Setup ----------
# Always fetch a fresh snapshot; no token, so the unauthenticated rate limit applies.
REST_HEADERS = {
    "Accept": "application/vnd.github+json",
    "Cache-Control": "no-cache",
}


# ---------- Records ----------
def _from_json(cls, data: dict):
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in (data or {}).items() if k in names})


@dataclass
class GithubUser:
    login: str
    avatar_url: str = ""
    html_url: str = ""
    name: Optional[str] = None
    bio: Optional[str] = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0

    @classmethod
    def from_json(cls, data: dict) -> "GithubUser":
        return _from_json(cls, data)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class GithubRepo:
    id: int
    name: str
    html_url: str = ""
    description: Optional[str] = None
    stargazers_count: int = 0
    language: Optional[str] = None
    fork: bool = False

    @classmethod
    def from_json(cls, data: dict) -> "GithubRepo":
        return _from_json(cls, data)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class GithubSnapshot:
    user: GithubUser
    repos: List[GithubRepo] = field(default_factory=list)

    @property
    def languages(self) -> List[Tuple[str, int]]:
        return language_tally(self.repos)

    @property
    def top_languages(self) -> List[Tuple[str, int]]:
        return self.languages[:config.TOP_LANGUAGES]

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "repos": [r.to_dict() for r in self.repos],
            "languages": [[name, count] for name, count in self.languages],
        }


# ---------- HTTP helpers ----------
def rest_get_json(url: str, failure_message: str, params: Optional[dict] = None):
    """GET a GitHub resource; any non-2xx or transport error raises with `failure_message`."""
    try:
        r = requests.get(url, headers=REST_HEADERS, params=params, timeout=config.GITHUB_TIMEOUT)
    except requests.RequestException as e:
        logger.warning("GET %s failed: %s", url, e)
        raise NetworkFailure(failure_message) from e
    if r.status_code == 404:
        raise NotFound(failure_message)
    if not 200 <= r.status_code < 300:
        logger.warning("GET %s returned HTTP %s", url, r.status_code)
        raise UpstreamFetchFailure(failure_message)
    try:
        return r.json()
    except ValueError as e:
        raise UpstreamFetchFailure(failure_message) from e


# ---------- Processing ----------
def normalize_repos(repos: List[GithubRepo]) -> List[GithubRepo]:
    """Drop forks, then order by stars descending (stable for equal counts)."""
    own = [r for r in repos if not r.fork]
    return sorted(own, key=lambda r: r.stargazers_count or 0, reverse=True)


def language_tally(repos: List[GithubRepo]) -> List[Tuple[str, int]]:
    counts: Dict[str, int] = {}
    for r in repos:
        if not r.language:
            continue
        counts[r.language] = counts.get(r.language, 0) + 1
    # dicts keep insertion order, so ties stay in first-seen order
    return sorted(counts.items(), key=lambda x: x[1], reverse=True)


# ---------- Data fetch ----------
def fetch_user(login: str) -> GithubUser:
    data = rest_get_json(f"{config.GITHUB_API}/users/{quote(login, safe='')}", USER_FETCH_FAILED)
    if not isinstance(data, dict):
        raise UpstreamFetchFailure(USER_FETCH_FAILED)
    return GithubUser.from_json(data)


def fetch_repos(login: str) -> List[GithubRepo]:
    data = rest_get_json(
        f"{config.GITHUB_API}/users/{quote(login, safe='')}/repos",
        REPOS_FETCH_FAILED,
        params={"per_page": config.GITHUB_PER_PAGE, "sort": "updated"},
    )
    if not isinstance(data, list):
        raise UpstreamFetchFailure(REPOS_FETCH_FAILED)
    return normalize_repos([GithubRepo.from_json(r) for r in data])


# ---------- Core summary ----------
def fetch_profile(login: str) -> GithubSnapshot:
    """
    Fetch the user record and repo list together.

    Both requests are issued at once; the first failure fails the whole lookup,
    so callers never see a profile without its repos or the other way round.
    """
    logger.info("Fetching GitHub profile for %s", login)
    executor = ThreadPoolExecutor(max_workers=2)
    try:
        user_future = executor.submit(fetch_user, login)
        repos_future = executor.submit(fetch_repos, login)
        done, _ = wait([user_future, repos_future], return_when=FIRST_EXCEPTION)
        for future in (user_future, repos_future):
            if future in done and future.exception() is not None:
                raise future.exception()
        user = user_future.result()
        repos = repos_future.result()
    finally:
        # don't hold the caller on the slower request once the lookup has failed
        executor.shutdown(wait=False)
    logger.info("Fetched %s: %d repos", login, len(repos))
    return GithubSnapshot(user=user, repos=repos)


# ---------- CLI ----------
def main():
    if len(sys.argv) < 2:
        print("usage: python -m resumeinsight.backend.github_scraper <github_username>")
        sys.exit(1)
    config.configure_logging()
    try:
        snapshot = fetch_profile(sys.argv[1])
    except UpstreamFetchFailure as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        sys.exit(2)
    print(json.dumps(snapshot.to_dict(), indent=2))


if __name__ == "__main__":
    main()
