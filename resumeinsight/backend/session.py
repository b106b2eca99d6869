"""
session.py

State for one viewer of the profile page: the resume text, the detected
username, the fetched snapshot and the last error.

Every lookup gets a request id from a monotonically increasing counter. A
result is only committed if its id is still the latest one issued, so a slow
lookup can never overwrite the outcome of a newer one.
"""
import itertools
import logging
import threading
from typing import Callable, Optional

from .errors import InsightError, NoGithubHandleFound, UpstreamFetchFailure
from .github_scraper import GithubSnapshot, fetch_profile
from .resume_scraper import extract_text
from .username_detector import detect_username, normalize_username

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], GithubSnapshot]


class InsightSession:
    def __init__(self, fetcher: Optional[Fetcher] = None):
        self._fetch = fetcher or fetch_profile
        self._ids = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()
        self.resume_text = ""
        self.username: Optional[str] = None
        self.snapshot: Optional[GithubSnapshot] = None
        self.error: Optional[str] = None

    @property
    def stage(self) -> str:
        return "results" if self.snapshot else "input"

    def begin(self) -> int:
        with self._lock:
            self._latest = next(self._ids)
            return self._latest

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest

    def _clear_results(self):
        self.snapshot = None

    def _fail(self, message: str):
        """Supersede anything in flight and show only the error."""
        self.begin()
        self.username = None
        self._clear_results()
        self.error = message

    def lookup(self, value: Optional[str]) -> Optional[GithubSnapshot]:
        """Fetch a profile for a typed or detected username."""
        login = normalize_username(value)
        if not login:
            return None
        request_id = self.begin()
        self.error = None
        self.username = login
        try:
            snapshot = self._fetch(login)
        except UpstreamFetchFailure as e:
            with self._lock:
                if not self.is_current(request_id):
                    logger.info("Dropping stale failure for %s (request %d)", login, request_id)
                    return None
                self.error = e.message or "Failed to fetch GitHub data"
                self._clear_results()
            return None
        with self._lock:
            if not self.is_current(request_id):
                logger.info("Dropping stale result for %s (request %d)", login, request_id)
                return None
            self.snapshot = snapshot
        return snapshot

    def analyze_text(self, text: str) -> Optional[GithubSnapshot]:
        self.resume_text = text or ""
        login = detect_username(self.resume_text)
        if not login:
            self._fail(NoGithubHandleFound.message)
            return None
        return self.lookup(login)

    def analyze_document(self, data: bytes, filename: str) -> Optional[GithubSnapshot]:
        self.error = None
        try:
            text = extract_text(data, filename)
        except InsightError as e:
            self._fail(e.message)
            return None
        return self.analyze_text(text)

    def reset(self):
        self.begin()
        self.resume_text = ""
        self.username = None
        self.snapshot = None
        self.error = None
