"""Failures surfaced to the user, each with a fixed human-readable message."""
from typing import Optional


class InsightError(Exception):
    message = "Something went wrong"
    status_code = 500

    def __init__(self, message: Optional[str] = None):
        if message:
            self.message = message
        super().__init__(self.message)


class NoFileProvided(InsightError):
    message = "No file uploaded"
    status_code = 400


class UnsupportedFormat(InsightError):
    message = "Unsupported file type. Use PDF, DOCX, or TXT."
    status_code = 400


class ParseFailure(InsightError):
    message = "Failed to extract text"
    status_code = 500


class NoGithubHandleFound(InsightError):
    # informational, not a system fault
    message = "No GitHub profile link found in the resume."
    status_code = 200


class UpstreamFetchFailure(InsightError):
    message = "Failed to fetch GitHub data"
    status_code = 502


class NotFound(UpstreamFetchFailure):
    status_code = 404


class NetworkFailure(UpstreamFetchFailure):
    status_code = 502


USER_FETCH_FAILED = "Failed to fetch user"
REPOS_FETCH_FAILED = "Failed to fetch repos"
