import logging
from typing import Optional

from fastapi import Body, FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import config
from .errors import InsightError, NoFileProvided, NoGithubHandleFound
from .github_scraper import fetch_profile
from .resume_scraper import extract_text
from .username_detector import (
    detect_username,
    detect_username_with_rule,
    is_valid_username,
    normalize_username,
)

config.configure_logging()
logger = logging.getLogger(__name__)


def error_response(e: InsightError) -> JSONResponse:
    return JSONResponse({"error": e.message}, status_code=e.status_code)


def read_upload(file: Optional[UploadFile]):
    if file is None or not file.filename:
        raise NoFileProvided()
    return file.file.read(), file.filename


# ---------------- FastAPI app ----------------
app = FastAPI(title="Resume Insight")
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)


@app.get("/api/health")
def health():
    return {"ok": True}


@app.post("/api/extract-text")
def api_extract_text(file: Optional[UploadFile] = File(None)):
    """
    Extract plain text from an uploaded resume.
    Expects multipart field `file` (.pdf, .docx or .txt).
    Returns: { text } or { error }
    """
    try:
        data, filename = read_upload(file)
        return {"text": extract_text(data, filename)}
    except InsightError as e:
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error extracting text")
        return JSONResponse({"error": "Failed to extract text"}, status_code=500)


@app.post("/api/detect-username")
def api_detect_username(payload: dict = Body(...)):
    """
    Expects JSON: { text }
    Returns: { username, rule } (both null when nothing matched)
    """
    hit = detect_username_with_rule(payload.get("text") or "")
    if not hit:
        return {"username": None, "rule": None}
    login, rule = hit
    return {"username": login, "rule": rule}


@app.get("/api/profile/{username}")
def api_profile(username: str):
    """Returns: { user, repos, languages } or { error }"""
    login = normalize_username(username)
    if not login:
        return JSONResponse({"error": "Username required"}, status_code=400)
    if not is_valid_username(login):
        return JSONResponse({"error": "Invalid GitHub username"}, status_code=400)
    try:
        return fetch_profile(login).to_dict()
    except InsightError as e:
        return error_response(e)


@app.post("/api/analyze")
def api_analyze(file: Optional[UploadFile] = File(None)):
    """
    Full pipeline: extract text, detect the GitHub handle, fetch the profile.
    Returns: { text, username, user, repos, languages } or { error }
    """
    try:
        data, filename = read_upload(file)
        text = extract_text(data, filename)
        login = detect_username(text)
        if not login:
            return {
                "text": text,
                "username": None,
                "user": None,
                "repos": [],
                "languages": [],
                "error": NoGithubHandleFound.message,
            }
        snapshot = fetch_profile(login)
        return {"text": text, "username": login, **snapshot.to_dict()}
    except InsightError as e:
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error analyzing resume")
        return JSONResponse({"error": "Failed to analyze resume"}, status_code=500)
