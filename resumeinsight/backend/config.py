import logging
import os

from dotenv import load_dotenv

# ---------- Setup ----------
load_dotenv()
# Also try loading from the project root
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
env_local_path = os.path.join(repo_root, ".env.local")
if os.path.exists(env_local_path):
    load_dotenv(env_local_path)

GITHUB_API = os.getenv("GITHUB_API", "https://api.github.com").rstrip("/")
GITHUB_TIMEOUT = float(os.getenv("GITHUB_TIMEOUT", "10"))
GITHUB_PER_PAGE = int(os.getenv("GITHUB_PER_PAGE", "100"))
TOP_LANGUAGES = int(os.getenv("TOP_LANGUAGES", "3"))
MAX_REPOS_DISPLAYED = int(os.getenv("MAX_REPOS_DISPLAYED", "24"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure root logging once for the app and the CLI."""
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
