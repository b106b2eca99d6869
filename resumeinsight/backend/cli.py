#!/usr/bin/env python3
"""Command-line front end.

Usage:
    resumeinsight path/to/resume.pdf
    resumeinsight @octocat --json
    resumeinsight serve --port 8000

Exit code is 0 when a profile was shown, 2 when the lookup ended in an error.
"""
import argparse
import json
import os
import sys

from . import config
from .session import InsightSession


def render_summary(session: InsightSession) -> str:
    snap = session.snapshot
    u = snap.user
    lines = [f"{u.name or u.login} (@{u.login})  {u.html_url}"]
    if u.bio:
        lines.append(u.bio)
    lines.append(f"followers {u.followers} · following {u.following} · public repos {u.public_repos}")
    langs = ", ".join(name for name, _ in snap.top_languages)
    if langs:
        lines.append(f"top languages: {langs}")
    lines.append(f"repositories ({len(snap.repos)}):")
    for repo in snap.repos[:config.MAX_REPOS_DISPLAYED]:
        desc = f" - {repo.description}" if repo.description else ""
        lines.append(f"  ★{repo.stargazers_count:<5} {repo.name} [{repo.language or '-'}]{desc}")
    return "\n".join(lines)


def run_lookup(target: str, as_json: bool = False, session: InsightSession = None) -> int:
    session = session or InsightSession()
    if os.path.isfile(target):
        with open(target, "rb") as f:
            session.analyze_document(f.read(), os.path.basename(target))
    else:
        session.lookup(target)

    if session.error or not session.snapshot:
        print(f"ERROR: {session.error or 'Nothing to look up'}", file=sys.stderr)
        return 2
    if as_json:
        print(json.dumps({"username": session.username, **session.snapshot.to_dict()}, indent=2))
    else:
        print(render_summary(session))
    return 0


def serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("resumeinsight.backend.app:app", host=host, port=port)
    return 0


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    config.configure_logging()
    if argv and argv[0] == "serve":
        ap = argparse.ArgumentParser(prog="resumeinsight serve", description="Run the HTTP API")
        ap.add_argument("--host", default="127.0.0.1")
        ap.add_argument("--port", type=int, default=8000)
        args = ap.parse_args(argv[1:])
        return serve(args.host, args.port)

    ap = argparse.ArgumentParser(prog="resumeinsight",
                                 description="Show the GitHub profile behind a resume or username")
    ap.add_argument("target", help="Resume file (.pdf/.docx/.txt) or GitHub username")
    ap.add_argument("--json", action="store_true", help="Print JSON instead of a summary")
    args = ap.parse_args(argv)
    return run_lookup(args.target, as_json=args.json)


if __name__ == "__main__":
    sys.exit(main())
