import json

from resumeinsight.backend import cli
from resumeinsight.backend.errors import UpstreamFetchFailure
from resumeinsight.backend.github_scraper import GithubRepo, GithubSnapshot, GithubUser
from resumeinsight.backend.session import InsightSession


def fetcher(login):
    if login == "ghost":
        raise UpstreamFetchFailure("Failed to fetch user")
    return GithubSnapshot(
        user=GithubUser(login=login, name="The Octocat", html_url=f"https://github.com/{login}"),
        repos=[GithubRepo(id=1, name="hello-world", stargazers_count=3, language="Ruby")],
    )


def test_summary_from_username(capsys):
    code = cli.run_lookup("@octocat", session=InsightSession(fetcher))
    out = capsys.readouterr().out
    assert code == 0
    assert "The Octocat (@octocat)" in out
    assert "top languages: Ruby" in out
    assert "hello-world" in out


def test_json_from_resume_file(tmp_path, capsys):
    resume = tmp_path / "cv.txt"
    resume.write_text("GitHub - OctoCat", encoding="utf-8")
    code = cli.run_lookup(str(resume), as_json=True, session=InsightSession(fetcher))
    body = json.loads(capsys.readouterr().out)
    assert code == 0
    assert body["username"] == "octocat"
    assert body["repos"][0]["name"] == "hello-world"


def test_error_exit_code(capsys):
    code = cli.run_lookup("ghost", session=InsightSession(fetcher))
    assert code == 2
    assert "Failed to fetch user" in capsys.readouterr().err
