"""
Integration tests for the local git platform against a real repository.
"""

import io
import shutil
import subprocess

import pytest

from ai_code_reviewer.exceptions import GitError
from ai_code_reviewer.formatting import OutputFormatter
from ai_code_reviewer.models import Issue, ReviewResult, Severity
from ai_code_reviewer.platforms import LocalPlatform, PlatformOptions
from ai_code_reviewer.platforms.local import parse_name_status


pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(repo, *args):
    subprocess.run(["git", *args], cwd=str(repo), check=True, capture_output=True, text=True)


@pytest.fixture
def repo(tmp_path):
    git(tmp_path, "init")
    git(tmp_path, "config", "user.email", "dev@example.com")
    git(tmp_path, "config", "user.name", "Dev")
    git(tmp_path, "config", "commit.gpgsign", "false")

    (tmp_path / "app.py").write_text("print('hello')\n", encoding="utf-8")
    (tmp_path / "old.py").write_text("x = 1\n", encoding="utf-8")
    git(tmp_path, "add", ".")
    git(tmp_path, "commit", "-m", "initial")
    return tmp_path


def test_parse_name_status():
    output = "commit abc\nAuthor: Dev\n\n    message\n\nM\tsrc/a.py\nA\tb.ts\nD\tc.go\n"
    assert parse_name_status(output) == [("M", "src/a.py"), ("A", "b.ts"), ("D", "c.go")]


class TestLocalPlatform:
    """Diff collection and console output."""

    def test_working_tree_changes(self, repo):
        (repo / "app.py").write_text("print('hello world')\n", encoding="utf-8")
        (repo / "old.py").unlink()

        diffs = LocalPlatform(PlatformOptions(path=str(repo))).get_code_diffs()

        assert [d.new_path for d in diffs] == ["app.py"]
        diff = diffs[0]
        assert diff.old_content == ""
        assert diff.new_content == "print('hello world')\n"
        assert "+print('hello world')" in diff.diff_content
        assert diff.language == "python"

    def test_no_changes(self, repo):
        assert LocalPlatform(PlatformOptions(path=str(repo))).get_code_diffs() == []

    def test_commit_changes(self, repo):
        (repo / "util.ts").write_text("export const a = 1;\n", encoding="utf-8")
        git(repo, "add", "util.ts")
        git(repo, "commit", "-m", "add util")
        sha = subprocess.run(
            ["git", "rev-parse", "HEAD"], cwd=str(repo), check=True, capture_output=True, text=True,
        ).stdout.strip()

        diffs = LocalPlatform(PlatformOptions(path=str(repo), commit_sha=sha)).get_code_diffs()

        assert [d.new_path for d in diffs] == ["util.ts"]
        assert "+export const a = 1;" in diffs[0].diff_content
        assert diffs[0].language == "typescript"

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(GitError):
            LocalPlatform(PlatformOptions(path=str(tmp_path))).get_code_diffs()

    def test_console_output(self, repo):
        stream = io.StringIO()
        platform = LocalPlatform(
            PlatformOptions(path=str(repo)),
            formatter=OutputFormatter("english", use_color=False),
            stream=stream,
        )
        result = ReviewResult(file="app.py", issues=[Issue(severity=Severity.ERROR, line=1, message="Bug")])

        assert platform.supports_batch
        platform.submit_review_comment("app.py", 1, "Bug")
        platform.submit_batch_review_comments([result])
        platform.submit_review_summary("All done")

        output = stream.getvalue()
        assert "[Line 1] Bug" in output
        assert "Code Review Report" in output
        assert "All done" in output
