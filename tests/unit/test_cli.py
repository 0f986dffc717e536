"""
Unit tests for the command line interface.
"""

from unittest.mock import Mock, patch

import pytest

from ai_code_reviewer import __version__
from ai_code_reviewer.cli import build_parser, main
from ai_code_reviewer.config import AppConfig
from ai_code_reviewer.exceptions import ConfigurationError
from ai_code_reviewer.models import ReviewResult


class TestBuildParser:
    """Argument parsing."""

    def test_github_pr(self):
        args = build_parser().parse_args(["github-pr", "--owner", "o", "--repo", "r", "--pr-id", "12", "--debug"])

        assert args.command == "github-pr"
        assert args.pr_id == 12
        assert args.debug is True
        assert args.config is None

    def test_local(self):
        args = build_parser().parse_args(["local", "--path", "/repo", "--commit", "abc", "-c", "cfg.yml"])

        assert args.path == "/repo"
        assert args.commit == "abc"
        assert args.config == "cfg.yml"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out


class TestMain:
    """Command execution with the reviewer mocked out."""

    def setup_method(self):
        self.reviewer = Mock()
        self.reviewer.review.return_value = []
        self.patches = [
            patch("ai_code_reviewer.cli.load_config", return_value=AppConfig()),
            patch("ai_code_reviewer.cli.setup_logging"),
            patch("ai_code_reviewer.cli.CodeReviewer.from_config", return_value=self.reviewer),
        ]
        self.load_config, _, self.from_config = [p.start() for p in self.patches]

    def teardown_method(self):
        for p in self.patches:
            p.stop()

    def test_missing_pr_arguments(self):
        assert main(["github-pr", "--owner", "o"]) == 1
        self.from_config.assert_not_called()

    def test_github_file_requires_file(self):
        assert main(["github-file", "--owner", "o", "--repo", "r", "--pr-id", "1"]) == 1

    def test_github_pr(self):
        assert main(["github-pr", "--owner", "o", "--repo", "r", "--pr-id", "5", "--debug"]) == 0

        self.load_config.assert_called_once_with(None, {"platform": {"type": "github"}, "debug": True})
        options = self.from_config.call_args[0][1]
        assert (options.owner, options.repo, options.pr_id) == ("o", "r", 5)
        self.reviewer.review.assert_called_once_with()

    def test_local(self):
        assert main(["local", "--path", "/repo"]) == 0

        self.load_config.assert_called_once_with(None, {"platform": {"type": "local"}})
        options = self.from_config.call_args[0][1]
        assert options.path == "/repo"
        assert options.commit_sha is None

    def test_github_file(self):
        self.reviewer.review_single_file.return_value = ReviewResult(file="a.py")

        assert main(["github-file", "--owner", "o", "--repo", "r", "--pr-id", "5", "--file", "a.py"]) == 0

        self.reviewer.review_single_file.assert_called_once_with("a.py")
        self.reviewer.review.assert_not_called()

    def test_github_file_not_in_pr(self):
        self.reviewer.review_single_file.return_value = None

        assert main(["github-file", "--owner", "o", "--repo", "r", "--pr-id", "5", "--file", "x.py"]) == 0

    def test_reviewer_error_exit_code(self):
        self.from_config.side_effect = ConfigurationError("API key is not configured")

        assert main(["local"]) == 1

    def test_unexpected_error_exit_code(self):
        self.reviewer.review.side_effect = RuntimeError("boom")

        assert main(["local"]) == 1
