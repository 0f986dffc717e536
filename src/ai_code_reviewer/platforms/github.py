"""
GitHub Platform

Reviews a GitHub pull request and posts the findings back to it.
"""

import re
import logging
from typing import Dict, List, Optional, Sequence

from ..config import PlatformConfig
from ..exceptions import ConfigurationError, GitHubAPIError
from ..formatting.github import GitHubCommentFormatter
from ..github.client import GitHubClient
from ..github.parser import PullRequestFileParser
from ..models.diff import CodeDiff
from ..models.review import ReviewResult
from .base import Platform, PlatformOptions


logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r'^(ghp|gho|ghu|ghs|ghr)_\w{36}$')


class GitHubPlatform(Platform):
    """
    Pull request platform backed by the GitHub REST API.

    Line comments are posted as a COMMENT review anchored at the PR head
    commit; comments without a line go to the PR conversation.
    """

    def __init__(
        self,
        config: PlatformConfig,
        options: PlatformOptions,
        client: Optional[GitHubClient] = None,
        formatter: Optional[GitHubCommentFormatter] = None,
    ):
        """
        Initialize GitHub platform.

        Args:
            config: Platform section of the app config
            options: owner, repo and pr_id of the pull request
            client: GitHub API client (created from config when omitted)
            formatter: Comment formatter

        Raises:
            ConfigurationError: If the token or the PR coordinates are missing
        """
        if not config.token:
            raise ConfigurationError("GitHub token is not configured")

        if not options.owner or not options.repo or not options.pr_id:
            raise ConfigurationError("GitHub owner, repo and PR id are required")

        if not TOKEN_PATTERN.match(config.token):
            logger.warning("GitHub token does not match the standard token format, using it anyway")

        self.owner = options.owner
        self.repo = options.repo
        self.pr_id = options.pr_id
        self.client = client or GitHubClient(config.token, base_url=config.url, timeout=config.timeout_seconds)
        self.formatter = formatter or GitHubCommentFormatter()
        self.file_parser = PullRequestFileParser(content_loader=self.client.get_file_content)

        logger.info(f"Initialized GitHub platform: {self.owner}/{self.repo}#{self.pr_id}")

    def get_code_diffs(self) -> List[CodeDiff]:
        """
        Fetch the changed files of the pull request.

        Raises:
            GitHubAPIError: If the PR cannot be read
        """
        # fails early with a clear error when the PR does not exist
        self.client.get_pull_request(self.owner, self.repo, self.pr_id)

        files = self.client.get_pull_request_files(self.owner, self.repo, self.pr_id)
        return self.file_parser.parse_files(files)

    def submit_review_comment(self, file_path: str, line: Optional[int], comment: str) -> None:
        """
        Post one comment.

        Args:
            file_path: File the comment refers to
            line: Diff position for an inline comment, None for a PR comment
            comment: Markdown body
        """
        if line:
            commit_id = self.client.get_head_sha(self.owner, self.repo, self.pr_id)
            self.client.create_review(self.owner, self.repo, self.pr_id, commit_id, [
                {'path': file_path, 'position': line, 'body': comment},
            ])
            logger.debug(f"Posted comment on {file_path} line {line}")
        else:
            self.client.create_issue_comment(self.owner, self.repo, self.pr_id, comment)
            logger.debug(f"Posted comment for {file_path}")

    def submit_review_summary(self, summary: str) -> None:
        self.client.create_issue_comment(
            self.owner, self.repo, self.pr_id,
            self.formatter.format_summary_comment(summary),
        )
        logger.debug("Posted review summary")

    def submit_batch_review_comments(self, results: Sequence[ReviewResult]) -> None:
        """
        Post all results.

        Every line issue goes into a single review; the issues without a
        line are combined into one PR comment per file. A failed post is
        logged and the remaining posts still go out.
        """
        comments: List[Dict] = []
        for result in results:
            for issue in result.line_issues:
                comments.append({
                    'path': result.file,
                    'position': issue.line,
                    'body': self.formatter.format_issue_comment(issue),
                })

        if comments:
            try:
                commit_id = self.client.get_head_sha(self.owner, self.repo, self.pr_id)
                self.client.create_review(self.owner, self.repo, self.pr_id, commit_id, comments)
                logger.debug(f"Posted {len(comments)} line comments in one review")
            except GitHubAPIError as e:
                logger.error(f"Failed to post review with {len(comments)} line comments: {e}")

        for result in results:
            general_issues = result.general_issues
            if not general_issues:
                continue
            try:
                self.submit_review_comment(
                    result.file, None,
                    self.formatter.format_file_comment(result.file, general_issues),
                )
            except GitHubAPIError as e:
                logger.error(f"Failed to post comment for {result.file}: {e}")
