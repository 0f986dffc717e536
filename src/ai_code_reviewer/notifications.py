"""
Review Notifications

Delivers review results and summaries to a platform. Delivery failures
are logged and never abort a finished review.
"""

import logging
from typing import Optional, Sequence

from .formatting.github import GitHubCommentFormatter
from .models.review import Issue, ReviewResult
from .platforms.base import Platform


logger = logging.getLogger(__name__)


class NotificationManager:
    """Sends review comments and summaries through a platform."""

    def __init__(self, formatter: Optional[GitHubCommentFormatter] = None):
        """
        Initialize notification manager.

        Args:
            formatter: Formatter for per-issue comment bodies
        """
        self.formatter = formatter or GitHubCommentFormatter()

    def send_review_notification(self, file_path: str, result: ReviewResult, platform: Platform) -> None:
        """Submit one comment per issue of a file. A failed comment does not stop the others."""
        for issue in result.issues:
            self._submit_issue(file_path, issue, platform)

    def send_summary_notification(self, summary: str, platform: Platform) -> None:
        try:
            platform.submit_review_summary(summary)
        except Exception as e:
            logger.error(f"Failed to send summary notification: {e}")

    def send_batch_review_notifications(self, results: Sequence[ReviewResult], platform: Platform) -> None:
        """
        Submit all results.

        Uses the platform's batch submission when it has one, otherwise
        submits every issue as its own comment.
        """
        if platform.supports_batch:
            try:
                platform.submit_batch_review_comments(results)
            except Exception as e:
                logger.error(f"Failed to send batch review notifications: {e}")
            return

        for result in results:
            for issue in result.issues:
                self._submit_issue(result.file, issue, platform)

    def _submit_issue(self, file_path: str, issue: Issue, platform: Platform) -> None:
        try:
            platform.submit_review_comment(file_path, issue.line, self.formatter.format_issue_comment(issue))
        except Exception as e:
            location = f"{file_path}:{issue.line}" if issue.line else file_path
            logger.error(f"Failed to send review comment for {location}: {e}")
