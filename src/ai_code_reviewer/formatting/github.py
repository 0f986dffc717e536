"""
GitHub Comment Formatter

Formats review issues as markdown bodies for GitHub PR comments.
"""

import logging
from typing import Dict, Sequence

from ..models.review import Issue, Severity


logger = logging.getLogger(__name__)

SEVERITY_EMOJI = {
    Severity.ERROR: '❌',
    Severity.WARNING: '⚠️',
    Severity.INFO: 'ℹ️',
}

COMMENT_LABELS: Dict[str, Dict[str, str]] = {
    "chinese": {
        "suggestion": "建议",
        "code": "示例代码",
        "file": "文件",
        "summary_title": "AI代码审查总结",
    },
    "english": {
        "suggestion": "Suggestion",
        "code": "Example code",
        "file": "File",
        "summary_title": "AI Code Review Summary",
    },
}

TRUNCATION_NOTICE = "\n\n_(truncated)_"


class GitHubCommentFormatter:
    """
    Formats issues for GitHub PR comments.

    Produces the bodies of inline review comments, per-file comments
    for issues without a line, and the run summary comment.
    """

    def __init__(self, language: str = "chinese"):
        """
        Initialize GitHub comment formatter.

        Args:
            language: Language of the labels ("chinese" or "english")
        """
        if language not in COMMENT_LABELS:
            raise ValueError(f"Unsupported comment language: {language}")

        self.language = language
        self.labels = COMMENT_LABELS[language]

        # GitHub rejects longer bodies
        self.max_comment_length = 65536

    def format_issue_comment(self, issue: Issue) -> str:
        """
        Format one issue.

        Args:
            issue: Issue to format

        Returns:
            Markdown body: emoji, bold message, optional suggestion and code
        """
        comment = f"{SEVERITY_EMOJI[issue.severity]} **{issue.message}**\n\n"

        if issue.suggestion:
            comment += f"{self.labels['suggestion']}: {issue.suggestion}\n\n"

        if issue.code:
            comment += f"{self.labels['code']}:\n```\n{issue.code}\n```\n"

        return self._truncate(comment)

    def format_file_comment(self, file_path: str, issues: Sequence[Issue]) -> str:
        """Combine the issues of one file into a single comment."""
        body = "\n\n".join(self.format_issue_comment(issue) for issue in issues)
        return self._truncate(f"## {self.labels['file']}: {file_path}\n\n{body}")

    def format_summary_comment(self, summary: str) -> str:
        return self._truncate(f"## {self.labels['summary_title']}\n\n{summary}")

    def _truncate(self, body: str) -> str:
        if len(body) <= self.max_comment_length:
            return body

        logger.warning(f"Comment body too long ({len(body)} chars), truncating")
        return body[:self.max_comment_length - len(TRUNCATION_NOTICE)] + TRUNCATION_NOTICE
