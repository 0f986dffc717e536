"""
Platform Interface

Common interface of diff sources and comment sinks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..models.diff import CodeDiff
from ..models.review import ReviewResult


class PlatformType(str, Enum):
    """Supported code hosting platforms."""
    GITHUB = "github"
    LOCAL = "local"


@dataclass
class PlatformOptions:
    """플랫폼 실행 옵션 (CLI 인자)"""
    owner: Optional[str] = None
    repo: Optional[str] = None
    pr_id: Optional[int] = None
    path: Optional[str] = None
    commit_sha: Optional[str] = None


class Platform(ABC):
    """
    Diff source and comment sink.

    Platforms that can post all comments at once override
    submit_batch_review_comments and report supports_batch.
    """

    @abstractmethod
    def get_code_diffs(self) -> List[CodeDiff]:
        """Return the changed files to review."""

    @abstractmethod
    def submit_review_comment(self, file_path: str, line: Optional[int], comment: str) -> None:
        """Publish one comment on a file (and line, when given)."""

    @abstractmethod
    def submit_review_summary(self, summary: str) -> None:
        """Publish the run summary."""

    @property
    def supports_batch(self) -> bool:
        return type(self).submit_batch_review_comments is not Platform.submit_batch_review_comments

    def submit_batch_review_comments(self, results: Sequence[ReviewResult]) -> None:
        """Publish all results at once."""
        raise NotImplementedError(f"{type(self).__name__} does not support batch comments")
