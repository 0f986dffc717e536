"""
Data Models

AI Code Reviewer 시스템의 핵심 데이터 모델들
"""

from .diff import CodeDiff
from .review import (
    Severity,
    Issue,
    ReviewResult,
    IssuePayload,
    SEVERITY_DISPLAY_ORDER,
    count_by_severity,
)

__all__ = [
    "CodeDiff",
    "Severity",
    "Issue",
    "ReviewResult",
    "IssuePayload",
    "SEVERITY_DISPLAY_ORDER",
    "count_by_severity",
]
