"""
Review Formatter

This module provides formatting of review results for GitHub PR
comments and for console output.
"""

from .github import GitHubCommentFormatter
from .console import OutputFormatter

__all__ = ['GitHubCommentFormatter', 'OutputFormatter']
