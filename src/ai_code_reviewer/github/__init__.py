"""
GitHub Integration Layer

This module provides GitHub API integration for PR file retrieval
and review comment submission.
"""

from .client import GitHubClient
from .parser import PullRequestFileParser

__all__ = ['GitHubClient', 'PullRequestFileParser']
