"""
Exceptions

Error hierarchy shared by the reviewer components.
"""

from datetime import datetime
from typing import Dict, Optional


class ReviewerError(Exception):
    """Base class for all reviewer errors."""


class ConfigurationError(ReviewerError):
    """Invalid or incomplete configuration (missing keys, unknown provider/platform)."""


class PlatformError(ReviewerError):
    """Diff source or comment sink failure."""


class GitError(PlatformError):
    """A git command failed in the local working tree."""

    def __init__(self, message: str, command: Optional[str] = None):
        super().__init__(message)
        self.command = command


class ModelResponseError(ReviewerError):
    """The model API answered with an empty or malformed envelope."""


class GitHubAPIError(PlatformError):
    """GitHub API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class RateLimitExceeded(GitHubAPIError):
    """GitHub API rate limit exceeded"""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", status_code=429)
        self.reset_time = reset_time
