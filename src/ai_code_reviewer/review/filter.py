"""
Diff Filter

Decides which changed files enter the review pipeline based on the
configured ignore / include / exclude patterns.
"""

import re
import logging
from functools import lru_cache
from typing import List, Optional, Pattern, Sequence, Tuple

from ..config import ReviewConfig
from ..models.diff import CodeDiff


logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _compile_wildcard(pattern: str) -> Pattern:
    # '*' is the only wildcard, everything else is literal
    regex = '.*'.join(re.escape(part) for part in pattern.split('*'))
    return re.compile(regex, re.DOTALL)


def match_pattern(file_path: str, pattern: str) -> bool:
    """
    Check a path against one pattern.

    A pattern containing '*' is matched as an anchored wildcard over the
    whole path ('*.min.js' matches 'a/b/c.min.js'); any other pattern
    requires exact equality.
    """
    if '*' in pattern:
        return _compile_wildcard(pattern).fullmatch(file_path) is not None
    return file_path == pattern


def match_patterns(file_path: str, patterns: Sequence[str]) -> bool:
    """True if the path matches any of the patterns."""
    return any(match_pattern(file_path, pattern) for pattern in patterns)


class DiffFilter:
    """
    Filters code diffs by path.

    Rules are checked in a fixed order and the first rule that applies
    decides: ignored files, ignored path prefixes, include patterns,
    exclude patterns.
    """

    def __init__(self, review_config: Optional[ReviewConfig] = None):
        """
        Initialize diff filter.

        Args:
            review_config: Review section of the app config
        """
        config = review_config or ReviewConfig()
        self.ignore_files = config.ignore_files
        self.ignore_paths = config.ignore_paths
        self.include_patterns = config.include_patterns
        self.exclude_patterns = config.exclude_patterns

    def skip_reason(self, file_path: str) -> Optional[str]:
        """
        Explain why a path is excluded.

        Args:
            file_path: New path of the changed file

        Returns:
            Reason string, or None if the file is reviewed
        """
        if self.ignore_files and match_patterns(file_path, self.ignore_files):
            return "ignored file"

        if self.ignore_paths and any(file_path.startswith(prefix) for prefix in self.ignore_paths):
            return "ignored path"

        if self.include_patterns and not match_patterns(file_path, self.include_patterns):
            return "not matched by include patterns"

        if self.exclude_patterns and match_patterns(file_path, self.exclude_patterns):
            return "matched by exclude patterns"

        return None

    def is_included(self, file_path: str) -> bool:
        """True if the path passes every rule."""
        return self.skip_reason(file_path) is None

    def split(self, diffs: List[CodeDiff]) -> Tuple[List[CodeDiff], List[Tuple[CodeDiff, str]]]:
        """
        Partition diffs into reviewed and skipped.

        Args:
            diffs: Diffs from the platform

        Returns:
            Tuple of (included diffs, [(skipped diff, reason)])
        """
        included = []
        skipped = []

        for diff in diffs:
            reason = self.skip_reason(diff.new_path)
            if reason is None:
                included.append(diff)
            else:
                logger.debug(f"Skipping {diff.new_path}: {reason}")
                skipped.append((diff, reason))

        return included, skipped

    def filter(self, diffs: List[CodeDiff]) -> List[CodeDiff]:
        """Return only the diffs that should be reviewed, in input order."""
        included, _ = self.split(diffs)
        return included
