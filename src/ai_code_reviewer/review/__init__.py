"""
Review Pipeline

This module provides diff filtering, progress observation and the
review orchestrator.
"""

from .filter import DiffFilter, match_pattern, match_patterns
from .observer import ReviewObserver, LoggingObserver, ConsoleObserver
from .reviewer import CodeReviewer, ReviewState

__all__ = [
    'DiffFilter',
    'match_pattern',
    'match_patterns',
    'ReviewObserver',
    'LoggingObserver',
    'ConsoleObserver',
    'CodeReviewer',
    'ReviewState',
]
