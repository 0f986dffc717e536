"""
Review Observer

Receives progress events of a review run.
"""

import sys
import logging
from pathlib import Path
from typing import List, Optional, TextIO

from ..models.diff import CodeDiff
from ..models.review import ReviewResult


logger = logging.getLogger(__name__)


class ReviewObserver:
    """Observer base class; every event is a no-op."""

    def on_diffs_fetched(self, count: int) -> None:
        pass

    def on_file_skipped(self, file_path: str, reason: str) -> None:
        pass

    def on_file_started(self, diff: CodeDiff) -> None:
        pass

    def on_file_completed(self, result: ReviewResult) -> None:
        pass

    def on_report(self, report: str) -> None:
        pass

    def on_results_saved(self, path: Path) -> None:
        pass

    def on_summary_saved(self, path: Path) -> None:
        pass

    def on_run_completed(self, results: List[ReviewResult]) -> None:
        pass

    def on_error(self, error: Exception) -> None:
        pass


class LoggingObserver(ReviewObserver):
    """Writes review progress to the log."""

    def on_diffs_fetched(self, count: int) -> None:
        if count == 0:
            logger.warning("No code changes found, nothing to review")
        else:
            logger.info(f"Fetched {count} file diffs")

    def on_file_skipped(self, file_path: str, reason: str) -> None:
        logger.debug(f"Skipped {file_path}: {reason}")

    def on_file_started(self, diff: CodeDiff) -> None:
        logger.info(f"Reviewing file: {diff.new_path}")

    def on_file_completed(self, result: ReviewResult) -> None:
        logger.debug(f"Reviewed {result.file}: {result.total_issues} issues")

    def on_report(self, report: str) -> None:
        logger.info(f"Review report:\n{report}")

    def on_results_saved(self, path: Path) -> None:
        logger.info(f"Review results saved to {path}")

    def on_summary_saved(self, path: Path) -> None:
        logger.info(f"Review summary saved to {path}")

    def on_run_completed(self, results: List[ReviewResult]) -> None:
        total = sum(result.total_issues for result in results)
        logger.info(f"Review completed: {len(results)} files, {total} issues")

    def on_error(self, error: Exception) -> None:
        logger.error(f"Review failed: {error}")


class ConsoleObserver(LoggingObserver):
    """Logs progress and prints rendered reports to a stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def on_report(self, report: str) -> None:
        print(report, file=self.stream)
