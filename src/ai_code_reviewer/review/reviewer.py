"""
Code Reviewer

Runs a review: fetches diffs from the platform, reviews each file with
the model provider and hands the results to the notification layer.
"""

import logging
from enum import Enum
from typing import List, Optional

from ..config import AppConfig
from ..formatting.console import OutputFormatter
from ..formatting.github import GitHubCommentFormatter
from ..llm.generator import AIProvider, create_provider
from ..models.diff import CodeDiff
from ..models.review import ReviewResult
from ..notifications import NotificationManager
from ..platforms import Platform, PlatformOptions, create_platform
from ..utils.files import TempFileManager
from .filter import DiffFilter
from .observer import LoggingObserver, ReviewObserver


logger = logging.getLogger(__name__)


class ReviewState(str, Enum):
    """Stages of a review run."""
    IDLE = "idle"
    FETCHING_DIFFS = "fetching_diffs"
    FILTERING = "filtering"
    REVIEWING_FILES = "reviewing_files"
    AGGREGATING = "aggregating"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


class CodeReviewer:
    """
    Review orchestrator.

    Files are reviewed one after another. Collaborator failures (diff
    fetch, model call) end the run in the FAILED state and propagate;
    notification failures are logged by the notifier and do not.
    """

    def __init__(
        self,
        config: AppConfig,
        platform: Platform,
        provider: AIProvider,
        notifier: Optional[NotificationManager] = None,
        observer: Optional[ReviewObserver] = None,
        storage: Optional[TempFileManager] = None,
    ):
        """
        Initialize code reviewer.

        Args:
            config: Application config
            platform: Diff source and comment sink
            provider: Model provider
            notifier: Notification manager
            observer: Receiver of progress events (default: logging)
            storage: Storage for results and summaries (None disables it)
        """
        self.config = config
        self.platform = platform
        self.provider = provider
        self.notifier = notifier or NotificationManager(GitHubCommentFormatter(config.review.prompt_language))
        self.observer = observer or LoggingObserver()
        self.storage = storage
        self.diff_filter = DiffFilter(config.review)
        self.report_formatter = OutputFormatter(config.review.prompt_language, use_color=False)
        self.state = ReviewState.IDLE
        self.current_file: Optional[str] = None

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        options: Optional[PlatformOptions] = None,
        observer: Optional[ReviewObserver] = None,
    ) -> "CodeReviewer":
        """
        Build a reviewer with the collaborators selected in the config.

        Raises:
            ConfigurationError: If the config is invalid
        """
        config.validate()

        provider = create_provider(config.ai, config.review)
        platform = create_platform(config, options)

        return cls(
            config,
            platform,
            provider,
            observer=observer,
            storage=TempFileManager(),
        )

    def review(self) -> List[ReviewResult]:
        """
        Review every changed file in scope.

        Returns:
            Per-file results in diff order

        Raises:
            Any platform or provider error; the state becomes FAILED
        """
        logger.info("Starting code review")
        results: List[ReviewResult] = []

        try:
            self.state = ReviewState.FETCHING_DIFFS
            diffs = self.platform.get_code_diffs()
            self.observer.on_diffs_fetched(len(diffs))

            if not diffs:
                self.state = ReviewState.DONE
                self.observer.on_run_completed(results)
                return results

            self.state = ReviewState.FILTERING
            diffs = self._filter(diffs)
            logger.info(f"{len(diffs)} files left to review after filtering")

            self.state = ReviewState.REVIEWING_FILES
            single_file = len(diffs) == 1

            for diff in diffs:
                result = self._review_diff(diff)
                results.append(result)

                if single_file:
                    self.observer.on_report(self.report_formatter.format_single_file_review(result))

            self.current_file = None
            self.state = ReviewState.AGGREGATING
            self._save_results(results)

            summary = ""
            if len(results) > 1:
                summary = self.provider.generate_summary(results)
                if summary:
                    self._save_summary(summary)

            self.state = ReviewState.NOTIFYING
            self.notifier.send_batch_review_notifications(results, self.platform)

            if summary:
                self.notifier.send_summary_notification(summary, self.platform)

            self.state = ReviewState.DONE
            self.observer.on_run_completed(results)
            return results

        except Exception as e:
            self._fail(e)
            raise

    def review_single_file(self, target_file: str) -> Optional[ReviewResult]:
        """
        Review one file of the change set and comment on each issue.

        Args:
            target_file: New path of the file to review

        Returns:
            The file's result, or None if the file is not part of the changes
        """
        logger.info(f"Starting single file review: {target_file}")

        try:
            self.state = ReviewState.FETCHING_DIFFS
            diffs = self.platform.get_code_diffs()
            self.observer.on_diffs_fetched(len(diffs))

            target = next((diff for diff in diffs if diff.new_path == target_file), None)
            if target is None:
                logger.warning(f"No changes found for target file: {target_file}")
                self.state = ReviewState.DONE
                return None

            self.state = ReviewState.REVIEWING_FILES
            result = self._review_diff(target)
            self.current_file = None
            self.observer.on_report(self.report_formatter.format_single_file_review(result))

            self.state = ReviewState.NOTIFYING
            self.notifier.send_review_notification(target_file, result, self.platform)

            self.state = ReviewState.DONE
            self.observer.on_run_completed([result])
            return result

        except Exception as e:
            self._fail(e)
            raise

    def _filter(self, diffs: List[CodeDiff]) -> List[CodeDiff]:
        included, skipped = self.diff_filter.split(diffs)
        for diff, reason in skipped:
            self.observer.on_file_skipped(diff.new_path, reason)
        return included

    def _review_diff(self, diff: CodeDiff) -> ReviewResult:
        self.current_file = diff.new_path
        self.observer.on_file_started(diff)

        result = self.provider.review_code(diff)

        self.observer.on_file_completed(result)
        return result

    def _save_results(self, results: List[ReviewResult]) -> None:
        if self.storage is None:
            return
        path = self.storage.save_review_results(results)
        self.observer.on_results_saved(path)

    def _save_summary(self, summary: str) -> None:
        if self.storage is None:
            return
        path = self.storage.save_summary(summary)
        self.observer.on_summary_saved(path)

    def _fail(self, error: Exception) -> None:
        self.state = ReviewState.FAILED
        if self.current_file:
            logger.error(f"Review failed while processing {self.current_file}")
        self.observer.on_error(error)
