"""
Temporary File Storage

Persists review results and summaries under the system temp directory.
"""

import json
import time
import logging
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..models.review import ReviewResult


logger = logging.getLogger(__name__)

TEMP_DIR_NAME = "encode-code-review"


class TempFileManager:
    """
    Stores review artifacts as files.

    Results are written as JSON (``review-results-<ms>.json``) and
    summaries as markdown (``review-summary-<ms>.md``).
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        """
        Initialize temp file manager.

        Args:
            base_dir: Target directory (default: <tmp>/encode-code-review)
        """
        self.base_dir = Path(base_dir) if base_dir else Path(tempfile.gettempdir()) / TEMP_DIR_NAME

    def _ensure_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _timestamp() -> int:
        return int(time.time() * 1000)

    def save_review_results(self, results: Sequence[ReviewResult]) -> Path:
        """
        Save review results as JSON.

        Args:
            results: Per-file review results

        Returns:
            Path of the written file
        """
        self._ensure_dir()

        file_path = self.base_dir / f"review-results-{self._timestamp()}.json"
        payload = [result.to_dict() for result in results]
        file_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

        logger.debug(f"Review results saved to {file_path}")
        return file_path

    def save_summary(self, summary: str) -> Path:
        """
        Save the run summary as markdown.

        Returns:
            Path of the written file
        """
        self._ensure_dir()

        file_path = self.base_dir / f"review-summary-{self._timestamp()}.md"
        file_path.write_text(summary, encoding="utf-8")

        logger.debug(f"Review summary saved to {file_path}")
        return file_path

    def read_review_results(self, file_path: Union[str, Path]) -> List[ReviewResult]:
        """Load results written by save_review_results."""
        data = json.loads(Path(file_path).read_text(encoding="utf-8"))
        return [ReviewResult.from_dict(item) for item in data]

    def read_summary(self, file_path: Union[str, Path]) -> str:
        return Path(file_path).read_text(encoding="utf-8")
