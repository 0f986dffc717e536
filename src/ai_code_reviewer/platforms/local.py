"""
Local Platform

Reviews changes of a local git working tree (or one commit) and prints
the findings to the console.
"""

import re
import sys
import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Tuple

from ..exceptions import GitError
from ..formatting.console import OutputFormatter
from ..models.diff import CodeDiff
from ..models.review import ReviewResult
from ..utils.language import detect_language
from .base import Platform, PlatformOptions


logger = logging.getLogger(__name__)

STATUS_LINE_PATTERN = re.compile(r'^([AMDRT])\s+(\S+)$')
DELETED = 'D'


def _run(repo: Path, args: List[str]) -> str:
    """Run a git command in repo and return its stdout."""
    command = ' '.join(['git', *args])
    try:
        p = subprocess.run(
            ["git", *args],
            cwd=str(repo),
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise GitError(f"Cannot run git: {e}", command=command)

    if p.returncode != 0:
        raise GitError((p.stderr or p.stdout or "").strip() or f"{command} failed", command=command)
    return p.stdout or ""


def parse_name_status(output: str) -> List[Tuple[str, str]]:
    """
    Parse ``--name-status`` output into (status, path) pairs.

    Lines that are not status lines (commit headers, messages) are ignored.
    """
    files = []
    for line in output.strip().split('\n'):
        match = STATUS_LINE_PATTERN.match(line)
        if match:
            files.append((match.group(1), match.group(2)))
    return files


class LocalPlatform(Platform):
    """
    Local git platform.

    Without a commit the working tree is compared against HEAD; with a
    commit sha, the changes of that commit are reviewed. Comments and
    summaries are written to the console.
    """

    def __init__(
        self,
        options: Optional[PlatformOptions] = None,
        formatter: Optional[OutputFormatter] = None,
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize local platform.

        Args:
            options: path (default: current directory) and commit_sha
            formatter: Console formatter
            stream: Output stream (default: stdout)
        """
        options = options or PlatformOptions()

        self.path = Path(options.path) if options.path else Path.cwd()
        self.commit_sha = options.commit_sha
        self.formatter = formatter or OutputFormatter()
        self.stream = stream or sys.stdout

        logger.info(f"Initialized local platform: path={self.path}, commit={self.commit_sha or 'working tree'}")

    def get_code_diffs(self) -> List[CodeDiff]:
        """
        Collect diffs of the changed files.

        Deleted files are skipped. A file whose diff cannot be read is
        logged and skipped.

        Raises:
            GitError: If the changed file list cannot be read
        """
        logger.info(f"Collecting local changes in {self.path}")

        if self.commit_sha:
            output = _run(self.path, ["show", "--name-status", self.commit_sha])
        else:
            output = _run(self.path, ["diff", "--name-status", "HEAD"])

        diffs = []
        for status, file_path in parse_name_status(output):
            if status == DELETED:
                logger.debug(f"Skipping deleted file: {file_path}")
                continue

            try:
                diff_content = self._file_diff(file_path)
            except GitError as e:
                logger.warning(f"Cannot read diff of {file_path}: {e}")
                continue

            diffs.append(CodeDiff(
                old_path=file_path,
                new_path=file_path,
                old_content="",
                new_content=self._read_file(file_path),
                diff_content=diff_content,
                language=detect_language(file_path),
            ))

        logger.info(f"Found {len(diffs)} changed files")
        return diffs

    def _file_diff(self, file_path: str) -> str:
        if self.commit_sha:
            return _run(self.path, ["show", self.commit_sha, "--", file_path])
        return _run(self.path, ["diff", "HEAD", "--", file_path])

    def _read_file(self, file_path: str) -> str:
        """Current file content, looked up under path and then the cwd."""
        candidates = [self.path / file_path]
        cwd = Path.cwd()
        if cwd.resolve() != self.path.resolve():
            candidates.append(cwd / file_path)

        for candidate in candidates:
            try:
                return candidate.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue

        logger.warning(f"Cannot read file content: {file_path}")
        return ""

    def _write(self, text: str) -> None:
        print(text, file=self.stream)

    def submit_review_comment(self, file_path: str, line: Optional[int], comment: str) -> None:
        self._write(self.formatter.format_comment(file_path, line, comment))

    def submit_review_summary(self, summary: str) -> None:
        self._write(self.formatter.format_summary(summary))

    def submit_batch_review_comments(self, results: Sequence[ReviewResult]) -> None:
        """Print the full report of all results."""
        self._write(self.formatter.format_review_results(results))