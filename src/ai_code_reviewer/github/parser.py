"""
PR File Parser

Parses GitHub PR file entries into CodeDiff objects for review.
"""

import re
import logging
from typing import Callable, Dict, List, Optional

from ..models.diff import CodeDiff
from ..utils.language import detect_language


logger = logging.getLogger(__name__)

ContentLoader = Callable[[Optional[str]], str]


class PullRequestFileParser:
    """
    Parser for GitHub PR file entries.

    Converts the items returned by the 'list pull request files'
    endpoint into CodeDiff objects, fetching file contents through a
    loader callable.
    """

    def __init__(self, content_loader: Optional[ContentLoader] = None):
        """
        Initialize PR file parser.

        Args:
            content_loader: Callable mapping a contents_url to file text.
                Without one, contents are left empty.
        """
        self.content_loader = content_loader
        self.binary_file_pattern = re.compile(r'Binary files? .* differ')

    def parse_files(self, files_data: List[Dict]) -> List[CodeDiff]:
        """
        Parse file entries into diffs, keeping API order.

        Entries without a filename are ignored.

        Args:
            files_data: List of file changes from GitHub API

        Returns:
            List of CodeDiff objects
        """
        diffs = []

        for file_data in files_data:
            if not file_data.get('filename'):
                logger.debug("Skipping file entry without filename")
                continue
            diffs.append(self.parse_file(file_data))

        logger.info(f"Parsed {len(diffs)} file diffs")
        return diffs

    def parse_file(self, file_data: Dict) -> CodeDiff:
        """
        Parse one file entry.

        Args:
            file_data: File change data from GitHub API

        Returns:
            CodeDiff for the file
        """
        new_path = file_data['filename']
        old_path = file_data.get('previous_filename') or new_path

        logger.debug(f"Processing file: {new_path} ({file_data.get('status', 'modified')})")

        # contents_url points at the head ref, so both sides share one download
        content = self._load(file_data.get('contents_url'))

        return CodeDiff(
            old_path=old_path,
            new_path=new_path,
            old_content=content,
            new_content=content,
            diff_content=self._patch(file_data),
            language=detect_language(new_path),
        )

    def _load(self, contents_url: Optional[str]) -> str:
        if self.content_loader is None:
            return ""
        return self.content_loader(contents_url)

    def _patch(self, file_data: Dict) -> str:
        """Unified diff of the file, empty for binary or oversized files."""
        patch = file_data.get('patch') or ''

        if self.binary_file_pattern.search(patch):
            logger.debug(f"Binary file diff: {file_data['filename']}")
            return ''

        return patch
