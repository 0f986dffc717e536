"""
Unit tests for review artifact storage.
"""

import json

from ai_code_reviewer.models import Issue, ReviewResult, Severity
from ai_code_reviewer.utils import TempFileManager


class TestTempFileManager:
    """Saving and reading results and summaries."""

    def setup_method(self):
        self.results = [
            ReviewResult(
                file="a.py",
                issues=[Issue(severity=Severity.ERROR, line=2, message="数据库连接未关闭", code="conn.close()")],
                summary="总结",
            ),
            ReviewResult(file="b.py"),
        ]

    def test_default_directory(self):
        assert TempFileManager().base_dir.name == "encode-code-review"

    def test_save_review_results(self, tmp_path):
        manager = TempFileManager(tmp_path / "out")

        path = manager.save_review_results(self.results)

        assert path.parent == tmp_path / "out"
        assert path.name.startswith("review-results-") and path.suffix == ".json"

        text = path.read_text(encoding="utf-8")
        assert "数据库连接未关闭" in text
        assert json.loads(text)[0] == {
            'file': 'a.py',
            'issues': [{'severity': 'error', 'line': 2, 'message': '数据库连接未关闭', 'code': 'conn.close()'}],
            'summary': '总结',
        }

    def test_read_review_results(self, tmp_path):
        manager = TempFileManager(tmp_path)

        path = manager.save_review_results(self.results)

        assert manager.read_review_results(path) == self.results

    def test_summary(self, tmp_path):
        manager = TempFileManager(tmp_path)

        path = manager.save_summary("# 总结\n\n一切正常")

        assert path.name.startswith("review-summary-") and path.suffix == ".md"
        assert manager.read_summary(path) == "# 总结\n\n一切正常"
