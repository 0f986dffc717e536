"""
Unit tests for the GitHub comment and console formatters.
"""

import pytest

from ai_code_reviewer.formatting import GitHubCommentFormatter, OutputFormatter
from ai_code_reviewer.formatting.console import KEY_FINDINGS_LIMIT
from ai_code_reviewer.formatting.github import TRUNCATION_NOTICE
from ai_code_reviewer.llm.parser import ResponseParser
from ai_code_reviewer.models import Issue, ReviewResult, Severity


class TestGitHubCommentFormatter:
    """Markdown bodies for GitHub comments."""

    def setup_method(self):
        self.formatter = GitHubCommentFormatter()

    def test_issue_comment_full(self):
        issue = Issue(severity=Severity.WARNING, line=3, message="Unused import", suggestion="Remove it", code="import os")

        comment = self.formatter.format_issue_comment(issue)

        assert comment == "⚠️ **Unused import**\n\n建议: Remove it\n\n示例代码:\n```\nimport os\n```\n"

    def test_issue_comment_minimal(self):
        comment = self.formatter.format_issue_comment(Issue(severity=Severity.INFO, message="Nit"))
        assert comment == "ℹ️ **Nit**\n\n"

    def test_english_labels(self):
        formatter = GitHubCommentFormatter("english")
        issue = Issue(severity=Severity.ERROR, message="Bug", suggestion="Fix")

        assert "Suggestion: Fix" in formatter.format_issue_comment(issue)
        assert formatter.format_summary_comment("ok") == "## AI Code Review Summary\n\nok"

    def test_unsupported_language(self):
        with pytest.raises(ValueError):
            GitHubCommentFormatter("french")

    def test_file_comment(self):
        issues = [Issue(severity=Severity.INFO, message="One"), Issue(severity=Severity.ERROR, message="Two")]

        comment = self.formatter.format_file_comment("src/a.py", issues)

        assert comment == "## 文件: src/a.py\n\nℹ️ **One**\n\n\n\n❌ **Two**\n\n"

    def test_long_comment_truncated(self):
        self.formatter.max_comment_length = 50

        comment = self.formatter.format_summary_comment("x" * 200)

        assert len(comment) == 50
        assert comment.endswith(TRUNCATION_NOTICE)


class TestOutputFormatter:
    """Console output without colours."""

    def setup_method(self):
        self.formatter = OutputFormatter(use_color=False)
        self.result = ReviewResult(
            file="src/db.py",
            issues=[
                Issue(severity=Severity.INFO, line=3, message="Naming"),
                Issue(severity=Severity.ERROR, line=12, message="SQL injection", suggestion="Use parameters", code="cur.execute(q, (x,))"),
                Issue(severity=Severity.WARNING, message="No error handling"),
            ],
            summary="Needs attention",
        )

    def test_no_ansi_codes(self):
        output = self.formatter.format_review_results([self.result])
        assert "\033[" not in output

    def test_color_enabled(self):
        output = OutputFormatter(use_color=True).format_review_results([self.result])
        assert "\033[31m" in output

    def test_review_results(self):
        output = self.formatter.format_review_results([self.result, ReviewResult(file="ok.py")])

        assert "代码审查报告" in output
        assert "审查了 2 个文件，共发现 3 个问题" in output
        assert "错误: 1个 | 警告: 1个 | 提示: 1个" in output
        assert "✓ 没有发现问题" in output
        assert output.index("SQL injection") < output.index("No error handling") < output.index("Naming")
        assert "[第12行] SQL injection" in output
        assert "[通用] No error handling" in output
        assert "      | cur.execute(q, (x,))" in output

    def test_summary(self):
        output = self.formatter.format_summary("# Title\n- item\n\ntext")

        assert "代码审查总结" in output
        assert "# Title\n- item\n\ntext\n" in output

    def test_comment(self):
        output = OutputFormatter("english", use_color=False).format_comment("a.py", None, "Body")

        assert " File: a.py " in output
        assert "[General] Body" in output

    def test_single_file_report(self):
        report = self.formatter.format_single_file_review(self.result)

        assert report.startswith("# 代码审查报告: src/db.py\n\n## 📝 总体评价\n\nNeeds attention")
        assert "- 💡 总计: 3个问题" in report
        assert "1. 🔴 **第12行**: SQL injection" in report
        assert "2. 🟠 **整体**: No error handling" in report
        assert "#### 第12行: SQL injection" in report
        assert "## 📚 最佳实践参考" in report

    def test_single_file_report_reads_back(self):
        report = self.formatter.format_single_file_review(self.result)

        parsed = ResponseParser().parse(report, "src/db.py")

        assert sorted(parsed.issues, key=lambda i: i.message) == sorted(self.result.issues, key=lambda i: i.message)
        assert parsed.summary == "Needs attention"

    def test_key_findings_limit(self):
        issues = [Issue(severity=Severity.ERROR, line=n, message=f"Problem {n}") for n in range(1, 9)]

        report = self.formatter.format_single_file_review(ReviewResult(file="a.py", issues=issues))

        assert f"{KEY_FINDINGS_LIMIT}. 🔴" in report
        assert f"{KEY_FINDINGS_LIMIT + 1}. 🔴" not in report
        assert "_...以及3个其他问题_" in report

    def test_unsupported_language(self):
        with pytest.raises(ValueError):
            OutputFormatter("french")
