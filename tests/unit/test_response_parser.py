"""
Unit tests for the review response parser.
"""

import json
from unittest.mock import patch

from ai_code_reviewer.llm.parser import (
    PARSE_ERROR_MESSAGE,
    REVIEW_FEEDBACK_MESSAGE,
    UNKNOWN_FILE,
    ResponseParser,
)
from ai_code_reviewer.models import Issue, ReviewResult, Severity


MARKDOWN_REPORT = """# 代码审查报告: src/db.py

## 📝 总体评价

整体结构清晰，但存在安全隐患。

## 🔍 详细分析

### 🔴 严重问题

#### 第12行: 直接拼接SQL字符串

**💡 改进建议:**
使用参数化查询

**📝 示例代码:**
```python
cursor.execute("SELECT * FROM t WHERE id = %s", (user_id,))
```

### 🟠 警告

#### 整体: 缺少错误处理

### 🔵 建议

#### 第3行: 变量命名不清晰

## 📚 最佳实践参考

- 编写单元测试以验证功能
"""


class TestJsonStrategy:
    """Strategy 1: fenced JSON."""

    def setup_method(self):
        self.parser = ResponseParser()

    def test_json_block(self):
        payload = {
            'file': 'a.py',
            'summary': 'Looks good overall',
            'issues': [
                {'severity': 'error', 'line': 5, 'message': 'Bug', 'suggestion': 'Fix it', 'code': 'x = 1'},
                {'severity': 'info', 'message': 'Style'},
            ],
        }
        text = f"Here is the review:\n```json\n{json.dumps(payload)}\n```\nThanks"

        result = self.parser.parse(text, "a.py")

        assert result.file == "a.py"
        assert result.summary == "Looks good overall"
        assert [issue.to_dict() for issue in result.issues] == payload['issues']

    def test_unlabelled_fence(self):
        text = '```\n{"issues": [{"severity": "warning", "line": 2, "message": "Shadowed name"}]}\n```'

        result = self.parser.parse(text, "a.py")

        assert result.issues == (Issue(severity=Severity.WARNING, line=2, message="Shadowed name"),)

    def test_other_language_label_dropped(self):
        text = '```JSON\n{"summary": "ok", "issues": []}\n```'

        result = self.parser.parse(text, "a.py")

        assert result.issues == ()
        assert result.summary == "ok"

    def test_empty_issue_array_wins_over_markdown(self):
        text = '```json\n{"issues": []}\n```\n### 🔴 严重问题\n#### 第1行: ignored'

        assert self.parser.parse(text, "a.py").issues == ()

    def test_issues_validated(self):
        text = "```json\n" + json.dumps({'issues': [
            {'severity': 'critical', 'line': '7', 'message': 'Coerced'},
            {'severity': 'error', 'line': -1, 'message': 'No line'},
            "not an object",
            {'severity': 'error'},
        ]}) + "\n```"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (
            Issue(severity=Severity.INFO, line=7, message="Coerced"),
            Issue(severity=Severity.ERROR, message="No line"),
        )

    def test_invalid_json_falls_through(self):
        text = "```json\n{not valid json\n```\n\n10: [error] Off by one"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (Issue(severity=Severity.ERROR, line=10, message="Off by one"),)

    def test_json_without_issue_array_falls_through(self):
        text = '```json\n{"issues": "none"}\n```'

        result = self.parser.parse(text, "a.py")

        # the object line is picked up by the line scanner
        assert result.issues == (Issue(severity=Severity.INFO, message='"none"}'),)

    def test_overlong_numbers_in_json(self):
        text = "```json\n{\"issues\": [{\"severity\": \"error\", \"line\": \"" + "7" * 5000 + "\", \"message\": \"Kept\"}]}\n```"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (Issue(severity=Severity.ERROR, message="Kept"),)

    def test_huge_json_integer_does_not_break_parsing(self):
        text = "```json\n{\"issues\": [{\"line\": " + "7" * 5000 + ", \"message\": \"x\"}]}\n```\n12: [warning] still found"

        result = self.parser.parse(text, "a.py")

        assert all(issue.message != PARSE_ERROR_MESSAGE for issue in result.issues)
        assert all(issue.line is None or issue.line < 10 ** 9 for issue in result.issues)

    def test_non_string_summary(self):
        text = '```json\n{"summary": 42, "issues": []}\n```'
        assert self.parser.parse(text, "a.py").summary == "42"


class TestMarkdownStrategy:
    """Strategy 2: severity sections."""

    def setup_method(self):
        self.parser = ResponseParser()

    def test_report(self):
        result = self.parser.parse(MARKDOWN_REPORT, "src/db.py")

        assert result.issues == (
            Issue(
                severity=Severity.ERROR,
                line=12,
                message="直接拼接SQL字符串",
                suggestion="使用参数化查询",
                code='cursor.execute("SELECT * FROM t WHERE id = %s", (user_id,))',
            ),
            Issue(severity=Severity.WARNING, message="缺少错误处理"),
            Issue(severity=Severity.INFO, line=3, message="变量命名不清晰"),
        )
        assert result.summary == "整体结构清晰，但存在安全隐患。"

    def test_minimal_error_section(self):
        text = "### 🔴 Critical\n#### 第12行: message text"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (Issue(severity=Severity.ERROR, line=12, message="message text"),)

    def test_english_headers(self):
        text = "### Warnings\n#### Line 8: Missing timeout\n\n**💡 Suggestion:**\nPass timeout=10\n"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (
            Issue(severity=Severity.WARNING, line=8, message="Missing timeout", suggestion="Pass timeout=10"),
        )

    def test_fullwidth_colon(self):
        text = "### 🟠 警告\n#### 第5行：循环中重复查询"

        result = self.parser.parse(text, "a.py")

        assert result.issues[0].line == 5
        assert result.issues[0].message == "循环中重复查询"

    def test_message_from_body_when_header_has_none(self):
        text = "### 🔴 严重问题\n#### 第9行:\n资源未关闭\n"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (Issue(severity=Severity.ERROR, line=9, message="资源未关闭"),)

    def test_overlong_line_in_header(self):
        text = "### 🔴 严重问题\n#### 第" + "9" * 5000 + "行: huge\n#### 第4行: small"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (
            Issue(severity=Severity.ERROR, message="huge"),
            Issue(severity=Severity.ERROR, line=4, message="small"),
        )

    def test_section_header_decides_severity(self):
        # the body mentions 'error' but the header marks a warning section
        text = "### 🟠 警告\n#### 第3行: missing error handling"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (Issue(severity=Severity.WARNING, line=3, message="missing error handling"),)

    def test_body_decides_when_header_has_no_marker(self):
        text = "### Findings\n#### 第3行: unchecked error code"

        result = self.parser.parse(text, "a.py")

        assert result.issues[0].severity is Severity.ERROR

    def test_sections_without_markers_ignored(self):
        text = "### Notes\n#### 第1行: nothing here"

        result = self.parser.parse(text, "a.py")

        # no markdown issue, the loose scanner picks up the line instead
        assert result.issues[0].severity is Severity.INFO
        assert result.issues[0].line is None


class TestLooseStrategy:
    """Strategy 3: '<line>: [severity] message' lines."""

    def setup_method(self):
        self.parser = ResponseParser()

    def test_loose_lines(self):
        text = "12: [warning] Magic number\nLine 30 : [error] Possible None\nGeneral: consider tests"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (
            Issue(severity=Severity.WARNING, line=12, message="Magic number"),
            Issue(severity=Severity.ERROR, line=30, message="Possible None"),
            Issue(severity=Severity.INFO, message="consider tests"),
        )

    def test_zero_line_becomes_none(self):
        result = self.parser.parse("0: [info] Header comment", "a.py")
        assert result.issues == (Issue(severity=Severity.INFO, message="Header comment"),)

    def test_empty_message_skipped(self):
        result = self.parser.parse("12:\n13: [error]\n14: real", "a.py")
        assert result.issues == (Issue(severity=Severity.INFO, line=14, message="real"),)

    def test_overlong_line_number_is_dropped(self):
        text = "12: [warning] real finding\n" + "1" * 5000 + ": [error] noise"

        result = self.parser.parse(text, "a.py")

        assert result.issues == (
            Issue(severity=Severity.WARNING, line=12, message="real finding"),
            Issue(severity=Severity.ERROR, message="noise"),
        )

    def test_nine_digit_line_number_kept(self):
        result = self.parser.parse("123456789: [info] far down", "a.py")
        assert result.issues[0].line == 123456789

    def test_scan_line_directly(self):
        assert self.parser.parse_loose_lines("no colon here") == []
        assert self.parser.parse_loose_lines("7 ：[error] 全角冒号") == [
            Issue(severity=Severity.ERROR, line=7, message="全角冒号"),
        ]


class TestFallback:
    """Strategy 4 and error handling."""

    def setup_method(self):
        self.parser = ResponseParser()

    def test_plain_text(self):
        text = "  The change looks reasonable overall  "

        result = self.parser.parse(text, "a.py")

        assert result.issues == (
            Issue(severity=Severity.INFO, message=REVIEW_FEEDBACK_MESSAGE, suggestion="The change looks reasonable overall"),
        )

    def test_empty_text(self):
        result = self.parser.parse("", "a.py")

        assert result == ReviewResult(file="a.py", issues=(), summary="")

    def test_none_text(self):
        assert self.parser.parse(None, "a.py").issues == ()

    def test_non_string_input(self):
        result = self.parser.parse(b"bytes", "a.py")

        assert result.summary == PARSE_ERROR_MESSAGE
        assert result.issues[0].severity is Severity.ERROR
        assert result.issues[0].message == PARSE_ERROR_MESSAGE

    def test_internal_error_degrades(self):
        with patch.object(ResponseParser, 'parse_markdown_sections', side_effect=RuntimeError("boom")):
            result = self.parser.parse("### 🔴 x", "a.py")

        assert result.file == "a.py"
        assert result.issues == (
            Issue(severity=Severity.ERROR, message=PARSE_ERROR_MESSAGE, suggestion="boom"),
        )

    def test_missing_file_path(self):
        result = self.parser.parse("whatever", "")
        assert result.file == UNKNOWN_FILE


class TestSummaryExtraction:
    """extract_summary fallbacks."""

    def setup_method(self):
        self.parser = ResponseParser()

    def test_label_line(self):
        text = "Some intro that is rather long " * 10 + "\n\n**Summary:** Solid change\n\nMore"
        assert self.parser.extract_summary(text) == "Solid change"

    def test_short_first_paragraph(self):
        assert self.parser.extract_summary("Short intro\n\nDetails follow") == "Short intro"

    def test_last_paragraph(self):
        text = "x" * 250 + "\n\nFinal words"
        assert self.parser.extract_summary(text) == "Final words"
