"""
Console Output Formatter

Renders review results for the terminal (ANSI colours) and the
single-file markdown report.
"""

import sys
import logging
from typing import Dict, List, Optional, Sequence

from ..models.review import Issue, ReviewResult, Severity, SEVERITY_DISPLAY_ORDER


logger = logging.getLogger(__name__)

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
ITALIC = "\033[3m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
CYAN = "\033[36m"
HEADER_STYLE = "\033[42;30m"  # black on green
FOOTER_STYLE = "\033[44;30m"  # black on blue
FILE_STYLE = "\033[44;37m"    # white on blue

SEVERITY_COLORS = {
    Severity.ERROR: RED,
    Severity.WARNING: YELLOW,
    Severity.INFO: BLUE,
}

SEVERITY_SYMBOLS = {
    Severity.ERROR: '❌',
    Severity.WARNING: '⚠️',
    Severity.INFO: 'ℹ️',
}

REPORT_ICONS = {
    Severity.ERROR: '🔴',
    Severity.WARNING: '🟠',
    Severity.INFO: '🔵',
}

LINE_WIDTH = 80
KEY_FINDINGS_LIMIT = 5

LABELS: Dict[str, Dict[str, str]] = {
    "chinese": {
        "results_title": "代码审查报告",
        "results_end": "审查报告结束",
        "summary_title": "代码审查总结",
        "summary_end": "总结结束",
        "totals": "总体统计：",
        "reviewed": "审查了 {files} 个文件，共发现 {issues} 个问题",
        "file": "文件",
        "no_issues": "✓ 没有发现问题",
        "count_error": "错误: {count}个",
        "count_warning": "警告: {count}个",
        "count_info": "提示: {count}个",
        "file_summary": "摘要: ",
        "issues": "详细问题:",
        "group": "■ {title} ({count}个)",
        "title_error": "错误",
        "title_warning": "警告",
        "title_info": "提示",
        "line": "第{line}行",
        "general": "通用",
        "suggestion": "建议:",
        "code": "示例代码:",
        # single file report
        "report_title": "# 代码审查报告: {file}",
        "report_summary": "## 📝 总体评价",
        "report_overview": "## 📊 问题概览",
        "overview_error": "- 🔴 严重问题: {count}个",
        "overview_warning": "- 🟠 警告: {count}个",
        "overview_info": "- 🔵 建议: {count}个",
        "overview_total": "- 💡 总计: {count}个问题",
        "report_key_findings": "## ⚠️ 关键发现",
        "more_findings": "_...以及{count}个其他问题_",
        "report_details": "## 🔍 详细分析",
        "section_error": "### 🔴 严重问题",
        "section_warning": "### 🟠 警告",
        "section_info": "### 🔵 建议",
        "report_location_general": "整体",
        "report_suggestion": "**💡 改进建议:**",
        "report_code": "**📝 示例代码:**",
        "report_practices": "## 📚 最佳实践参考",
        "practices": "- 代码应当清晰、简洁且易于维护\n"
                     "- 遵循语言特定的编码规范\n"
                     "- 添加适当的注释和文档\n"
                     "- 编写单元测试以验证功能",
    },
    "english": {
        "results_title": "Code Review Report",
        "results_end": "End of Review Report",
        "summary_title": "Code Review Summary",
        "summary_end": "End of Summary",
        "totals": "Totals:",
        "reviewed": "Reviewed {files} files and found {issues} issues",
        "file": "File",
        "no_issues": "✓ No issues found",
        "count_error": "Errors: {count}",
        "count_warning": "Warnings: {count}",
        "count_info": "Info: {count}",
        "file_summary": "Summary: ",
        "issues": "Issues:",
        "group": "■ {title} ({count})",
        "title_error": "Errors",
        "title_warning": "Warnings",
        "title_info": "Info",
        "line": "Line {line}",
        "general": "General",
        "suggestion": "Suggestion:",
        "code": "Example code:",
        "report_title": "# Code Review Report: {file}",
        "report_summary": "## 📝 Overall Assessment",
        "report_overview": "## 📊 Overview",
        "overview_error": "- 🔴 Errors: {count}",
        "overview_warning": "- 🟠 Warnings: {count}",
        "overview_info": "- 🔵 Suggestions: {count}",
        "overview_total": "- 💡 Total: {count} issues",
        "report_key_findings": "## ⚠️ Key Findings",
        "more_findings": "_...and {count} more issues_",
        "report_details": "## 🔍 Detailed Analysis",
        "section_error": "### 🔴 Errors",
        "section_warning": "### 🟠 Warnings",
        "section_info": "### 🔵 Suggestions",
        "report_location_general": "Overall",
        "report_suggestion": "**💡 Suggestion:**",
        "report_code": "**📝 Example code:**",
        "report_practices": "## 📚 Best Practices",
        "practices": "- Keep code clear, concise and maintainable\n"
                     "- Follow the language's coding conventions\n"
                     "- Add appropriate comments and documentation\n"
                     "- Write unit tests for the behaviour",
    },
}


class OutputFormatter:
    """
    Formats review output for the console.

    Colours are plain ANSI escape codes and can be switched off, e.g.
    when output is not a terminal.
    """

    def __init__(self, language: str = "chinese", use_color: Optional[bool] = None):
        """
        Initialize output formatter.

        Args:
            language: Language of the labels ("chinese" or "english")
            use_color: Emit ANSI colours (default: only when stdout is a tty)
        """
        if language not in LABELS:
            raise ValueError(f"Unsupported output language: {language}")

        self.language = language
        self.labels = LABELS[language]
        self.use_color = sys.stdout.isatty() if use_color is None else use_color

    def _style(self, text: str, *codes: str) -> str:
        if not self.use_color or not codes:
            return text
        return f"{''.join(codes)}{text}{RESET}"

    def format_review_results(self, results: Sequence[ReviewResult]) -> str:
        """
        Format the results of a whole run.

        Args:
            results: Per-file review results

        Returns:
            Report text with totals and one block per file
        """
        labels = self.labels
        total_issues = sum(result.total_issues for result in results)

        output = "\n"
        output += self._banner(labels["results_title"], HEADER_STYLE)
        output += "\n\n"

        output += self._style(labels["totals"], BOLD) + "\n"
        output += f"{self._style('•', CYAN)} " + labels["reviewed"].format(
            files=self._style(str(len(results)), BOLD),
            issues=self._style(str(total_issues), BOLD),
        ) + "\n"
        output += f"{self._style('•', CYAN)} {self._counts_line(results)}\n"
        output += self._divider()

        for result in results:
            output += self.format_file_result(result)

        output += self._banner(labels["results_end"], FOOTER_STYLE)
        output += "\n"

        return output

    def format_file_result(self, result: ReviewResult) -> str:
        """Format one file: counts, summary and issues grouped by severity."""
        labels = self.labels

        output = self._style(f" {labels['file']}: {result.file} ", FILE_STYLE) + "\n"

        if not result.issues:
            output += "  " + self._style(labels["no_issues"], GREEN) + "\n"
            output += self._divider()
            return output

        output += f"  {self._counts_line([result])}\n"

        if result.summary:
            summary = result.summary.replace("\n", "\n  ")
            output += f"\n  {self._style(labels['file_summary'], BOLD)}{summary}\n"

        output += f"\n  {self._style(labels['issues'], BOLD)}\n"

        for severity, issues in result.issues_by_severity().items():
            if issues:
                output += self.format_issues_by_type(issues, severity)

        output += self._divider()
        return output

    def format_issues_by_type(self, issues: Sequence[Issue], severity: Severity) -> str:
        labels = self.labels
        color = SEVERITY_COLORS[severity]

        title = labels["group"].format(title=labels[f"title_{severity.value}"], count=len(issues))
        output = f"  {self._style(title, color, BOLD)}\n"

        for issue in issues:
            line_info = labels["line"].format(line=issue.line) if issue.line else labels["general"]
            output += f"    {SEVERITY_SYMBOLS[issue.severity]} {self._style(f'[{line_info}]', color)} {issue.message}\n"

            if issue.suggestion:
                output += f"      {self._style('✓', GREEN)} {self._style(labels['suggestion'], ITALIC)} {issue.suggestion}\n"

            if issue.code:
                output += f"      {self._style(labels['code'], DIM)}\n"
                for code_line in issue.code.split("\n"):
                    output += f"      {self._style('|', DIM)} {code_line}\n"

            output += "\n"

        return output

    def format_summary(self, summary: str) -> str:
        """
        Format the run summary between a header and a footer.

        Markdown headings and list items are highlighted.
        """
        output = "\n"
        output += self._banner(self.labels["summary_title"], HEADER_STYLE)
        output += "\n\n"

        for line in summary.split("\n"):
            if line.startswith("#"):
                output += self._style(line, BOLD, GREEN) + "\n"
            elif line.startswith(("*", "-")):
                output += self._style(line, CYAN) + "\n"
            elif not line.strip():
                output += "\n"
            else:
                output += f"{line}\n"

        output += "\n"
        output += self._banner(self.labels["summary_end"], FOOTER_STYLE)
        output += "\n"

        return output

    def format_comment(self, file_path: str, line: Optional[int], comment: str) -> str:
        """Format a single comment addressed to a file (and optionally a line)."""
        labels = self.labels
        header = self._style(f" {labels['file']}: {file_path} ", FILE_STYLE)
        if line:
            line_info = self._style(f"[{labels['line'].format(line=line)}]", CYAN)
        else:
            line_info = self._style(f"[{labels['general']}]", DIM)
        return f"\n{header}\n\n{line_info} {comment}\n{self._divider()}"

    def format_single_file_review(self, result: ReviewResult) -> str:
        """
        Render the markdown report for one file.

        The report uses severity sections (``###``) and one ``####``
        block per issue, so the ResponseParser can read it back.

        Args:
            result: Review result of the file

        Returns:
            Markdown text (no ANSI codes)
        """
        labels = self.labels
        grouped = result.issues_by_severity()

        output = labels["report_title"].format(file=result.file) + "\n\n"

        if result.summary:
            output += f"{labels['report_summary']}\n\n{result.summary}\n\n"

        output += f"{labels['report_overview']}\n\n"
        for severity in SEVERITY_DISPLAY_ORDER:
            output += labels[f"overview_{severity.value}"].format(count=len(grouped[severity])) + "\n"
        output += labels["overview_total"].format(count=result.total_issues) + "\n\n"

        key_issues = grouped[Severity.ERROR] + grouped[Severity.WARNING]
        if key_issues:
            output += f"{labels['report_key_findings']}\n\n"
            for index, issue in enumerate(key_issues[:KEY_FINDINGS_LIMIT], start=1):
                output += f"{index}. {REPORT_ICONS[issue.severity]} **{self._report_location(issue)}**: {issue.message}\n"
            if len(key_issues) > KEY_FINDINGS_LIMIT:
                output += labels["more_findings"].format(count=len(key_issues) - KEY_FINDINGS_LIMIT) + "\n"
            output += "\n"

        if result.issues:
            output += f"{labels['report_details']}\n\n"
            for severity in SEVERITY_DISPLAY_ORDER:
                if grouped[severity]:
                    output += f"{labels[f'section_{severity.value}']}\n\n"
                    for issue in grouped[severity]:
                        output += self._format_report_issue(issue)

        output += f"{labels['report_practices']}\n\n{labels['practices']}\n\n"

        return output

    def _format_report_issue(self, issue: Issue) -> str:
        labels = self.labels
        message = " ".join(issue.message.split())
        output = f"#### {self._report_location(issue)}: {message}\n\n"

        if issue.suggestion:
            output += f"{labels['report_suggestion']}\n{issue.suggestion}\n\n"

        if issue.code:
            output += f"{labels['report_code']}\n```\n{issue.code}\n```\n\n"

        return output

    def _report_location(self, issue: Issue) -> str:
        if issue.line:
            return self.labels["line"].format(line=issue.line)
        return self.labels["report_location_general"]

    def _counts_line(self, results: Sequence[ReviewResult]) -> str:
        parts: List[str] = []
        for severity in SEVERITY_DISPLAY_ORDER:
            count = sum(result.count(severity) for result in results)
            parts.append(self._style(self.labels[f"count_{severity.value}"].format(count=count), SEVERITY_COLORS[severity]))
        return " | ".join(parts)

    def _divider(self) -> str:
        return self._style("─" * LINE_WIDTH, DIM) + "\n"

    def _banner(self, title: str, style: str) -> str:
        padding = " " * max(0, (LINE_WIDTH - 4 - len(title)) // 2)
        return self._style(f"\n{padding} {title} {padding}\n", style)
