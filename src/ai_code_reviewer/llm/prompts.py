"""
Prompt Builder

Builds the per-file review prompt and the project summary prompt,
either from user supplied templates or from the built-in ones.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..config import PromptConfig
from ..models.diff import CodeDiff
from ..models.review import ReviewResult, Severity, SEVERITY_DISPLAY_ORDER, count_by_severity


logger = logging.getLogger(__name__)


def substitute_placeholders(template: str, values: Dict[str, str]) -> str:
    """
    Replace the first occurrence of each '{{name}}' placeholder.

    Placeholders without a value are left untouched, and repeated
    placeholders are only substituted once.
    """
    result = template
    for name, value in values.items():
        result = result.replace(f"{{{{{name}}}}}", value, 1)
    return result


def percentage(count: int, total: int) -> int:
    """Rounded percentage of total, 0 when total is 0."""
    if total <= 0:
        return 0
    # round half up
    return int(count * 100 / total + 0.5)


class PromptBuilder:
    """
    Builds prompts for the review model.

    Custom templates from the config take precedence over the built-in
    templates, which exist in Chinese and English.
    """

    def __init__(self, prompts: Optional[PromptConfig] = None, language: str = "chinese"):
        """
        Initialize prompt builder.

        Args:
            prompts: Custom prompt templates (system/review/summary)
            language: Language of the built-in templates ("chinese" or "english")
        """
        self.prompts = prompts or PromptConfig()
        self.language = language
        self.templates = self._load_templates()

        if language not in self.templates:
            raise ValueError(f"Unsupported prompt language: {language}")

    @property
    def template(self) -> Dict[str, str]:
        return self.templates[self.language]

    def build_system_prompt(self, kind: str = "review") -> str:
        """
        System prompt for a review or summary request.

        Args:
            kind: "review" or "summary"

        Returns:
            Custom system prompt if configured, otherwise the built-in one
        """
        if self.prompts.system:
            return self.prompts.system
        return self.template[f"{kind}_system"]

    def build_review_prompt(self, diff: CodeDiff, language: str) -> str:
        """
        Build the review prompt for one file.

        Args:
            diff: Changed file to review
            language: Display name of the file's language

        Returns:
            Prompt text
        """
        logger.debug(f"Building review prompt for {diff.new_path}")

        if self.prompts.review:
            return substitute_placeholders(self.prompts.review, {
                'language': language,
                'filePath': diff.new_path,
                'diffContent': diff.diff_content,
            })

        return self.template["review_prompt"].format(
            language=language,
            file_path=diff.new_path,
            diff_content=diff.diff_content,
        )

    def build_summary_prompt(self, results: List[ReviewResult]) -> str:
        """
        Build the project summary prompt from all per-file results.

        Args:
            results: Review results of every reviewed file

        Returns:
            Prompt text
        """
        files_count = len(results)
        issues_count = sum(result.total_issues for result in results)

        logger.debug(f"Building summary prompt for {files_count} files, {issues_count} issues")

        results_summary = "\n\n".join(self._format_file_result(result) for result in results)
        distribution = self.format_severity_distribution(results)

        if self.prompts.summary:
            return substitute_placeholders(self.prompts.summary, {
                'filesCount': str(files_count),
                'issuesCount': str(issues_count),
                'resultsSummary': results_summary,
                'severityDistribution': distribution,
            })

        return self.template["summary_prompt"].format(
            files_count=files_count,
            issues_count=issues_count,
            severity_distribution=distribution,
            results_summary=results_summary,
        )

    def severity_distribution(self, results: List[ReviewResult]) -> Dict[Severity, Tuple[int, int]]:
        """
        Count issues per severity across results.

        Returns:
            Mapping of severity to (count, percentage of all issues)
        """
        counts = count_by_severity(results)
        total = sum(counts.values())
        return {severity: (counts[severity], percentage(counts[severity], total)) for severity in SEVERITY_DISPLAY_ORDER}

    def format_severity_distribution(self, results: List[ReviewResult]) -> str:
        template = self.template
        lines = []
        for severity, (count, pct) in self.severity_distribution(results).items():
            lines.append(template["distribution_line"].format(
                label=template[f"label_{severity.value}"],
                count=count,
                percent=pct,
            ))
        return "\n".join(lines)

    def _format_file_result(self, result: ReviewResult) -> str:
        """Per-file breakdown used inside the summary prompt."""
        template = self.template

        sections = [template["file_header"].format(file=result.file)]
        sections.append(template["file_counts"].format(
            error=result.count(Severity.ERROR),
            warning=result.count(Severity.WARNING),
            info=result.count(Severity.INFO),
        ))

        if result.summary:
            sections.append("\n" + template["file_summary"].format(summary=result.summary) + "\n")

        sections.append("")
        sections.append(template["issues_header"])

        for issue in result.issues:
            if issue.line:
                line_info = template["line_info"].format(line=issue.line)
            else:
                line_info = template["general_info"]

            entry = f"- [{issue.severity.value.upper()}] {line_info}: {issue.message}"
            if issue.suggestion:
                entry += "\n" + template["suggestion"].format(suggestion=issue.suggestion)
            sections.append(entry)

        return "\n".join(sections) + "\n"

    def _load_templates(self) -> Dict[str, Dict[str, str]]:
        """Load prompt templates for different languages."""
        return {
            "chinese": {
                "review_system": """你是一个专业的代码审查助手，擅长识别代码中的问题并提供改进建议。
请按照以下格式提供反馈:
1. 分析代码差异
2. 列出具体问题
3. 对每个问题提供改进建议
4. 提供总结""",

                "summary_system": """你是一个专业的代码审查助手，擅长总结代码审查结果并提供改进建议。
请按照以下格式提供完整的审查报告:
1. 总体概述 - 代码库整体质量评估
2. 按文件列出详细问题 - 每个文件的具体问题及建议
3. 通用改进建议 - 适用于整个代码库的改进建议
4. 优先修复项 - 需要优先处理的问题""",

                "review_prompt": """请以专业代码审查者的身份审查以下{language}代码差异。

文件路径: {file_path}

代码差异:
```diff
{diff_content}
```

请按照以下结构提供评论：

1. **总体评价**: 简要总结代码质量，包括积极方面和需要改进的地方
2. **关键发现**: 按优先级列出最重要的问题
3. **详细分析**: 对每个问题进行详细说明，每个问题包含：
   - 严重性: 低(info) | 中(warning) | 高(error)
   - 问题位置: 具体到行号
   - 问题描述: 清晰说明问题所在
   - 改进建议: 提供具体的改进方法，可能包含代码示例
   - 解释理由: 简要解释为什么这是一个问题或为什么建议的改进是有益的
4. **最佳实践**: 指出代码中遵循或违反的最佳实践

请以JSON格式返回响应，包含以下字段:
1. file: 文件路径
2. summary: 总体评价摘要
3. issues: 问题数组，每个问题包含:
   - severity: 'info' | 'warning' | 'error'
   - line: 行号(可选)
   - message: 问题描述
   - suggestion: 改进建议(可选)
   - code: 示例代码(可选)

确保分析全面且具有建设性，重点关注可行的改进而不仅仅是指出问题。""",

                "summary_prompt": """请对以下代码审查结果进行全面总结，并提供详细的整体改进建议:

审查了 {files_count} 个文件，共发现 {issues_count} 个问题。

问题严重程度分布:
{severity_distribution}

详细审查结果:
{results_summary}

请基于以上结果提供:
1. 代码库整体质量评估
2. 按文件列出关键问题及建议
3. 最常见的问题类型及改进方向
4. 优先修复的关键问题
5. 整体代码质量改进建议""",

                "file_header": "## 文件: {file}",
                "file_counts": "严重问题: {error}个, 警告: {warning}个, 信息: {info}个",
                "file_summary": "文件摘要: {summary}",
                "issues_header": "详细问题:",
                "line_info": "第{line}行",
                "general_info": "通用",
                "suggestion": "建议: {suggestion}",
                "distribution_line": "{label}: {count}个 ({percent}%)",
                "label_error": "严重问题",
                "label_warning": "警告",
                "label_info": "信息",
            },

            "english": {
                "review_system": """You are a professional code review assistant who is good at spotting problems in code and suggesting improvements.
Structure your feedback as follows:
1. Analyze the code diff
2. List the concrete issues
3. Give an improvement suggestion for each issue
4. Provide a summary""",

                "summary_system": """You are a professional code review assistant who summarizes code review results and recommends improvements.
Structure the full review report as follows:
1. Overview - overall quality of the code base
2. Detailed issues per file - concrete problems and suggestions
3. General recommendations - improvements for the whole code base
4. Priority fixes - problems to address first""",

                "review_prompt": """Please review the following {language} code diff as a professional code reviewer.

File path: {file_path}

Code diff:
```diff
{diff_content}
```

Structure your review as follows:

1. **Overall assessment**: short summary of code quality, both strengths and weaknesses
2. **Key findings**: the most important issues in priority order
3. **Detailed analysis**: for every issue give
   - Severity: low(info) | medium(warning) | high(error)
   - Location: the line number
   - Description: what the problem is
   - Suggestion: a concrete fix, optionally with example code
   - Rationale: why it is a problem or why the fix helps
4. **Best practices**: practices the code follows or violates

Return the response as JSON with these fields:
1. file: file path
2. summary: overall assessment
3. issues: array of issues, each with:
   - severity: 'info' | 'warning' | 'error'
   - line: line number (optional)
   - message: issue description
   - suggestion: improvement suggestion (optional)
   - code: example code (optional)

Keep the analysis thorough and constructive, focusing on actionable improvements rather than only pointing out problems.""",

                "summary_prompt": """Please summarize the following code review results and give detailed overall recommendations:

Reviewed {files_count} files and found {issues_count} issues.

Severity distribution:
{severity_distribution}

Detailed results:
{results_summary}

Based on these results, provide:
1. An overall quality assessment of the code base
2. Key issues and suggestions per file
3. The most common issue types and how to address them
4. Critical issues to fix first
5. General code quality recommendations""",

                "file_header": "## File: {file}",
                "file_counts": "Errors: {error}, Warnings: {warning}, Info: {info}",
                "file_summary": "File summary: {summary}",
                "issues_header": "Issues:",
                "line_info": "line {line}",
                "general_info": "general",
                "suggestion": "Suggestion: {suggestion}",
                "distribution_line": "{label}: {count} ({percent}%)",
                "label_error": "Errors",
                "label_warning": "Warnings",
                "label_info": "Info",
            },
        }
