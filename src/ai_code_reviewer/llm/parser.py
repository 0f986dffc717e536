"""
Review Response Parser

Turns a model response into a ReviewResult. The response format is not
reliable, so several strategies are tried in order:

1. fenced JSON block with an ``issues`` array
2. markdown report with ``###`` severity sections and ``####`` problems
3. loose ``<line>: [severity] message`` lines
4. the whole text as a single info issue

Parsing never raises; internal failures degrade to an error result.
"""

import json
import re
import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from ..models.review import MAX_LINE_DIGITS, Issue, IssuePayload, ReviewResult, Severity


logger = logging.getLogger(__name__)

REVIEW_FEEDBACK_MESSAGE = "review feedback"
PARSE_ERROR_MESSAGE = "Failed to parse review response"
UNKNOWN_ISSUE_MESSAGE = "unknown issue"
UNKNOWN_FILE = "<unknown>"

FENCE = "```"

SECTION_PREFIX = "### "
PROBLEM_PREFIX = "#### "
TOP_HEADER_PREFIXES = ("# ", "## ")

SEVERITY_MARKERS = ("🔴", "🟠", "🔵", "严重问题", "警告", "建议", "error", "warning", "info")
ERROR_MARKERS = ("🔴", "严重问题", "error")
WARNING_MARKERS = ("🟠", "警告", "warning")

SUGGESTION_LABELS = ("**💡 改进建议:**", "**💡 改进建议：**", "**💡 Suggestion:**")

COLONS = (":", "：")
LOOSE_SEVERITY_TAGS = {f"[{s.value}]": s for s in Severity}

SUMMARY_SECTION_PATTERN = re.compile(r"##[ \t]*📝[ \t]*(?:总体评价|Overall Assessment)[ \t]*\n([^#]+)", re.IGNORECASE)
SUMMARY_LABEL_PATTERN = re.compile(
    r"^[ \t>*#-]*(?:总结|总体评价|总体评估|总览|Summary)(?:\*\*)?[ \t]*[:：](?:\*\*)?[ \t]*(\S[^\n]*)",
    re.IGNORECASE | re.MULTILINE,
)
LINE_HEADER_PATTERN = re.compile(r"^(?:第\s*(\d+)\s*行|line\s+(\d+))$", re.IGNORECASE)

FIRST_PARAGRAPH_LIMIT = 200


@dataclass
class _Block:
    """A markdown block: the header line text and the lines below it."""
    header: str
    body: str

    @property
    def text(self) -> str:
        return f"{self.header}\n{self.body}"


def _split_blocks(text: str, prefix: str, stop_prefixes: Tuple[str, ...] = ()) -> Iterator[_Block]:
    """
    Split text at lines starting with the given header prefix.

    Text before the first header, and text after a higher level header
    (one of stop_prefixes), is yielded as a block with an empty header.
    """
    header = ""
    body: List[str] = []

    for line in text.split("\n"):
        is_header = line.startswith(prefix)
        if is_header or line.startswith(stop_prefixes):
            if header or any(part.strip() for part in body):
                yield _Block(header, "\n".join(body))
            header = line[len(prefix):].strip() if is_header else ""
            body = [] if is_header else [line]
        else:
            body.append(line)

    if header or any(part.strip() for part in body):
        yield _Block(header, "\n".join(body))


def _contains_any(text: str, markers: Tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def _extract_fenced(text: str) -> Optional[str]:
    """Body of the first fenced block, ignoring its info string."""
    start = text.find(FENCE)
    if start == -1:
        return None

    line_end = text.find("\n", start + len(FENCE))
    if line_end == -1:
        return None

    end = text.find("\n" + FENCE, line_end)
    if end == -1:
        # fence closed on the same line as the body
        end = text.find(FENCE, line_end + 1)
        if end == -1:
            return None
        return text[line_end + 1:end]

    return text[line_end + 1:end]


class ResponseParser:
    """
    Parses model responses into ReviewResult objects.

    The parser is stateless and safe to reuse for every file of a run.
    """

    def parse(self, response_text: str, file_path: str) -> ReviewResult:
        """
        Parse a model response for one file.

        Args:
            response_text: Raw text returned by the model
            file_path: Path of the reviewed file

        Returns:
            ReviewResult; never raises on malformed input
        """
        try:
            return self._parse(response_text, file_path)
        except Exception as e:
            logger.error(f"Failed to parse review response for {file_path}: {e}")
            return ReviewResult(
                file=file_path or UNKNOWN_FILE,
                issues=(Issue(
                    severity=Severity.ERROR,
                    message=PARSE_ERROR_MESSAGE,
                    suggestion=str(e) or repr(e),
                ),),
                summary=PARSE_ERROR_MESSAGE,
            )

    def _parse(self, text: str, file_path: str) -> ReviewResult:
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise TypeError(f"Response must be text, got {type(text).__name__}")

        json_result = self.parse_json_block(text, file_path)
        if json_result is not None:
            logger.debug(f"Parsed JSON review for {file_path}: {json_result.total_issues} issues")
            return json_result

        issues = self.parse_markdown_sections(text)
        strategy = "markdown"

        if not issues:
            issues = self.parse_loose_lines(text)
            strategy = "loose"

        if not issues and text.strip():
            issues = [Issue(
                severity=Severity.INFO,
                message=REVIEW_FEEDBACK_MESSAGE,
                suggestion=text.strip(),
            )]
            strategy = "fallback"

        logger.debug(f"Parsed {strategy} review for {file_path}: {len(issues)} issues")

        return ReviewResult(
            file=file_path,
            issues=tuple(issues),
            summary=self.extract_summary(text),
        )

    # Strategy 1

    def parse_json_block(self, text: str, file_path: str) -> Optional[ReviewResult]:
        """
        Parse a fenced JSON review.

        A block labelled ``json`` is preferred, otherwise the first fenced
        block is used. The parsed value is accepted only if it is an object
        whose ``issues`` field is an array.

        Returns:
            ReviewResult, or None if the text has no usable JSON block
        """
        payload = self._find_json_payload(text)
        if payload is None:
            return None

        try:
            parsed = json.loads(payload)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Cannot parse JSON review response, falling back to text parsing: {e}")
            return None

        if not isinstance(parsed, dict) or not isinstance(parsed.get("issues"), list):
            return None

        summary = parsed.get("summary") or ""
        if not isinstance(summary, str):
            summary = str(summary)

        return ReviewResult(
            file=file_path,
            issues=tuple(self._validate_json_issues(parsed["issues"], file_path)),
            summary=summary,
        )

    def _find_json_payload(self, text: str) -> Optional[str]:
        labelled = text.find(FENCE + "json\n")
        if labelled != -1:
            body_start = labelled + len(FENCE + "json\n")
            end = text.find("\n" + FENCE, body_start)
            if end != -1:
                return text[body_start:end]

        start = text.find(FENCE)
        if start == -1:
            return None
        end = text.find(FENCE, start + len(FENCE))
        if end == -1:
            return None

        body = text[start + len(FENCE):end]
        first_line, sep, rest = body.partition("\n")
        # drop an info string such as "JSON" or "javascript"
        if sep and first_line.strip().isalnum():
            return rest
        return body

    def _validate_json_issues(self, items: List[Any], file_path: str) -> List[Issue]:
        """Validate model issues; unknown severities become info, broken entries are dropped."""
        issues = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                logger.warning(f"Dropping non-object issue #{index} for {file_path}")
                continue
            try:
                issues.append(IssuePayload(**item).to_issue())
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning(f"Dropping invalid issue #{index} for {file_path}: {e}")
        return issues

    # Strategy 2

    def parse_markdown_sections(self, text: str) -> List[Issue]:
        """
        Parse a markdown report of ``###`` severity sections.

        Each ``####`` block inside a section is one problem. The block
        header is ``第N行: message`` (or ``Line N: message``) for line
        issues and any other ``label: message`` for general ones.
        """
        issues = []

        for section in _split_blocks(text, SECTION_PREFIX, TOP_HEADER_PREFIXES):
            if not _contains_any(section.text, SEVERITY_MARKERS):
                continue

            severity = self._classify_section(section)

            for problem in _split_blocks(section.body, PROBLEM_PREFIX):
                if not problem.header:
                    continue
                issues.append(self._parse_problem(problem, severity))

        return issues

    def _classify_section(self, section: _Block) -> Severity:
        # header decides when it carries a marker, otherwise the whole section
        for text in (section.header, section.text):
            if _contains_any(text, ERROR_MARKERS):
                return Severity.ERROR
            if _contains_any(text, WARNING_MARKERS):
                return Severity.WARNING
            if _contains_any(text, SEVERITY_MARKERS):
                return Severity.INFO
        return Severity.INFO

    def _parse_problem(self, problem: _Block, severity: Severity) -> Issue:
        label, message = self._split_label(problem.header)
        line = self._line_from_label(label)

        if not message:
            message = self._first_body_line(problem.body) or UNKNOWN_ISSUE_MESSAGE

        return Issue(
            severity=severity,
            line=line,
            message=message,
            suggestion=self._extract_suggestion(problem.body),
            code=_extract_fenced(problem.body) or None,
        )

    @staticmethod
    def _split_label(header: str) -> Tuple[str, str]:
        positions = [header.find(colon) for colon in COLONS if colon in header]
        if not positions:
            return "", header.strip()
        index = min(positions)
        return header[:index].strip(), header[index + 1:].strip()

    @staticmethod
    def _line_from_label(label: str) -> Optional[int]:
        match = LINE_HEADER_PATTERN.match(label.strip("*` "))
        if not match:
            return None
        digits = match.group(1) or match.group(2)
        if len(digits) > MAX_LINE_DIGITS:
            return None
        line = int(digits)
        return line if line > 0 else None

    @staticmethod
    def _first_body_line(body: str) -> Optional[str]:
        for line in body.split("\n"):
            stripped = line.strip()
            if stripped and not stripped.startswith(("**", FENCE)):
                return stripped
        return None

    @staticmethod
    def _extract_suggestion(body: str) -> Optional[str]:
        for label in SUGGESTION_LABELS:
            start = body.find(label)
            if start == -1:
                continue
            start += len(label)
            end = body.find("**", start)
            suggestion = body[start:end] if end != -1 else body[start:]
            return suggestion.strip() or None
        return None

    # Strategy 3

    def parse_loose_lines(self, text: str) -> List[Issue]:
        """
        Scan lines shaped like ``12: [warning] message``.

        A single forward pass over each line: the first colon splits the
        line, digits right before it (optionally followed by spaces) are
        the line number, an optional ``[error|warning|info]`` tag is the
        severity (default info) and the rest of the line is the message.
        """
        issues = []
        for raw_line in text.split("\n"):
            issue = self._scan_line(raw_line)
            if issue is not None:
                issues.append(issue)
        return issues

    def _scan_line(self, line: str) -> Optional[Issue]:
        colon = -1
        for index, char in enumerate(line):
            if char in COLONS:
                colon = index
                break
        if colon == -1:
            return None

        # walk back over spaces then digits
        cursor = colon
        while cursor > 0 and line[cursor - 1].isspace():
            cursor -= 1
        digits_end = cursor
        while cursor > 0 and "0" <= line[cursor - 1] <= "9":
            cursor -= 1
        digits = line[cursor:digits_end]

        rest = line[colon + 1:].lstrip()
        severity = Severity.INFO
        for tag, tagged_severity in LOOSE_SEVERITY_TAGS.items():
            if rest.startswith(tag):
                severity = tagged_severity
                rest = rest[len(tag):].lstrip()
                break

        message = rest.strip()
        if not message:
            return None

        line_number = int(digits) if digits and len(digits) <= MAX_LINE_DIGITS else None
        if line_number is not None and line_number <= 0:
            line_number = None

        return Issue(severity=severity, line=line_number, message=message)

    # Summary

    def extract_summary(self, text: str) -> str:
        """
        Extract the overall assessment from a text response.

        Tries, in order: a ``## 📝 总体评价`` section, a ``Summary:`` style
        label line, the first paragraph if it is short, the last paragraph.
        """
        match = SUMMARY_SECTION_PATTERN.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()

        match = SUMMARY_LABEL_PATTERN.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()

        paragraphs = text.split("\n\n")
        first_paragraph = paragraphs[0]
        if first_paragraph and len(first_paragraph) < FIRST_PARAGRAPH_LIMIT:
            return first_paragraph.strip()

        return paragraphs[-1].strip()
