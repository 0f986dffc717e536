"""
Review Data Models

코드 리뷰 결과 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, validator


class Severity(str, Enum):
    """이슈 심각도 (info < warning < error)"""
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'

    @property
    def rank(self) -> int:
        """정렬용 순위"""
        return _SEVERITY_RANK[self]

    @classmethod
    def coerce(cls, value: Any) -> "Severity":
        """알 수 없는 값은 info로 변환"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for severity in cls:
                if severity.value == normalized:
                    return severity
        return cls.INFO


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}

# 이보다 긴 숫자는 라인 번호로 보지 않는다
MAX_LINE_DIGITS = 9

# 표시 순서 (심각한 것부터)
SEVERITY_DISPLAY_ORDER = (Severity.ERROR, Severity.WARNING, Severity.INFO)


@dataclass(frozen=True)
class Issue:
    """파일 내 개별 이슈"""
    severity: Severity
    message: str
    line: Optional[int] = None
    suggestion: Optional[str] = None
    code: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if not isinstance(self.severity, Severity):
            # 문자열로 들어온 경우 허용된 값만 받는다
            object.__setattr__(self, 'severity', Severity(self.severity))

        if not isinstance(self.message, str) or not self.message.strip():
            raise ValueError("Message cannot be empty")

        if self.line is not None and (isinstance(self.line, bool) or not isinstance(self.line, int) or self.line <= 0):
            raise ValueError("Line number must be a positive integer")

    @property
    def is_general(self) -> bool:
        """라인이 없는 파일 단위 이슈인지"""
        return self.line is None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        """JSON 이슈 스키마에서 생성"""
        return IssuePayload(**data).to_issue()

    def to_dict(self) -> Dict[str, Any]:
        """JSON 이슈 스키마로 변환 (없는 필드는 생략)"""
        result: Dict[str, Any] = {'severity': self.severity.value}
        if self.line is not None:
            result['line'] = self.line
        result['message'] = self.message
        if self.suggestion is not None:
            result['suggestion'] = self.suggestion
        if self.code is not None:
            result['code'] = self.code
        return result


@dataclass(frozen=True)
class ReviewResult:
    """파일 하나의 리뷰 결과"""
    file: str
    issues: Tuple[Issue, ...] = field(default_factory=tuple)
    summary: str = ''

    def __post_init__(self):
        """데이터 검증"""
        if not self.file:
            raise ValueError("File path cannot be empty")
        if not isinstance(self.issues, tuple):
            object.__setattr__(self, 'issues', tuple(self.issues))
        if self.summary is None:
            object.__setattr__(self, 'summary', '')

    @property
    def total_issues(self) -> int:
        """이슈 개수"""
        return len(self.issues)

    def count(self, severity: Severity) -> int:
        """특정 심각도의 이슈 개수"""
        return sum(1 for issue in self.issues if issue.severity == severity)

    def issues_by_severity(self) -> Dict[Severity, List[Issue]]:
        """심각도별로 묶은 이슈 (error, warning, info 순서)"""
        grouped: Dict[Severity, List[Issue]] = {s: [] for s in SEVERITY_DISPLAY_ORDER}
        for issue in self.issues:
            grouped[issue.severity].append(issue)
        return grouped

    @property
    def line_issues(self) -> List[Issue]:
        """라인이 지정된 이슈들"""
        return [issue for issue in self.issues if issue.line is not None]

    @property
    def general_issues(self) -> List[Issue]:
        """파일 단위 이슈들"""
        return [issue for issue in self.issues if issue.line is None]

    def to_dict(self) -> Dict[str, Any]:
        """직렬화용 딕셔너리"""
        return {
            'file': self.file,
            'issues': [issue.to_dict() for issue in self.issues],
            'summary': self.summary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReviewResult":
        """직렬화된 딕셔너리에서 복원"""
        return cls(
            file=data['file'],
            issues=tuple(Issue.from_dict(item) for item in data.get('issues', [])),
            summary=data.get('summary') or '',
        )


def count_by_severity(results: List[ReviewResult]) -> Dict[Severity, int]:
    """여러 결과에 걸친 심각도별 이슈 개수"""
    counts = {s: 0 for s in SEVERITY_DISPLAY_ORDER}
    for result in results:
        for issue in result.issues:
            counts[issue.severity] += 1
    return counts


# Pydantic model for model-output validation
class IssuePayload(BaseModel):
    """모델 응답 JSON의 이슈 항목 검증용 모델"""
    severity: Severity = Severity.INFO
    line: Optional[int] = None
    message: str
    suggestion: Optional[str] = None
    code: Optional[str] = None

    @validator('severity', pre=True, always=True)
    def coerce_severity(cls, v):
        return Severity.coerce(v)

    @validator('line', pre=True)
    def validate_line(cls, v):
        if isinstance(v, bool):
            return None
        if isinstance(v, str):
            v = v.strip()
            if not (v.isascii() and v.isdigit()) or len(v) > MAX_LINE_DIGITS:
                return None
            v = int(v)
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        if isinstance(v, int) and 0 < v < 10 ** MAX_LINE_DIGITS:
            return v
        return None

    @validator('message', pre=True)
    def validate_message(cls, v):
        if v is None:
            raise ValueError('Message is required')
        if not isinstance(v, str):
            v = str(v)
        if not v.strip():
            raise ValueError('Message cannot be empty')
        return v

    @validator('suggestion', 'code', pre=True)
    def stringify_optional(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def to_issue(self) -> Issue:
        """dataclass로 변환"""
        return Issue(
            severity=self.severity,
            line=self.line,
            message=self.message,
            suggestion=self.suggestion,
            code=self.code,
        )
