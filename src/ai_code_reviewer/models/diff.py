"""
Code Diff Data Model

리뷰 대상 파일 변경사항 데이터 모델
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CodeDiff:
    """리뷰 대상 파일 하나의 변경사항"""
    old_path: str
    new_path: str
    old_content: str
    new_content: str
    diff_content: str  # 플랫폼이 준 unified diff 그대로
    language: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if not self.new_path:
            raise ValueError("new_path cannot be empty")

    @property
    def is_rename(self) -> bool:
        """이름 변경 여부"""
        return self.old_path != self.new_path
